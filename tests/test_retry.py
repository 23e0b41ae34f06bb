import pytest

from payouts.errors import ExtractionResponseError, UpstreamServiceError
from payouts.retry import RetryPolicy, is_rate_limited, parse_retry_after


def _policy(sleeps):
    return RetryPolicy(sleep=sleeps.append, rand=lambda: 0.0)


def _flaky(failures, error):
    calls = {"n": 0}

    def fn():
        calls["n"] += 1
        if calls["n"] <= failures:
            raise error
        return "ok"

    return fn, calls


def test_rate_limited_call_backs_off_exponentially() -> None:
    sleeps = []
    fn, calls = _flaky(2, UpstreamServiceError("slow down", status=429))
    assert _policy(sleeps).call(fn) == "ok"
    assert calls["n"] == 3
    assert sleeps == [1.0, 2.0]


def test_server_suggested_delay_wins() -> None:
    sleeps = []
    fn, _ = _flaky(1, UpstreamServiceError("busy", status=429, retry_after_s=7))
    _policy(sleeps).call(fn)
    assert sleeps == [7.0]


def test_gives_up_after_five_attempts() -> None:
    sleeps = []
    fn, calls = _flaky(99, UpstreamServiceError("x", code="RESOURCE_EXHAUSTED"))
    with pytest.raises(UpstreamServiceError):
        _policy(sleeps).call(fn)
    assert calls["n"] == 5
    assert sleeps == [1.0, 2.0, 4.0, 8.0]


def test_other_errors_propagate_immediately() -> None:
    sleeps = []
    fn, calls = _flaky(1, UpstreamServiceError("bad request", status=400))
    with pytest.raises(UpstreamServiceError):
        _policy(sleeps).call(fn)
    assert calls["n"] == 1
    assert sleeps == []


def test_backoff_is_capped_and_jittered() -> None:
    policy = RetryPolicy(rand=lambda: 1.0)
    assert policy.backoff_s(10) == pytest.approx(60.25)


def test_rate_limit_signals() -> None:
    assert is_rate_limited(UpstreamServiceError("x", status=429))
    assert is_rate_limited(UpstreamServiceError("x", code="RESOURCE_EXHAUSTED"))
    assert is_rate_limited(RuntimeError("Quota exceeded for model"))
    assert is_rate_limited(RuntimeError("Too Many Requests"))
    assert not is_rate_limited(UpstreamServiceError("internal", status=500))
    assert not is_rate_limited(ExtractionResponseError("not an array"))


def test_parse_retry_after() -> None:
    assert parse_retry_after({"Retry-After": "3"}) == 3.0
    details = [
        {"@type": "type.googleapis.com/google.rpc.ErrorInfo"},
        {"@type": "type.googleapis.com/google.rpc.RetryInfo", "retryDelay": "12s"},
    ]
    assert parse_retry_after({}, details) == 12.0
    assert parse_retry_after({"retry-after": "soon"}, None) is None
