import asyncio
from datetime import datetime, timezone

import pytest

from payouts.errors import UpstreamServiceError
from payouts.extraction import ImagePayload
from payouts.models import MatchResult
from payouts.task_queue import SequentialTaskQueue
from payouts_api.application.ports.match_extraction import MatchExtractionPort
from payouts_api.application.ports.progress import ProgressCallbackPort
from payouts_api.application.use_cases.run_analysis import RunAnalysisRequest, RunAnalysisUseCase
from payouts_api.application.use_cases.settings import SettingsService
from payouts_api.infrastructure.adapters.memory_store import InMemoryReportStore, InMemorySettingsStore

NOW = datetime(2026, 10, 19, 23, 30, tzinfo=timezone.utc)


class FakeExtraction(MatchExtractionPort):
    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.seen = []

    def extract_matches(self, image):
        self.seen.append(image.data)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def extract_texts(self, images):
        return []


class RecordingProgress(ProgressCallbackPort):
    def __init__(self):
        self.updates = []

    async def report_progress(self, progress, message, status="processing"):
        self.updates.append((progress, status))


def _image(data: str) -> ImagePayload:
    return ImagePayload(data=data, mime_type="image/png")


def _use_case(extraction, store):
    return RunAnalysisUseCase(
        extraction=extraction,
        report_store=store,
        settings=SettingsService(InMemorySettingsStore()),
        queue=SequentialTaskQueue(delay_s=0.0),
        clock=lambda: NOW,
    )


def test_successful_run_is_ranked_and_saved() -> None:
    extraction = FakeExtraction([
        [MatchResult(["Ana"], kills=3, placement=2)],
        [MatchResult(["Bia", "Caio"], kills=1, placement=1), MatchResult(["X"], kills=9, placement=None)],
    ])
    store = InMemoryReportStore()
    progress = RecordingProgress()

    result = asyncio.run(
        _use_case(extraction, store).execute(
            RunAnalysisRequest(images=[_image("one"), _image("two")], slots_sold=12), progress
        )
    )

    assert result.success
    record = result.record
    assert extraction.seen == ["one", "two"]
    assert record.id == str(int(NOW.timestamp() * 1000))
    assert record.created_at == "2026-10-19T23:30:00.000Z"
    assert record.tournament == "19/10/2026 20:30"
    assert [e.id for e in record.entries] == ["BiaCaio-1", "Ana-0"]
    assert record.config.slots_sold == 12
    assert record.config.adjusted_prizes.placement_prizes[1] == pytest.approx(14.12, abs=0.01)
    assert record.entries[0].earnings.kill_prize == 0.5
    assert [r.id for r in store.list()] == [record.id]
    assert progress.updates[-1] == (90, "processing")


def test_failed_image_aborts_without_saving() -> None:
    extraction = FakeExtraction([
        [MatchResult(["Ana"], kills=3, placement=1)],
        UpstreamServiceError("Inference service returned HTTP 500", status=500),
    ])
    store = InMemoryReportStore()
    progress = RecordingProgress()

    result = asyncio.run(
        _use_case(extraction, store).execute(
            RunAnalysisRequest(images=[_image("one"), _image("two"), _image("three")]), progress
        )
    )

    assert not result.success
    assert result.status_code == 502
    assert extraction.seen == ["one", "two"]
    assert store.list() == []
    assert progress.updates[-1] == (0, "error")


def test_unexpected_error_is_internal() -> None:
    extraction = FakeExtraction([RuntimeError("boom")])
    result = asyncio.run(_use_case(extraction, InMemoryReportStore()).execute(RunAnalysisRequest(images=[_image("x")])))
    assert not result.success
    assert result.status_code == 500
    assert result.error == "boom"


def test_no_images_is_rejected() -> None:
    extraction = FakeExtraction([])
    result = asyncio.run(_use_case(extraction, InMemoryReportStore()).execute(RunAnalysisRequest(images=[])))
    assert result.status_code == 400
    assert extraction.seen == []


def test_given_tournament_label_is_kept() -> None:
    extraction = FakeExtraction([[MatchResult(["Ana"], kills=0, placement=1)]])
    result = asyncio.run(
        _use_case(extraction, InMemoryReportStore()).execute(
            RunAnalysisRequest(images=[_image("x")], tournament="Copa de Sexta", mode="duo")
        )
    )
    assert result.record.tournament == "Copa de Sexta"
    assert result.record.mode == "duo"
    # Full lobby: prizes are paid unscaled.
    assert result.record.entries[0].earnings.placement_prize == 25.0
