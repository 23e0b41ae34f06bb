from __future__ import annotations

from typing import Optional


class PayoutsError(Exception):
    """Base class for errors surfaced to callers."""

    status_code = 500


class InputValidationError(PayoutsError):
    status_code = 400


class NotConfiguredError(PayoutsError):
    status_code = 500


class UpstreamServiceError(PayoutsError):
    """The inference service or the store answered with an error."""

    status_code = 502

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        code: Optional[str] = None,
        retry_after_s: Optional[float] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code
        self.retry_after_s = retry_after_s


class ExtractionResponseError(PayoutsError):
    """Upstream data did not match the expected structured shape."""

    status_code = 502


class StoreError(PayoutsError):
    status_code = 502


class SettingsNotReadyError(PayoutsError):
    """Settings were written before being loaded from the store."""

    status_code = 503


class NotFoundError(PayoutsError):
    status_code = 404
