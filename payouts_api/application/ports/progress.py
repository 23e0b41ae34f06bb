"""Port (interface) for progress reporting."""

from abc import ABC, abstractmethod


class ProgressCallbackPort(ABC):
    """Port for reporting progress during long operations."""

    @abstractmethod
    async def report_progress(
        self, progress: int, message: str, status: str = "processing"
    ) -> None:
        """Report progress update.

        Args:
            progress: Progress percentage (0-100)
            message: Human-readable status message
            status: Status type (connecting, processing, completed, error)
        """
        ...
