"""Port (interface) for screenshot extraction."""

from abc import ABC, abstractmethod
from typing import List, Sequence

from payouts.extraction import ImagePayload
from payouts.models import MatchResult


class MatchExtractionPort(ABC):
    """Port for reading match data out of screenshots."""

    @abstractmethod
    def extract_matches(self, image: ImagePayload) -> List[MatchResult]:
        """Extract one result per team detected in a single screenshot.

        Args:
            image: Base64 screenshot and its MIME type

        Returns:
            Match results in the order the model listed them
        """
        ...

    @abstractmethod
    def extract_texts(self, images: Sequence[ImagePayload]) -> List[str]:
        """Extract visible text fragments from each image, in image order."""
        ...
