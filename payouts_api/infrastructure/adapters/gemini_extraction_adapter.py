"""Adapter wrapping the Gemini screenshot extraction client."""

from typing import List, Optional, Sequence

from payouts.config import gemini_config_from_env
from payouts.extraction import ImagePayload
from payouts.gemini_client import GeminiClient
from payouts.models import MatchResult

from ...application.ports.match_extraction import MatchExtractionPort


class GeminiExtractionAdapter(MatchExtractionPort):
    """Adapter for reading match results and text through the Gemini API."""

    def __init__(self, client: Optional[GeminiClient] = None):
        """Initialize with a client.

        Args:
            client: Configured client. If None, one is built from the
                environment on first use.
        """
        self._client = client

    @property
    def client(self) -> GeminiClient:
        if self._client is None:
            self._client = GeminiClient.from_config(gemini_config_from_env())
        return self._client

    def extract_matches(self, image: ImagePayload) -> List[MatchResult]:
        return self.client.extract_matches(image)

    def extract_texts(self, images: Sequence[ImagePayload]) -> List[str]:
        return self.client.extract_texts(images)
