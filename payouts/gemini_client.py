from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

import requests

from .config import DEFAULT_GEMINI_MODEL, GEMINI_BASE_URL, OCR_CALL_DELAY_S, GeminiConfig
from .errors import ExtractionResponseError, NotConfiguredError, UpstreamServiceError
from .extraction import (
    MATCHES_PROMPT,
    MATCHES_SCHEMA,
    TEXTS_PROMPT,
    TEXTS_SCHEMA,
    ImagePayload,
    decode_match_results,
    decode_texts,
)
from .models import MatchResult
from .retry import RetryPolicy, parse_retry_after

logger = logging.getLogger(__name__)


@dataclass
class RequestWindow:
    """Sliding-window throttle: at most ``limit`` calls per ``window_s`` seconds."""

    limit: int = 5
    window_s: float = 60.0
    clock: Callable[[], float] = field(default=time.monotonic, repr=False)
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)

    def __post_init__(self) -> None:
        self._stamps: List[float] = []
        self._lock = threading.Lock()

    def acquire(self) -> None:
        with self._lock:
            now = self.clock()
            self._stamps = [t for t in self._stamps if now - t < self.window_s]
            if len(self._stamps) < self.limit:
                return
            wait = self.window_s - (now - self._stamps[0])
        if wait > 0:
            logger.info("Request window full, waiting %.1fs", wait)
            self.sleep(wait)

    def record(self) -> None:
        with self._lock:
            self._stamps.append(self.clock())


def _image_part(image: ImagePayload) -> Dict[str, Any]:
    return {"inlineData": {"mimeType": image.mime_type, "data": image.data}}


def _response_text(body: Dict[str, Any]) -> str:
    candidates = (body.get("candidates") or []) if isinstance(body, dict) else []
    if not candidates:
        raise ExtractionResponseError("Model returned no candidates.")
    first = candidates[0] if isinstance(candidates, list) else None
    content = first.get("content") if isinstance(first, dict) else None
    if not isinstance(content, dict):
        raise ExtractionResponseError("Model returned a malformed candidate.")
    parts = content.get("parts") or []
    text = "".join(p.get("text", "") for p in parts if isinstance(p, dict))
    if not text.strip():
        raise ExtractionResponseError("Model returned an empty response.")
    return text.strip()


@dataclass
class GeminiClient:
    api_key: str
    model: str = DEFAULT_GEMINI_MODEL
    timeout_s: int = 60
    base_url: str = GEMINI_BASE_URL
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    window: RequestWindow = field(default_factory=RequestWindow)
    ocr_delay_s: float = OCR_CALL_DELAY_S
    session: Optional[requests.Session] = None
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)

    def __post_init__(self) -> None:
        if not self.api_key:
            raise NotConfiguredError("GEMINI_API_KEY is not configured.")
        if self.session is None:
            self.session = requests.Session()
        self.session.headers.update(
            {
                "x-goog-api-key": self.api_key,
                "content-type": "application/json",
                "accept": "application/json",
            }
        )

    @classmethod
    def from_config(cls, config: GeminiConfig, **kwargs: Any) -> "GeminiClient":
        return cls(
            api_key=config.api_key,
            model=config.model,
            timeout_s=config.timeout_s,
            base_url=config.base_url,
            **kwargs,
        )

    @property
    def url(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def _error_from_response(self, resp: requests.Response) -> UpstreamServiceError:
        try:
            body = resp.json()
        except ValueError:
            body = {}
        err = body.get("error") if isinstance(body, dict) else None
        if not isinstance(err, dict):
            err = {}
        message = err.get("message") or f"Inference service returned HTTP {resp.status_code}"
        headers: Mapping[str, str] = resp.headers or {}
        return UpstreamServiceError(
            message,
            status=resp.status_code,
            code=err.get("status"),
            retry_after_s=parse_retry_after(headers, err.get("details")),
        )

    def _post(self, body: Dict[str, Any]) -> Dict[str, Any]:
        assert self.session is not None
        try:
            resp = self.session.post(self.url, json=body, timeout=self.timeout_s)
        except requests.RequestException as exc:
            raise UpstreamServiceError(f"Inference service unreachable: {exc}") from exc
        if resp.status_code >= 400:
            raise self._error_from_response(resp)
        try:
            return resp.json()
        except ValueError as exc:
            raise ExtractionResponseError("Inference service returned a non-JSON body.") from exc

    def generate_json(self, parts: List[Dict[str, Any]], response_schema: Dict[str, Any]) -> str:
        """Run one structured generation call and return the raw JSON text."""
        body = {
            "contents": [{"parts": parts}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": response_schema,
            },
        }
        self.window.acquire()
        data = self.retry.call(lambda: self._post(body))
        self.window.record()
        return _response_text(data)

    def extract_matches(self, image: ImagePayload) -> List[MatchResult]:
        text = self.generate_json([{"text": MATCHES_PROMPT}, _image_part(image)], MATCHES_SCHEMA)
        try:
            results = decode_match_results(text)
        except ExtractionResponseError:
            logger.error("Unusable match extraction response: %s", text[:500])
            raise
        logger.info("Extracted %d team results from image", len(results))
        return results

    def extract_texts(self, images: Sequence[ImagePayload]) -> List[str]:
        texts: List[str] = []
        for idx, image in enumerate(images):
            raw = self.generate_json([{"text": TEXTS_PROMPT}, _image_part(image)], TEXTS_SCHEMA)
            try:
                texts.extend(decode_texts(raw))
            except ExtractionResponseError:
                # An unreadable image does not fail the whole OCR batch.
                logger.warning("Skipping unparseable OCR response for image %d", idx)
            if idx < len(images) - 1 and self.ocr_delay_s > 0:
                self.sleep(self.ocr_delay_s)
        return texts
