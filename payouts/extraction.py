from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ExtractionResponseError, InputValidationError
from .models import MatchResult

MATCHES_PROMPT = """
You analyse end-of-match screenshots from the game Free Fire.
The image is either the result screen of a single team (solo or duo) or a
leaderboard/table listing several teams.
Extract every team you can identify; a team has 1 or 2 players.
- "playerNames": 1 or 2 names exactly as shown. Never invent missing names.
- "kills": total kills of the team. If kills are shown per player, add them up.
- "placement": final position of the team in the match, or null if unclear.
Return one object per team. Use null for any field you cannot read.
Return an empty array if no team is found.
"""

TEXTS_PROMPT = """
Extract ALL visible text from this image (names, nicknames, words, phrases),
in any language and exactly as written, including accents and special
characters. Return each separate piece of text as one array item. Ignore
icons and noise. Return an empty array if there is no text.
"""

MATCHES_SCHEMA: Dict[str, Any] = {
    "type": "ARRAY",
    "description": "Every team (solo or duo) found in the image with its result.",
    "items": {
        "type": "OBJECT",
        "properties": {
            "playerNames": {"type": "ARRAY", "items": {"type": "STRING"}},
            "kills": {"type": "INTEGER"},
            "placement": {"type": "INTEGER", "nullable": True},
        },
        "required": ["playerNames", "kills", "placement"],
    },
}

TEXTS_SCHEMA: Dict[str, Any] = {
    "type": "ARRAY",
    "description": "Text fragments found in the image.",
    "items": {"type": "STRING"},
}

_REQUIRED_KEYS = ("playerNames", "kills", "placement")


class ImagePayload(BaseModel):
    """One screenshot as base64 data plus its MIME type."""

    model_config = ConfigDict(populate_by_name=True)

    data: str = Field(..., min_length=1)
    mime_type: str = Field(..., alias="mimeType", min_length=1)

    @classmethod
    def parse(cls, raw: Any) -> "ImagePayload":
        try:
            return cls.model_validate(raw)
        except ValidationError as exc:
            raise InputValidationError("Each image needs non-empty data and mimeType.") from exc


class ExtractedTeam(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    player_names: Optional[List[str]] = Field(default=None, alias="playerNames")
    kills: Optional[int] = None
    placement: Optional[int] = None

    @field_validator("player_names", mode="before")
    @classmethod
    def _names(cls, value: Any) -> Optional[List[str]]:
        if not isinstance(value, list):
            return None
        return [str(v) for v in value]

    @field_validator("kills", "placement", mode="before")
    @classmethod
    def _number(cls, value: Any) -> Optional[int]:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return int(value)

    def to_match_result(self) -> MatchResult:
        return MatchResult(player_names=self.player_names, kills=self.kills, placement=self.placement)


def _load(payload: Any) -> Any:
    if isinstance(payload, (str, bytes)):
        try:
            return json.loads(payload)
        except json.JSONDecodeError as exc:
            raise ExtractionResponseError("Model response is not valid JSON.") from exc
    return payload


def decode_match_results(payload: Any) -> List[MatchResult]:
    """Validate an extraction response into match results.

    The response must be a JSON array. Items lacking any of the required keys
    are dropped; fields of the wrong type become None.
    """
    data = _load(payload)
    if not isinstance(data, list):
        raise ExtractionResponseError("Model response is not an array of results.")

    results: List[MatchResult] = []
    for item in data:
        if not isinstance(item, dict) or not all(k in item for k in _REQUIRED_KEYS):
            continue
        results.append(ExtractedTeam.model_validate(item).to_match_result())
    return results


def decode_texts(payload: Any) -> List[str]:
    data = _load(payload)
    if not isinstance(data, list):
        raise ExtractionResponseError("Model response is not an array of texts.")
    return [t for t in data if isinstance(t, str) and t.strip()]


def format_extracted_texts(texts: List[str]) -> str:
    """Join names for display: ``a``, ``a e b``, ``a, b e c``."""
    if not texts:
        return ""
    if len(texts) == 1:
        return texts[0]
    return f"{', '.join(texts[:-1])} e {texts[-1]}"
