import json

import pytest

from payouts.errors import ExtractionResponseError, InputValidationError
from payouts.extraction import ImagePayload, decode_match_results, decode_texts, format_extracted_texts
from payouts.models import MatchResult


def test_decode_keeps_complete_items() -> None:
    payload = json.dumps([
        {"playerNames": ["A", "B"], "kills": 7, "placement": 1},
        {"playerNames": ["C"], "kills": 2},
        {"playerNames": ["D"], "kills": 1, "placement": None},
    ])
    assert decode_match_results(payload) == [
        MatchResult(player_names=["A", "B"], kills=7, placement=1),
        MatchResult(player_names=["D"], kills=1, placement=None),
    ]


def test_decode_coerces_wrong_types_to_none() -> None:
    [result] = decode_match_results([{"playerNames": "A", "kills": "3", "placement": 2.0}])
    assert result == MatchResult(player_names=None, kills=None, placement=2)


def test_decode_rejects_non_arrays() -> None:
    with pytest.raises(ExtractionResponseError):
        decode_match_results('{"playerNames": ["A"]}')
    with pytest.raises(ExtractionResponseError):
        decode_match_results("not json")


def test_decode_texts_drops_blanks() -> None:
    assert decode_texts('["Ana", " ", "Bia", 3]') == ["Ana", "Bia"]


def test_image_payload() -> None:
    image = ImagePayload.parse({"data": "aGk=", "mimeType": "image/png"})
    assert image.mime_type == "image/png"
    with pytest.raises(InputValidationError):
        ImagePayload.parse({"data": "", "mimeType": "image/png"})
    with pytest.raises(InputValidationError):
        ImagePayload.parse({"data": "aGk="})


def test_format_extracted_texts() -> None:
    assert format_extracted_texts([]) == ""
    assert format_extracted_texts(["Ana"]) == "Ana"
    assert format_extracted_texts(["Ana", "Bia"]) == "Ana e Bia"
    assert format_extracted_texts(["Ana", "Bia", "Caio"]) == "Ana, Bia e Caio"
