"""Turning free-form model replies into validated analysis fields."""

from __future__ import annotations

import json
import math
from collections.abc import Iterator
from typing import Any

from sasktask.common.enums import Recommendation
from sasktask.core.disputes.schemas import ParsedAnalysis, ParseFailure, ParseResult

_EXCERPT_CHARS = 200
_MAX_CANDIDATES = 32


def clamp_score(value: float) -> int:
    return max(0, min(100, int(round(value))))


def _balanced_spans(text: str) -> Iterator[str]:
    """Yield balanced ``{...}`` spans: each top-level object, then its nested ones.

    Braces inside JSON string literals are ignored so that a reasoning field
    containing ``"}"`` does not end the object early. Every character is
    scanned once; an object left open at the end of the text stops the scan.
    """
    start = text.find("{")
    while start != -1:
        open_at: list[int] = []
        closed: list[tuple[int, int]] = []
        in_string = False
        escaped = False
        end = None
        for i in range(start, len(text)):
            ch = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
                continue
            if ch == '"':
                in_string = True
            elif ch == "{":
                open_at.append(i)
            elif ch == "}":
                closed.append((open_at.pop(), i))
                if not open_at:
                    end = i
                    break

        for first, last in sorted(closed):
            yield text[first : last + 1]
        if end is None:
            return
        start = text.find("{", end + 1)


def extract_json_object(text: str) -> dict[str, Any] | None:
    """Return the first balanced span of ``text`` that decodes to a JSON object."""
    for attempt, span in enumerate(_balanced_spans(text)):
        if attempt >= _MAX_CANDIDATES:
            break
        try:
            value = json.loads(span)
        except (ValueError, RecursionError):
            continue
        if isinstance(value, dict):
            return value
    return None


def _score(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return max(0, min(100, value))
    if isinstance(value, str):
        try:
            value = float(value.strip().rstrip("%"))
        except ValueError:
            return None
    if isinstance(value, (int, float)) and math.isfinite(value):
        return clamp_score(value)
    return None


def _recommendation(value: Any) -> Recommendation | None:
    if not isinstance(value, str):
        return None
    try:
        return Recommendation(value.strip().lower())
    except ValueError:
        return None


def _text(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _string_list(value: Any) -> tuple[str, ...] | None:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return None
    return tuple(item.strip() for item in value if isinstance(item, str) and item.strip())


def parse_analysis_response(text: str) -> ParseResult:
    if not text or not text.strip():
        return ParseFailure(reason="empty response")

    payload = extract_json_object(text)
    if payload is None:
        return ParseFailure(reason="no JSON object found", raw_excerpt=text[:_EXCERPT_CHARS])

    parsed = ParsedAnalysis(
        risk_score=_score(payload.get("risk_score")),
        confidence_score=_score(payload.get("confidence_score")),
        recommendation=_recommendation(payload.get("recommendation")),
        reasoning=_text(payload.get("reasoning")),
        inconsistencies=_string_list(payload.get("inconsistencies")),
        suggested_resolution=_text(payload.get("suggested_resolution")),
    )
    if all(v is None for v in parsed.model_dump().values()):
        return ParseFailure(reason="no analysis fields in JSON object", raw_excerpt=text[:_EXCERPT_CHARS])
    return parsed
