"""Coerce free-text model replies into JSON objects."""

from __future__ import annotations

import json
import re
from typing import Any, Dict, Tuple

from .config import ExtractionPolicy
from .errors import ExtractionError

_LEADING_FENCE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"\s*```$")


def _strip_code_fence(text: str) -> str:
    cleaned = text.strip()
    cleaned = _LEADING_FENCE.sub("", cleaned)
    return _TRAILING_FENCE.sub("", cleaned)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def _loads_object(text: str) -> Dict[str, Any] | None:
    try:
        value = json.loads(text, parse_constant=_reject_constant)
    except ValueError:
        return None
    # Stage results are always mappings; a bare list or scalar is a miss.
    if isinstance(value, dict):
        return value
    return None


def extract(raw_text: str) -> Tuple[Dict[str, Any] | None, bool]:
    """Attempt to parse *raw_text* as a JSON object.

    Tries the fence-stripped text as a whole first, then the span between the
    first ``{`` and the last ``}``. Returns ``(structured, True)`` on success
    and ``(None, False)`` otherwise.
    """

    cleaned = _strip_code_fence(raw_text or "")

    structured = _loads_object(cleaned)
    if structured is not None:
        return structured, True

    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start != -1 and end > start:
        structured = _loads_object(cleaned[start : end + 1])
        if structured is not None:
            return structured, True

    return None, False


def parse_failure_sentinel(raw_text: str) -> Dict[str, Any]:
    """Placeholder stage result used when parsing fails under the soft policy."""

    return {"parseError": True, "raw": raw_text}


def is_parse_failure(result: Dict[str, Any] | None) -> bool:
    return bool(result) and result.get("parseError") is True


def parse_stage_output(raw_text: str, policy: ExtractionPolicy = ExtractionPolicy.SOFT) -> Dict[str, Any]:
    """Extract a stage result, applying the configured failure policy."""

    structured, ok = extract(raw_text)
    if ok and structured is not None:
        return structured

    if policy is ExtractionPolicy.HARD:
        raise ExtractionError(raw_text)

    return parse_failure_sentinel(raw_text)
