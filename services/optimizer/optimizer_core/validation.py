from __future__ import annotations

import json
import math
import re
from typing import Any, Dict

from .context import is_missing_value
from .errors import OracleError, ValidationError

_LIST_MARKER = re.compile(r"^\s*(?:•\s*|[-*]\s+|\d+[.)]\s+)")


def extract_json(text: str) -> str:
    if not text:
        return ""
    stripped = text.strip()
    if stripped.startswith("```"):
        stripped = stripped.strip("`")
    start = stripped.find("{")
    end = stripped.rfind("}")
    if start == -1 or end == -1 or end <= start:
        return ""
    return stripped[start : end + 1]


def parse_json_object(json_text: str) -> Dict[str, Any]:
    if not json_text:
        raise OracleError("invalid_json")
    try:
        payload = json.loads(json_text)
    except json.JSONDecodeError as exc:
        raise OracleError(f"invalid_json:{exc}") from exc
    if not isinstance(payload, dict):
        raise OracleError("invalid_json:not_an_object")
    return payload


def clean_item(text: str) -> str:
    return _LIST_MARKER.sub("", text).strip()


def require_score(payload: Dict[str, Any], key: str = "matchScore") -> int:
    value = payload.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{key} must be a number")
    if isinstance(value, float) and not math.isfinite(value):
        raise ValidationError(f"{key} must be finite")
    score = int(round(value))
    if score < 0 or score > 100:
        raise ValidationError(f"{key} out of range:{score}")
    return score


def require_string_list(payload: Dict[str, Any], key: str, *, non_empty: bool = False) -> list[str]:
    value = payload.get(key)
    if not isinstance(value, list):
        raise ValidationError(f"{key} must be an array")
    items: list[str] = []
    for idx, item in enumerate(value):
        if not isinstance(item, str):
            raise ValidationError(f"{key}[{idx}] must be a string")
        cleaned = clean_item(item)
        if not cleaned:
            raise ValidationError(f"{key}[{idx}] must not be blank")
        items.append(cleaned)
    if non_empty and not items:
        raise ValidationError(f"{key} must not be empty")
    return items


def require_text(payload: Dict[str, Any], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or is_missing_value(value):
        raise ValidationError(f"{key} must be a non-empty string")
    return value.strip()


def require_object_list(payload: Dict[str, Any], key: str) -> list[Dict[str, Any]]:
    value = payload.get(key)
    if not isinstance(value, list):
        raise ValidationError(f"{key} must be an array")
    for idx, item in enumerate(value):
        if not isinstance(item, dict):
            raise ValidationError(f"{key}[{idx}] must be an object")
    return value
