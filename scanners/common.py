# scanners/common.py
from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Sequence

from scanners.errors import ScanParseError

FENCE_PAT = re.compile(r"```(?:json)?\s*", re.IGNORECASE)
JSON_OBJECT_PAT = re.compile(r"\{[\s\S]*\}")  # greedy: first '{' .. last '}'
JSON_ARRAY_PAT = re.compile(r"\[[\s\S]*\]")


# ======================================================================
# Model text → JSON
# ======================================================================

def clean_json_block(text: str) -> str:
    """Trim and drop every ``` / ```json fence marker, wherever it sits."""
    return FENCE_PAT.sub("", (text or "").strip()).strip()


def extract_json_object(text: str) -> Dict[str, Any]:
    """
    Pull the JSON object out of free-form model text.
    Raises ScanParseError if there is no {...} region or it does not parse.
    """
    m = JSON_OBJECT_PAT.search(clean_json_block(text))
    if not m:
        raise ScanParseError("No JSON found in response")
    try:
        parsed = json.loads(m.group(0))
    except json.JSONDecodeError as e:
        raise ScanParseError(f"Invalid JSON in response: {e}") from e
    if not isinstance(parsed, dict):
        raise ScanParseError("Response JSON is not an object")
    return parsed


def extract_json_array(text: str) -> List[Any]:
    """Same as extract_json_object, for a top-level [...] answer."""
    m = JSON_ARRAY_PAT.search(clean_json_block(text))
    if not m:
        raise ScanParseError("No JSON array found in response")
    try:
        parsed = json.loads(m.group(0))
    except json.JSONDecodeError as e:
        raise ScanParseError(f"Invalid JSON in response: {e}") from e
    if not isinstance(parsed, list):
        raise ScanParseError("Response JSON is not an array")
    return parsed


def strip_data_url_prefix(image_base64: str) -> str:
    """'data:image/jpeg;base64,AAAA' → 'AAAA'; bare base64 passes through."""
    return image_base64.split(",", 1)[1] if "," in image_base64 else image_base64


# ======================================================================
# Loose value coercion (model output is never trusted for shape)
# ======================================================================

def as_text(value: Any, default: str = "") -> str:
    if isinstance(value, str) and value.strip():
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return default


def as_str_list(value: Any) -> List[str]:
    """Strings kept as-is, numbers stringified, anything else dropped; non-lists become []."""
    if not isinstance(value, list):
        return []
    out: List[str] = []
    for v in value:
        if isinstance(v, str):
            out.append(v)
        elif isinstance(v, (int, float)) and not isinstance(v, bool):
            out.append(str(v))
    return out


def as_bool(value: Any, default: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in {"true", "false"}:
        return value.strip().lower() == "true"
    return default


def as_choice(value: Any, choices: Sequence[str], default: str) -> str:
    if isinstance(value, str):
        v = value.strip()
        if v in choices:
            return v
        if v.lower() in choices:
            return v.lower()
        if v.upper() in choices:
            return v.upper()
    return default


def as_score(value: Any, default: int = 70, lo: int = 0, hi: int = 100) -> int:
    """Numeric → int clamped to [lo, hi]. Missing / non-numeric → default."""
    if isinstance(value, bool):
        return default
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return default
    if not isinstance(value, (int, float)) or value != value:
        return default
    return int(round(max(lo, min(hi, value))))


def as_confidence(value: Any, default: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return max(0.0, min(1.0, float(value)))
