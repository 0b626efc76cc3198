# core/forms.py: helpers for validating multipart form fields

import json
from typing import List, Optional

from core.errors import InvalidArgument


def require_length(value: Optional[str], label: str, min_length: int, max_length: int) -> str:
    """Trimmed `value`, or InvalidArgument when it falls outside the length bounds."""
    cleaned = (value or "").strip()
    if len(cleaned) < min_length or len(cleaned) > max_length:
        raise InvalidArgument(f"{label} must be between {min_length} and {max_length} characters")
    return cleaned


def parse_json_list(raw: Optional[str], label: str) -> List[str]:
    """Decode a form field carrying a JSON array of strings."""
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        raise InvalidArgument(f"{label} must be a valid JSON array")
    if not isinstance(value, list):
        raise InvalidArgument(f"{label} must be a valid JSON array")
    return [str(item) for item in value]
