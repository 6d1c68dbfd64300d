"""
Input validation helpers shared by the services.
"""

import html
from typing import Any, Optional

from perfeval.core.exceptions import ValidationError


def require_positive_id(value: Any, field: str) -> int:
    """
    Accept positive integers (or digit strings) as identifiers.

    Raises:
        ValidationError: For anything else, naming the field
    """
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {field}", field=field)
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    if not isinstance(value, int) or value <= 0:
        raise ValidationError(f"Invalid {field}: must be a positive integer", field=field)
    return value


def require_text(value: Any, field: str, max_length: Optional[int] = None, escape: bool = False) -> str:
    """
    Return the trimmed text, rejecting blanks and over-long values.

    With escape=True the text is also HTML-escaped (free text shown back in
    the UI as-is).
    """
    text = "" if value is None else str(value).strip()
    if not text:
        raise ValidationError(f"{field} is required", field=field)
    # Length is measured on what the caller typed, not the escaped form
    if max_length is not None and len(text) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters", field=field)
    return html.escape(text, quote=True) if escape else text


def optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
