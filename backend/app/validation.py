from __future__ import annotations

import re
from typing import Any

from app.errors import ValidationError


_WHITESPACE = re.compile(r"\s+")
# Characters the xlsx format cannot store; tab, newline and CR are allowed
_CONTROL = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")


def normalize_name(value: Any) -> str:
    """
    Canonical display form of a name: trimmed, inner whitespace collapsed,
    control characters removed.

    Accents and other diacritics are left as typed.
    """
    if value is None:
        return ""
    return _WHITESPACE.sub(" ", _CONTROL.sub(" ", str(value))).strip()


def name_key(value: Any) -> str:
    """Comparison key for uniqueness checks (case-insensitive)."""
    return normalize_name(value).casefold()


def require_text(value: Any, field: str) -> str:
    text = normalize_name(value)
    if not text:
        raise ValidationError(f"{field} is required")
    return text


def optional_text(value: Any) -> str:
    if value is None:
        return ""
    return _CONTROL.sub("", str(value)).strip()


def parse_positive_int(value: Any, field: str) -> int:
    """
    Strict integer parsing for form and JSON input.

    Rejects blanks, booleans, floats, decimals ("12.5") and scientific
    notation ("1e3"). The result must be > 0.
    """
    if value is None:
        raise ValidationError(f"{field} is required")

    # Already an int (but not bool which is a subclass of int)
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer")
    if isinstance(value, int):
        number = value
    elif isinstance(value, float):
        raise ValidationError(f"{field} must be an integer, not a decimal")
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{field} is required")
        if "e" in stripped.lower():
            raise ValidationError(f"{field} must be a plain integer (scientific notation not allowed)")
        if "." in stripped:
            raise ValidationError(f"{field} must be an integer (no decimals)")
        try:
            number = int(stripped)
        except ValueError:
            raise ValidationError(f"{field} must be an integer")
    else:
        raise ValidationError(f"{field} must be an integer")

    if number <= 0:
        raise ValidationError(f"{field} must be greater than zero")
    return number


def parse_flag(value: Any) -> bool:
    """HTML checkbox / form flag. Missing means False."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in {"1", "true", "yes", "on", "y"}
