"""
Input normalization and validation rules.

All functions are pure and raise ValidationError on bad input.
"""

import re
from typing import Optional
from urllib.parse import unquote

from bulletin.core.config import settings
from bulletin.core.exceptions import ValidationError
from bulletin.db.store import PageRequest


EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# Stores take OFFSET and LIMIT as signed 64-bit integers
MAX_ROW_INDEX = 2 ** 63 - 1


def is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def normalize_email(raw: Optional[str]) -> Optional[str]:
    """Percent-decode, trim and lowercase an email. None stays None."""
    if raw is None:
        return None
    return unquote(raw, encoding="utf-8").strip().lower()


def validate_email(field: str, raw: Optional[str]) -> str:
    """Return the normalized email or raise if it is blank or malformed."""
    normalized = normalize_email(raw)

    if is_blank(normalized):
        raise ValidationError(f"{field} must not be blank")

    if not EMAIL_PATTERN.match(normalized):
        raise ValidationError(f"{field} must be a valid email")

    return normalized


def validate_required(field: str, value: Optional[str]) -> str:
    if is_blank(value):
        raise ValidationError(f"{field} must not be empty")
    return value


def validate_paging(page: Optional[int] = None, size: Optional[int] = None) -> PageRequest:
    """
    Apply paging defaults and bounds.

    page >= 0, size > 0, and the last row of the page must be addressable
    by the store.
    """
    page = settings.default_page if page is None else page
    size = settings.default_page_size if size is None else size

    if page < 0:
        raise ValidationError("page must be >= 0")
    if size <= 0:
        raise ValidationError("size must be > 0")
    if (page + 1) * size > MAX_ROW_INDEX:
        raise ValidationError("page and size exceed the maximum row index")

    return PageRequest(page=page, size=size)
