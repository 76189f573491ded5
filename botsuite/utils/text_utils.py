"""
botsuite/utils/text_utils.py

Purpose: Small text helpers shared by the extraction pipeline and the API
"""

from typing import Optional

from botsuite.utils.constants import TRUNCATION_MARKER


def truncate_text(text: Optional[str], limit: int = 12000) -> str:
    """
    Cuts text at `limit` characters and appends a marker with the number
    of characters dropped.

    Example:
        >>> truncate_text("abcdef", limit=4)
        'abcd\\n\\n[Truncated 2 chars]'
    """
    if not text:
        return ""
    if len(text) <= limit:
        return text
    return text[:limit] + TRUNCATION_MARKER.format(omitted=len(text) - limit)


def clean_field(value: Optional[str]) -> str:
    """Stringify and trim an optional form/JSON field."""
    if value is None:
        return ""
    return str(value).strip()
