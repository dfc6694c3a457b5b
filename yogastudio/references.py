"""
Cross-record references.

The record store links records through URL strings such as

    https://ci04.ci.xist4c.de/rest/apps/<appId>/records/<recordId>

Only the trailing 24-hex-character record id carries meaning. Multi-value
reference fields hold several URLs separated by commas.
"""

from __future__ import annotations

import re
from typing import Optional

_RECORD_ID_RE = re.compile(r"([a-f0-9]{24})$", re.IGNORECASE)


def extract_record_id(url: Optional[str]) -> Optional[str]:
    """
    Return the 24-hex-character suffix of `url`, or None if there is none.
    """
    if not url:
        return None
    m = _RECORD_ID_RE.search(url)
    return m.group(1) if m else None


def create_record_url(base_url: str, app_id: str, record_id: str) -> str:
    return f"{base_url.rstrip('/')}/apps/{app_id}/records/{record_id}"


def split_reference_field(value: Optional[str]) -> list[str]:
    """
    Split a (possibly multi-value) reference field into trimmed segments.

    A value without a comma is returned as a single, untouched segment.
    """
    if not value:
        return []
    if "," not in value:
        return [value]
    return [part.strip() for part in value.split(",")]


def extract_record_ids(value: Optional[str]) -> list[str]:
    """
    Resolve every segment of a reference field to a record id.

    Segments without a valid id are dropped; order follows the field.
    """
    out: list[str] = []
    for segment in split_reference_field(value):
        rid = extract_record_id(segment)
        if rid:
            out.append(rid)
    return out
