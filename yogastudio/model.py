"""
Central data model definitions used across the project.

This module defines the canonical structure of the three record kinds kept in
the record store so that:
- all modules share the same attribute names
- references between records are plain record ids, never URLs
- the wire field names stay confined to yogastudio.codec
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class Course:
    """
    One yoga course (collection "Kursverwaltung").

    `schedule` is kept as the string the store holds, usually
    'YYYY-MM-DDTHH:MM'.
    """

    record_id: str
    name: Optional[str] = None
    description: Optional[str] = None
    schedule: Optional[str] = None
    location: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class Instructor:
    """
    One instructor (collection "Kursleiterzuordnung"), assigned to at most one course.
    """

    record_id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    course_id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class Participant:
    """
    One participant registration (collection "Teilnehmeranmeldung").
    """

    record_id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    course_ids: list[str] = field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


def full_name(first: Optional[str], last: Optional[str]) -> str:
    """
    Join first and last name; empty string if both are missing.
    """
    return f"{first or ''} {last or ''}".strip()
