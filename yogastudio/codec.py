"""
Wire format of the record store.

A record body looks like:

    {"id": "...", "createdat": "...", "updatedat": "...",
     "fields": {"kurs_name": "...", "kurs_zeitplan": "2026-10-19T10:00", ...}}

This is the only module that knows the German wire field names and the
URL encoding of references. Everything above it works with the dataclasses
from yogastudio.model.
"""

from __future__ import annotations

import logging
from dataclasses import fields as dc_fields
from typing import Any, Callable, Generic, Mapping, Optional, TypeVar

from yogastudio.model import Course, Instructor, Participant
from yogastudio.references import extract_record_id, split_reference_field

logger = logging.getLogger(__name__)

T = TypeVar("T", Course, Instructor, Participant)

# attribute name -> wire field name
COURSE_FIELDS = {
    "name": "kurs_name",
    "description": "kurs_beschreibung",
    "schedule": "kurs_zeitplan",
    "location": "kurs_ort",
}
INSTRUCTOR_FIELDS = {
    "first_name": "kursleiter_vorname",
    "last_name": "kursleiter_nachname",
    "phone": "kursleiter_kontakt",
    "course_id": "zugewiesener_kurs",
}
PARTICIPANT_FIELDS = {
    "first_name": "teilnehmer_vorname",
    "last_name": "teilnehmer_nachname",
    "email": "teilnehmer_email",
    "course_ids": "angemeldete_kurse",
}


def _text(value: Any) -> Optional[str]:
    # The store omits empty fields; treat "" the same way.
    if value is None:
        return None
    s = str(value)
    return s if s.strip() else None


class RecordCodec(Generic[T]):
    """
    Converts between record bodies and one model dataclass.

    `course_url` turns a course record id into the reference URL the store
    expects in lookup fields.
    """

    record_type: type
    field_map: dict[str, str]
    single_refs: tuple[str, ...] = ()
    multi_refs: tuple[str, ...] = ()

    def __init__(self, course_url: Callable[[str], str]) -> None:
        self.course_url = course_url

    # -- decoding ---------------------------------------------------------

    def decode(self, record_id: str, body: Mapping[str, Any]) -> T:
        raw_fields = body.get("fields") or {}
        if not isinstance(raw_fields, Mapping):
            raw_fields = {}

        values: dict[str, Any] = {}
        for attr, wire in self.field_map.items():
            raw = _text(raw_fields.get(wire))
            if attr in self.single_refs:
                values[attr] = self._decode_single(record_id, wire, raw)
            elif attr in self.multi_refs:
                values[attr] = self._decode_multi(record_id, wire, raw)
            else:
                values[attr] = raw

        return self.record_type(
            record_id=record_id,
            created_at=_text(body.get("createdat")),
            updated_at=_text(body.get("updatedat")),
            **values,
        )

    def _decode_single(self, record_id: str, wire: str, raw: Optional[str]) -> Optional[str]:
        if raw is None:
            return None
        rid = extract_record_id(raw)
        if rid is None:
            logger.debug("Record %s: dropping unresolvable %s reference %r", record_id, wire, raw)
        return rid

    def _decode_multi(self, record_id: str, wire: str, raw: Optional[str]) -> list[str]:
        out: list[str] = []
        for segment in split_reference_field(raw):
            rid = extract_record_id(segment)
            if rid is None:
                logger.debug("Record %s: dropping unresolvable %s segment %r", record_id, wire, segment)
                continue
            out.append(rid)
        return out

    # -- encoding ---------------------------------------------------------

    def encode(self, record: T) -> dict[str, str]:
        """
        Encode all fields of `record`. Missing values are left out.
        """
        changes = {
            f.name: getattr(record, f.name)
            for f in dc_fields(record)
            if f.name in self.field_map and getattr(record, f.name) not in (None, "", [])
        }
        return self.encode_changes(changes)

    def encode_changes(self, changes: Mapping[str, Any]) -> dict[str, str]:
        """
        Encode a partial update given as {attribute: value}.

        None leaves the stored field alone; "" (or an empty course list)
        is sent as "" and clears it.
        """
        out: dict[str, str] = {}
        for attr, value in changes.items():
            if attr not in self.field_map:
                raise KeyError(f"Unknown field for {self.record_type.__name__}: {attr!r}")
            if value is None:
                continue
            wire = self.field_map[attr]
            if attr in self.single_refs:
                out[wire] = self.course_url(value) if value else ""
            elif attr in self.multi_refs:
                ids = [rid for rid in value if rid]
                out[wire] = ", ".join(self.course_url(rid) for rid in ids)
            else:
                out[wire] = str(value).strip()
        return out


class CourseCodec(RecordCodec[Course]):
    record_type = Course
    field_map = COURSE_FIELDS


class InstructorCodec(RecordCodec[Instructor]):
    record_type = Instructor
    field_map = INSTRUCTOR_FIELDS
    single_refs = ("course_id",)


class ParticipantCodec(RecordCodec[Participant]):
    record_type = Participant
    field_map = PARTICIPANT_FIELDS
    multi_refs = ("course_ids",)
