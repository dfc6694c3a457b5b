"""
Create/edit forms and the dialogs that submit them.

Each dialog follows the same small state machine:

    closed -> open(create) | open(edit) -> submitting -> closed      (success)
                                                      -> open + error (failure)

Closing a dialog discards the form. Failures never close the dialog, so the
user can fix the input or simply submit the same form again.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, ClassVar, Generic, Optional, TypeVar, Union

from yogastudio.dates import parse_iso, tomorrow_default
from yogastudio.errors import ValidationError, YogaStudioError
from yogastudio.model import Course, Instructor, Participant

logger = logging.getLogger(__name__)

# notify(level, message) with level "success" or "error"
Notify = Callable[[str, str], None]


def log_notify(level: str, message: str) -> None:
    if level == "error":
        logger.error(message)
    else:
        logger.info(message)


def _clean(value: str) -> str:
    return value.strip()


def _or_none(values: dict[str, Any]) -> dict[str, Any]:
    # blank optional text becomes a missing value on new records
    return {k: (None if v == "" else v) for k, v in values.items()}


@dataclass
class CourseForm:
    name: str = ""
    description: str = ""
    schedule: str = field(default_factory=tomorrow_default)
    location: str = ""

    required: ClassVar[dict[str, str]] = {"name": "Course name", "schedule": "Date & time"}

    @classmethod
    def from_record(cls, course: Optional[Course] = None) -> "CourseForm":
        if course is None:
            return cls()
        return cls(
            name=course.name or "",
            description=course.description or "",
            schedule=course.schedule or tomorrow_default(),
            location=course.location or "",
        )

    def validate(self) -> dict[str, str]:
        errors = _missing(self, self.required)
        if "schedule" not in errors and parse_iso(self.schedule) is None:
            errors["schedule"] = "Date & time must look like YYYY-MM-DDTHH:MM"
        return errors

    def changes(self) -> dict[str, Any]:
        return {
            "name": self.name.strip(),
            "description": _clean(self.description),
            "schedule": self.schedule.strip(),
            "location": _clean(self.location),
        }

    def to_record(self) -> Course:
        return Course(record_id="", **_or_none(self.changes()))


@dataclass
class InstructorForm:
    first_name: str = ""
    last_name: str = ""
    phone: str = ""
    course_id: str = ""

    required: ClassVar[dict[str, str]] = {"first_name": "First name", "last_name": "Last name"}

    @classmethod
    def from_record(cls, instructor: Optional[Instructor] = None) -> "InstructorForm":
        if instructor is None:
            return cls()
        return cls(
            first_name=instructor.first_name or "",
            last_name=instructor.last_name or "",
            phone=instructor.phone or "",
            course_id=instructor.course_id or "",
        )

    def validate(self) -> dict[str, str]:
        return _missing(self, self.required)

    def changes(self) -> dict[str, Any]:
        return {
            "first_name": self.first_name.strip(),
            "last_name": self.last_name.strip(),
            "phone": _clean(self.phone),
            "course_id": _clean(self.course_id),
        }

    def to_record(self) -> Instructor:
        return Instructor(record_id="", **_or_none(self.changes()))


@dataclass
class ParticipantForm:
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    course_ids: list[str] = field(default_factory=list)

    required: ClassVar[dict[str, str]] = {"first_name": "First name", "last_name": "Last name"}

    @classmethod
    def from_record(cls, participant: Optional[Participant] = None) -> "ParticipantForm":
        if participant is None:
            return cls()
        return cls(
            first_name=participant.first_name or "",
            last_name=participant.last_name or "",
            email=participant.email or "",
            course_ids=list(participant.course_ids),
        )

    def validate(self) -> dict[str, str]:
        return _missing(self, self.required)

    def changes(self) -> dict[str, Any]:
        return {
            "first_name": self.first_name.strip(),
            "last_name": self.last_name.strip(),
            "email": _clean(self.email),
            "course_ids": [cid for cid in self.course_ids if cid],
        }

    def to_record(self) -> Participant:
        return Participant(record_id="", **_or_none(self.changes()))


AnyForm = Union[CourseForm, InstructorForm, ParticipantForm]
AnyRecord = Union[Course, Instructor, Participant]
F = TypeVar("F", CourseForm, InstructorForm, ParticipantForm)


def _missing(form: AnyForm, required: dict[str, str]) -> dict[str, str]:
    errors: dict[str, str] = {}
    for attr, label in required.items():
        if not str(getattr(form, attr) or "").strip():
            errors[attr] = f"{label} is required"
    return errors


def changed_fields(form: AnyForm, record: AnyRecord) -> dict[str, Any]:
    """
    The form values that differ from `record`, for a partial update.

    A field the user emptied comes back as "" (or []), which clears it in the store.
    """
    out: dict[str, Any] = {}
    for attr, value in form.changes().items():
        old = getattr(record, attr)
        if isinstance(value, list):
            old = list(old or [])
        else:
            old = (old or "").strip()
        if value != old:
            out[attr] = value
    return out


class DialogState(str, Enum):
    CLOSED = "closed"
    CREATE = "create"
    EDIT = "edit"
    SUBMITTING = "submitting"


@dataclass(frozen=True)
class DialogMessages:
    created: str
    updated: str
    create_failed: str = "Error while creating."
    update_failed: str = "Error while saving."


COURSE_MESSAGES = DialogMessages(created="New course created.", updated="Course updated.")
INSTRUCTOR_MESSAGES = DialogMessages(created="Instructor added.", updated="Instructor updated.")
PARTICIPANT_MESSAGES = DialogMessages(
    created="Participant registered.",
    updated="Participant updated.",
    create_failed="Error while registering.",
)


class FormDialog(Generic[F]):
    """
    Create/edit dialog for one record kind.

    `create(record)` and `update(record_id, changes)` perform the mutation;
    the dashboard passes functions that also refetch the full dataset.
    """

    def __init__(
        self,
        form_type: type,
        messages: DialogMessages,
        create: Callable[[Any], Any],
        update: Callable[[str, dict[str, Any]], Any],
        notify: Notify = log_notify,
    ) -> None:
        self.form_type = form_type
        self.messages = messages
        self._create = create
        self._update = update
        self.notify = notify

        self.state = DialogState.CLOSED
        self.record: Optional[AnyRecord] = None
        self.form: Optional[F] = None
        self.errors: dict[str, str] = {}
        self.error: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.state != DialogState.CLOSED

    @property
    def is_editing(self) -> bool:
        return self.record is not None

    def open_create(self) -> F:
        return self._open(None)

    def open_edit(self, record: AnyRecord) -> F:
        return self._open(record)

    def _open(self, record: Optional[AnyRecord]) -> F:
        self.record = record
        self.form = self.form_type.from_record(record)
        self.state = DialogState.EDIT if record is not None else DialogState.CREATE
        self.errors = {}
        self.error = None
        return self.form

    def close(self) -> None:
        self.state = DialogState.CLOSED
        self.record = None
        self.form = None
        self.errors = {}
        self.error = None

    def submit(self) -> bool:
        """
        Validate and send the form. Returns True if the dialog closed.
        """
        if self.form is None or self.state == DialogState.CLOSED:
            raise RuntimeError("Dialog is not open")
        if self.state == DialogState.SUBMITTING:
            return False

        self.errors = self.form.validate()
        if self.errors:
            self.error = str(ValidationError(self.errors))
            return False

        open_state = self.state
        self.state = DialogState.SUBMITTING
        try:
            if self.record is not None:
                self._update(self.record.record_id, changed_fields(self.form, self.record))
            else:
                self._create(self.form.to_record())
        except YogaStudioError as e:
            logger.debug("Submit failed: %s", e)
            self.state = open_state
            self.error = str(e)
            self.notify("error", self.messages.update_failed if self.is_editing else self.messages.create_failed)
            return False

        self.notify("success", self.messages.updated if self.is_editing else self.messages.created)
        self.close()
        return True


class DeleteDialog:
    """
    Confirmation step before a record is deleted.
    """

    def __init__(self, delete: Callable[[str], Any], notify: Notify = log_notify) -> None:
        self._delete = delete
        self.notify = notify
        self.record: Optional[AnyRecord] = None
        self.record_name = ""
        self.deleting = False

    @property
    def is_open(self) -> bool:
        return self.record is not None

    def open(self, record: AnyRecord, record_name: str) -> None:
        self.record = record
        self.record_name = record_name
        self.deleting = False

    def cancel(self) -> None:
        self.record = None
        self.record_name = ""
        self.deleting = False

    def confirm(self) -> bool:
        """
        Delete the record. On failure the dialog stays open.
        """
        if self.record is None:
            raise RuntimeError("Dialog is not open")
        self.deleting = True
        try:
            self._delete(self.record.record_id)
        except YogaStudioError as e:
            logger.debug("Delete failed: %s", e)
            self.notify("error", "Entry could not be deleted.")
            return False
        finally:
            self.deleting = False

        self.notify("success", f'"{self.record_name}" was deleted.')
        self.cancel()
        return True
