"""
Dashboard state.

One Dashboard object owns the only copy of the data: a Snapshot of all three
collections plus their cross-references. Every mutation goes through the
record client and is followed by a full refetch; there is no incremental
update path and no partial snapshot.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

from yogastudio.client import RecordStoreClient
from yogastudio.dates import is_today, is_today_or_future, schedule_sort_key
from yogastudio.errors import YogaStudioError
from yogastudio.forms import (
    COURSE_MESSAGES,
    INSTRUCTOR_MESSAGES,
    PARTICIPANT_MESSAGES,
    CourseForm,
    DeleteDialog,
    FormDialog,
    InstructorForm,
    Notify,
    ParticipantForm,
    log_notify,
)
from yogastudio.model import Course, Instructor, Participant
from yogastudio.resolver import CrossReferences, build_cross_references

logger = logging.getLogger(__name__)


def sort_courses(courses: list[Course]) -> list[Course]:
    return sorted(courses, key=lambda c: schedule_sort_key(c.schedule))


def sort_by_last_name(records: list[Any]) -> list[Any]:
    return sorted(records, key=lambda r: (r.last_name or "").lower())


def course_status(course: Course) -> str:
    """
    'today', 'upcoming' or 'past' (unknown dates count as past).
    """
    if is_today(course.schedule):
        return "today"
    if is_today_or_future(course.schedule):
        return "upcoming"
    return "past"


@dataclass
class Snapshot:
    courses: list[Course] = field(default_factory=list)
    instructors: list[Instructor] = field(default_factory=list)
    participants: list[Participant] = field(default_factory=list)
    refs: CrossReferences = field(default_factory=CrossReferences)

    @classmethod
    def build(
        cls, courses: list[Course], instructors: list[Instructor], participants: list[Participant]
    ) -> "Snapshot":
        return cls(
            courses=courses,
            instructors=instructors,
            participants=participants,
            refs=build_cross_references(courses, instructors, participants),
        )

    @property
    def sorted_courses(self) -> list[Course]:
        return sort_courses(self.courses)

    @property
    def sorted_instructors(self) -> list[Instructor]:
        return sort_by_last_name(self.instructors)

    @property
    def sorted_participants(self) -> list[Participant]:
        return sort_by_last_name(self.participants)

    def stats(self) -> dict[str, int]:
        return {
            "courses": len(self.courses),
            "instructors": len(self.instructors),
            "participants": len(self.participants),
        }


class LoadState(str, Enum):
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class Dashboard:
    """
    Top-level coordinator: loads data, owns the snapshot, builds dialogs.
    """

    def __init__(self, client: RecordStoreClient, notify: Notify = log_notify) -> None:
        self.client = client
        self.notify = notify
        self.state = LoadState.LOADING
        self.snapshot: Optional[Snapshot] = None
        self.error: Optional[YogaStudioError] = None

        self.course_dialog: FormDialog[CourseForm] = FormDialog(
            CourseForm, COURSE_MESSAGES, self.create_course, self.update_course, notify
        )
        self.instructor_dialog: FormDialog[InstructorForm] = FormDialog(
            InstructorForm, INSTRUCTOR_MESSAGES, self.create_instructor, self.update_instructor, notify
        )
        self.participant_dialog: FormDialog[ParticipantForm] = FormDialog(
            ParticipantForm, PARTICIPANT_MESSAGES, self.create_participant, self.update_participant, notify
        )
        self.delete_course_dialog = DeleteDialog(self.delete_course, notify)
        self.delete_instructor_dialog = DeleteDialog(self.delete_instructor, notify)
        self.delete_participant_dialog = DeleteDialog(self.delete_participant, notify)

    # -- loading ----------------------------------------------------------

    def _fetch_all(self) -> Snapshot:
        # The three lists are independent: fetch them in parallel,
        # but any single failure fails the whole load.
        with ThreadPoolExecutor(max_workers=3) as pool:
            f_courses = pool.submit(self.client.courses.list)
            f_instructors = pool.submit(self.client.instructors.list)
            f_participants = pool.submit(self.client.participants.list)
            courses = f_courses.result()
            instructors = f_instructors.result()
            participants = f_participants.result()
        return Snapshot.build(courses, instructors, participants)

    def refresh(self) -> bool:
        """
        Refetch everything. On failure the snapshot is dropped and the
        dashboard switches to the error state. Returns True on success.
        """
        self.state = LoadState.LOADING
        self.error = None
        try:
            snapshot = self._fetch_all()
        except YogaStudioError as e:
            logger.warning("Loading data failed: %s", e)
            self.snapshot = None
            self.error = e
            self.state = LoadState.ERROR
            return False
        except Exception as e:
            logger.exception("Loading data failed unexpectedly")
            self.snapshot = None
            self.error = YogaStudioError("Unknown error")
            self.error.__cause__ = e
            self.state = LoadState.ERROR
            return False

        self.snapshot = snapshot
        self.state = LoadState.READY
        logger.debug("Loaded %s", snapshot.stats())
        return True

    @property
    def data(self) -> Snapshot:
        if self.snapshot is None:
            raise RuntimeError("Dashboard has no data (state: %s)" % self.state.value)
        return self.snapshot

    # -- mutations --------------------------------------------------------

    def _mutate(self, action: Callable[[], Any]) -> Any:
        result = action()
        self.refresh()
        return result

    def create_course(self, course: Course) -> Any:
        return self._mutate(lambda: self.client.courses.create(course))

    def update_course(self, record_id: str, changes: dict[str, Any]) -> Any:
        return self._mutate(lambda: self.client.courses.update(record_id, changes))

    def delete_course(self, record_id: str) -> bool:
        return self._mutate(lambda: self.client.courses.delete(record_id))

    def create_instructor(self, instructor: Instructor) -> Any:
        return self._mutate(lambda: self.client.instructors.create(instructor))

    def update_instructor(self, record_id: str, changes: dict[str, Any]) -> Any:
        return self._mutate(lambda: self.client.instructors.update(record_id, changes))

    def delete_instructor(self, record_id: str) -> bool:
        return self._mutate(lambda: self.client.instructors.delete(record_id))

    def create_participant(self, participant: Participant) -> Any:
        return self._mutate(lambda: self.client.participants.create(participant))

    def update_participant(self, record_id: str, changes: dict[str, Any]) -> Any:
        return self._mutate(lambda: self.client.participants.update(record_id, changes))

    def delete_participant(self, record_id: str) -> bool:
        return self._mutate(lambda: self.client.participants.delete(record_id))
