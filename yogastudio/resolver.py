"""
Cross-references between courses, instructors and participants.

Given the three collections, build in-memory indexes:
- course_by_id
- instructor_by_course_id   (one instructor per course, last one wins)
- participants_by_course_id (input order)

=> views never have to scan the lists again for every row.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Optional

from yogastudio.model import Course, Instructor, Participant, full_name

PLACEHOLDER = "—"
UNNAMED_COURSE = "Unnamed course"


def course_title(course: Course) -> str:
    return (course.name or "").strip() or UNNAMED_COURSE


def instructor_full_name(instructor: Instructor) -> str:
    return full_name(instructor.first_name, instructor.last_name)


def participant_full_name(participant: Participant) -> str:
    return full_name(participant.first_name, participant.last_name)


@dataclass
class CrossReferences:
    course_by_id: dict[str, Course] = field(default_factory=dict)
    instructor_by_course_id: dict[str, Instructor] = field(default_factory=dict)
    participants_by_course_id: dict[str, list[Participant]] = field(default_factory=dict)

    def instructor_name(self, course_id: str) -> Optional[str]:
        """
        Full name of the instructor running the course, None if unassigned or nameless.
        """
        instructor = self.instructor_by_course_id.get(course_id)
        if instructor is None:
            return None
        return instructor_full_name(instructor) or None

    def participant_count(self, course_id: str) -> int:
        return len(self.participants_by_course_id.get(course_id, []))

    def participant_names(self, course_id: str) -> list[str]:
        return [participant_full_name(p) for p in self.participants_by_course_id.get(course_id, [])]

    def course_name(self, course_id: Optional[str]) -> str:
        """
        Name of the referenced course, or the placeholder if it cannot be resolved.
        """
        if not course_id:
            return PLACEHOLDER
        course = self.course_by_id.get(course_id)
        if course is None or not course.name:
            return PLACEHOLDER
        return course.name

    def participant_course_names(self, participant: Participant) -> list[str]:
        """
        Names of the courses a participant is enrolled in, skipping unknown ids.
        A course without a name shows as the placeholder.
        """
        out: list[str] = []
        for cid in participant.course_ids:
            course = self.course_by_id.get(cid)
            if course is not None:
                out.append(course.name or PLACEHOLDER)
        return out


def build_cross_references(
    courses: list[Course], instructors: list[Instructor], participants: list[Participant]
) -> CrossReferences:
    course_by_id: dict[str, Course] = {}
    for c in courses:
        course_by_id[c.record_id] = c

    instructor_by_course_id: dict[str, Instructor] = {}
    for i in instructors:
        if i.course_id:
            instructor_by_course_id[i.course_id] = i

    participants_by_course_id: dict[str, list[Participant]] = defaultdict(list)
    for p in participants:
        for cid in p.course_ids:
            participants_by_course_id[cid].append(p)

    return CrossReferences(
        course_by_id=course_by_id,
        instructor_by_course_id=instructor_by_course_id,
        participants_by_course_id=dict(participants_by_course_id),
    )
