"""
CLI (Command Line Interface).

This module provides quick terminal commands for scripting and for testing, e.g.:

    yogastudio courses
    yogastudio course add --name "Hatha Yoga Anfänger" --schedule 2026-10-19T10:00
    yogastudio participant add --first-name Anna --last-name Berg --course <id>
    yogastudio instructor delete <id> --yes
    yogastudio login "<cookie header>"
    yogastudio interactive

Note:
- The interactive dashboard lives in yogastudio/interactive.py
- This CLI is intentionally simple and prints plain text (no rich formatting)
"""

from __future__ import annotations

import argparse
import logging
from typing import Any, Callable, Optional

from yogastudio.client import RecordStoreClient
from yogastudio.config import Settings
from yogastudio.dashboard import Dashboard
from yogastudio.dates import format_date_time, tomorrow_default
from yogastudio.errors import YogaStudioError
from yogastudio.forms import CourseForm, InstructorForm, ParticipantForm, changed_fields
from yogastudio.references import extract_record_id
from yogastudio.resolver import PLACEHOLDER, course_title, instructor_full_name, participant_full_name
from yogastudio.storage import clear_session_cookie, save_session_cookie

logger = logging.getLogger(__name__)


def _print_errors(errors: dict[str, str]) -> None:
    for msg in errors.values():
        print(f"Invalid input: {msg}")


def _course_ref(value: Optional[str]) -> Optional[str]:
    """
    Accept either a bare record id or a full record URL.
    """
    if value is None:
        return None
    if not value.strip():
        return ""
    rid = extract_record_id(value.strip())
    if rid is None:
        raise YogaStudioError(f"Not a course id: {value!r}")
    return rid


def _load(client: RecordStoreClient) -> Optional[Dashboard]:
    dashboard = Dashboard(client)
    if not dashboard.refresh():
        print(f"Could not load data: {dashboard.error}")
        return None
    return dashboard


def _confirm(args: argparse.Namespace, name: str) -> bool:
    if args.yes:
        return True
    answer = input(f'Delete "{name}"? This cannot be undone. [y/N]: ').strip().lower()
    return answer == "y"


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------


def _cmd_courses(args: argparse.Namespace, client: RecordStoreClient) -> int:
    dashboard = _load(client)
    if dashboard is None:
        return 1
    data = dashboard.data
    courses = data.sorted_courses
    if not courses:
        print("No courses yet.")
        return 0

    for c in courses:
        bits = [c.record_id, format_date_time(c.schedule), course_title(c)]
        if c.location:
            bits.append(c.location)
        instructor = data.refs.instructor_name(c.record_id)
        if instructor:
            bits.append(instructor)
        bits.append(f"{data.refs.participant_count(c.record_id)} participants")
        print(" | ".join(bits))
    return 0


def _cmd_instructors(args: argparse.Namespace, client: RecordStoreClient) -> int:
    dashboard = _load(client)
    if dashboard is None:
        return 1
    data = dashboard.data
    instructors = data.sorted_instructors
    if not instructors:
        print("No instructors yet.")
        return 0

    for kl in instructors:
        bits = [kl.record_id, instructor_full_name(kl) or PLACEHOLDER, kl.phone or PLACEHOLDER]
        bits.append(data.refs.course_name(kl.course_id))
        print(" | ".join(bits))
    return 0


def _cmd_participants(args: argparse.Namespace, client: RecordStoreClient) -> int:
    dashboard = _load(client)
    if dashboard is None:
        return 1
    data = dashboard.data
    participants = data.sorted_participants
    if not participants:
        print("No participants yet.")
        return 0

    for p in participants:
        names = data.refs.participant_course_names(p)
        bits = [p.record_id, participant_full_name(p) or PLACEHOLDER, p.email or PLACEHOLDER]
        bits.append(", ".join(names) if names else PLACEHOLDER)
        print(" | ".join(bits))
    return 0


def _cmd_course_show(args: argparse.Namespace, client: RecordStoreClient) -> int:
    dashboard = _load(client)
    if dashboard is None:
        return 1
    refs = dashboard.data.refs
    course = refs.course_by_id.get(args.record_id)
    if course is None:
        print(f"Course not found: {args.record_id}")
        return 1

    print(course.name or "Course")
    if course.description:
        print(course.description)
    print(f"When:       {format_date_time(course.schedule)}")
    if course.location:
        print(f"Location:   {course.location}")
    instructor = refs.instructor_name(course.record_id)
    if instructor:
        print(f"Instructor: {instructor}")
    print(f"Participants ({refs.participant_count(course.record_id)}):")
    for name in refs.participant_names(course.record_id):
        print(f"- {name}")
    return 0


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


def _apply(form: Any, overrides: dict[str, Any]) -> None:
    # only options the user actually passed
    for attr, value in overrides.items():
        if value is not None:
            setattr(form, attr, value)


def _cmd_course_save(args: argparse.Namespace, client: RecordStoreClient) -> int:
    editing = args.action == "edit"
    record = client.courses.get(args.record_id) if editing else None
    form = CourseForm.from_record(record)
    _apply(
        form,
        {"name": args.name, "description": args.description, "schedule": args.schedule, "location": args.location},
    )
    errors = form.validate()
    if errors:
        _print_errors(errors)
        return 1

    if editing:
        client.courses.update(args.record_id, changed_fields(form, record))
        print("Course updated.")
    else:
        client.courses.create(form.to_record())
        print("New course created.")
    return 0


def _cmd_instructor_save(args: argparse.Namespace, client: RecordStoreClient) -> int:
    editing = args.action == "edit"
    record = client.instructors.get(args.record_id) if editing else None
    form = InstructorForm.from_record(record)
    _apply(
        form,
        {
            "first_name": args.first_name,
            "last_name": args.last_name,
            "phone": args.phone,
            "course_id": _course_ref(args.course),
        },
    )
    errors = form.validate()
    if errors:
        _print_errors(errors)
        return 1

    if editing:
        client.instructors.update(args.record_id, changed_fields(form, record))
        print("Instructor updated.")
    else:
        client.instructors.create(form.to_record())
        print("Instructor added.")
    return 0


def _cmd_participant_save(args: argparse.Namespace, client: RecordStoreClient) -> int:
    editing = args.action == "edit"
    record = client.participants.get(args.record_id) if editing else None
    form = ParticipantForm.from_record(record)
    course_ids = None
    if args.course is not None:
        course_ids = [cid for cid in (_course_ref(c) for c in args.course) if cid]
    _apply(
        form,
        {"first_name": args.first_name, "last_name": args.last_name, "email": args.email, "course_ids": course_ids},
    )
    errors = form.validate()
    if errors:
        _print_errors(errors)
        return 1

    if editing:
        client.participants.update(args.record_id, changed_fields(form, record))
        print("Participant updated.")
    else:
        client.participants.create(form.to_record())
        print("Participant registered.")
    return 0


def _cmd_delete(
    args: argparse.Namespace, client: RecordStoreClient, collection_name: str, display: Callable[[Any], str]
) -> int:
    collection = getattr(client, collection_name)
    record = collection.get(args.record_id)
    name = display(record)
    if not _confirm(args, name):
        print("Cancelled.")
        return 0
    collection.delete(args.record_id)
    print(f'"{name}" was deleted.')
    return 0


def _cmd_login(args: argparse.Namespace) -> int:
    cookie = (args.cookie or "").strip()
    if not cookie:
        print("Please provide the session cookie.")
        return 1
    save_session_cookie(cookie)
    print("Session cookie saved.")
    return 0


def _cmd_logout(args: argparse.Namespace) -> int:
    if clear_session_cookie():
        print("Session cookie removed.")
    else:
        print("No saved session cookie.")
    return 0


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def _add_record_commands(
    sub: Any, name: str, help_text: str, add_fields: Callable[[argparse.ArgumentParser], None]
) -> Any:
    p = sub.add_parser(name, help=help_text)
    actions = p.add_subparsers(dest="action", required=True)

    p_add = actions.add_parser("add", help=f"Create a new {name}")
    add_fields(p_add)

    p_edit = actions.add_parser("edit", help=f"Edit a {name} (only given options change)")
    p_edit.add_argument("record_id", type=str, help="Record ID")
    add_fields(p_edit)

    p_delete = actions.add_parser("delete", help=f"Delete a {name}")
    p_delete.add_argument("record_id", type=str, help="Record ID")
    p_delete.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")

    return actions


def _course_fields(p: argparse.ArgumentParser) -> None:
    p.add_argument("--name", type=str, help="Course name (e.g. 'Hatha Yoga Anfänger')")
    p.add_argument("--description", type=str, help="Course description")
    p.add_argument(
        "--schedule", type=str, help=f"Date & time, YYYY-MM-DDTHH:MM (new courses default to {tomorrow_default()})"
    )
    p.add_argument("--location", type=str, help="Location (e.g. 'Raum 1, Studio Mitte')")


def _instructor_fields(p: argparse.ArgumentParser) -> None:
    p.add_argument("--first-name", dest="first_name", type=str, help="First name")
    p.add_argument("--last-name", dest="last_name", type=str, help="Last name")
    p.add_argument("--phone", type=str, help="Contact phone (e.g. '+49 123 456 789')")
    p.add_argument("--course", type=str, help="Assigned course ID or URL ('' removes the assignment)")


def _participant_fields(p: argparse.ArgumentParser) -> None:
    p.add_argument("--first-name", dest="first_name", type=str, help="First name")
    p.add_argument("--last-name", dest="last_name", type=str, help="Last name")
    p.add_argument("--email", type=str, help="E-mail address")
    p.add_argument("--course", type=str, action="append", help="Enrolled course ID or URL (repeatable)")


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="yogastudio", description="Yoga Studio course management")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log HTTP requests and debug details")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("courses", help="List courses by date")
    sub.add_parser("instructors", help="List instructors by last name")
    sub.add_parser("participants", help="List participants by last name")

    course_actions = _add_record_commands(sub, "course", "Manage courses", _course_fields)
    p_show = course_actions.add_parser("show", help="Show course details with instructor and participants")
    p_show.add_argument("record_id", type=str, help="Record ID")

    _add_record_commands(sub, "instructor", "Manage instructors", _instructor_fields)
    _add_record_commands(sub, "participant", "Manage participants", _participant_fields)

    p_login = sub.add_parser("login", help="Save the record-store session cookie")
    p_login.add_argument("cookie", type=str, help="Cookie header value copied from the browser")
    sub.add_parser("logout", help="Remove the saved session cookie")

    sub.add_parser("interactive", help="Interactive dashboard")

    return parser


def _dispatch(args: argparse.Namespace, client: RecordStoreClient) -> int:
    if args.command == "courses":
        return _cmd_courses(args, client)
    if args.command == "instructors":
        return _cmd_instructors(args, client)
    if args.command == "participants":
        return _cmd_participants(args, client)

    if args.command == "course":
        if args.action == "show":
            return _cmd_course_show(args, client)
        if args.action == "delete":
            return _cmd_delete(args, client, "courses", lambda c: c.name or "Course")
        return _cmd_course_save(args, client)
    if args.command == "instructor":
        if args.action == "delete":
            return _cmd_delete(args, client, "instructors", instructor_full_name)
        return _cmd_instructor_save(args, client)
    if args.command == "participant":
        if args.action == "delete":
            return _cmd_delete(args, client, "participants", participant_full_name)
        return _cmd_participant_save(args, client)

    return 2


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "login":
        raise SystemExit(_cmd_login(args))
    if args.command == "logout":
        raise SystemExit(_cmd_logout(args))

    client = RecordStoreClient(Settings.from_env())

    if args.command == "interactive":
        from yogastudio.interactive import notify, run_interactive

        run_interactive(Dashboard(client, notify=notify))
        raise SystemExit(0)

    try:
        code = _dispatch(args, client)
    except YogaStudioError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}")
        code = 1
    raise SystemExit(code)
