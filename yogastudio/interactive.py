from __future__ import annotations

from typing import Any, Callable, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from yogastudio.dashboard import Dashboard, LoadState, course_status
from yogastudio.dates import format_date_short, format_date_time, format_time
from yogastudio.forms import CourseForm, FormDialog, InstructorForm, ParticipantForm
from yogastudio.model import Course, Instructor, Participant
from yogastudio.resolver import PLACEHOLDER, course_title, instructor_full_name, participant_full_name

console = Console()

# Typing this at a field prompt clears the field.
CLEAR = "-"

STATUS_STYLE = {"today": "[bold green]today[/]", "upcoming": "[green]upcoming[/]", "past": "[dim]past[/]"}


def _println(msg: str = "") -> None:
    console.print(msg)


def _prompt(msg: str) -> str:
    return console.input(escape(msg))


def notify(level: str, message: str) -> None:
    if level == "error":
        console.print(f"[bold red]✗[/] {escape(message)}")
    else:
        console.print(f"[bold green]✓[/] {escape(message)}")


def run_interactive(dashboard: Dashboard) -> None:
    """
    Interactive menu loop. Loads all data first; every action that changes
    data reloads everything before the menu is shown again.
    """
    dashboard.refresh()

    while True:
        if dashboard.state == LoadState.ERROR:
            if not _flow_error(dashboard):
                _println("Bye.")
                return
            continue

        _print_header(dashboard)

        choice = _prompt(
            "\n[1] Courses\n"
            "[2] Participants\n"
            "[3] Instructors\n"
            "[4] New course\n"
            "[r] Reload\n"
            "[0] Exit\n"
            "Select: "
        ).strip().lower()

        if choice == "0":
            _println("Bye.")
            return

        if choice == "1":
            _flow_courses(dashboard)
        elif choice == "2":
            _flow_participants(dashboard)
        elif choice == "3":
            _flow_instructors(dashboard)
        elif choice == "4":
            dashboard.course_dialog.open_create()
            _run_form_dialog(dashboard.course_dialog, _fill_course_form)
        elif choice == "r":
            if dashboard.refresh():
                _println("Data reloaded.")
        else:
            _println("Invalid choice.")


def _flow_error(dashboard: Dashboard) -> bool:
    """
    Error state: nothing but the message and a retry. Returns False to quit.
    """
    _println("\n[bold red]Data could not be loaded.[/]")
    _println(escape(str(dashboard.error) or "Unknown error"))
    choice = _prompt("[r] Retry  [0] Exit: ").strip().lower()
    if choice == "0":
        return False
    dashboard.refresh()
    return True


def _print_header(dashboard: Dashboard) -> None:
    stats = dashboard.data.stats()
    _println("\n=== Yoga Studio · Course management ===")
    _println(
        f"Courses: [bold]{stats['courses']}[/] | "
        f"Instructors: [bold]{stats['instructors']}[/] | "
        f"Participants: [bold]{stats['participants']}[/]"
    )


def _pick(items: list[Any], label: str) -> Optional[Any]:
    """
    Ask for a 1-based row number. Blank or invalid input returns None.
    """
    pick = _prompt(f"Enter number to {label} [blank = back]: ").strip()
    if not pick:
        return None
    if not pick.isdigit():
        _println("Not a number.")
        return None
    i = int(pick)
    if not (1 <= i <= len(items)):
        _println("Out of range.")
        return None
    return items[i - 1]


# ---------------------------------------------------------------------------
# Courses
# ---------------------------------------------------------------------------


def _course_when(course: Course) -> str:
    if not course.schedule:
        return PLACEHOLDER
    return escape(f"{format_date_short(course.schedule)}, {format_time(course.schedule)} Uhr")


def _print_courses(dashboard: Dashboard, courses: list[Course]) -> None:
    refs = dashboard.data.refs
    table = Table(title="Upcoming courses", box=box.SIMPLE)
    table.add_column("#", justify="right")
    table.add_column("When")
    table.add_column("Course")
    table.add_column("Location")
    table.add_column("Instructor")
    table.add_column("Participants", justify="right")
    table.add_column("Status")

    for i, c in enumerate(courses, start=1):
        table.add_row(
            str(i),
            _course_when(c),
            f"[bold cyan]{escape(course_title(c))}[/]",
            escape(c.location or ""),
            f"[magenta]{escape(refs.instructor_name(c.record_id) or '')}[/]",
            f"[yellow]{refs.participant_count(c.record_id)}[/]",
            STATUS_STYLE[course_status(c)],
        )
    console.print(table)


def _flow_courses(dashboard: Dashboard) -> None:
    while dashboard.state == LoadState.READY:
        courses = dashboard.data.sorted_courses
        if not courses:
            _println("No courses yet. Create your first yoga course to get started.")
            if _prompt("Create one now? [Y/n]: ").strip().lower() != "n":
                dashboard.course_dialog.open_create()
                _run_form_dialog(dashboard.course_dialog, _fill_course_form)
                continue
            return

        _print_courses(dashboard, courses)
        action = _prompt("[s] Show  [n] New  [e] Edit  [d] Delete  [blank] Back: ").strip().lower()
        if not action:
            return

        if action == "n":
            dashboard.course_dialog.open_create()
            _run_form_dialog(dashboard.course_dialog, _fill_course_form)
            continue

        if action not in ("s", "e", "d"):
            _println("Invalid choice.")
            continue

        course = _pick(courses, {"s": "show", "e": "edit", "d": "delete"}[action])
        if course is None:
            continue
        if action == "s":
            _flow_course_detail(dashboard, course)
        elif action == "e":
            dashboard.course_dialog.open_edit(course)
            _run_form_dialog(dashboard.course_dialog, _fill_course_form)
        else:
            _confirm_delete(dashboard.delete_course_dialog, course, course.name or "Course")


def _flow_course_detail(dashboard: Dashboard, course: Course) -> None:
    refs = dashboard.data.refs

    _println(f"\n=== {escape(course.name or 'Course')} ===")
    if course.description:
        _println(escape(course.description))
    _println(f"When:       {escape(format_date_time(course.schedule))}")
    if course.location:
        _println(f"Location:   {escape(course.location)}")
    instructor = refs.instructor_name(course.record_id)
    if instructor:
        _println(f"Instructor: [magenta]{escape(instructor)}[/]")

    names = refs.participant_names(course.record_id)
    _println(f"\nParticipants ({refs.participant_count(course.record_id)})")
    if names:
        for name in names:
            _println(f"  - {escape(name)}")
    else:
        _println("  No participants registered yet.")

    action = _prompt("\n[e] Edit  [d] Delete  [blank] Back: ").strip().lower()
    if action == "e":
        dashboard.course_dialog.open_edit(course)
        _run_form_dialog(dashboard.course_dialog, _fill_course_form)
    elif action == "d":
        _confirm_delete(dashboard.delete_course_dialog, course, course.name or "Course")


# ---------------------------------------------------------------------------
# Participants
# ---------------------------------------------------------------------------


def _print_participants(dashboard: Dashboard, participants: list[Participant]) -> None:
    refs = dashboard.data.refs
    table = Table(title="Participants", box=box.SIMPLE)
    table.add_column("#", justify="right")
    table.add_column("Name")
    table.add_column("E-mail")
    table.add_column("Courses")

    for i, p in enumerate(participants, start=1):
        names = refs.participant_course_names(p)
        courses = ", ".join(f"[green]{escape(n)}[/]" for n in names) if names else PLACEHOLDER
        table.add_row(str(i), escape(participant_full_name(p)), escape(p.email or PLACEHOLDER), courses)
    console.print(table)


def _flow_participants(dashboard: Dashboard) -> None:
    while dashboard.state == LoadState.READY:
        participants = dashboard.data.sorted_participants
        if participants:
            _print_participants(dashboard, participants)
        else:
            _println("No participants yet.")

        action = _prompt("[n] New  [e] Edit  [d] Delete  [blank] Back: ").strip().lower()
        if not action:
            return

        if action == "n":
            dashboard.participant_dialog.open_create()
            _run_form_dialog(dashboard.participant_dialog, lambda f: _fill_participant_form(dashboard, f))
            continue
        if action not in ("e", "d"):
            _println("Invalid choice.")
            continue

        participant = _pick(participants, "edit" if action == "e" else "delete")
        if participant is None:
            continue
        if action == "e":
            dashboard.participant_dialog.open_edit(participant)
            _run_form_dialog(dashboard.participant_dialog, lambda f: _fill_participant_form(dashboard, f))
        else:
            _confirm_delete(dashboard.delete_participant_dialog, participant, participant_full_name(participant))


# ---------------------------------------------------------------------------
# Instructors
# ---------------------------------------------------------------------------


def _print_instructors(dashboard: Dashboard, instructors: list[Instructor]) -> None:
    refs = dashboard.data.refs
    table = Table(title="Instructors", box=box.SIMPLE)
    table.add_column("#", justify="right")
    table.add_column("Name")
    table.add_column("Contact")
    table.add_column("Course")

    for i, kl in enumerate(instructors, start=1):
        course_name = refs.course_name(kl.course_id)
        table.add_row(
            str(i),
            escape(instructor_full_name(kl)),
            escape(kl.phone or ""),
            f"[green]{escape(course_name)}[/]" if course_name != PLACEHOLDER else "",
        )
    console.print(table)


def _flow_instructors(dashboard: Dashboard) -> None:
    while dashboard.state == LoadState.READY:
        instructors = dashboard.data.sorted_instructors
        if instructors:
            _print_instructors(dashboard, instructors)
        else:
            _println("No instructors yet.")

        action = _prompt("[n] New  [e] Edit  [d] Delete  [blank] Back: ").strip().lower()
        if not action:
            return

        if action == "n":
            dashboard.instructor_dialog.open_create()
            _run_form_dialog(dashboard.instructor_dialog, lambda f: _fill_instructor_form(dashboard, f))
            continue
        if action not in ("e", "d"):
            _println("Invalid choice.")
            continue

        instructor = _pick(instructors, "edit" if action == "e" else "delete")
        if instructor is None:
            continue
        if action == "e":
            dashboard.instructor_dialog.open_edit(instructor)
            _run_form_dialog(dashboard.instructor_dialog, lambda f: _fill_instructor_form(dashboard, f))
        else:
            _confirm_delete(dashboard.delete_instructor_dialog, instructor, instructor_full_name(instructor))


# ---------------------------------------------------------------------------
# Dialogs
# ---------------------------------------------------------------------------


def _ask(label: str, current: str) -> str:
    """
    Prompt for one field. Blank keeps the current value, '-' clears it.
    """
    shown = f" [{current}]" if current else ""
    answer = _prompt(f"{label}{shown}: ").strip()
    if not answer:
        return current
    if answer == CLEAR:
        return ""
    return answer


def _fill_course_form(form: CourseForm) -> None:
    form.name = _ask("Course name (e.g. Hatha Yoga Anfänger)", form.name)
    form.description = _ask("Description", form.description)
    form.schedule = _ask("Date & time (YYYY-MM-DDTHH:MM)", form.schedule)
    form.location = _ask("Location (e.g. Room 1, Studio Mitte)", form.location)


def _choose_courses(dashboard: Dashboard, current: list[str], multiple: bool) -> list[str]:
    courses = dashboard.data.sorted_courses
    if not courses:
        return current

    _println("Courses:")
    _println("  0) No course")
    for i, c in enumerate(courses, start=1):
        _println(f"  {i}) {escape(course_title(c))} ({_course_when(c)})")

    current_nums = [str(i) for i, c in enumerate(courses, start=1) if c.record_id in current]
    hint = "numbers, comma-separated" if multiple else "number"
    answer = _prompt(f"Course ({hint}) [{','.join(current_nums) or '0'}]: ").strip()
    if not answer:
        return current

    picked: list[str] = []
    for part in answer.split(","):
        part = part.strip()
        if not part.isdigit():
            _println(f"Ignoring '{part}': not a number.")
            continue
        n = int(part)
        if n == 0:
            return []
        if not (1 <= n <= len(courses)):
            _println(f"Ignoring {n}: out of range.")
            continue
        cid = courses[n - 1].record_id
        if cid not in picked:
            picked.append(cid)
        if not multiple:
            break
    return picked


def _fill_instructor_form(dashboard: Dashboard, form: InstructorForm) -> None:
    form.first_name = _ask("First name", form.first_name)
    form.last_name = _ask("Last name", form.last_name)
    form.phone = _ask("Phone (e.g. +49 123 456 789)", form.phone)
    chosen = _choose_courses(dashboard, [form.course_id] if form.course_id else [], multiple=False)
    form.course_id = chosen[0] if chosen else ""


def _fill_participant_form(dashboard: Dashboard, form: ParticipantForm) -> None:
    form.first_name = _ask("First name", form.first_name)
    form.last_name = _ask("Last name", form.last_name)
    form.email = _ask("E-mail (e.g. participant@example.de)", form.email)
    form.course_ids = _choose_courses(dashboard, form.course_ids, multiple=True)


def _run_form_dialog(dialog: FormDialog, fill: Callable[[Any], None]) -> None:
    """
    Drive one create/edit dialog until it closes (saved or cancelled).
    """
    title = "Edit" if dialog.is_editing else "New"
    _println(f"\n--- {title} ({CLEAR} clears a field, blank keeps it) ---")
    fill(dialog.form)

    while dialog.is_open:
        if dialog.submit():
            return

        if dialog.errors:
            for msg in dialog.errors.values():
                _println(f"[red]{msg}[/]")
            if _prompt("Fix the form? [Y/n]: ").strip().lower() == "n":
                dialog.close()
                return
            fill(dialog.form)
            continue

        _println(f"[dim]{escape(dialog.error or '')}[/]")
        again = _prompt("[s] Submit again  [e] Edit form  [blank] Cancel: ").strip().lower()
        if again == "e":
            fill(dialog.form)
        elif again != "s":
            dialog.close()
            return


def _confirm_delete(dialog: Any, record: Any, name: str) -> None:
    dialog.open(record, name)
    _println(escape(f'\nDo you really want to delete "{name}"? This cannot be undone.'))
    while dialog.is_open:
        if _prompt("Delete? [y/N]: ").strip().lower() != "y":
            dialog.cancel()
            return
        if dialog.confirm():
            return
