"""
Tests for forms and the dialog state machine.

closed -> open(create|edit) -> submitting -> closed on success,
back to open with an error on failure.
"""

import unittest
from unittest.mock import MagicMock

from yogastudio.dates import tomorrow_default
from yogastudio.errors import RecordStoreError
from yogastudio.forms import (
    COURSE_MESSAGES,
    PARTICIPANT_MESSAGES,
    CourseForm,
    DeleteDialog,
    DialogState,
    FormDialog,
    InstructorForm,
    ParticipantForm,
    changed_fields,
)
from yogastudio.model import Course, Instructor, Participant

A = "a" * 24


class TestForms(unittest.TestCase):
    def test_new_course_defaults_to_tomorrow_ten(self) -> None:
        self.assertEqual(CourseForm().schedule, tomorrow_default())

    def test_course_form_from_record(self) -> None:
        form = CourseForm.from_record(Course(record_id=A, name="Yin", schedule="2026-10-19T18:00"))
        self.assertEqual(form.name, "Yin")
        self.assertEqual(form.schedule, "2026-10-19T18:00")
        self.assertEqual(form.location, "")

    def test_course_requires_name_and_valid_schedule(self) -> None:
        form = CourseForm(name="  ", schedule="tomorrow")
        errors = form.validate()
        self.assertIn("name", errors)
        self.assertIn("schedule", errors)

    def test_course_changes_keep_empty_optionals_blank(self) -> None:
        form = CourseForm(name=" Hatha ", schedule="2026-10-19T10:00", location="")
        self.assertEqual(
            form.changes(), {"name": "Hatha", "description": "", "schedule": "2026-10-19T10:00", "location": ""}
        )
        record = form.to_record()
        self.assertIsNone(record.location)
        self.assertIsNone(record.description)

    def test_changed_fields_only_lists_edits(self) -> None:
        course = Course(record_id=A, name="Yin", schedule="2026-10-19T18:00", location="Raum 1")
        form = CourseForm.from_record(course)
        self.assertEqual(changed_fields(form, course), {})

        form.location = ""
        form.description = "Ruhig"
        self.assertEqual(changed_fields(form, course), {"location": "", "description": "Ruhig"})

    def test_changed_fields_for_course_lists(self) -> None:
        participant = Participant(record_id=A, first_name="Anna", last_name="Berg", course_ids=[A])
        form = ParticipantForm.from_record(participant)
        form.course_ids = []
        self.assertEqual(changed_fields(form, participant), {"course_ids": []})

    def test_person_forms_require_both_names(self) -> None:
        self.assertEqual(set(InstructorForm(first_name="Mira").validate()), {"last_name"})
        self.assertEqual(set(ParticipantForm(last_name="Berg").validate()), {"first_name"})
        self.assertEqual(ParticipantForm(first_name="Anna", last_name="Berg").validate(), {})

    def test_instructor_record(self) -> None:
        record = InstructorForm(first_name="Mira", last_name="Kohl", course_id=A).to_record()
        self.assertEqual(record, Instructor(record_id="", first_name="Mira", last_name="Kohl", course_id=A))


class TestFormDialog(unittest.TestCase):
    def setUp(self) -> None:
        self.create = MagicMock()
        self.update = MagicMock()
        self.messages: list[tuple[str, str]] = []
        self.dialog = FormDialog(
            CourseForm, COURSE_MESSAGES, self.create, self.update, lambda level, msg: self.messages.append((level, msg))
        )

    def test_starts_closed(self) -> None:
        self.assertEqual(self.dialog.state, DialogState.CLOSED)
        self.assertFalse(self.dialog.is_open)

    def test_create_success_closes(self) -> None:
        form = self.dialog.open_create()
        self.assertEqual(self.dialog.state, DialogState.CREATE)
        form.name = "Hatha Yoga Anfänger"

        self.assertTrue(self.dialog.submit())

        record = self.create.call_args[0][0]
        self.assertEqual(record.name, "Hatha Yoga Anfänger")
        self.assertIsNone(record.location)
        self.assertEqual(self.dialog.state, DialogState.CLOSED)
        self.assertIsNone(self.dialog.form)
        self.assertEqual(self.messages, [("success", "New course created.")])

    def test_validation_blocks_submission(self) -> None:
        self.dialog.open_create()
        self.assertFalse(self.dialog.submit())
        self.create.assert_not_called()
        self.assertEqual(self.dialog.state, DialogState.CREATE)
        self.assertIn("name", self.dialog.errors)
        self.assertEqual(self.messages, [])

    def test_failure_keeps_dialog_open_and_allows_retry(self) -> None:
        course = Course(record_id=A, name="Yin", schedule="2026-10-19T18:00")
        form = self.dialog.open_edit(course)
        form.location = "Studio 2"
        self.update.side_effect = [RecordStoreError("boom", status_code=500), None]

        self.assertFalse(self.dialog.submit())
        self.assertEqual(self.dialog.state, DialogState.EDIT)
        self.assertEqual(self.dialog.error, "boom")
        self.assertEqual(self.dialog.form.location, "Studio 2")
        self.assertEqual(self.messages, [("error", "Error while saving.")])

        self.assertTrue(self.dialog.submit())
        self.assertEqual(self.update.call_count, 2)
        self.assertEqual(self.update.call_args[0][0], A)
        self.assertEqual(self.update.call_args[0][1], {"location": "Studio 2"})
        self.assertEqual(self.messages[-1], ("success", "Course updated."))

    def test_close_discards_edits(self) -> None:
        form = self.dialog.open_create()
        form.name = "draft"
        self.dialog.close()
        self.assertEqual(self.dialog.open_create().name, "")

    def test_participant_create_failure_message(self) -> None:
        create = MagicMock(side_effect=RecordStoreError("nope"))
        messages: list[tuple[str, str]] = []
        dialog = FormDialog(ParticipantForm, PARTICIPANT_MESSAGES, create, MagicMock(), lambda l, m: messages.append((l, m)))
        form = dialog.open_create()
        form.first_name, form.last_name = "Anna", "Berg"
        self.assertFalse(dialog.submit())
        self.assertEqual(messages, [("error", "Error while registering.")])

    def test_submit_when_closed(self) -> None:
        with self.assertRaises(RuntimeError):
            self.dialog.submit()


class TestDeleteDialog(unittest.TestCase):
    def test_confirm_deletes_and_closes(self) -> None:
        delete = MagicMock()
        messages: list[tuple[str, str]] = []
        dialog = DeleteDialog(delete, lambda l, m: messages.append((l, m)))
        dialog.open(Participant(record_id=A), "Anna Berg")

        self.assertTrue(dialog.confirm())
        delete.assert_called_once_with(A)
        self.assertFalse(dialog.is_open)
        self.assertEqual(messages, [("success", '"Anna Berg" was deleted.')])

    def test_failure_stays_open(self) -> None:
        delete = MagicMock(side_effect=RecordStoreError("locked"))
        messages: list[tuple[str, str]] = []
        dialog = DeleteDialog(delete, lambda l, m: messages.append((l, m)))
        dialog.open(Course(record_id=A, name="Yin"), "Yin")

        self.assertFalse(dialog.confirm())
        self.assertTrue(dialog.is_open)
        self.assertFalse(dialog.deleting)
        self.assertEqual(messages, [("error", "Entry could not be deleted.")])


if __name__ == "__main__":
    unittest.main()
