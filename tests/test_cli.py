import io
import unittest
from contextlib import redirect_stdout
from unittest.mock import patch

from fake_store import BASE_URL, COURSES, INSTRUCTORS, PARTICIPANTS, FakeStore
from yogastudio.cli import main
from yogastudio.client import RecordStoreClient
from yogastudio.config import Settings


class CliTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.store = FakeStore()
        client = RecordStoreClient(Settings(base_url=BASE_URL), session=self.store)
        patcher = patch("yogastudio.cli.RecordStoreClient", return_value=client)
        patcher.start()
        self.addCleanup(patcher.stop)
        env_patcher = patch("yogastudio.cli.Settings.from_env", return_value=Settings(base_url=BASE_URL))
        env_patcher.start()
        self.addCleanup(env_patcher.stop)

    def run_cli(self, *argv: str) -> tuple[int, str]:
        out = io.StringIO()
        with redirect_stdout(out), self.assertRaises(SystemExit) as cm:
            main(list(argv))
        return cm.exception.code, out.getvalue()


class TestListings(CliTestCase):
    def test_courses_listing(self) -> None:
        cid = self.store.add(
            COURSES, {"kurs_name": "Yin Yoga", "kurs_zeitplan": "2026-10-20T18:30", "kurs_ort": "Raum 2"}
        )
        self.store.add(INSTRUCTORS, {"kursleiter_vorname": "Mira", "zugewiesener_kurs": self.store.course_url(cid)})

        code, out = self.run_cli("courses")

        self.assertEqual(code, 0)
        self.assertIn("20.10.2026 um 18:30 Uhr | Yin Yoga | Raum 2 | Mira | 0 participants", out)

    def test_load_failure_exits_1(self) -> None:
        self.store.fail("GET", PARTICIPANTS, status=503, text="down")

        code, out = self.run_cli("courses")

        self.assertEqual(code, 1)
        self.assertIn("Could not load data: down", out)

    def test_empty_participants(self) -> None:
        code, out = self.run_cli("participants")
        self.assertEqual(code, 0)
        self.assertIn("No participants yet.", out)

    def test_course_show(self) -> None:
        cid = self.store.add(COURSES, {"kurs_name": "Yin Yoga", "kurs_zeitplan": "2026-10-20T18:30"})
        self.store.add(
            PARTICIPANTS,
            {"teilnehmer_vorname": "Anna", "teilnehmer_nachname": "Berg", "angemeldete_kurse": self.store.course_url(cid)},
        )

        code, out = self.run_cli("course", "show", cid)

        self.assertEqual(code, 0)
        self.assertIn("Participants (1):", out)
        self.assertIn("- Anna Berg", out)


class TestMutations(CliTestCase):
    def test_course_add(self) -> None:
        code, out = self.run_cli("course", "add", "--name", "Hatha Yoga Anfänger", "--schedule", "2026-10-19T10:00")

        self.assertEqual(code, 0)
        self.assertIn("New course created.", out)
        fields = next(iter(self.store.apps[COURSES].values()))["fields"]
        self.assertEqual(fields, {"kurs_name": "Hatha Yoga Anfänger", "kurs_zeitplan": "2026-10-19T10:00"})

    def test_course_add_without_name_is_rejected(self) -> None:
        code, out = self.run_cli("course", "add", "--location", "Raum 1")

        self.assertEqual(code, 1)
        self.assertIn("Invalid input:", out)
        self.assertEqual([c for c in self.store.calls if c[0] == "POST"], [])

    def test_participant_add_with_course_url(self) -> None:
        cid = self.store.add(COURSES, {"kurs_name": "Yin Yoga"})

        code, _ = self.run_cli(
            "participant", "add", "--first-name", "Anna", "--last-name", "Berg", "--course", self.store.course_url(cid)
        )

        self.assertEqual(code, 0)
        stored = next(iter(self.store.apps[PARTICIPANTS].values()))["fields"]
        self.assertEqual(stored["angemeldete_kurse"], self.store.course_url(cid))

    def test_instructor_edit_changes_only_given_options(self) -> None:
        iid = self.store.add(INSTRUCTORS, {"kursleiter_vorname": "Mira", "kursleiter_nachname": "Kohl"})

        code, out = self.run_cli("instructor", "edit", iid, "--phone", "+49 123")

        self.assertEqual(code, 0)
        self.assertIn("Instructor updated.", out)
        self.assertEqual(
            self.store.apps[INSTRUCTORS][iid]["fields"],
            {"kursleiter_vorname": "Mira", "kursleiter_nachname": "Kohl", "kursleiter_kontakt": "+49 123"},
        )

    def test_instructor_edit_removes_course_assignment(self) -> None:
        cid = self.store.add(COURSES, {"kurs_name": "Yin Yoga"})
        iid = self.store.add(
            INSTRUCTORS,
            {"kursleiter_vorname": "Mira", "kursleiter_nachname": "Kohl", "zugewiesener_kurs": self.store.course_url(cid)},
        )

        code, _ = self.run_cli("instructor", "edit", iid, "--course", "")

        self.assertEqual(code, 0)
        fields = self.store.apps[INSTRUCTORS][iid]["fields"]
        self.assertNotIn("zugewiesener_kurs", fields)
        self.assertEqual(fields["kursleiter_vorname"], "Mira")

    def test_instructor_delete_with_yes(self) -> None:
        iid = self.store.add(INSTRUCTORS, {"kursleiter_vorname": "Mira", "kursleiter_nachname": "Kohl"})

        code, out = self.run_cli("instructor", "delete", iid, "--yes")

        self.assertEqual(code, 0)
        self.assertIn('"Mira Kohl" was deleted.', out)
        self.assertNotIn(iid, self.store.apps[INSTRUCTORS])

    def test_delete_cancelled(self) -> None:
        cid = self.store.add(COURSES, {"kurs_name": "Yin Yoga"})

        with patch("builtins.input", return_value="n"):
            code, out = self.run_cli("course", "delete", cid)

        self.assertEqual(code, 0)
        self.assertIn("Cancelled.", out)
        self.assertIn(cid, self.store.apps[COURSES])

    def test_store_error_exits_1(self) -> None:
        code, out = self.run_cli("course", "delete", "ffffffffffffffffffffffff", "--yes")

        self.assertEqual(code, 1)
        self.assertIn("Error: Record not found", out)


class TestSession(unittest.TestCase):
    def test_login_requires_cookie(self) -> None:
        out = io.StringIO()
        with patch("yogastudio.cli.save_session_cookie") as save, redirect_stdout(out), self.assertRaises(
            SystemExit
        ) as cm:
            main(["login", "  "])
        self.assertEqual(cm.exception.code, 1)
        save.assert_not_called()

    def test_login_saves_cookie(self) -> None:
        out = io.StringIO()
        with patch("yogastudio.cli.save_session_cookie") as save, redirect_stdout(out), self.assertRaises(
            SystemExit
        ) as cm:
            main(["login", "sid=1"])
        self.assertEqual(cm.exception.code, 0)
        save.assert_called_once_with("sid=1")


if __name__ == "__main__":
    unittest.main()
