import json
import tempfile
import unittest
from pathlib import Path

from yogastudio.storage import clear_session_cookie, load_session_cookie, save_session_cookie


class TestSessionStorage(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "nested" / "session.json"

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_load_missing_file_returns_none(self) -> None:
        self.assertIsNone(load_session_cookie(self.path))

    def test_save_then_load(self) -> None:
        save_session_cookie("  JSESSIONID=abc123 ", self.path)

        self.assertTrue(self.path.exists())
        self.assertEqual(load_session_cookie(self.path), "JSESSIONID=abc123")
        data = json.loads(self.path.read_text(encoding="utf-8"))
        self.assertEqual(data, {"cookie": "JSESSIONID=abc123"})

    def test_corrupt_file_returns_none(self) -> None:
        self.path.parent.mkdir(parents=True)
        self.path.write_text("{not json", encoding="utf-8")
        self.assertIsNone(load_session_cookie(self.path))

    def test_wrong_shape_returns_none(self) -> None:
        self.path.parent.mkdir(parents=True)
        self.path.write_text(json.dumps(["cookie"]), encoding="utf-8")
        self.assertIsNone(load_session_cookie(self.path))

        self.path.write_text(json.dumps({"cookie": 42}), encoding="utf-8")
        self.assertIsNone(load_session_cookie(self.path))

    def test_clear(self) -> None:
        self.assertFalse(clear_session_cookie(self.path))
        save_session_cookie("a=b", self.path)
        self.assertTrue(clear_session_cookie(self.path))
        self.assertFalse(self.path.exists())


if __name__ == "__main__":
    unittest.main()
