"""
Persistent storage for the record-store session cookie.

This module manages the file:

    ~/.yogastudio/session.json

The record store authenticates through a session cookie. `yogastudio login`
saves it here so the CLI and the interactive dashboard can reuse it without
setting YOGASTUDIO_SESSION_COOKIE in every shell.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional


def _default_session_path() -> Path:
    """
    Return the default path of session.json in the user's home directory.

    A function instead of a constant so tests can point it elsewhere.
    """
    return Path.home() / ".yogastudio" / "session.json"


def load_session_cookie(path: str | Path | None = None) -> Optional[str]:
    """
    Load the saved cookie header value.

    Returns None if the file does not exist, is invalid, or holds no cookie.
    A broken file must never stop the dashboard from starting.
    """
    session_path = Path(path) if path is not None else _default_session_path()

    if not session_path.exists():
        return None

    try:
        data = json.loads(session_path.read_text(encoding="utf-8"))
        cookie = data.get("cookie")
        if not isinstance(cookie, str):
            return None
        cookie = cookie.strip()
        return cookie or None
    except (OSError, json.JSONDecodeError, UnicodeDecodeError, AttributeError):
        return None


def save_session_cookie(cookie: str, path: str | Path | None = None) -> None:
    """
    Save the cookie header value to session.json.

    Creates parent directories if needed.
    """
    session_path = Path(path) if path is not None else _default_session_path()
    session_path.parent.mkdir(parents=True, exist_ok=True)

    payload = {"cookie": cookie.strip()}
    session_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")


def clear_session_cookie(path: str | Path | None = None) -> bool:
    """
    Delete session.json. Returns True if a file was removed.
    """
    session_path = Path(path) if path is not None else _default_session_path()
    if not session_path.exists():
        return False
    session_path.unlink()
    return True
