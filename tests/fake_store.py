"""
In-memory stand-in for the hosted record store.

It plays the part of requests.Session for RecordStoreClient, so tests run the
real client and codec without any network access.
"""

from __future__ import annotations

import json as jsonlib
from collections import defaultdict
from typing import Any, Optional

BASE_URL = "https://store.test/rest"
COURSES = "6899d0d3ca4dc3817f92802b"
INSTRUCTORS = "6899d0d63370f71550c5aea6"
PARTICIPANTS = "6899d0d7ab6cda2d36ea30f4"


class FakeResponse:
    def __init__(self, status_code: int, payload: Any = None, text: Optional[str] = None) -> None:
        self.status_code = status_code
        self._payload = payload
        if text is None:
            text = jsonlib.dumps(payload) if payload is not None else ""
        self.text = text

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload


class FakeStore:
    def __init__(self, base_url: str = BASE_URL) -> None:
        self.base_url = base_url
        self.headers: dict[str, str] = {}
        self.apps: dict[str, dict[str, dict[str, Any]]] = defaultdict(dict)
        self.calls: list[tuple[str, str, Any]] = []
        self.failures: dict[tuple[str, str], tuple[int, str]] = {}
        self._counter = 0

    def course_url(self, record_id: str) -> str:
        return f"{self.base_url}/apps/{COURSES}/records/{record_id}"

    def add(self, app_id: str, fields: dict[str, str], record_id: Optional[str] = None) -> str:
        rid = record_id or self._new_id()
        self.apps[app_id][rid] = {"createdat": "2026-10-01T09:00:00", "updatedat": None, "fields": dict(fields)}
        return rid

    def fail(self, method: str, app_id: str, status: int = 500, text: str = "Internal Server Error") -> None:
        self.failures[(method, app_id)] = (status, text)

    def _new_id(self) -> str:
        self._counter += 1
        return f"{self._counter:024x}"

    def request(self, method: str, url: str, json: Any = None, timeout: Any = None) -> FakeResponse:
        self.calls.append((method, url, json))
        parts = url[len(self.base_url):].strip("/").split("/")
        app_id = parts[1]
        rid = parts[3] if len(parts) > 3 else None

        if (method, app_id) in self.failures:
            status, text = self.failures[(method, app_id)]
            return FakeResponse(status, text=text)

        records = self.apps[app_id]
        if method == "GET" and rid is None:
            return FakeResponse(200, {k: dict(v) for k, v in records.items()})
        if method == "POST":
            rid = self.add(app_id, json["fields"])
            return FakeResponse(200, dict(records[rid], id=rid))

        if rid not in records:
            return FakeResponse(404, text="Record not found")
        if method == "GET":
            return FakeResponse(200, dict(records[rid], id=rid))
        if method == "PATCH":
            # the store omits empty fields, so "" removes one
            for key, value in json["fields"].items():
                if value == "":
                    records[rid]["fields"].pop(key, None)
                else:
                    records[rid]["fields"][key] = value
            records[rid]["updatedat"] = "2026-10-18T12:00:00"
            return FakeResponse(200, dict(records[rid], id=rid))
        if method == "DELETE":
            del records[rid]
            return FakeResponse(200, text="")
        return FakeResponse(405, text="Method not allowed")
