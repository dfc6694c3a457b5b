"""
HTTP client for the hosted record store.

Each of the three collections (courses, instructors, participants) supports
the same five calls:

    GET    /apps/{appId}/records          -> {record_id: body, ...}
    GET    /apps/{appId}/records/{id}     -> body
    POST   /apps/{appId}/records          {"fields": {...}} -> body
    PATCH  /apps/{appId}/records/{id}     {"fields": {...}} -> body
    DELETE /apps/{appId}/records/{id}     -> anything, 2xx means success

Every call is a single best-effort request: no retries, no caching.
"""

from __future__ import annotations

import logging
from typing import Any, Generic, Mapping, Optional, TypeVar

import requests

from yogastudio.codec import CourseCodec, InstructorCodec, ParticipantCodec, RecordCodec
from yogastudio.config import Settings
from yogastudio.errors import RecordStoreError, TransportError
from yogastudio.model import Course, Instructor, Participant
from yogastudio.references import create_record_url

logger = logging.getLogger(__name__)

T = TypeVar("T", Course, Instructor, Participant)


class RecordStoreClient:
    """
    Thin wrapper around one requests.Session.

    Credentials are ambient: the configured session cookie is attached to
    every request, nothing else is sent.
    """

    def __init__(self, settings: Optional[Settings] = None, session: Optional[requests.Session] = None) -> None:
        self.settings = settings or Settings.from_env()
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json", "Accept": "application/json"})
        if self.settings.session_cookie:
            self.session.headers["Cookie"] = self.settings.session_cookie

        course_url = self.course_url
        self.courses: Collection[Course] = Collection(self, self.settings.courses_app_id, CourseCodec(course_url))
        self.instructors: Collection[Instructor] = Collection(
            self, self.settings.instructors_app_id, InstructorCodec(course_url)
        )
        self.participants: Collection[Participant] = Collection(
            self, self.settings.participants_app_id, ParticipantCodec(course_url)
        )

    def course_url(self, record_id: str) -> str:
        return create_record_url(self.settings.base_url, self.settings.courses_app_id, record_id)

    def call(self, method: str, endpoint: str, data: Optional[Mapping[str, Any]] = None) -> Any:
        """
        Send one request and return the decoded JSON body.

        DELETE returns True for any 2xx, whatever the body says.
        Raises TransportError if no response arrived and RecordStoreError for
        non-2xx answers (message = raw response text).
        """
        url = f"{self.settings.base_url}{endpoint}"
        logger.debug("%s %s", method, url)

        try:
            resp = self.session.request(method, url, json=data, timeout=self.settings.timeout)
        except requests.RequestException as e:
            logger.debug("%s %s failed: %s", method, url, e)
            raise TransportError(str(e)) from e

        if not 200 <= resp.status_code < 300:
            logger.debug("%s %s -> %s", method, url, resp.status_code)
            raise RecordStoreError(resp.text, status_code=resp.status_code)

        if method == "DELETE":
            return True

        try:
            return resp.json()
        except ValueError as e:
            raise RecordStoreError(f"Invalid JSON response: {resp.text}", status_code=resp.status_code) from e


class Collection(Generic[T]):
    """
    The five record operations for one app id, typed through a codec.
    """

    def __init__(self, client: RecordStoreClient, app_id: str, codec: RecordCodec[T]) -> None:
        self.client = client
        self.app_id = app_id
        self.codec = codec

    def _path(self, record_id: Optional[str] = None) -> str:
        base = f"/apps/{self.app_id}/records"
        return f"{base}/{record_id}" if record_id else base

    def list(self) -> list[T]:
        """
        Return all records, in the order the store listed them.
        """
        data = self.client.call("GET", self._path())
        if not isinstance(data, Mapping):
            raise RecordStoreError(f"Expected an object of records, got {type(data).__name__}")
        out: list[T] = []
        for record_id, body in data.items():
            if not isinstance(body, Mapping):
                logger.debug("Skipping malformed record %s in app %s", record_id, self.app_id)
                continue
            out.append(self.codec.decode(str(record_id), body))
        return out

    def get(self, record_id: str) -> T:
        body = self.client.call("GET", self._path(record_id))
        if not isinstance(body, Mapping):
            raise RecordStoreError(f"Expected a record object, got {type(body).__name__}")
        return self.codec.decode(str(body.get("id") or record_id), body)

    def create(self, record: T) -> Any:
        """
        Create a record from all fields of `record` (its record_id is ignored).
        Returns the store's response body.
        """
        return self.client.call("POST", self._path(), {"fields": self.codec.encode(record)})

    def update(self, record_id: str, changes: Mapping[str, Any]) -> Any:
        """
        Patch only the given attributes, e.g. update(id, {"location": "Studio 2"}).
        """
        return self.client.call("PATCH", self._path(record_id), {"fields": self.codec.encode_changes(changes)})

    def delete(self, record_id: str) -> bool:
        return bool(self.client.call("DELETE", self._path(record_id)))
