"""Firestore-backed stores for the internship course page.

Collections (primary store):
    users/{uid}                                         role lookup
    internships/{iid}/courses/{cid}                     course
    internships/{iid}/courses/{cid}/chapters            ordered by `order`
    internships/{iid}/students                          enrollment records
    students/{studentId}                                profile with chapterAccess

Collections (delivery store):
    copiedcourses/{cid}/assignments                     progress tests
    copiedcourses/{cid}/assignments/{tid}/submissions   keyed by studentId

The two stores may live in different projects or databases, so each adapter
owns its own AsyncClient. Clients are created lazily so importing this
module never requires credentials.
"""

from __future__ import annotations

import inspect
from typing import Any, Optional

from google.cloud import firestore
from google.cloud.firestore_v1 import FieldFilter


def _doc_to_dict(snapshot: Any) -> Optional[dict]:
    """Convert a DocumentSnapshot to a dict with an 'id' field."""
    if snapshot is None or not snapshot.exists:
        return None
    data = snapshot.to_dict() or {}
    data["id"] = snapshot.id
    return data


async def _query_to_list(query: Any) -> list[dict]:
    results: list[dict] = []
    async for snapshot in query.stream():
        doc = _doc_to_dict(snapshot)
        if doc is not None:
            results.append(doc)
    return results


async def _first(query: Any) -> Optional[dict]:
    async for snapshot in query.limit(1).stream():
        return _doc_to_dict(snapshot)
    return None


class _FirestoreBase:
    def __init__(self, *, project: str | None = None, database: str | None = None, client: Any = None) -> None:
        self._project = project
        self._database = database
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            kwargs: dict[str, Any] = {}
            if self._project:
                kwargs["project"] = self._project
            if self._database:
                kwargs["database"] = self._database
            self._client = firestore.AsyncClient(**kwargs)
        return self._client

    async def close(self) -> None:
        """Close the client transport if a client was created; safe to call twice."""
        if self._client is None:
            return
        client, self._client = self._client, None
        result = client.close()
        if inspect.isawaitable(result):
            await result


class FirestorePrimaryStore(_FirestoreBase):
    """Authoring data adapter (implements PrimaryStoreProtocol)."""

    async def get_user_role(self, uid: str) -> Optional[str]:
        doc = _doc_to_dict(await self.client.collection("users").document(uid).get())
        role = (doc or {}).get("role")
        return role if isinstance(role, str) else None

    async def get_course(self, internship_id: str, course_id: str) -> Optional[dict]:
        ref = self.client.document("internships", internship_id, "courses", course_id)
        return _doc_to_dict(await ref.get())

    async def list_chapters(self, internship_id: str, course_id: str) -> list[dict]:
        query = self.client.collection(
            "internships", internship_id, "courses", course_id, "chapters"
        ).order_by("order", direction=firestore.Query.ASCENDING)
        return await _query_to_list(query)

    async def list_internship_students(self, internship_id: str) -> list[dict]:
        return await _query_to_list(self.client.collection("internships", internship_id, "students"))

    async def get_student_profile(self, student_id: str) -> Optional[dict]:
        return _doc_to_dict(await self.client.collection("students").document(student_id).get())

    async def find_student_profile_by_uid(self, uid: str) -> Optional[dict]:
        query = self.client.collection("students").where(filter=FieldFilter("uid", "==", uid))
        return await _first(query)


class FirestoreDeliveryStore(_FirestoreBase):
    """Delivery namespace adapter (implements DeliveryStoreProtocol)."""

    async def list_progress_tests(self, course_id: str) -> list[dict]:
        return await _query_to_list(self.client.collection("copiedcourses", course_id, "assignments"))

    async def find_submission(self, course_id: str, test_id: str, student_id: str) -> Optional[dict]:
        query = self.client.collection(
            "copiedcourses", course_id, "assignments", test_id, "submissions"
        ).where(filter=FieldFilter("studentId", "==", student_id))
        return await _first(query)
