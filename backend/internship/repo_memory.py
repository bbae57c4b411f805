"""In-memory stores for development and tests.

Mirror the Firestore query contracts closely enough that the use cases can
not tell the difference:
    - chapters come back ordered by `order` (documents without a numeric
      order keep insertion order after the ordered ones)
    - "find" queries return the first match in insertion order
    - returned dicts are copies carrying their id under "id"

Failure injection (`fail_on`) lets tests exercise the degradation paths
without patching.
"""

from __future__ import annotations

from copy import deepcopy
from typing import Any, Dict, List, Optional


def _with_id(doc_id: str, data: dict) -> dict:
    out = deepcopy(data)
    out["id"] = doc_id
    return out


def _order_key(doc: dict) -> tuple[int, float]:
    value = doc.get("order")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return (1, 0.0)
    return (0, float(value))


class _FailureInjection:
    def __init__(self) -> None:
        # method name -> exception raised on every call
        self.fail_on: Dict[str, BaseException] = {}

    def _maybe_fail(self, method: str) -> None:
        exc = self.fail_on.get(method)
        if exc is not None:
            raise exc


class InMemoryPrimaryStore(_FailureInjection):
    def __init__(self) -> None:
        super().__init__()
        self.users: Dict[str, dict] = {}
        self.courses: Dict[tuple[str, str], dict] = {}
        self.chapters: Dict[tuple[str, str], List[tuple[str, dict]]] = {}
        self.enrollments: Dict[str, List[tuple[str, dict]]] = {}
        self.students: Dict[str, dict] = {}

    # --- seeding -----------------------------------------------------------

    def add_user(self, uid: str, **data: Any) -> None:
        self.users[uid] = dict(data)

    def add_course(self, internship_id: str, course_id: str, **data: Any) -> None:
        self.courses[(internship_id, course_id)] = dict(data)

    def add_chapter(self, internship_id: str, course_id: str, chapter_id: str, **data: Any) -> None:
        self.chapters.setdefault((internship_id, course_id), []).append((chapter_id, dict(data)))

    def add_enrollment(self, internship_id: str, record_id: str, **data: Any) -> None:
        self.enrollments.setdefault(internship_id, []).append((record_id, dict(data)))

    def add_student(self, student_id: str, **data: Any) -> None:
        self.students[student_id] = dict(data)

    # --- PrimaryStoreProtocol ---------------------------------------------

    async def get_user_role(self, uid: str) -> Optional[str]:
        self._maybe_fail("get_user_role")
        role = (self.users.get(uid) or {}).get("role")
        return role if isinstance(role, str) else None

    async def get_course(self, internship_id: str, course_id: str) -> Optional[dict]:
        self._maybe_fail("get_course")
        data = self.courses.get((internship_id, course_id))
        return _with_id(course_id, data) if data is not None else None

    async def list_chapters(self, internship_id: str, course_id: str) -> list[dict]:
        self._maybe_fail("list_chapters")
        docs = [_with_id(cid, data) for cid, data in self.chapters.get((internship_id, course_id), [])]
        return sorted(docs, key=_order_key)

    async def list_internship_students(self, internship_id: str) -> list[dict]:
        self._maybe_fail("list_internship_students")
        return [_with_id(rid, data) for rid, data in self.enrollments.get(internship_id, [])]

    async def get_student_profile(self, student_id: str) -> Optional[dict]:
        self._maybe_fail("get_student_profile")
        data = self.students.get(student_id)
        return _with_id(student_id, data) if data is not None else None

    async def find_student_profile_by_uid(self, uid: str) -> Optional[dict]:
        self._maybe_fail("find_student_profile_by_uid")
        for sid, data in self.students.items():
            if data.get("uid") == uid:
                return _with_id(sid, data)
        return None


class InMemoryDeliveryStore(_FailureInjection):
    def __init__(self) -> None:
        super().__init__()
        self.tests: Dict[str, List[tuple[str, dict]]] = {}
        self.submissions: Dict[tuple[str, str], List[tuple[str, dict]]] = {}
        # test ids whose submission lookup raises
        self.failing_submission_tests: Dict[str, BaseException] = {}

    def add_test(self, course_id: str, test_id: str, **data: Any) -> None:
        self.tests.setdefault(course_id, []).append((test_id, dict(data)))

    def add_submission(self, course_id: str, test_id: str, submission_id: str, **data: Any) -> None:
        self.submissions.setdefault((course_id, test_id), []).append((submission_id, dict(data)))

    async def list_progress_tests(self, course_id: str) -> list[dict]:
        self._maybe_fail("list_progress_tests")
        return [_with_id(tid, data) for tid, data in self.tests.get(course_id, [])]

    async def find_submission(self, course_id: str, test_id: str, student_id: str) -> Optional[dict]:
        self._maybe_fail("find_submission")
        exc = self.failing_submission_tests.get(test_id)
        if exc is not None:
            raise exc
        for sid, data in self.submissions.get((course_id, test_id), []):
            if data.get("studentId") == student_id:
                return _with_id(sid, data)
        return None
