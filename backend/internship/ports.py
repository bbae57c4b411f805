"""
Ports for the internship course page: store protocols and errors.

Intent:
    The page reads from two document stores with distinct contracts. The
    primary store holds authoring data (courses, chapters, enrollments,
    student profiles); the delivery store holds per-course copies of progress
    tests and their submissions. Aggregation composes both explicitly; no
    adapter ever queries the other store.

Design:
    - Protocols: PrimaryStoreProtocol, DeliveryStoreProtocol (all coroutines)
    - Documents are plain dicts carrying their document id under "id"
    - Error taxonomy: CourseStoreUnavailable for outages on the course fetch
"""

from __future__ import annotations

from typing import Optional, Protocol


class CourseStoreUnavailable(RuntimeError):
    """The primary store could not answer the course lookup."""


class PrimaryStoreProtocol(Protocol):
    """Authoring data: courses, chapters, enrollments and student profiles."""

    async def get_user_role(self, uid: str) -> Optional[str]:
        ...

    async def get_course(self, internship_id: str, course_id: str) -> Optional[dict]:
        ...

    async def list_chapters(self, internship_id: str, course_id: str) -> list[dict]:
        """Return chapters ordered by ascending `order`."""
        ...

    async def list_internship_students(self, internship_id: str) -> list[dict]:
        ...

    async def get_student_profile(self, student_id: str) -> Optional[dict]:
        ...

    async def find_student_profile_by_uid(self, uid: str) -> Optional[dict]:
        """Return the first student profile whose `uid` field equals `uid`."""
        ...


class DeliveryStoreProtocol(Protocol):
    """Delivery namespace: progress tests copied per course, plus submissions."""

    async def list_progress_tests(self, course_id: str) -> list[dict]:
        ...

    async def find_submission(self, course_id: str, test_id: str, student_id: str) -> Optional[dict]:
        """Return the first submission of `student_id` for the test, if any."""
        ...


__all__ = ["CourseStoreUnavailable", "PrimaryStoreProtocol", "DeliveryStoreProtocol"]
