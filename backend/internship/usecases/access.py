from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Optional

from backend.internship.domain import Viewer, read_chapter_access
from backend.internship.ports import PrimaryStoreProtocol

LOG = logging.getLogger("portal.internship.access")


@dataclass
class ResolveAccessInput:
    viewer: Viewer
    internship_id: str
    course_id: str


def _first_enrolled_student_id(records: list[dict]) -> Optional[str]:
    for record in records:
        student_id = record.get("studentId")
        if isinstance(student_id, str) and student_id.strip():
            return student_id
    return None


class ResolveChapterAccessUseCase:
    def __init__(self, repo: PrimaryStoreProtocol) -> None:
        self._repo = repo

    async def execute(self, req: ResolveAccessInput) -> list[str]:
        """Return the chapter ids unlocked for the viewer in this course.

        Behavior:
            - Students read `chapterAccess[course_id]` from their own profile,
              keyed by sub, falling back to a profile whose `uid` equals sub.
            - Staff mirror the first enrolled student of the internship that
              has a non-empty `studentId`. No such student means nothing is
              unlocked; staff never get access lists of their own.
            - Store failures degrade to "everything locked" and are logged.

        Security:
            Fail-locked: every missing or malformed piece yields an empty list.
        """
        try:
            if req.viewer.is_staff:
                profile = await self._mirrored_profile(req.internship_id)
            else:
                profile = await self._own_profile(req.viewer.sub)
        except Exception as exc:
            LOG.warning(
                "chapter access lookup failed internship=%s course=%s error=%s",
                req.internship_id,
                req.course_id,
                exc.__class__.__name__,
            )
            return []
        return read_chapter_access(profile, req.course_id)

    async def _mirrored_profile(self, internship_id: str) -> Optional[dict]:
        records = await self._repo.list_internship_students(internship_id)
        student_id = _first_enrolled_student_id(records)
        if student_id is None:
            return None
        return await self._repo.get_student_profile(student_id)

    async def _own_profile(self, sub: str) -> Optional[dict]:
        profile = await self._repo.get_student_profile(sub)
        if profile is None:
            profile = await self._repo.find_student_profile_by_uid(sub)
        return profile
