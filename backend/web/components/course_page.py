"""
CoursePage component.

Assembles the internship course page: course header, one ChapterCard per
chapter (or an empty hint) and the full practice section.
"""

from __future__ import annotations

from backend.internship.presentation import CoursePageView

from .base import Component
from .cards import ChapterCard


class CoursePage(Component):
    def __init__(self, view: CoursePageView, *, page_path: str, back_href: str) -> None:
        self.view = view
        self.page_path = page_path
        self.back_href = back_href

    def render(self) -> str:
        return (
            '<div class="container course-page">'
            f'<p><a class="btn btn--ghost" href="{self.escape(self.back_href)}">Back to Internship Courses</a></p>'
            f"{self._render_header()}"
            f"{self._render_chapters()}"
            f"{self._render_practice()}"
            "</div>"
        )

    def _render_header(self) -> str:
        course = self.view.course
        description = (
            f'<p class="course-page__description">{self.escape(course.description)}</p>'
            if course.description
            else ""
        )
        code = (
            f'<p class="course-page__code">Code: {self.escape(course.course_code)}</p>'
            if course.course_code
            else ""
        )
        return (
            '<header class="course-page__header">'
            f"<h1>{self.escape(course.title)}</h1>"
            f"{description}"
            f"{code}"
            "</header>"
        )

    def _render_chapters(self) -> str:
        if not self.view.chapters:
            body = '<p class="text-muted">No chapters added yet.</p>'
        else:
            body = "".join(ChapterCard(ch, page_path=self.page_path).render() for ch in self.view.chapters)
        return f'<section class="course-page__chapters" aria-label="Chapters">{body}</section>'

    def _render_practice(self) -> str:
        href = self.view.practice_href
        if not href:
            return ""
        return (
            '<section class="card course-page__practice">'
            "<h3>Full MCQ Practice</h3>"
            "<p>Use this link to attempt full MCQ practice for this course.</p>"
            f'<a class="btn" href="{self.escape(href)}">Full MCQ Practice</a>'
            "</section>"
        )
