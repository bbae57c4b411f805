"""
ChapterCard component.

Renders one chapter of the internship course. Locked chapters show only
their title, topics and the locked notice; the view model already stripped
their media, so nothing here can leak a locked URL.
"""

from __future__ import annotations

from typing import List
from urllib.parse import quote

from backend.internship.presentation import ChapterView, MediaAction

from ..base import Component
from ..video_player import VideoPlayer
from .progress_test import ProgressTestCard


class ChapterCard(Component):
    """
    Args:
        chapter: Chapter view model (locked or unlocked).
        page_path: Path of the course page; inline player toggles link back to
            it with the `play` parameter of the toggled state.
    """

    def __init__(self, chapter: ChapterView, *, page_path: str) -> None:
        self.chapter = chapter
        self.page_path = page_path

    def render(self) -> str:
        ch = self.chapter
        cls = self.classes("surface-panel", "chapter-card", **{"chapter-card--locked": not ch.unlocked})
        return (
            f'<section class="{cls}" id="chapter-{self.escape(ch.id)}">'
            f"{self._render_header()}"
            f"{self._render_actions()}"
            f"{self._render_player()}"
            f"{self._render_tests()}"
            "</section>"
        )

    def _render_header(self) -> str:
        ch = self.chapter
        notice = (
            f'<p class="chapter-card__locked">{self.escape(ch.locked_notice)}</p>' if ch.locked_notice else ""
        )
        topics = f'<p class="chapter-card__topics">{self.escape(ch.topics)}</p>' if ch.topics else ""
        badge = f'<span class="badge chapter-card__order">{self.escape(ch.order_badge)}</span>' if ch.order_badge else ""
        return (
            '<header class="chapter-card__header">'
            "<div>"
            f'<h3 class="chapter-card__title">{self.escape(ch.title)}</h3>'
            f"{notice}"
            f"{topics}"
            "</div>"
            f"{badge}"
            "</header>"
        )

    def _toggle_href(self, play: str) -> str:
        return f"{self.page_path}?play={quote(play, safe=':')}" if play else self.page_path

    def _render_action(self, action: MediaAction) -> str:
        label = self.escape(action.label)
        cls = self.classes("btn", f"chapter-action--{action.kind}", **{"btn--active": action.active})
        if action.is_inline:
            href = self._toggle_href(action.play or "")
            attrs = self.attributes(
                href=href,
                class_=cls,
                aria_pressed="true" if action.active else "false",
            )
            return f"<a {attrs}>{label}</a>"
        if action.external:
            attrs = self.attributes(href=action.href, class_=cls, target="_blank", rel="noreferrer")
            return f"<a {attrs}>{label}</a>"
        return f"<a {self.attributes(href=action.href, class_=cls)}>{label}</a>"

    def _render_actions(self) -> str:
        if not self.chapter.media:
            return ""
        items: List[str] = [self._render_action(action) for action in self.chapter.media]
        return '<div class="chapter-card__actions">' + "".join(items) + "</div>"

    def _render_player(self) -> str:
        player = self.chapter.player
        if player is None:
            return ""
        return VideoPlayer(player.url, player.title).render()

    def _render_tests(self) -> str:
        if not self.chapter.tests:
            return ""
        cards = "".join(ProgressTestCard(test).render() for test in self.chapter.tests)
        return f'<div class="chapter-card__tests">{cards}</div>'
