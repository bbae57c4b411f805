"""
Terminal page states with a single recovery action.
"""

from __future__ import annotations

from .base import Component


class EmptyState(Component):
    """Message plus exactly one action (e.g. "Course not found." / "Go Back")."""

    def __init__(self, message: str, *, action_label: str = "Go Back", action_href: str = "/") -> None:
        self.message = message
        self.action_label = action_label
        self.action_href = action_href

    def render(self) -> str:
        return (
            '<div class="container empty-state">'
            f'<p class="text-muted">{self.escape(self.message)}</p>'
            f'<a class="btn" href="{self.escape(self.action_href)}">'
            f"{self.escape(self.action_label)}</a>"
            "</div>"
        )
