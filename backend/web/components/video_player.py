"""
VideoPlayer component.

Renders the single inline player of the course page as an embedded
<iframe> (YouTube or Google Drive preview URL).
"""

from __future__ import annotations

from .base import Component

_ALLOW = (
    "accelerometer; autoplay; clipboard-write; encrypted-media; "
    "gyroscope; picture-in-picture; web-share"
)


class VideoPlayer(Component):
    def __init__(self, url: str, title: str, *, height: str = "420px") -> None:
        self.url = url or ""
        self.title = title or ""
        self.height = height

    def render(self) -> str:
        if not self.url:
            return ""
        frame_attrs = self.attributes(
            src=self.url,
            title=self.title,
            class_="video-player__frame",
            style=f"width: 100%; height: {self.height}; border: none;",
            allow=_ALLOW,
            allowfullscreen=True,
        )
        return (
            '<div class="video-player" data-video-player="true">'
            f'<h4 class="video-player__title">{self.escape(self.title)}</h4>'
            f"<iframe {frame_attrs}></iframe>"
            "</div>"
        )
