"""
Inline video helpers: embeddable URLs and the page-wide player state.

Behavior:
    - `get_embed_url` classifies a stored URL (YouTube, Google Drive) and
      returns the embeddable form, or the input unchanged when unrecognised.
    - `is_frameable` tells whether that embed URL may load in the inline
      player under the page CSP.
    - `VideoPlayerState` models the single inline player of the page: at most
      one chapter video is open at a time.
    - `encode_play_param` / `parse_play_param` carry the open video across SSR
      requests as `<chapter_id>:<kind>`.
"""
from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Optional
from urllib.parse import urlsplit

_YOUTUBE_RE = re.compile(
    r"(?:youtube\.com/(?:[^/]+/.+/|(?:v|e(?:mbed)?)/|.*[?&]v=)|youtu\.be/)([^\"&?/\s]{11})"
)
_DRIVE_RE = re.compile(r"drive\.google\.com/file/d/([a-zA-Z0-9_-]+)")

VIDEO_KINDS = ("video", "recorded")

# Origins the page CSP allows in frame-src. Other sources open in a new tab.
FRAME_ORIGINS = ("https://www.youtube.com", "https://drive.google.com")


def get_embed_url(url: Optional[str]) -> str:
    """Return an embeddable player URL for YouTube/Drive links, else `url`."""
    if not url:
        return ""
    match = _YOUTUBE_RE.search(url)
    if match:
        return f"https://www.youtube.com/embed/{match.group(1)}"
    if "youtube.com/embed/" in url:
        return url
    match = _DRIVE_RE.search(url)
    if match:
        return f"https://drive.google.com/file/d/{match.group(1)}/preview"
    return url


def is_frameable(url: Optional[str]) -> bool:
    """True when the embed URL of `url` may be loaded in the inline player."""
    embed = get_embed_url(url)
    if not embed:
        return False
    parts = urlsplit(embed)
    return f"{parts.scheme}://{parts.netloc}" in FRAME_ORIGINS


@dataclass(frozen=True)
class VideoPlayerState:
    chapter_id: Optional[str] = None
    url: str = ""
    title: str = ""

    @property
    def is_open(self) -> bool:
        return bool(self.chapter_id and self.url)

    def is_playing(self, chapter_id: str) -> bool:
        return self.is_open and self.chapter_id == chapter_id

    def toggle(self, chapter_id: str, source_url: Optional[str], title: str) -> "VideoPlayerState":
        """Open the chapter's video, or close it when it is already open.

        Opening any video replaces whatever was open before. A source that
        yields no embeddable URL leaves the state untouched.
        """
        embed = get_embed_url(source_url)
        if not embed:
            return self
        if self.chapter_id == chapter_id and self.url == embed:
            return VideoPlayerState()
        return VideoPlayerState(chapter_id=chapter_id, url=embed, title=title)


@dataclass(frozen=True)
class PlayRef:
    chapter_id: str
    kind: str  # "video" | "recorded"


def parse_play_param(value: Optional[str]) -> Optional[PlayRef]:
    if not value or ":" not in value:
        return None
    chapter_id, _, kind = value.rpartition(":")
    if not chapter_id or kind not in VIDEO_KINDS:
        return None
    return PlayRef(chapter_id=chapter_id, kind=kind)


def encode_play_param(ref: Optional[PlayRef]) -> Optional[str]:
    if ref is None:
        return None
    return f"{ref.chapter_id}:{ref.kind}"
