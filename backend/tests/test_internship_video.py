"""
Inline video: embed URL classification and single-player toggle semantics.
"""
from __future__ import annotations

import pytest

from backend.internship.video import (
    PlayRef,
    VideoPlayerState,
    encode_play_param,
    get_embed_url,
    is_frameable,
    parse_play_param,
)


@pytest.mark.parametrize(
    "url",
    [
        "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        "https://youtube.com/watch?feature=share&v=dQw4w9WgXcQ",
        "https://youtu.be/dQw4w9WgXcQ",
        "https://www.youtube.com/embed/dQw4w9WgXcQ",
        "https://www.youtube.com/v/dQw4w9WgXcQ",
    ],
)
def test_youtube_urls_become_embed_urls(url):
    assert get_embed_url(url) == "https://www.youtube.com/embed/dQw4w9WgXcQ"


def test_drive_file_becomes_preview_url():
    url = "https://drive.google.com/file/d/1AbC_d-EF/view?usp=sharing"
    assert get_embed_url(url) == "https://drive.google.com/file/d/1AbC_d-EF/preview"


def test_unknown_url_is_returned_unchanged_and_empty_stays_empty():
    assert get_embed_url("https://vimeo.com/12345") == "https://vimeo.com/12345"
    assert get_embed_url("") == ""
    assert get_embed_url(None) == ""


def test_toggle_opens_closes_and_switches():
    yt = "https://youtu.be/dQw4w9WgXcQ"
    closed = VideoPlayerState()
    assert not closed.is_open

    opened = closed.toggle("ch1", yt, "Intro")
    assert opened.is_playing("ch1")
    assert opened.url == "https://www.youtube.com/embed/dQw4w9WgXcQ"
    assert opened.title == "Intro"

    # Same chapter and same video closes the player
    assert not opened.toggle("ch1", yt, "Intro").is_open

    # Another chapter replaces the open video; only one player at a time
    switched = opened.toggle("ch2", "https://youtu.be/aaaaaaaaaaa", "Loops")
    assert switched.is_playing("ch2")
    assert not switched.is_playing("ch1")


def test_toggle_same_chapter_other_video_switches_instead_of_closing():
    opened = VideoPlayerState().toggle("ch1", "https://youtu.be/dQw4w9WgXcQ", "Topic")
    recorded = opened.toggle("ch1", "https://drive.google.com/file/d/REC/view", "Topic - Recorded")
    assert recorded.is_playing("ch1")
    assert recorded.url.endswith("/REC/preview")


def test_toggle_without_embeddable_source_is_a_no_op():
    opened = VideoPlayerState().toggle("ch1", "https://youtu.be/dQw4w9WgXcQ", "Topic")
    assert opened.toggle("ch2", "", "Nothing") == opened
    assert VideoPlayerState().toggle("ch1", None, "x") == VideoPlayerState()


def test_play_param_parsing():
    assert parse_play_param("ch1:video") == PlayRef("ch1", "video")
    assert parse_play_param("a:b:recorded") == PlayRef("a:b", "recorded")
    for bad in (None, "", "ch1", "ch1:audio", ":video"):
        assert parse_play_param(bad) is None
    assert encode_play_param(PlayRef("ch1", "recorded")) == "ch1:recorded"
    assert encode_play_param(None) is None


def test_only_youtube_and_drive_are_frameable():
    assert is_frameable("https://youtu.be/dQw4w9WgXcQ")
    assert is_frameable("https://drive.google.com/file/d/REC/view")
    assert not is_frameable("https://vimeo.com/12345")
    assert not is_frameable("https://www.youtube.com.evil.example/watch")
    assert not is_frameable("")
    assert not is_frameable(None)
