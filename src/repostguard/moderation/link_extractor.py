"""Find the YouTube video a message links to."""

import re

# youtube.com/watch?v=<id>, youtube.com/shorts/<id>, youtu.be/<id>
VIDEO_URL_PATTERN = re.compile(
    r"https?://(?:www\.)?(?:youtube\.com/(?:watch\?v=|shorts/)|youtu\.be/)([\w-]+)",
    re.IGNORECASE,
)


def extract_video_id(text: str | None) -> str | None:
    """
    Return the canonical id of the first video link in ``text``, or None.

    The text is lower-cased before matching, so the id is case-folded and
    the same video posted with different casing compares equal. Only the
    first link counts; query parameters after the id are ignored.
    """
    if not text:
        return None
    match = VIDEO_URL_PATTERN.search(text.lower())
    if match is None:
        return None
    return match.group(1)


def contains_video_link(text: str | None) -> bool:
    return extract_video_id(text) is not None
