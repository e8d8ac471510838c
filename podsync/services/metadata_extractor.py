"""Heuristic metadata extraction from free-form feed text.

Feeds frequently omit structured itunes fields and bury episode numbers,
durations and artwork in titles or HTML show notes. These helpers recover
them. Every function here is pure and total: no match (or unusable
input) yields None, nothing raises.
"""

from __future__ import annotations

import re
from typing import Optional

# Tried in order; the first pattern that matches wins. Each entry maps
# capture groups to (episode_group, season_group).
_EPISODE_PATTERNS: tuple[tuple[re.Pattern[str], int, Optional[int]], ...] = (
    (re.compile(r"S(\d+)E(\d+)", re.IGNORECASE), 2, 1),  # S01E05
    (re.compile(r"\bEpisode\s+(\d+)", re.IGNORECASE), 1, None),  # Episode 5
    (re.compile(r"\bEp\.\s*(\d+)", re.IGNORECASE), 1, None),  # Ep. 5
    (
        re.compile(r"\bSeason\s+(\d+)\s+Episode\s+(\d+)", re.IGNORECASE),
        2,
        1,
    ),  # Season 1 Episode 5
)

_HMS_PATTERN = re.compile(r"(\d+):(\d+):(\d+)")
_MS_PATTERN = re.compile(r"(\d+):(\d+)")
_SECONDS_PATTERN = re.compile(r"(\d+)\s*(?:seconds?|secs?)\b", re.IGNORECASE)

_IMG_SRC_PATTERN = re.compile(r"""<img[^>]+src=["']([^"']+)["']""", re.IGNORECASE)

_AUDIO_FILE_PATTERN = re.compile(
    r"""https?://[^\s"'<>]+\.(?:mp3|m4a|wav|ogg|aac)\b""", re.IGNORECASE
)
_ENCLOSURE_PATTERN = re.compile(
    r"""<enclosure[^>]+url=["']([^"']+)["']""", re.IGNORECASE
)

_TAG_PATTERN = re.compile(r"<[^>]+>")
_WHITESPACE_PATTERN = re.compile(r"\s+")


def _to_int(raw: Optional[str]) -> Optional[int]:
    if raw is None:
        return None
    try:
        return int(raw)
    except (ValueError, TypeError):
        return None


def extract_episode_numbers(
    title: Optional[str],
) -> tuple[Optional[int], Optional[int]]:
    """Infer episode and season numbers from an episode title.

    Patterns are tried from most to least structured so a stray number
    elsewhere in the title is not misread as the episode number.

    Args:
        title: Episode title, possibly empty

    Returns:
        Tuple of (episode_number, season_number); either may be None
    """
    if not title:
        return None, None

    for pattern, episode_group, season_group in _EPISODE_PATTERNS:
        match = pattern.search(title)
        if match is None:
            continue
        episode = _to_int(match.group(episode_group))
        season = _to_int(match.group(season_group)) if season_group else None
        return episode, season

    return None, None


def extract_duration(text: Optional[str]) -> Optional[int]:
    """Infer a duration in seconds from free text.

    Handles formats: H:MM:SS, M:SS, "N seconds".

    Args:
        text: Description or content text

    Returns:
        Duration in seconds, or None if nothing recognizable is present
    """
    if not text:
        return None

    match = _HMS_PATTERN.search(text)
    if match:
        hours, minutes, seconds = (_to_int(g) for g in match.groups())
        if hours is not None and minutes is not None and seconds is not None:
            return hours * 3600 + minutes * 60 + seconds
        return None

    match = _MS_PATTERN.search(text)
    if match:
        minutes, seconds = (_to_int(g) for g in match.groups())
        if minutes is not None and seconds is not None:
            return minutes * 60 + seconds
        return None

    match = _SECONDS_PATTERN.search(text)
    if match:
        return _to_int(match.group(1))

    return None


def extract_image_url(text: Optional[str]) -> Optional[str]:
    """Return the src of the first <img> tag in the text, if any."""
    if not text:
        return None
    match = _IMG_SRC_PATTERN.search(text)
    return match.group(1) if match else None


def extract_audio_url(text: Optional[str]) -> Optional[str]:
    """Find a playable media URL in raw item text.

    Only used when the item has no structured enclosure. Prefers the
    first http(s) URL ending in a known audio extension, then the url
    attribute of an inline <enclosure> tag.

    Args:
        text: Item content or description

    Returns:
        Audio URL if found, None otherwise
    """
    if not text:
        return None

    match = _AUDIO_FILE_PATTERN.search(text)
    if match:
        return match.group(0)

    match = _ENCLOSURE_PATTERN.search(text)
    if match:
        return match.group(1)

    return None


def clean_text(text: Optional[str]) -> str:
    """Strip HTML tags and common entities, collapsing whitespace.

    Args:
        text: Raw text with possible HTML

    Returns:
        Cleaned text ("" for None)
    """
    if not text:
        return ""

    cleaned = _TAG_PATTERN.sub("", text)
    cleaned = _WHITESPACE_PATTERN.sub(" ", cleaned)
    cleaned = cleaned.replace("&amp;", "&")
    cleaned = cleaned.replace("&lt;", "<")
    cleaned = cleaned.replace("&gt;", ">")
    cleaned = cleaned.replace("&quot;", '"')
    cleaned = cleaned.replace("&#39;", "'")
    cleaned = cleaned.replace("&nbsp;", " ")

    return cleaned.strip()
