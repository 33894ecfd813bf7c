from __future__ import annotations

import re
from pathlib import PurePath
from typing import Optional

from .models import LocalTrack

LEADING_NUMBER = re.compile(r"^\s*(?P<num>\d+)")
TRACK_PATTERN = re.compile(r"^(?:\d{1,2}[-.])?(?P<num>\d{1,3})(?:[\s._-]+)(?P<title>.+)$")


def leading_number(name: str) -> Optional[int]:
    match = LEADING_NUMBER.match(name)
    if not match:
        return None
    return int(match.group("num"))


def filesystem_sort_key(track: LocalTrack) -> tuple[int, int, str]:
    """Numbered files first by their prefix, then everything else by name."""
    name = track.file_name
    number = leading_number(name)
    if number is None:
        return (1, 0, name.casefold())
    return (0, number, name.casefold())


def title_from_filename(file_path: str) -> str:
    stem = PurePath(file_path).stem
    track_match = TRACK_PATTERN.match(stem)
    if track_match:
        return _clean(track_match.group("title")) or stem
    embedded = _embedded_title(stem)
    if embedded:
        return embedded
    return _clean(stem) or stem


def _clean(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    cleaned = value.replace("_", " ").strip(" ._-")
    return cleaned or None


def _embedded_title(filename: str) -> Optional[str]:
    # "Artist - Album - 03 - Title"
    parts = filename.split(" - ")
    if len(parts) < 3:
        return None
    for idx, part in enumerate(parts[:-1]):
        if part.strip().isdigit():
            title = " - ".join(parts[idx + 1 :]).strip()
            if title:
                return _clean(title)
    return None
