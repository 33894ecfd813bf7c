from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping, Optional

import yaml

from .models import ConfigurationError, LocalTrack, RemoteTrack

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TrackDocument:
    local: List[LocalTrack] = field(default_factory=list)
    remote: List[RemoteTrack] = field(default_factory=list)


def load_document(path: Path) -> TrackDocument:
    """Read a YAML (or JSON) file with top-level ``local`` and ``remote`` lists."""
    with path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)
    if raw is None:
        return TrackDocument()
    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"{path}: expected a mapping with 'local' and 'remote' lists")
    local_raw = raw.get("local") or []
    remote_raw = raw.get("remote") or []
    if not isinstance(local_raw, list) or not isinstance(remote_raw, list):
        raise ConfigurationError(f"{path}: 'local' and 'remote' must be lists")
    if not all(isinstance(record, Mapping) for record in [*local_raw, *remote_raw]):
        raise ConfigurationError(f"{path}: every track entry must be a mapping")
    document = TrackDocument(
        local=[local_track_from_record(record) for record in local_raw],
        remote=[remote_track_from_record(record, position) for position, record in enumerate(remote_raw, 1)],
    )
    logger.debug(
        "Loaded %d local and %d remote tracks from %s",
        len(document.local),
        len(document.remote),
        path,
    )
    return document


def local_track_from_record(record: Mapping[str, Any]) -> LocalTrack:
    file_path = _first(record, "file_path", "path", "filename")
    if not file_path:
        raise ConfigurationError(f"Local track record is missing a file path: {dict(record)!r}")
    return LocalTrack(
        file_path=str(file_path),
        title=_text(_first(record, "title", "name")),
        track_number=_parse_int(_first(record, "track_number", "tracknumber", "track")) or 0,
        disc_number=_parse_int(_first(record, "disc_number", "discnumber", "disc")),
        duration_ms=_duration_ms(record),
    )


def remote_track_from_record(record: Mapping[str, Any], position: Optional[int] = None) -> RemoteTrack:
    track_id = _first(record, "id", "recording_id", "track_id")
    if track_id is None:
        if position is None:
            raise ConfigurationError(f"Remote track record is missing an id: {dict(record)!r}")
        track_id = position
    return RemoteTrack(
        id=str(track_id),
        name=_text(_first(record, "name", "title")),
        track_number=_parse_int(_first(record, "track_number", "tracknumber", "track", "number")) or 0,
        disc_number=_parse_int(_first(record, "disc_number", "discnumber", "disc")),
        duration_ms=_duration_ms(record),
    )


def _first(record: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = record.get(key)
        if value is not None and value != "":
            return value
    return None


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _duration_ms(record: Mapping[str, Any]) -> int:
    value = _first(record, "duration_ms", "length")
    scale = 1
    if value is None:
        value = _first(record, "duration", "duration_seconds")
        scale = 1000
    if value is None:
        return 0
    if isinstance(value, str) and ":" in value:
        # Clock strings are read as seconds whichever key holds them.
        number = parse_clock_duration(value)
        scale = 1000
    else:
        number = _parse_number(value)
    if number is None:
        logger.debug("Ignoring unparseable duration %r", value)
        return 0
    return int(round(number * scale)) if number > 0 else 0


def parse_clock_duration(value: Optional[str]) -> Optional[int]:
    """``"3:05"`` -> 185 seconds; ``"1:02:03"`` is hours, minutes, seconds."""
    if not value or ":" not in value:
        return None
    total = 0.0
    try:
        for part in value.strip().split(":"):
            total = total * 60 + float(part)
    except ValueError:
        return None
    return int(total) if math.isfinite(total) else None


def _parse_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(str(value).strip())
        except ValueError:
            return None
    return number if math.isfinite(number) else None


def _parse_int(value: object) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        cleaned = value.strip()
        if "/" in cleaned:
            cleaned = cleaned.split("/", 1)[0].strip()
        if cleaned.isdigit():
            return int(cleaned)
        return None
    return None
