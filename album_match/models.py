from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePath
from typing import Dict, Optional


class ConfigurationError(ValueError):
    """Raised for settings or strategy selections the engine cannot honour."""


class MatchStrategy(str, Enum):
    ORDER = "order"
    FILESYSTEM = "filesystem"
    NAME = "name"
    TITLE = "title"
    TRACK_NUMBER = "track_number"
    DURATION = "duration"
    HYBRID = "hybrid"
    MANUAL = "manual"

    @classmethod
    def parse(cls, value: "str | MatchStrategy") -> "MatchStrategy":
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().replace("-", "_")
        if key == "tracknumber":
            key = cls.TRACK_NUMBER.value
        for member in cls:
            if member.value == key:
                return member
        choices = ", ".join(member.value for member in cls)
        raise ConfigurationError(f"Unknown match strategy {value!r}; expected one of: {choices}")

    @classmethod
    def automatic(cls) -> list["MatchStrategy"]:
        return [member for member in cls if member is not cls.MANUAL]


class Direction(str, Enum):
    FORWARD = "forward"
    REVERSE = "reverse"

    @classmethod
    def parse(cls, value: "str | Direction") -> "Direction":
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        for member in cls:
            if member.value == key:
                return member
        raise ConfigurationError(f"Unknown direction {value!r}; expected forward or reverse")


class ConfidenceLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(slots=True, eq=False)
class LocalTrack:
    file_path: str
    title: Optional[str] = None
    track_number: int = 0
    disc_number: Optional[int] = None
    duration_ms: int = 0

    @property
    def disc(self) -> int:
        return self.disc_number or 1

    @property
    def file_name(self) -> str:
        return PurePath(self.file_path).name


@dataclass(slots=True, eq=False)
class RemoteTrack:
    id: str
    name: Optional[str] = None
    track_number: int = 0
    disc_number: Optional[int] = None
    duration_ms: int = 0

    @property
    def disc(self) -> int:
        return self.disc_number or 1


@dataclass(slots=True)
class MatchConfidence:
    score: float
    level: ConfidenceLevel
    factors: Dict[str, float] = field(default_factory=dict)


@dataclass(slots=True)
class Pair:
    local: Optional[LocalTrack] = None
    remote: Optional[RemoteTrack] = None
    confidence: float = 0.0
    level: ConfidenceLevel = ConfidenceLevel.LOW

    def __post_init__(self) -> None:
        if self.local is None and self.remote is None:
            raise ValueError("Pair requires at least one side")

    @property
    def is_matched(self) -> bool:
        return self.local is not None and self.remote is not None

    def to_record(self) -> Dict[str, object]:
        return {
            "file_path": self.local.file_path if self.local else None,
            "local_title": self.local.title if self.local else None,
            "remote_id": self.remote.id if self.remote else None,
            "remote_name": self.remote.name if self.remote else None,
            "track_number": self.remote.track_number if self.remote else None,
            "disc_number": self.remote.disc if self.remote else None,
            "confidence": round(self.confidence, 2) if self.is_matched else None,
            "level": self.level.value if self.is_matched else None,
        }
