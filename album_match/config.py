from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .models import ConfigurationError, Direction, MatchStrategy

DEFAULT_CATALOG_PATTERNS = {"BWV": r"\bBWV\.?\s*(\d+[a-z]?)"}


class MatchSettings(BaseModel):
    duration_tolerance: float = Field(default=0.1, gt=0.0, le=1.0)
    name_min_similarity: float = Field(default=0.5, ge=0.0, le=1.0)
    title_min_similarity: float = Field(default=0.4, ge=0.0, le=1.0)
    min_edge_score: float = Field(default=40.0, ge=0.0)
    hybrid_min_score: float = Field(default=20.0, ge=0.0)
    catalog_bonus: float = Field(default=0.3, ge=0.0, le=1.0)
    title_weight: float = Field(default=50.0, ge=0.0)
    duration_weight: float = Field(default=20.0, ge=0.0)
    catalog_weight: float = Field(default=30.0, ge=0.0)
    medium_threshold: float = 45.0
    high_threshold: float = 65.0
    catalog_patterns: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_CATALOG_PATTERNS))

    @field_validator("catalog_patterns")
    @classmethod
    def _check_patterns(cls, values: Dict[str, str]) -> Dict[str, str]:
        for label, pattern in values.items():
            try:
                compiled = re.compile(pattern, re.IGNORECASE)
            except re.error as exc:
                raise ValueError(f"catalog pattern {label!r} is not a valid regex: {exc}") from exc
            if compiled.groups != 1:
                raise ValueError(f"catalog pattern {label!r} must have exactly one capture group")
        return values

    @model_validator(mode="after")
    def _check_thresholds(self) -> "MatchSettings":
        if self.medium_threshold > self.high_threshold:
            raise ValueError("medium_threshold must not exceed high_threshold")
        return self


class OutputSettings(BaseModel):
    default_strategy: str = "best"
    default_direction: Direction = Direction.FORWARD

    @field_validator("default_strategy")
    @classmethod
    def _check_strategy(cls, value: str) -> str:
        if value.strip().lower() == "best":
            return "best"
        return MatchStrategy.parse(value).value

    @field_validator("default_direction", mode="before")
    @classmethod
    def _parse_direction(cls, value: str | Direction) -> Direction:
        return Direction.parse(value)


class Settings(BaseModel):
    match: MatchSettings = MatchSettings()
    output: OutputSettings = OutputSettings()

    @classmethod
    def load(cls, path: Path) -> "Settings":
        with path.open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh)
        try:
            return cls.model_validate(raw or {})
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid configuration in {path}: {exc}") from exc


def find_config(explicit_path: Optional[Path]) -> Optional[Path]:
    if explicit_path:
        if not explicit_path.exists():
            raise ConfigurationError(f"Config file {explicit_path} does not exist")
        return explicit_path
    cwd = Path.cwd()
    for candidate in (cwd / "album-match.yaml", cwd / "config.yaml", cwd / "config.yml"):
        if candidate.exists():
            return candidate
    return None


def load_settings(explicit_path: Optional[Path] = None) -> Settings:
    path = find_config(explicit_path)
    if path is None:
        return Settings()
    return Settings.load(path)
