from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Mapping, Optional

from .config import DEFAULT_CATALOG_PATTERNS


@dataclass(frozen=True, slots=True)
class CatalogNumber:
    scheme: str
    number: str

    def __str__(self) -> str:
        return f"{self.scheme} {self.number}"


class CatalogExtractor:
    """Pulls catalog identifiers (e.g. ``BWV 846``) out of track titles.

    Patterns are tried in insertion order; each must capture the catalog
    number in its single group. The first pattern that matches wins.
    """

    def __init__(self, patterns: Optional[Mapping[str, str]] = None) -> None:
        source = DEFAULT_CATALOG_PATTERNS if patterns is None else patterns
        self._patterns = [
            (label, re.compile(pattern, re.IGNORECASE)) for label, pattern in source.items()
        ]

    @property
    def schemes(self) -> list[str]:
        return [label for label, _ in self._patterns]

    def extract(self, value: Optional[str]) -> Optional[CatalogNumber]:
        if not value:
            return None
        for label, pattern in self._patterns:
            match = pattern.search(value)
            if match:
                return CatalogNumber(scheme=label, number=self._normalize(match.group(1)))
        return None

    def same_catalog(self, a: Optional[str], b: Optional[str]) -> bool:
        left = self.extract(a)
        if left is None:
            return False
        return left == self.extract(b)

    @staticmethod
    def _normalize(number: str) -> str:
        cleaned = re.sub(r"\s+", "", number).lower()
        return cleaned.lstrip("0") or "0"
