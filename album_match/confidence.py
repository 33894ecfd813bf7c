from __future__ import annotations

from typing import Optional

from .catalog import CatalogExtractor
from .config import MatchSettings
from .models import ConfidenceLevel, LocalTrack, MatchConfidence, RemoteTrack
from .similarity import duration_score, similarity


class ConfidenceEvaluator:
    """Scores a remote/local pairing on a 0-100 scale.

    The score blends title token overlap, duration proximity and a flat
    bonus when both titles carry the same catalog number.
    """

    def __init__(
        self,
        settings: Optional[MatchSettings] = None,
        catalog: Optional[CatalogExtractor] = None,
    ) -> None:
        self.settings = settings or MatchSettings()
        self.catalog = catalog or CatalogExtractor(self.settings.catalog_patterns)

    def evaluate(self, remote: RemoteTrack, local: LocalTrack) -> MatchConfidence:
        cfg = self.settings
        title = similarity(remote.name, local.title) * cfg.title_weight
        duration = (
            duration_score(remote.duration_ms, local.duration_ms, cfg.duration_tolerance)
            * cfg.duration_weight
        )
        catalog = cfg.catalog_weight if self.catalog.same_catalog(remote.name, local.title) else 0.0
        score = title + duration + catalog
        return MatchConfidence(
            score=score,
            level=self.classify(score),
            factors={"title": title, "duration": duration, "catalog": catalog},
        )

    def classify(self, score: float) -> ConfidenceLevel:
        if score >= self.settings.high_threshold:
            return ConfidenceLevel.HIGH
        if score >= self.settings.medium_threshold:
            return ConfidenceLevel.MEDIUM
        return ConfidenceLevel.LOW


def confidence(remote: RemoteTrack, local: LocalTrack) -> MatchConfidence:
    return ConfidenceEvaluator().evaluate(remote, local)
