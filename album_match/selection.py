from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List

from .models import ConfidenceLevel, MatchStrategy, Pair

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class StrategyReport:
    strategy: MatchStrategy
    pairs: List[Pair] = field(default_factory=list)
    average: float = 0.0
    high: int = 0
    medium: int = 0
    low: int = 0

    @property
    def matched(self) -> int:
        return self.high + self.medium + self.low


@dataclass(slots=True)
class StrategySelection:
    strategy: MatchStrategy
    pairs: List[Pair]
    reports: List[StrategyReport]


def build_report(strategy: MatchStrategy, pairs: List[Pair]) -> StrategyReport:
    report = StrategyReport(strategy=strategy, pairs=pairs)
    total = 0.0
    for pair in pairs:
        if not pair.is_matched:
            continue
        total += pair.confidence
        if pair.level is ConfidenceLevel.HIGH:
            report.high += 1
        elif pair.level is ConfidenceLevel.MEDIUM:
            report.medium += 1
        else:
            report.low += 1
    report.average = total / report.matched if report.matched else 0.0
    return report


def rank_reports(reports: Iterable[StrategyReport]) -> List[StrategyReport]:
    """Best first: highest average, then most High pairs, then fewest Low pairs.

    The sort is stable, so remaining ties keep the order the reports came in.
    """
    return sorted(reports, key=lambda report: (-report.average, -report.high, report.low))


def choose(reports: List[StrategyReport]) -> StrategySelection:
    if not reports:
        raise ValueError("choose() needs at least one strategy report")
    ranked = rank_reports(reports)
    winner = ranked[0]
    for report in ranked:
        logger.debug(
            "Strategy %-12s avg=%.1f high=%d medium=%d low=%d",
            report.strategy.value,
            report.average,
            report.high,
            report.medium,
            report.low,
        )
    logger.info(
        "Selected %s strategy (avg confidence %.1f, %d matched)",
        winner.strategy.value,
        winner.average,
        winner.matched,
    )
    return StrategySelection(strategy=winner.strategy, pairs=winner.pairs, reports=ranked)
