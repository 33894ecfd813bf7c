from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from .catalog import CatalogExtractor
from .confidence import ConfidenceEvaluator
from .config import MatchSettings
from .manual import ManualRefiner
from .models import ConfigurationError, Direction, LocalTrack, MatchStrategy, Pair, RemoteTrack
from .selection import StrategySelection, build_report, choose
from .strategies import MATCHERS, StrategyContext

logger = logging.getLogger(__name__)


class Reconciler:
    """Pairs local files with remote tracks using a chosen or auto-selected strategy."""

    def __init__(
        self,
        settings: Optional[MatchSettings] = None,
        refiner: Optional[ManualRefiner] = None,
    ) -> None:
        self.settings = settings or MatchSettings()
        self.catalog = CatalogExtractor(self.settings.catalog_patterns)
        self.evaluator = ConfidenceEvaluator(self.settings, self.catalog)
        self.context = StrategyContext(settings=self.settings, catalog=self.catalog)
        self.refiner = refiner

    def match(
        self,
        local: Sequence[LocalTrack],
        remote: Sequence[RemoteTrack],
        strategy: MatchStrategy | str,
        direction: Direction | str = Direction.FORWARD,
        seed_pairs: Optional[Sequence[Pair]] = None,
    ) -> List[Pair]:
        strategy = MatchStrategy.parse(strategy)
        direction = Direction.parse(direction)
        local = list(local)
        remote = list(remote)
        if strategy is MatchStrategy.MANUAL:
            if self.refiner is None:
                raise ConfigurationError("Manual strategy requested but no manual refiner is configured")
            seed = list(seed_pairs) if seed_pairs is not None else self._run(
                MatchStrategy.ORDER, local, remote, direction
            )
            pairs = self.refiner.refine(local, remote, seed, direction)
        else:
            pairs = self._run(strategy, local, remote, direction)
        return self.score(pairs)

    def best_strategy(
        self,
        local: Sequence[LocalTrack],
        remote: Sequence[RemoteTrack],
        direction: Direction | str = Direction.FORWARD,
    ) -> StrategySelection:
        direction = Direction.parse(direction)
        local = list(local)
        remote = list(remote)
        reports = [
            build_report(strategy, self.score(self._run(strategy, local, remote, direction)))
            for strategy in MatchStrategy.automatic()
        ]
        return choose(reports)

    def score(self, pairs: List[Pair]) -> List[Pair]:
        for pair in pairs:
            if pair.local is not None and pair.remote is not None:
                result = self.evaluator.evaluate(pair.remote, pair.local)
                pair.confidence = result.score
                pair.level = result.level
        return pairs

    def _run(
        self,
        strategy: MatchStrategy,
        local: List[LocalTrack],
        remote: List[RemoteTrack],
        direction: Direction,
    ) -> List[Pair]:
        matcher = MATCHERS.get(strategy)
        if matcher is None:
            raise ConfigurationError(f"No matcher registered for strategy {strategy.value!r}")
        pairs = matcher(local, remote, direction, self.context)
        logger.debug(
            "%s strategy produced %d pairs for %d local / %d remote tracks",
            strategy.value,
            len(pairs),
            len(local),
            len(remote),
        )
        return pairs


def reconcile(
    local: Sequence[LocalTrack],
    remote: Sequence[RemoteTrack],
    strategy: MatchStrategy | str,
    direction: Direction | str = Direction.FORWARD,
) -> List[Pair]:
    return Reconciler().match(local, remote, strategy, direction)


def best_strategy(
    local: Sequence[LocalTrack],
    remote: Sequence[RemoteTrack],
    direction: Direction | str = Direction.FORWARD,
) -> MatchStrategy:
    return Reconciler().best_strategy(local, remote, direction).strategy
