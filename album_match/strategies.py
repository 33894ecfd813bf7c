from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Dict, Hashable, List, Optional, Sequence

from .assignment import greedy_assignment, pairs_from_assignment
from .catalog import CatalogExtractor
from .config import MatchSettings
from .heuristics import filesystem_sort_key, title_from_filename
from .models import Direction, LocalTrack, MatchStrategy, Pair, RemoteTrack
from .similarity import duration_score, similarity

logger = logging.getLogger(__name__)

# Edge blends for the greedy strategies, expressed as fractions of 100.
TEXT_SIMILARITY_WEIGHT = 0.8
TEXT_DURATION_WEIGHT = 0.2
DURATION_PRIMARY_WEIGHT = 0.7
DURATION_TITLE_WEIGHT = 0.3
HYBRID_POSITION_SCORE = 50.0
HYBRID_TITLE_WEIGHT = 30.0
HYBRID_DURATION_WEIGHT = 20.0


@dataclass(slots=True)
class StrategyContext:
    settings: MatchSettings = field(default_factory=MatchSettings)
    catalog: Optional[CatalogExtractor] = None

    def __post_init__(self) -> None:
        if self.catalog is None:
            self.catalog = CatalogExtractor(self.settings.catalog_patterns)

    def duration(self, remote: RemoteTrack, local: LocalTrack) -> float:
        return duration_score(remote.duration_ms, local.duration_ms, self.settings.duration_tolerance)

    def within_tolerance(self, remote: RemoteTrack, local: LocalTrack) -> bool:
        if not remote.duration_ms or not local.duration_ms:
            return False
        diff = abs(remote.duration_ms - local.duration_ms)
        return diff <= remote.duration_ms * self.settings.duration_tolerance


Matcher = Callable[[Sequence[LocalTrack], Sequence[RemoteTrack], Direction, StrategyContext], List[Pair]]


def match_order(
    local: Sequence[LocalTrack],
    remote: Sequence[RemoteTrack],
    direction: Direction,
    ctx: StrategyContext,
) -> List[Pair]:
    if direction is Direction.FORWARD:
        pairs = [
            Pair(local=track, remote=remote[idx] if idx < len(remote) else None)
            for idx, track in enumerate(local)
        ]
        pairs.extend(Pair(remote=track) for track in remote[len(local) :])
        return pairs
    pairs = [
        Pair(local=local[idx] if idx < len(local) else None, remote=track)
        for idx, track in enumerate(remote)
    ]
    pairs.extend(Pair(local=track) for track in local[len(remote) :])
    return pairs


def match_filesystem(
    local: Sequence[LocalTrack],
    remote: Sequence[RemoteTrack],
    direction: Direction,
    ctx: StrategyContext,
) -> List[Pair]:
    local_sorted = sorted(local, key=filesystem_sort_key)
    remote_sorted = sorted(remote, key=lambda track: (track.disc, track.track_number or 0))
    return match_order(local_sorted, remote_sorted, direction, ctx)


def match_track_number(
    local: Sequence[LocalTrack],
    remote: Sequence[RemoteTrack],
    direction: Direction,
    ctx: StrategyContext,
) -> List[Pair]:
    if not any((track.track_number or 0) > 0 for track in local):
        logger.info("No usable local track numbers; falling back to filesystem order")
        return match_filesystem(local, remote, direction, ctx)

    use_disc = any(track.disc_number is not None for track in local) and len(
        {track.disc for track in remote}
    ) > 1

    def key(track: LocalTrack | RemoteTrack) -> Optional[Hashable]:
        number = track.track_number or 0
        if number <= 0:
            return None
        return (track.disc, number) if use_disc else number

    driver: Sequence[LocalTrack | RemoteTrack]
    other: Sequence[LocalTrack | RemoteTrack]
    if direction is Direction.FORWARD:
        driver, other = local, remote
    else:
        driver, other = remote, local

    duplicates = [k for k, count in Counter(key(t) for t in other).items() if k is not None and count > 1]
    if duplicates:
        logger.warning(
            "Duplicate track positions %s; first unused match wins",
            sorted(duplicates, key=str),
        )

    used: set[int] = set()
    pairs: List[Pair] = []
    for track in driver:
        wanted = key(track)
        partner = None
        if wanted is not None:
            for idx, candidate in enumerate(other):
                if idx not in used and key(candidate) == wanted:
                    partner = candidate
                    used.add(idx)
                    break
        pairs.append(_oriented_pair(track, partner, direction))
    for idx, candidate in enumerate(other):
        if idx not in used:
            pairs.append(_oriented_pair(None, candidate, direction, leftover=True))
    logger.debug(
        "Track number matching (%s, disc-aware=%s): %d of %d driving tracks matched",
        direction.value,
        use_disc,
        len(used),
        len(driver),
    )
    return pairs


def _oriented_pair(driving, partner, direction: Direction, leftover: bool = False) -> Pair:
    forward = direction is Direction.FORWARD
    if leftover:
        # ``partner`` belongs to the non-driving side.
        return Pair(remote=partner) if forward else Pair(local=partner)
    if forward:
        return Pair(local=driving, remote=partner)
    return Pair(local=partner, remote=driving)


def _greedy(
    local: Sequence[LocalTrack],
    remote: Sequence[RemoteTrack],
    edge: Callable[[LocalTrack, RemoteTrack], Optional[float]],
    label: str,
) -> List[Pair]:
    scores = [[edge(loc, rem) for rem in remote] for loc in local]
    assignment = greedy_assignment(scores)
    pairs = pairs_from_assignment(local, remote, assignment)
    logger.debug(
        "%s matching: %d of %d local tracks assigned",
        label,
        sum(1 for col in assignment if col is not None),
        len(local),
    )
    return pairs


def match_name(
    local: Sequence[LocalTrack],
    remote: Sequence[RemoteTrack],
    direction: Direction,
    ctx: StrategyContext,
) -> List[Pair]:
    cfg = ctx.settings
    names = {id(track): title_from_filename(track.file_path) for track in local}

    def edge(loc: LocalTrack, rem: RemoteTrack) -> Optional[float]:
        sim = similarity(rem.name, names[id(loc)])
        if sim < cfg.name_min_similarity:
            return None
        score = 100.0 * (TEXT_SIMILARITY_WEIGHT * sim + TEXT_DURATION_WEIGHT * ctx.duration(rem, loc))
        return score if score >= cfg.min_edge_score else None

    return _greedy(local, remote, edge, "Name")


def match_title(
    local: Sequence[LocalTrack],
    remote: Sequence[RemoteTrack],
    direction: Direction,
    ctx: StrategyContext,
) -> List[Pair]:
    cfg = ctx.settings
    catalog = ctx.catalog

    def edge(loc: LocalTrack, rem: RemoteTrack) -> Optional[float]:
        sim = similarity(rem.name, loc.title)
        if catalog is not None and catalog.same_catalog(rem.name, loc.title):
            sim = min(1.0, sim + cfg.catalog_bonus)
        if sim < cfg.title_min_similarity:
            return None
        score = 100.0 * (TEXT_SIMILARITY_WEIGHT * sim + TEXT_DURATION_WEIGHT * ctx.duration(rem, loc))
        return score if score >= cfg.min_edge_score else None

    return _greedy(local, remote, edge, "Title")


def match_duration(
    local: Sequence[LocalTrack],
    remote: Sequence[RemoteTrack],
    direction: Direction,
    ctx: StrategyContext,
) -> List[Pair]:
    def edge(loc: LocalTrack, rem: RemoteTrack) -> Optional[float]:
        if not ctx.within_tolerance(rem, loc):
            return None
        return 100.0 * (
            DURATION_PRIMARY_WEIGHT * ctx.duration(rem, loc)
            + DURATION_TITLE_WEIGHT * similarity(rem.name, loc.title)
        )

    return _greedy(local, remote, edge, "Duration")


def match_hybrid(
    local: Sequence[LocalTrack],
    remote: Sequence[RemoteTrack],
    direction: Direction,
    ctx: StrategyContext,
) -> List[Pair]:
    single_disc = len({track.disc for track in remote}) <= 1
    floor = ctx.settings.hybrid_min_score

    def edge(loc: LocalTrack, rem: RemoteTrack) -> Optional[float]:
        score = 0.0
        number = loc.track_number or 0
        if number > 0 and number == rem.track_number and (single_disc or loc.disc == rem.disc):
            score += HYBRID_POSITION_SCORE
        score += HYBRID_TITLE_WEIGHT * similarity(rem.name, loc.title)
        score += HYBRID_DURATION_WEIGHT * ctx.duration(rem, loc)
        return score if score >= floor else None

    return _greedy(local, remote, edge, "Hybrid")


MATCHERS: Dict[MatchStrategy, Matcher] = {
    MatchStrategy.ORDER: match_order,
    MatchStrategy.FILESYSTEM: match_filesystem,
    MatchStrategy.NAME: match_name,
    MatchStrategy.TITLE: match_title,
    MatchStrategy.TRACK_NUMBER: match_track_number,
    MatchStrategy.DURATION: match_duration,
    MatchStrategy.HYBRID: match_hybrid,
}
