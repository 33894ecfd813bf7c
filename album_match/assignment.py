from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from .models import LocalTrack, Pair, RemoteTrack

logger = logging.getLogger(__name__)


def greedy_assignment(score: List[List[Optional[float]]]) -> List[Optional[int]]:
    """
    Approximate maximum-weight bipartite matching over a score matrix.

    Rows are local tracks, columns remote tracks; ``None`` marks an edge
    that did not qualify. Edges are accepted in descending score order
    (ties by row, then column) whenever both endpoints are still free.

    Returns a list `assignment` where assignment[row] = col (or None if unassigned).
    """
    if not score:
        return []
    edges: List[tuple[float, int, int]] = []
    for r, row in enumerate(score):
        for c, val in enumerate(row):
            if val is not None:
                edges.append((float(val), r, c))
    edges.sort(key=lambda edge: (-edge[0], edge[1], edge[2]))

    assignment: List[Optional[int]] = [None] * len(score)
    taken_cols: set[int] = set()
    for _val, r, c in edges:
        if assignment[r] is not None or c in taken_cols:
            continue
        assignment[r] = c
        taken_cols.add(c)
    logger.debug(
        "Greedy assignment: %d qualifying edges, %d accepted",
        len(edges),
        len(taken_cols),
    )
    return assignment


def pairs_from_assignment(
    local: Sequence[LocalTrack],
    remote: Sequence[RemoteTrack],
    assignment: Sequence[Optional[int]],
) -> list[Pair]:
    """Matched pairs in remote order, then unmatched remote, then unmatched local."""
    local_for_col: dict[int, LocalTrack] = {}
    for r, c in enumerate(assignment):
        if c is not None:
            local_for_col[c] = local[r]
    pairs = [Pair(local=local_for_col[c], remote=remote[c]) for c in sorted(local_for_col)]
    pairs.extend(Pair(remote=track) for c, track in enumerate(remote) if c not in local_for_col)
    pairs.extend(
        Pair(local=track)
        for r, track in enumerate(local)
        if r >= len(assignment) or assignment[r] is None
    )
    return pairs
