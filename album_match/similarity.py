from __future__ import annotations

import re
from typing import Optional

# Runs start with a letter and may carry digits and internal hyphens.
TOKEN_PATTERN = re.compile(r"[^\W\d_](?:[^\W_]|-)*")


def tokenize(value: Optional[str]) -> frozenset[str]:
    if not value:
        return frozenset()
    tokens = set()
    for raw in TOKEN_PATTERN.findall(str(value)):
        token = raw.casefold().strip("-")
        if token:
            tokens.add(token)
    return frozenset(tokens)


def similarity(a: Optional[str], b: Optional[str]) -> float:
    """Jaccard overlap of the word tokens in ``a`` and ``b``.

    Two empty token sets are identical (1.0); one empty side scores 0.0.
    """
    tokens_a = tokenize(a)
    tokens_b = tokenize(b)
    if not tokens_a and not tokens_b:
        return 1.0
    if not tokens_a or not tokens_b:
        return 0.0
    return len(tokens_a & tokens_b) / len(tokens_a | tokens_b)


def duration_score(remote_ms: Optional[int], local_ms: Optional[int], tolerance: float = 0.1) -> float:
    # 0 means unknown; an unknown length earns no duration credit.
    if not remote_ms or not local_ms:
        return 0.0
    diff = abs(remote_ms - local_ms)
    allowed = remote_ms * tolerance
    if diff > allowed:
        return 0.0
    return 1.0 - diff / allowed
