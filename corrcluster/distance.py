"""
CORRELATION DISTANCE INDEX — Paradigm: CACHED PAIRWISE DISTANCES

===============================================================
THE METRIC
===============================================================

    d(a, b) = 1 - pearson(a, b)        range ~[0, 2]

    0 → same trend (b = k·a + c, k > 0)
    1 → unrelated
    2 → opposite trend

Pearson only looks at the SHAPE of a profile, not its scale:
[1, 2, 3] and [200, 400, 600] are at distance 0. That is what we
want for word counts, where a prolific writer and a quiet one on
the same topic should still end up together.

UNDEFINED CASE: a vector with zero variance ([1, 1, 1]) has no
trend, so its correlation with anything is 0/0. We return nan for
it, except that two element-wise identical vectors are always at
distance 0. What happens to nan is decided at selection time (see
closest_pair).

===============================================================
THE INDEX
===============================================================

One slot per unordered pair of active nodes:

    PairKey(i, j), i < j  →  Future[float]

Every slot is filled by a task on a shared thread pool. Building or
updating the index only SUBMITS work; reading a slot is the only
thing that blocks, and only on that slot.

After merging (i, j) into m:
    - drop every slot that mentions i or j
    - submit d(m, k) for every other active k

That's O(k) new tasks per merge instead of recomputing all pairs.
Each update returns a NEW index; old revisions are never modified,
so nothing is ever written concurrently. Slots that get dropped keep
computing in the background; their results are simply never read.

===============================================================
"""

import logging
import math
from collections.abc import Mapping
from concurrent.futures import Executor, Future
from types import MappingProxyType
from typing import Callable, Dict, Iterable, NamedTuple, Sequence, Set, Tuple

import numpy as np
from scipy.stats import pearsonr

from .exceptions import UndefinedDistance

logger = logging.getLogger(__name__)

UNDEFINED_POLICIES = ('infinite', 'raise')

DistanceFn = Callable[[Sequence[float], Sequence[float]], float]


def correlation(a, b) -> float:
    """
    Pearson correlation of two equal-length sequences.

    Returns nan when it is undefined: fewer than two values, or zero
    variance in either sequence.
    """
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    if a.shape != b.shape:
        raise ValueError(f"Cannot correlate sequences of lengths {a.size} and {b.size}")
    if a.size < 2 or np.ptp(a) == 0 or np.ptp(b) == 0:
        return math.nan
    r, _ = pearsonr(a, b)
    return float(r)


def correlation_distance(a, b) -> float:
    """
    1 - Pearson correlation. Lower means more similar.

    Identical vectors are at distance 0 even when their correlation is
    undefined (e.g. two copies of [1, 1, 1]).
    """
    if np.array_equal(np.asarray(a, dtype=float), np.asarray(b, dtype=float)):
        return 0.0
    return 1.0 - correlation(a, b)


class PairKey(NamedTuple):
    """Unordered pair of node indices, stored smaller index first."""

    low: int
    high: int

    @classmethod
    def of(cls, i: int, j: int) -> 'PairKey':
        if i == j:
            raise ValueError(f"A pair needs two distinct indices, got ({i}, {j})")
        return cls(min(i, j), max(i, j))

    def __contains__(self, index):
        return index == self.low or index == self.high


class DistanceIndex(Mapping):
    """
    Read-only map PairKey -> Future[float], plus what is needed to extend it.

    Iteration is in sorted key order, so anything that walks the index
    (selection, tie-breaking, tests) sees a reproducible sequence.
    """

    def __init__(self, entries: Dict[PairKey, Future], distance_fn: DistanceFn,
                 executor: Executor):
        self._entries = MappingProxyType(dict(entries))
        self._order = tuple(sorted(self._entries))
        self.distance_fn = distance_fn
        self.executor = executor

    def __getitem__(self, key):
        return self._entries[PairKey.of(*key)]

    def __iter__(self):
        return iter(self._order)

    def __len__(self):
        return len(self._entries)

    def __contains__(self, key):
        try:
            return PairKey.of(*key) in self._entries
        except (TypeError, ValueError):
            return False

    def indices(self) -> Set[int]:
        """Every node index that appears in some pair."""
        return {i for key in self._order for i in key}

    def resolved(self) -> Dict[PairKey, float]:
        """Block on every slot and return plain distances."""
        return {key: self._entries[key].result() for key in self._order}

    def __repr__(self):
        pending = sum(1 for f in self._entries.values() if not f.done())
        return f"DistanceIndex(pairs={len(self)}, pending={pending})"


def build(vectors: Sequence[Sequence[float]], distance_fn: DistanceFn,
          executor: Executor) -> DistanceIndex:
    """
    Submit one distance task for every pair i > j of the given vectors.

    Parameters:
    -----------
    vectors : sequence of vectors
        Position in the sequence is the node index.
    distance_fn : callable (a, b) -> float
        Pure, deterministic distance.
    executor : concurrent.futures.Executor
        Pool the tasks run on. Submission never waits for results.
    """
    entries = {}
    for i in range(len(vectors)):
        for j in range(i):
            entries[PairKey(j, i)] = executor.submit(distance_fn, vectors[i], vectors[j])

    logger.debug("Dispatched %d distance tasks for %d vectors", len(entries), len(vectors))
    return DistanceIndex(entries, distance_fn, executor)


def _rank(distance, key, undefined):
    # nan compares False against everything, so it must never reach min()
    if math.isnan(distance):
        if undefined == 'raise':
            raise UndefinedDistance(key)
        return math.inf
    return distance


def closest_pair(index: DistanceIndex, undefined: str = 'infinite') -> Tuple[PairKey, float]:
    """
    Find the pair with the smallest distance.

    Blocks until every slot has resolved. Ties go to the smallest PairKey.

    Parameters:
    -----------
    index : DistanceIndex
    undefined : str
        'infinite': nan distances rank as +inf, so an undefined pair is only
                    chosen when no finite pair is left (and is then reported
                    with distance +inf, never nan)
        'raise':    any nan distance raises UndefinedDistance

    Returns:
    --------
    (key, distance) : (PairKey, float)
    """
    if undefined not in UNDEFINED_POLICIES:
        raise ValueError(f"Unknown undefined-distance policy: {undefined}")
    if len(index) == 0:
        raise ValueError("Cannot select a pair from an empty distance index")

    best_key, best = None, None
    for key in index:
        distance = _rank(index[key].result(), key, undefined)
        if best is None or distance < best:
            best_key, best = key, distance
    return best_key, best


def update(index: DistanceIndex, active: Iterable, merged, removed: Iterable[int]) -> DistanceIndex:
    """
    Return a new index that reflects one merge.

    Parameters:
    -----------
    index : DistanceIndex
        Current revision (left untouched).
    active : iterable of Node
        Active nodes after the merge (may include `merged` itself).
    merged : Node
        The node that was just created.
    removed : pair of int
        Indices of the two nodes absorbed into `merged`.
    """
    removed = set(removed)
    kept = {key: index[key] for key in index if not (removed & set(key))}

    dispatched = 0
    for node in active:
        if node.index == merged.index:
            continue
        kept[PairKey.of(node.index, merged.index)] = index.executor.submit(
            index.distance_fn, merged.data, node.data)
        dispatched += 1

    logger.debug("Index revision for node %d: dropped %d pairs, dispatched %d",
                 merged.index, len(index) - (len(kept) - dispatched), dispatched)
    return DistanceIndex(kept, index.distance_fn, index.executor)
