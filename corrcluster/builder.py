"""
CORRELATION HIERARCHICAL CLUSTERING — Paradigm: DENDROGRAM

===============================================================
THE LOOP
===============================================================

    1. Every record is a leaf (index 0..n-1, height 0)
    2. Distances between all leaf pairs go to the thread pool
    3. While more than one node is active:
         a. pick the closest active pair (waits for its distances)
         b. merge it into a new node:
                index  = next id (n, n+1, ...)
                data   = element-wise mean of the two children
                height = their distance
         c. swap the two children for the new node
         d. submit distances from the new node to every other active node
    4. The last active node is the root

Each iteration removes two nodes and adds one, so there are exactly
n-1 merges and 2n-1 nodes in the tree.

===============================================================
WHAT IT IS NOT
===============================================================

A merged node is represented by its CENTROID, not by its members.
That makes this neither single, complete, average nor Ward linkage:
the distance from a cluster to the rest of the data is recomputed
from an averaged profile. Two consequences:

- Merge heights are NOT guaranteed to grow toward the root.
  A child can sit higher than its parent. Cutting by height is
  still possible but less meaningful than with monotone linkages.
- The centroid of a merge of merges weighs both sides equally,
  whatever their sizes.

Complexity: O(n²) distance evaluations in total, O(n³) comparisons
for the naive closest-pair scan. Fine for tens to a few hundred
records.

===============================================================
"""

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Sequence

import numpy as np

from . import distance as dist
from .distance import correlation_distance
from .exceptions import EmptyInput, InconsistentDimension
from .features import extract
from .node import Node, leaf, merge
from .tree import cut, linkage_matrix, merges

logger = logging.getLogger(__name__)


def _check_vectors(vectors) -> List[tuple]:
    vectors = [tuple(float(v) for v in vec) for vec in vectors]
    if not vectors:
        raise EmptyInput("Cannot cluster zero vectors")
    lengths = {len(v) for v in vectors}
    if len(lengths) > 1:
        raise InconsistentDimension(f"Feature vectors have differing lengths: {sorted(lengths)}")
    return vectors


def build_tree(vectors: Sequence[Sequence[float]], distance_fn=correlation_distance,
               max_workers: Optional[int] = None, undefined: str = 'infinite',
               names: Optional[Sequence[str]] = None) -> Node:
    """
    Cluster feature vectors into a dendrogram and return its root.

    Parameters:
    -----------
    vectors : sequence of equal-length numeric sequences
        Leaf i is vectors[i].
    distance_fn : callable (a, b) -> float
        Pairwise distance, default 1 - pearson(a, b).
    max_workers : int or None
        Size of the distance thread pool (None lets the executor decide).
    undefined : str
        What to do with nan distances, see distance.closest_pair.
    names : sequence of str or None
        Record identifiers attached to the leaves.
    """
    if undefined not in dist.UNDEFINED_POLICIES:
        raise ValueError(f"Unknown undefined-distance policy: {undefined}")
    vectors = _check_vectors(vectors)
    n = len(vectors)
    if names is not None and len(names) != n:
        raise ValueError(f"Got {len(names)} names for {n} vectors")

    # Arena: node index -> node, for the nodes not yet absorbed by a merge
    active: Dict[int, Node] = {
        i: leaf(i, vec, None if names is None else names[i]) for i, vec in enumerate(vectors)
    }
    if n == 1:
        return active[0]

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix='corrcluster') as executor:
        index = dist.build(vectors, distance_fn, executor)
        next_index = n

        while len(active) > 1:
            key, height = dist.closest_pair(index, undefined=undefined)
            if math.isinf(height):
                logger.warning("Merging nodes %d and %d at an undefined distance "
                               "(no finite pair left)", key.low, key.high)

            parent = merge(next_index, active[key.low], active[key.high], height)
            active = {i: node for i, node in active.items() if i not in key}
            active[parent.index] = parent
            logger.debug("Merge %d: nodes (%d, %d) at height %.6f, %d active",
                         parent.index, key.low, key.high, height, len(active))

            index = dist.update(index, active.values(), parent, key)
            next_index += 1

    (root,) = active.values()
    logger.info("Built dendrogram over %d leaves, root height %.6f", n, root.height)
    return root


def hier_cluster(dataset, **options) -> Node:
    """
    Cluster the records of a dataset by the correlation of their features.

    The first column names the records, the rest are features. Keyword
    options are passed to build_tree; an explicit `names` replaces the
    record identifiers as leaf names.
    """
    vectors = extract(dataset)
    options.setdefault('names', [v.identifier for v in vectors])
    return build_tree([v.values for v in vectors], **options)


class CorrelationClustering:
    """
    Agglomerative clustering on 1 - pearson correlation.

    Paradigm: DENDROGRAM — always builds the full tree, then (optionally)
    cuts it into flat clusters.
    """

    def __init__(self, n_clusters=None, distance_threshold=None,
                 distance_fn=correlation_distance, max_workers=None, undefined='infinite'):
        """
        Parameters:
        -----------
        n_clusters : int or None
            Number of flat clusters to cut the tree into.
        distance_threshold : float or None
            Alternatively, split every merge above this height.
        distance_fn : callable (a, b) -> float
            Pairwise distance between node profiles.
        max_workers : int or None
            Thread pool size for distance computations.
        undefined : str
            'infinite' or 'raise', see distance.closest_pair.
        """
        if n_clusters is not None and distance_threshold is not None:
            raise ValueError("Give n_clusters or distance_threshold, not both")
        if n_clusters is not None and n_clusters < 1:
            raise ValueError(f"n_clusters must be at least 1, got {n_clusters}")
        if distance_threshold is not None and distance_threshold < 0:
            raise ValueError(f"distance_threshold must be non-negative, got {distance_threshold}")
        if undefined not in dist.UNDEFINED_POLICIES:
            raise ValueError(f"Unknown undefined-distance policy: {undefined}")
        self.n_clusters = n_clusters
        self.distance_threshold = distance_threshold
        self.distance_fn = distance_fn
        self.max_workers = max_workers
        self.undefined = undefined

        # Attributes set after fit
        self.root_ = None
        self.n_leaves_ = None
        self.names_ = None
        self.children_ = None         # Merge history: (i, j) merged at step k
        self.distances_ = None        # Height of each merge
        self.dendrogram_data_ = None  # scipy-style linkage matrix
        self.labels_ = None

    def fit(self, dataset):
        """Extract features, build the dendrogram, and cut it if asked to."""
        vectors = extract(dataset)
        self.names_ = [v.identifier for v in vectors]
        self.n_leaves_ = len(vectors)

        self.root_ = build_tree([v.values for v in vectors], distance_fn=self.distance_fn,
                                max_workers=self.max_workers, undefined=self.undefined,
                                names=self.names_)

        history = merges(self.root_)
        self.children_ = [(node.left.index, node.right.index) for node in history]
        self.distances_ = [node.height for node in history]
        self.dendrogram_data_ = linkage_matrix(self.root_)

        if self.n_clusters is not None or self.distance_threshold is not None:
            self.labels_ = cut(self.root_, n_clusters=self.n_clusters,
                               distance_threshold=self.distance_threshold)
        else:
            self.labels_ = np.zeros(self.n_leaves_, dtype=int)
        return self

    def fit_predict(self, dataset):
        """Fit and return cluster labels."""
        self.fit(dataset)
        return self.labels_
