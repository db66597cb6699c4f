"""
Walking and flattening dendrograms.

Everything here uses an explicit stack, so deep (chain-like) trees never
hit the recursion limit.
"""

from typing import Iterator, List, Optional

import numpy as np

from .node import Node


def iter_nodes(root: Node) -> Iterator[Node]:
    """Pre-order walk: parent, then left subtree, then right subtree."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        if not node.is_leaf:
            stack.append(node.right)
            stack.append(node.left)


def leaves(root: Node) -> List[Node]:
    """Leaves in left-to-right order."""
    return [node for node in iter_nodes(root) if node.is_leaf]


def merges(root: Node) -> List[Node]:
    """Merged nodes in the order they were created."""
    return sorted((node for node in iter_nodes(root) if not node.is_leaf),
                  key=lambda node: node.index)


def linkage_matrix(root: Node) -> np.ndarray:
    """
    Merge history in the scipy linkage layout.

    Row k describes the k-th merge: [left index, right index, height, n_leaves].
    Node indices already follow scipy's numbering (leaves 0..n-1, merge k is n+k).
    Heights are copied as-is, so the matrix need not be monotone.
    """
    history = merges(root)
    sizes = {}
    rows = []
    for node in iter_nodes(root):
        if node.is_leaf:
            sizes[node.index] = 1
    for node in history:
        size = sizes[node.left.index] + sizes[node.right.index]
        sizes[node.index] = size
        rows.append([node.left.index, node.right.index, node.height, size])
    return np.array(rows, dtype=float).reshape(len(rows), 4)


def cut(root: Node, n_clusters: Optional[int] = None,
        distance_threshold: Optional[float] = None) -> np.ndarray:
    """
    Flatten the tree into cluster labels.

    Parameters:
    -----------
    n_clusters : int or None
        Undo the latest merges until this many clusters remain.
    distance_threshold : float or None
        Split every merge whose height exceeds the threshold. Heights are
        not monotone here, so a low merge can still be split under a high one
        that was kept: only the path from the root matters.

    Returns:
    --------
    labels : int array indexed by leaf index, clusters numbered by first
             appearance in leaf-index order
    """
    if (n_clusters is None) == (distance_threshold is None):
        raise ValueError("Give exactly one of n_clusters or distance_threshold")

    all_leaves = leaves(root)
    n = len(all_leaves)

    if n_clusters is not None:
        if not 1 <= n_clusters <= n:
            raise ValueError(f"n_clusters must be in 1..{n}, got {n_clusters}")
        # Latest merge has the highest index; splitting it first undoes merges in reverse order
        frontier = {root.index: root}
        while len(frontier) < n_clusters:
            latest = frontier.pop(max(frontier))
            frontier[latest.left.index] = latest.left
            frontier[latest.right.index] = latest.right
        clusters = list(frontier.values())
    else:
        clusters = []
        stack = [root]
        while stack:
            node = stack.pop()
            if not node.is_leaf and node.height > distance_threshold:
                stack.extend(node.children)
            else:
                clusters.append(node)

    assignment = {}
    for cluster_id, cluster in enumerate(clusters):
        for member in leaves(cluster):
            assignment[member.index] = cluster_id

    labels = np.zeros(n, dtype=int)
    renumber = {}
    for leaf_index in sorted(assignment):
        cluster_id = assignment[leaf_index]
        renumber.setdefault(cluster_id, len(renumber))
        labels[leaf_index] = renumber[cluster_id]
    return labels
