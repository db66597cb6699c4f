"""
Dendrogram nodes.

A leaf wraps one record's feature vector. A merged node owns its two
children, averages their data element-wise, and remembers the distance at
which they were joined as its height.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np


@dataclass(frozen=True, eq=False)
class Node:
    """
    Immutable dendrogram node.

    Parameters:
    -----------
    index : int
        0..n-1 for leaves, n, n+1, ... for merges in the order they happened
    left, right : Node or None
        Children of a merged node (both None for a leaf)
    data : tuple of float
        Raw vector for a leaf, centroid of the children for a merge
    height : float
        0.0 for a leaf, merge distance otherwise
    name : str or None
        Record identifier (leaves only)
    """

    index: int
    left: Optional["Node"] = None
    right: Optional["Node"] = None
    data: Tuple[float, ...] = ()
    height: float = 0.0
    name: Optional[str] = None

    @property
    def is_leaf(self) -> bool:
        return self.left is None and self.right is None

    @property
    def children(self) -> Tuple["Node", ...]:
        if self.is_leaf:
            return ()
        return (self.left, self.right)

    def _fields(self):
        return (self.index, self.data, self.height, self.name)

    def __eq__(self, other):
        if not isinstance(other, Node):
            return NotImplemented
        # Explicit stack: chain-shaped trees are deeper than the recursion limit
        stack = [(self, other)]
        while stack:
            a, b = stack.pop()
            if a is b:
                continue
            if a is None or b is None or a._fields() != b._fields():
                return False
            stack.append((a.left, b.left))
            stack.append((a.right, b.right))
        return True

    def __hash__(self):
        return hash(self._fields())

    def __repr__(self):
        if self.is_leaf:
            return f"Node(index={self.index}, name={self.name!r}, leaf)"
        return (f"Node(index={self.index}, left={self.left.index}, "
                f"right={self.right.index}, height={self.height:.4f})")


def leaf(index: int, values: Sequence[float], name: Optional[str] = None) -> Node:
    """Build a leaf node (height 0) from a raw feature vector."""
    return Node(index=index, data=tuple(float(v) for v in values), height=0.0, name=name)


def merge(index: int, left: Node, right: Node, height: float) -> Node:
    """
    Join two nodes under a new parent.

    The parent's data is the element-wise mean of its children's data, so it
    can stand in for both of them in later distance computations.
    """
    if len(left.data) != len(right.data):
        raise ValueError(f"Cannot merge nodes {left.index} and {right.index}: "
                         f"data lengths {len(left.data)} != {len(right.data)}")
    centroid = (np.asarray(left.data, dtype=float) + np.asarray(right.data, dtype=float)) / 2.0
    return Node(index=index, left=left, right=right,
                data=tuple(float(v) for v in centroid), height=float(height))
