"""
Errors raised while turning records into a correlation dendrogram.

Everything subclasses ValueError: bad input is a caller problem, not a
transient one, so nothing here is ever retried.
"""


class ClusteringError(ValueError):
    """Base class for every corrcluster error."""


class EmptyInput(ClusteringError):
    """The dataset (or vector list) has zero records."""


class InconsistentDimension(ClusteringError):
    """Feature vectors do not all have the same length."""


class MalformedRecord(ClusteringError):
    """A record is missing its identifier or a numeric column, or holds a non-numeric value."""


class UndefinedDistance(ClusteringError):
    """
    Correlation of a pair is undefined (zero variance in one or both vectors).

    Only raised when the builder runs with undefined='raise'; the default
    policy ranks such pairs as infinitely far apart instead.
    """

    def __init__(self, pair):
        self.pair = tuple(pair)
        super().__init__(f"Distance between nodes {self.pair[0]} and {self.pair[1]} is undefined "
                         f"(zero variance in at least one vector)")
