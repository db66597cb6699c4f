"""
corrcluster: hierarchical clustering of records by feature correlation.

    from corrcluster import hier_cluster
    root = hier_cluster(dataset)
"""

from .builder import CorrelationClustering, build_tree, hier_cluster
from .datasets import Dataset, make_word_counts
from .distance import DistanceIndex, PairKey, correlation, correlation_distance
from .exceptions import (ClusteringError, EmptyInput, InconsistentDimension,
                         MalformedRecord, UndefinedDistance)
from .features import FeatureVector, extract, features_map
from .node import Node
from .tree import cut, iter_nodes, leaves, linkage_matrix, merges

__version__ = '0.1.0'

__all__ = [
    'ClusteringError',
    'CorrelationClustering',
    'Dataset',
    'DistanceIndex',
    'EmptyInput',
    'FeatureVector',
    'InconsistentDimension',
    'MalformedRecord',
    'Node',
    'PairKey',
    'UndefinedDistance',
    'build_tree',
    'correlation',
    'correlation_distance',
    'cut',
    'extract',
    'features_map',
    'hier_cluster',
    'iter_nodes',
    'leaves',
    'linkage_matrix',
    'make_word_counts',
    'merges',
]
