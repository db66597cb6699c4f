"""
IN-MEMORY DATASETS — What the clusterer consumes

A dataset is just two things:
    column_names : ordered column labels, the first one names the records
    rows         : ordered records, mappings column -> value or sequences

Reading files into this shape is somebody else's job. This module only
provides the container and a synthetic generator so the clusterer can be
exercised without any storage.

USAGE:
    from corrcluster.datasets import make_word_counts

    dataset, topics = make_word_counts(n_records=20, n_topics=3)
    root = hier_cluster(dataset)
"""

from collections.abc import Mapping
from typing import List, Sequence, Tuple

import numpy as np


class Dataset:
    """
    Named columns plus ordered row records.

    Rows may be mappings (column -> value) or sequences in column order;
    they are copied as given.
    """

    def __init__(self, column_names: Sequence[str], rows: Sequence):
        self.column_names = list(column_names)
        self.rows = [dict(row) if isinstance(row, Mapping) else list(row) for row in rows]

    @classmethod
    def from_array(cls, names: Sequence[str], X, columns: Sequence[str] = None,
                   id_column: str = 'name') -> 'Dataset':
        """
        Build a dataset from record names and a (n_records x n_features) matrix.

        Parameters:
        -----------
        names : sequence of str
            One identifier per row of X
        X : array-like
            Feature matrix
        columns : sequence of str or None
            Feature column names (defaults to f0, f1, ...)
        id_column : str
            Name of the identifier column
        """
        X = np.asarray(X, dtype=float)
        if X.ndim != 2:
            raise ValueError(f"Expected a 2D feature matrix, got shape {X.shape}")
        if len(names) != X.shape[0]:
            raise ValueError(f"Got {len(names)} names for {X.shape[0]} rows")
        if columns is None:
            columns = [f'f{j}' for j in range(X.shape[1])]
        column_names = [id_column] + list(columns)
        rows = [[name] + [float(v) for v in X[i]] for i, name in enumerate(names)]
        return cls(column_names, rows)

    def __len__(self):
        return len(self.rows)

    def __repr__(self):
        return f"Dataset(columns={len(self.column_names)}, rows={len(self.rows)})"


def make_word_counts(n_records=30, n_topics=3, n_words=40, noise=0.3,
                     random_state=42) -> Tuple[Dataset, np.ndarray]:
    """
    WHAT: Word-count profiles of blogs that each lean toward one topic.
    TESTS: Correlation clustering — blogs on the same topic share a count
           TREND across words even when their overall volume differs a lot.

    Each topic has its own word-frequency profile. A record is its topic's
    profile scaled by a random volume (prolific vs quiet writers), with
    multiplicative noise. Euclidean distance is dominated by volume;
    1 - correlation ignores it.

    Returns the dataset and the true topic of every record (for evaluation
    only, the clusterer never sees it).
    """
    np.random.seed(random_state)

    profiles = np.random.gamma(shape=1.0, scale=1.0, size=(n_topics, n_words))
    topics = np.arange(n_records) % n_topics

    X = []
    for t in topics:
        volume = np.random.rand() * 20 + 5
        jitter = 1 + np.random.randn(n_words) * noise
        X.append(np.maximum(profiles[t] * volume * jitter, 0).round())
    X = np.array(X)

    idx = np.random.permutation(n_records)
    names: List[str] = [f'blog-{i:03d}' for i in range(n_records)]
    columns = [f'word{j}' for j in range(n_words)]
    return Dataset.from_array(names, X[idx], columns=columns), topics[idx]
