"""Tests for the in-memory dataset container and generator."""

from __future__ import annotations

import numpy as np
import pytest

from corrcluster.datasets import Dataset, make_word_counts


def test_from_array_prepends_identifier_column() -> None:
    """Names become the first column, matrix rows the remaining values."""

    dataset = Dataset.from_array(["a", "b"], np.array([[1, 2], [3, 4]]), columns=["x", "y"])
    assert dataset.column_names == ["name", "x", "y"]
    assert dataset.rows == [["a", 1.0, 2.0], ["b", 3.0, 4.0]]
    assert len(dataset) == 2


def test_from_array_rejects_mismatched_names() -> None:
    """Every matrix row needs exactly one name."""

    with pytest.raises(ValueError):
        Dataset.from_array(["a"], [[1, 2], [3, 4]])


def test_mapping_rows_are_copied() -> None:
    """Mutating the source rows must not leak into the dataset."""

    row = {"id": "r", "v": 1}
    dataset = Dataset(["id", "v"], [row])
    row["v"] = 99
    assert dataset.rows[0]["v"] == 1


def test_make_word_counts_is_reproducible() -> None:
    """The same seed yields the same records and topics."""

    first, topics_a = make_word_counts(n_records=9, n_topics=3, random_state=3)
    second, topics_b = make_word_counts(n_records=9, n_topics=3, random_state=3)
    assert first.rows == second.rows
    np.testing.assert_array_equal(topics_a, topics_b)
    assert len(first.column_names) == 41
    assert sorted(set(topics_a.tolist())) == [0, 1, 2]
