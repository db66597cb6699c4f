"""Shared fixtures for corrcluster tests."""

from __future__ import annotations

import pytest

from corrcluster.datasets import Dataset, make_word_counts


@pytest.fixture
def abc_vectors() -> list[list[float]]:
    """A and B share a trend, C runs against it."""

    return [[1.0, 2.0, 3.0], [2.0, 4.0, 6.0], [3.0, 1.0, 0.0]]


@pytest.fixture
def pets_dataset() -> Dataset:
    """Small mapping-row dataset with an identifier column."""

    return Dataset(
        ["Name", "length", "width"],
        [
            {"Name": "Tom", "length": 80, "width": 20},
            {"Name": "Jerry", "length": 8, "width": 2},
            {"Name": "Spike", "length": 120, "width": 45},
        ],
    )


@pytest.fixture
def word_counts():
    """Synthetic blog word counts with three topics."""

    return make_word_counts(n_records=18, n_topics=3, n_words=50, noise=0.2, random_state=7)
