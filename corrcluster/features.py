"""
FEATURE EXTRACTION — records in, indexed vectors out

The first column names each record; every other column is a feature.
All validation happens here, once, before any distance is computed:
a bad record should fail the run immediately, not halfway through a
pool of background tasks.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from numbers import Real
from typing import Any, Dict, List, Tuple

from .exceptions import EmptyInput, InconsistentDimension, MalformedRecord


@dataclass(frozen=True)
class FeatureVector:
    """One record's identifier, its numeric values, and its leaf index."""

    identifier: str
    values: Tuple[float, ...]
    index: int

    def __len__(self):
        return len(self.values)


def split_record(record, key) -> Tuple[Any, Dict]:
    """
    Break one value off a record.

    Returns (value, remainder) where remainder is a copy of the record
    without the key. value is None if the key is absent.

    Example:
        split_record({'one': 1, 'two': 2}, 'one')  ->  (1, {'two': 2})
    """
    remainder = dict(record)
    value = remainder.pop(key, None)
    return value, remainder


def _columns(dataset) -> Tuple[str, List[str]]:
    column_names = list(dataset.column_names)
    if len(dataset.rows) == 0:
        raise EmptyInput("Dataset has no records")
    if not column_names:
        raise MalformedRecord("Dataset has no columns (need an identifier column)")
    if len(column_names) < 2:
        raise InconsistentDimension("Records carry no feature columns besides the identifier")
    return column_names[0], column_names[1:]


def _numeric(value, column, position) -> float:
    # bool is a Real subclass, but True/False are not counts
    if isinstance(value, bool) or not isinstance(value, Real):
        raise MalformedRecord(f"Record {position}: column {column!r} is not numeric ({value!r})")
    return float(value)


def _record_values(row, position, id_column, feature_columns) -> Tuple[Any, List]:
    """Pull (identifier, raw feature values) out of a mapping or sequence row."""
    if isinstance(row, Mapping):
        if id_column not in row:
            raise MalformedRecord(f"Record {position} is missing identifier column {id_column!r}")
        identifier, remainder = split_record(row, id_column)
        missing = [c for c in feature_columns if c not in remainder]
        if missing:
            raise MalformedRecord(f"Record {position} is missing feature columns {missing}")
        return identifier, [remainder[c] for c in feature_columns]

    row = list(row)
    expected = len(feature_columns) + 1
    if len(row) != expected:
        raise InconsistentDimension(f"Record {position} has {len(row)} values, expected {expected}")
    return row[0], row[1:]


def extract(dataset) -> List[FeatureVector]:
    """
    Turn a dataset into indexed feature vectors.

    Parameters:
    -----------
    dataset : object with `column_names` and `rows`
        First column is the record identifier, the rest must be numeric.
        Rows may be mappings (column -> value) or sequences in column order.

    Returns:
    --------
    vectors : list of FeatureVector
        In record order, indices 0..n-1.
    """
    id_column, feature_columns = _columns(dataset)

    vectors = []
    for position, row in enumerate(dataset.rows):
        identifier, raw = _record_values(row, position, id_column, feature_columns)
        values = tuple(_numeric(v, c, position) for v, c in zip(raw, feature_columns))
        vectors.append(FeatureVector(identifier=str(identifier), values=values, index=position))

    lengths = {len(v) for v in vectors}
    if len(lengths) > 1:
        raise InconsistentDimension(f"Feature vectors have differing lengths: {sorted(lengths)}")
    return vectors


def features_map(dataset) -> Dict[str, Dict[str, float]]:
    """
    Map each record identifier to its {column: value} features.

    Example:
        columns ['Name', 'length', 'width'], rows ['Tom', 80, 20], ['Jerry', 8, 2]
        ->  {'Tom': {'length': 80.0, 'width': 20.0},
             'Jerry': {'length': 8.0, 'width': 2.0}}
    """
    _, feature_columns = _columns(dataset)

    result = {}
    for vector in extract(dataset):
        if vector.identifier in result:
            raise MalformedRecord(f"Duplicate record identifier {vector.identifier!r}")
        result[vector.identifier] = dict(zip(feature_columns, vector.values))
    return result
