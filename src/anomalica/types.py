"""
Type utilities and result containers used throughout anomalica.

Classes
-------
NaturalNumber
    Type descriptor enabling `isinstance(x, NaturalNumber)` checks for
    positive integers (natural numbers). Used to validate batch and sample
    sizes.
DataKind
    Enumeration of the column kinds a schema can declare.
ExtractedColumn
    Contiguous null-aware float64 column assembled from a batch stream.
DetectionResult
    Output of the z-score anomaly detector: mask, anomalous values and
    per-row scores.

Notes
-----
- The containers in this module are passive: they hold data and offer
  conversions to pandas for presentation, but implement no analysis.
- Array attributes are plain NumPy arrays owned by the container.

Examples
--------
>>> from anomalica.types import NaturalNumber, DataKind
>>> isinstance(1024, NaturalNumber)
True
>>> isinstance(0, NaturalNumber)
False
>>> DataKind("int64").dtype
dtype('int64')
"""

import math
from dataclasses import dataclass
from enum import Enum
from numbers import Number
from typing import Any, Optional, Sequence

import numpy as np
import pandas as pd


class _NaturalNumberMeta(type):
    """Metaclass to enable isinstance checks for natural numbers."""

    def __instancecheck__(cls, instance):
        """Return True if instance is a positive integer."""
        return (
            isinstance(instance, Number)
            and not isinstance(instance, complex)
            and math.isfinite(instance)
            and instance > 0
            and instance == int(instance)
        )

    def __repr__(cls):
        return "NaturalNumber"

    def __init__(cls, *_):
        cls.__name__ = "NaturalNumber"


# pylint: disable=R0903
class NaturalNumber(metaclass=_NaturalNumberMeta):
    """
    Type descriptor for natural numbers (positive integers).

    `isinstance(value, NaturalNumber)` returns True if and only if `value`
    is numeric, strictly greater than zero and a whole number.

    Notes
    -----
    - Floats are accepted **only if they are exact integers**, e.g. `1.0`.
    - Non-numeric types (str, list, etc.) always return False.
    - This class is a **type descriptor**, not a numeric class.

    Examples
    --------
    >>> isinstance(1, NaturalNumber)
    True
    >>> isinstance(3.14, NaturalNumber)
    False
    >>> isinstance("5", NaturalNumber)
    False
    """


class DataKind(str, Enum):
    """
    Column kind of a schema field.

    Each kind maps to the NumPy dtype of the value buffer the reader allocates
    for the column. ``TEXT`` columns are stored in object arrays.
    """

    INT32 = "int32"
    INT64 = "int64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    TEXT = "text"

    @property
    def dtype(self) -> np.dtype:
        """NumPy dtype of the value buffer."""
        if self is DataKind.TEXT:
            return np.dtype(object)
        return np.dtype(self.value)

    @property
    def is_numeric(self) -> bool:
        return self is not DataKind.TEXT

    @property
    def is_integer(self) -> bool:
        return self in (DataKind.INT32, DataKind.INT64)

    def __str__(self):
        return self.value


@dataclass
class ExtractedColumn:
    """
    Contiguous null-aware float64 column.

    Parameters
    ----------
    name : str or None
        Name of the source column.
    values : np.ndarray
        float64 values; entries at null positions are unspecified (0.0 when
        produced by the extractor).
    validity : np.ndarray
        Boolean validity array of the same length; ``False`` marks a null.

    Examples
    --------
    >>> col = ExtractedColumn.from_sequence([1.0, None, 3.0], name="x")
    >>> len(col), col.null_count
    (3, 1)
    >>> col.valid_values()
    array([1., 3.])
    """

    name: Optional[str]
    values: np.ndarray
    validity: np.ndarray

    def __post_init__(self):
        self.values = np.asarray(self.values, dtype=np.float64)
        self.validity = np.asarray(self.validity, dtype=bool)
        if self.values.ndim != 1 or self.values.shape != self.validity.shape:
            raise ValueError(
                "values and validity must be one-dimensional arrays of equal "
                f"length, got shapes {self.values.shape} and {self.validity.shape}"
            )

    def __len__(self):
        return self.values.shape[0]

    @property
    def null_count(self) -> int:
        return int(len(self) - np.count_nonzero(self.validity))

    def valid_values(self) -> np.ndarray:
        """Return a copy of the non-null values in row order."""
        return self.values[self.validity]

    def to_series(self) -> pd.Series:
        """Return the column as a pandas ``Float64`` (nullable) Series."""
        return pd.Series(
            pd.arrays.FloatingArray(self.values.copy(), ~self.validity),
            name=self.name,
        )

    @classmethod
    def from_sequence(
        cls, data: Sequence[Any], name: Optional[str] = None
    ) -> "ExtractedColumn":
        """Build a column from a sequence where ``None``/NaN mark nulls."""
        validity = np.array([not pd.isna(v) for v in data], dtype=bool)
        values = np.array(
            [float(v) if ok else 0.0 for v, ok in zip(data, validity)],
            dtype=np.float64,
        )
        return cls(name=name, values=values, validity=validity)


@dataclass
class DetectionResult:
    """
    Standardized container for the output of z-score anomaly detection.

    Parameters
    ----------
    mask : np.ndarray
        Boolean array, one entry per row of the analysed column. Null rows are
        always ``False``.
    anomalies : list[float]
        Original (not standardized) values at masked positions, in row order.
    scores : np.ndarray
        float64 z-score per row, ``NaN`` at null positions.
    mean : float
        Population mean of the non-null values.
    stddev : float
        Population standard deviation of the non-null values.
    threshold : float
        Threshold the scores were compared against.
    inclusive : bool, default=False
        Whether the comparison was ``>=`` instead of the strict ``>``.
    name : str, optional
        Name of the analysed column.

    Examples
    --------
    >>> from anomalica import detect_zscore
    >>> res = detect_zscore([1, 2, 3, 100, 2], threshold=1.99)
    >>> res.indices
    [3]
    >>> res.anomalies
    [100.0]
    """

    mask: np.ndarray
    anomalies: list
    scores: np.ndarray
    mean: float
    stddev: float
    threshold: float
    inclusive: bool = False
    name: Optional[str] = None

    @property
    def count(self) -> int:
        """Number of rows in the analysed column."""
        return int(self.mask.shape[0])

    @property
    def valid_count(self) -> int:
        """Number of non-null rows in the analysed column."""
        return int(np.count_nonzero(~np.isnan(self.scores)))

    @property
    def n_anomalies(self) -> int:
        return int(np.count_nonzero(self.mask))

    @property
    def indices(self) -> list:
        """Row indices of anomalous values."""
        return np.flatnonzero(self.mask).tolist()

    def to_frame(self) -> pd.DataFrame:
        """
        Return anomalies as a DataFrame with ``row``, ``value`` and ``zscore``.

        The frame has one line per anomaly, in row order.
        """
        rows = np.flatnonzero(self.mask)
        return pd.DataFrame(
            {
                "row": rows.astype(np.int64),
                "value": np.asarray(self.anomalies, dtype=np.float64),
                "zscore": self.scores[rows],
            }
        )

    def to_dict(self) -> dict:
        """
        Return a JSON-friendly dict of the result.

        NaN statistics are converted to ``None``; NumPy scalars are cast to
        native Python numbers.
        """
        return {
            "column": self.name,
            "count": self.count,
            "valid_count": self.valid_count,
            "mean": _json_float(self.mean),
            "stddev": _json_float(self.stddev),
            "threshold": _json_float(self.threshold),
            "inclusive": bool(self.inclusive),
            "anomalies": [
                {
                    "row": int(row),
                    "value": _json_float(value),
                    "zscore": _json_float(self.scores[row]),
                }
                for row, value in zip(self.indices, self.anomalies)
            ],
        }


def _json_float(value) -> Optional[float]:
    value = float(value)
    if math.isnan(value):
        return None
    return value
