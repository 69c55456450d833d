"""
Null-aware z-score anomaly detection.

Classes
-------
ZScoreDetector
    Implements population z-score detection over one null-aware column.

Methods
-------
detect_zscore(column, threshold=3.0, inclusive=False)
    Flag values whose absolute z-score exceeds ``threshold``.

Notes
-----
Statistics are population statistics over the non-null values only::

    mean   = sum(v) / N
    var    = sum((v - mean) ** 2) / N
    stddev = sqrt(var)
    z      = |v - mean| / stddev

Null rows are never flagged and carry a ``NaN`` score. A column whose
non-null values are all equal has ``stddev == 0`` (tested on the values
themselves, not on the rounded variance): nothing is flagged, whatever the
threshold, and a ``UserWarning`` is emitted.

Examples
--------
>>> from anomalica.detection import detect_zscore
>>> res = detect_zscore([100, 100, None, 100, 200, 0, None, 100], threshold=1.5)
>>> res.mask.tolist()
[False, False, False, False, True, True, False, False]
"""

import logging
import math
import warnings
from numbers import Real
from typing import Any, Sequence

import numpy as np

from anomalica._utils import convert_column, read_config
from anomalica.exceptions import EmptyInputError, NoValidDataError
from anomalica.types import DetectionResult, ExtractedColumn

logger = logging.getLogger(__name__)


class ZScoreDetector:
    """
    Population z-score outlier detector.

    Methods
    -------
    detect_zscore(column, threshold=3.0, inclusive=False)
        Compute per-row z-scores and the anomaly mask of a column.
    describe(values)
        Two-pass population mean and standard deviation of a float array.

    Examples
    --------
    >>> from anomalica.detection import ZScoreDetector
    >>> ZScoreDetector.describe(np.array([1.0, 2.0, 3.0]))
    (2.0, 0.816496580927726)
    """

    _warns = read_config("messages")["warns"]
    _errors = read_config("messages")["errors"]
    _defaults = read_config("defaults")["detection"]

    @staticmethod
    def describe(values: np.ndarray) -> tuple[float, float]:
        """
        Return the population mean and standard deviation of ``values``.

        Parameters
        ----------
        values : np.ndarray
            Non-empty float64 array of non-null values.

        Returns
        -------
        tuple[float, float]
            ``(mean, stddev)``, computed in two passes with divisor ``N``.
        """
        n = values.shape[0]
        mean = float(np.sum(values) / n)
        variance = float(np.sum((values - mean) ** 2) / n)
        return mean, math.sqrt(variance)

    @classmethod
    def detect_zscore(
        cls,
        column: ExtractedColumn | Sequence[Any],
        threshold: float = _defaults["threshold"],
        inclusive: bool = _defaults["inclusive"],
    ) -> DetectionResult:
        """
        Detect outliers in a null-aware numeric column using z-scores.

        Parameters
        ----------
        column : ExtractedColumn, pd.Series, np.ndarray or Sequence
            Column to analyse. ``None``, ``NaN`` and ``pd.NA`` are nulls.
        threshold : float, default=3.0
            Values with ``z > threshold`` are anomalies. Callers should pass
            a positive value; ``threshold <= 0`` flags every non-null value
            of a non-constant column and emits a ``UserWarning``.
        inclusive : bool, default=False
            If True, compare with ``z >= threshold`` instead.

        Returns
        -------
        DetectionResult
            Mask (one entry per row), anomalous original values in row order,
            per-row scores (``NaN`` at nulls) and the population statistics.

        Raises
        ------
        EmptyInputError
            If the column has no rows.
        NoValidDataError
            If the column has no non-null value.
        ValueError
            If ``threshold`` is not a real number or the column is not
            numeric.

        Warns
        -----
        UserWarning
            If the column has zero variance, or ``threshold <= 0``.

        Examples
        --------
        >>> from anomalica.detection import ZScoreDetector
        >>> res = ZScoreDetector.detect_zscore([1, 2, 3, 100, 2], threshold=1.99)
        >>> res.indices, res.anomalies
        ([3], [100.0])
        """
        if isinstance(threshold, bool) or not isinstance(threshold, Real):
            raise ValueError(f"threshold must be a real number, got {threshold!r}.")
        if math.isnan(threshold):
            raise ValueError("threshold must not be NaN.")
        values, validity, name = convert_column(column)
        if values.shape[0] == 0:
            raise EmptyInputError(cls._errors["empty_column"])
        valid = values[validity]
        if valid.shape[0] == 0:
            raise NoValidDataError(name)

        scores = np.full(values.shape[0], np.nan, dtype=np.float64)

        # identical values: rounding in the mean must not yield a tiny stddev
        if np.all(valid == valid[0]):
            mean, stddev = float(valid[0]), 0.0
        else:
            mean, stddev = cls.describe(valid)

        if stddev == 0:
            warnings.warn(
                cls._warns["zero_variance_f"].format(name or "data"), UserWarning
            )
            scores[validity] = 0.0
            mask = np.zeros(values.shape[0], dtype=bool)
        elif threshold <= 0:
            warnings.warn(
                cls._warns["threshold_not_positive_f"].format(threshold), UserWarning
            )
            scores[validity] = np.abs(valid - mean) / stddev
            mask = validity.copy()
        else:
            scores[validity] = np.abs(valid - mean) / stddev
            with np.errstate(invalid="ignore"):
                exceeds = scores >= threshold if inclusive else scores > threshold
            mask = exceeds & validity

        anomalies = values[mask].tolist()
        logger.info(
            "Column '%s': %d of %d non-null values flagged "
            "(mean=%g, stddev=%g, threshold=%g).",
            name,
            len(anomalies),
            valid.shape[0],
            mean,
            stddev,
            threshold,
        )
        return DetectionResult(
            mask=mask,
            anomalies=anomalies,
            scores=scores,
            mean=mean,
            stddev=stddev,
            threshold=float(threshold),
            inclusive=bool(inclusive),
            name=name,
        )


detect_zscore = ZScoreDetector.detect_zscore
