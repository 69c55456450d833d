"""
Conversion utilities for null-aware numeric columns.

Methods
-------
convert_series(data)
    Convert an input data to a pandas Series.
convert_column(data, name=None)
    Convert a column-like input to a null-aware pair of float64 values and a
    boolean validity array.

Notes
-----
- Conversion functions return copies; inputs are never modified in place.
- ``None``, ``NaN`` and ``pd.NA`` are all treated as nulls.

Examples
--------
>>> from anomalica._utils import convert_column
>>> values, validity, name = convert_column([1, None, 3])
>>> validity
array([ True, False,  True])
"""

from typing import Any, Optional

import numpy as np
import pandas as pd

from anomalica.types import ExtractedColumn

from .readers import read_config

ERR_MSG_MULTIDIMENSIONAL_DATA = read_config("messages")["errors"][
    "multidimensional_data_f"
]


def convert_series(data: Any) -> pd.Series:
    """
    Convert an input data to a pandas Series.

    Parameters
    ----------
    data : Any
        A pandas Series (copied), a one-dimensional NumPy array, a sequence
        or any other iterable (generators included).

    Returns
    -------
    pd.Series

    Raises
    ------
    ValueError
        If the input has more than one dimension.
    """
    if isinstance(data, pd.Series):
        return data.copy()
    if isinstance(data, pd.DataFrame):
        if data.shape[1] != 1:
            raise ValueError(ERR_MSG_MULTIDIMENSIONAL_DATA.format("data"))
        return data.iloc[:, 0].copy()
    if not isinstance(data, (np.ndarray, list, tuple)):
        data = list(data)
    if np.ndim(np.asarray(data, dtype=object)) > 1:
        raise ValueError(ERR_MSG_MULTIDIMENSIONAL_DATA.format("data"))
    return pd.Series(data)


def convert_column(
    data: Any, name: Optional[str] = None
) -> tuple[np.ndarray, np.ndarray, Optional[str]]:
    """
    Convert a column-like input to float64 values and a validity array.

    Parameters
    ----------
    data : ExtractedColumn, pd.Series, np.ndarray or Sequence
        Column data. For an :class:`ExtractedColumn` the validity array is
        taken as is, and NaN values are additionally treated as nulls.
        For other inputs nulls are detected with ``pandas.isna``.
    name : str, optional
        Column name. Defaults to the name carried by the input, if any.

    Returns
    -------
    tuple[np.ndarray, np.ndarray, str or None]
        ``(values, validity, name)``; ``values`` is float64 with 0.0 at null
        positions and ``validity`` is a boolean array of the same length.

    Raises
    ------
    ValueError
        If the input is multidimensional or contains non-numeric values.
    """
    if isinstance(data, ExtractedColumn):
        values = np.array(data.values, dtype=np.float64, copy=True)
        validity = np.array(data.validity, dtype=bool, copy=True)
        validity &= ~np.isnan(values)
        values[~validity] = 0.0
        return values, validity, name if name is not None else data.name

    series = convert_series(data)
    if name is None and series.name is not None:
        name = str(series.name)
    validity = ~series.isna().to_numpy(dtype=bool)
    try:
        values = pd.to_numeric(series, errors="raise").to_numpy(
            dtype=np.float64, na_value=0.0
        )
    except (TypeError, ValueError) as e:
        raise ValueError(f"Column '{name or 'data'}' must be numeric: {e}") from e
    values = np.array(values, dtype=np.float64, copy=True)
    values[~validity] = 0.0
    return values, validity, name
