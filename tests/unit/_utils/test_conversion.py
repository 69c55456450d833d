import pytest
import numpy as np
import pandas as pd

from anomalica._utils import convert_column, convert_series
from anomalica.types import ExtractedColumn
from .constants import COLUMN_SEQUENCES


@pytest.mark.parametrize("data", COLUMN_SEQUENCES)
def test_convert_column_different_sequences(data):
    values, validity, _ = convert_column(data)
    np.testing.assert_array_equal(validity, [True, False, True, True])
    np.testing.assert_array_equal(values, [1.0, 0.0, 3.0, 100.0])
    assert values.dtype == np.float64

def test_convert_column_takes_series_name():
    _, _, name = convert_column(pd.Series([1, 2], name="temp"))
    assert name == "temp"

def test_convert_column_extracted_column_nan_is_null():
    col = ExtractedColumn("x", np.array([1.0, np.nan, 3.0]),
                          np.array([True, True, False]))
    values, validity, name = convert_column(col)
    assert name == "x"
    np.testing.assert_array_equal(validity, [True, False, False])
    np.testing.assert_array_equal(values, [1.0, 0.0, 0.0])

def test_convert_column_does_not_mutate_input():
    col = ExtractedColumn("x", np.array([1.0, np.nan]), np.array([True, True]))
    convert_column(col)
    assert np.isnan(col.values[1])
    assert col.validity.all()

def test_convert_column_non_numeric():
    with pytest.raises(ValueError, match="must be numeric"):
        convert_column(["a", "b"])

def test_convert_series_multidimensional():
    with pytest.raises(ValueError, match="one-dimensional"):
        convert_series([[1, 2], [3, 4]])

def test_convert_series_generator():
    series = convert_series(x for x in [1, 2, 3])
    assert series.tolist() == [1, 2, 3]
