import pytest
import numpy as np

from anomalica._utils import (
    validate_string_flag, validate_natural_number, validate_positive,
    validate_single_char, validate_header_names)


# tests for validate_string_flag

def test_validate_string_flag_positive_case():
    validate_string_flag(arg="A", supported_values=["A", "B", "C"],
                         err_msg="my_error_message")

def test_validate_string_flag_negative_case():
    with pytest.raises(ValueError, match="my_error_message"):
        validate_string_flag(arg="D", supported_values=["A", "B", "C"],
                             err_msg="my_error_message")

# tests for validate_natural_number

@pytest.mark.parametrize("value", [1, 1024, 5.0, np.int64(3)])
def test_validate_natural_number_positive_case(value):
    validate_natural_number(value, err_msg="my_error_message")

@pytest.mark.parametrize("value", [0, -1, 2.5, "3", True, None, float("inf")])
def test_validate_natural_number_negative_case(value):
    with pytest.raises(ValueError, match="my_error_message"):
        validate_natural_number(value, err_msg="my_error_message")

# tests for validate_positive

@pytest.mark.parametrize("value", [0.001, 1, 3.0, float("inf")])
def test_validate_positive_positive_case(value):
    validate_positive(value, err_msg="my_error_message")

@pytest.mark.parametrize("value", [0, -1.5, float("nan"), "2", False])
def test_validate_positive_negative_case(value):
    with pytest.raises(ValueError, match="my_error_message"):
        validate_positive(value, err_msg="my_error_message")

# tests for validate_single_char

def test_validate_single_char():
    validate_single_char(";", err_msg="my_error_message")
    validate_single_char("", err_msg="my_error_message", allow_empty=True)
    with pytest.raises(ValueError, match="my_error_message"):
        validate_single_char("", err_msg="my_error_message")
    with pytest.raises(ValueError, match="my_error_message"):
        validate_single_char(";;", err_msg="my_error_message")

# tests for validate_header_names

def test_validate_header_names_positive_case():
    validate_header_names(["a", "b", "c"])

def test_validate_header_names_duplicates():
    with pytest.raises(ValueError, match="duplicate column names"):
        validate_header_names(["a", "b", "a"])

def test_validate_header_names_empty_name():
    with pytest.raises(ValueError, match="empty column name at position 1"):
        validate_header_names(["a", "", "c"])
