"""
Internal utilities for the anomalica package.

This module provides low-level utilities for configuration access, argument
validation, column conversion and input handling. These are internal APIs and
may change without notice.

Methods
-------
convert_series(data)
    Convert an input data to a pandas Series.
convert_column(data, name)
    Convert a column-like input to float64 values and a validity array.
validate_string_flag(arg, supported_values, err_msg)
    Validate a string flag against a set of supported values.
validate_natural_number(arg, err_msg)
    Validate that an argument is a natural number.
validate_positive(arg, err_msg)
    Validate that an argument is a real number greater than zero.
validate_single_char(arg, err_msg, allow_empty)
    Validate a one-character separator or prefix.
validate_header_names(names)
    Validate that header names are non-empty and unique.
temp_log_level(logger, level)
    Temporarily sets the logging level of a logger within a context.
verbose_context(logger, verbose)
    Info-level logging context enabled by a ``verbose`` flag.
read_config(name)
    Read and cache JSON configuration files.
read_json(path)
    Read a JSON object from an arbitrary path.
validate_input_path(path, readable_check)
    Validate that a path points to an existing, readable file.
open_source(source, encoding)
    Resolve a path or stream into a text stream.
enable_io_logs(logger)
    Decorator for I/O functions to log and re-raise OS errors.
"""

from .readers import read_config, read_json
from .validation import (
    validate_header_names,
    validate_natural_number,
    validate_positive,
    validate_single_char,
    validate_string_flag,
)
from .conversion import convert_column, convert_series
from .helpers import temp_log_level, verbose_context
from .io import enable_io_logs, open_source, validate_input_path

__all__ = [
    "convert_series",
    "convert_column",
    "validate_string_flag",
    "validate_natural_number",
    "validate_positive",
    "validate_single_char",
    "validate_header_names",
    "temp_log_level",
    "verbose_context",
    "read_config",
    "read_json",
    "validate_input_path",
    "open_source",
    "enable_io_logs",
]
