"""
Argument validation utilities.

This module centralises the checks performed on user-supplied arguments:
string flags, natural numbers, positive reals, single-character separators and
header names. All validators raise ``ValueError`` with the error message given
by the caller, so message wording stays in ``config/messages.json``.

Methods
-------
validate_string_flag(arg, supported_values, err_msg)
    Validate that a flag is among a set of supported values.
validate_natural_number(arg, err_msg)
    Validate that ``arg`` is a positive whole number.
validate_positive(arg, err_msg)
    Validate that ``arg`` is a real number strictly greater than zero.
validate_single_char(arg, err_msg, allow_empty=False)
    Validate a one-character separator or prefix.
validate_header_names(names)
    Validate that header names are non-empty and unique.

Examples
--------
>>> from anomalica._utils import validate_string_flag
>>> validate_string_flag("int64", {"int64", "float64"}, err_msg="bad kind")
>>> validate_string_flag("bool", {"int64", "float64"}, err_msg="bad kind")
Traceback (most recent call last):
    ...
ValueError: bad kind
"""

from collections import Counter
from numbers import Real
from typing import Iterable, Sequence

from anomalica.types import NaturalNumber

from .readers import read_config


def validate_string_flag(
    arg: str, supported_values: Iterable[str], err_msg: str
) -> None:
    """
    Validate a string flag against a set of supported values.

    Parameters
    ----------
    arg : str
        The string flag to validate.
    supported_values : Iterable[str]
        An iterable containing all supported flag values.
    err_msg : str
        The error message used in the raised ``ValueError`` if validation fails.

    Raises
    ------
    ValueError
        If `arg` is not found in `supported_values`.
    """
    if arg not in supported_values:
        raise ValueError(err_msg)


def validate_natural_number(arg, err_msg: str) -> None:
    """
    Validate that ``arg`` is a natural number (see :class:`NaturalNumber`).

    Booleans are rejected even though ``True == 1``.

    Raises
    ------
    ValueError
        If ``arg`` is not a positive whole number.
    """
    if isinstance(arg, bool) or not isinstance(arg, NaturalNumber):
        raise ValueError(err_msg)


def validate_positive(arg, err_msg: str) -> None:
    """
    Validate that ``arg`` is a finite-or-infinite real number greater than zero.

    Raises
    ------
    ValueError
        If ``arg`` is not a real number or is ``<= 0`` (NaN included).
    """
    if isinstance(arg, bool) or not isinstance(arg, Real) or not arg > 0:
        raise ValueError(err_msg)


def validate_single_char(arg, err_msg: str, allow_empty: bool = False) -> None:
    """Validate that ``arg`` is a one-character string (or empty if allowed)."""
    if not isinstance(arg, str):
        raise ValueError(err_msg)
    if len(arg) == 1 or (allow_empty and arg == ""):
        return
    raise ValueError(err_msg)


def validate_header_names(names: Sequence[str]) -> None:
    """
    Validate that header names are non-empty and unique.

    Parameters
    ----------
    names : Sequence[str]
        Column names, already trimmed.

    Raises
    ------
    ValueError
        If any name is empty or if any name occurs more than once.

    Examples
    --------
    >>> validate_header_names(["a", "b"])
    >>> validate_header_names(["a", "a"])
    Traceback (most recent call last):
        ...
    ValueError: Header contains duplicate column names: ['a'].
    """
    errors = read_config("messages")["errors"]
    for position, name in enumerate(names):
        if name == "":
            raise ValueError(errors["empty_header_name_f"].format(position))
    duplicates = [name for name, count in Counter(names).items() if count > 1]
    if duplicates:
        raise ValueError(errors["duplicate_header_names_f"].format(duplicates))
