"""
Row splitting and token parsing shared by the inferencer and the reader.

A delimited input is turned into rows of trimmed string fields by
:func:`iter_rows`; comment lines and empty lines are skipped and the physical
line number of every row is reported. Tokens are classified and parsed with
the helpers below, which accept exactly the numeric spellings a CSV producer
emits (no underscores, no surrounding text).
"""

import csv
import re
from typing import Iterable, Iterator

import numpy as np

from anomalica.types import DataKind

_INT_RE = re.compile(r"[+-]?\d+\Z")
_FLOAT_RE = re.compile(
    r"[+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan)\Z",
    re.IGNORECASE,
)

_INT_BOUNDS = {
    DataKind.INT32: np.iinfo(np.int32),
    DataKind.INT64: np.iinfo(np.int64),
}


class _CommentFilter:
    """Iterate over lines, dropping comment lines and counting every line."""

    def __init__(self, lines: Iterable[str], comment: str):
        self._lines = lines
        self._comment = comment
        self.line_number = 0

    def __iter__(self):
        for line in self._lines:
            self.line_number += 1
            if self._comment and line.startswith(self._comment):
                continue
            yield line


def iter_rows(
    stream: Iterable[str], delimiter: str = ",", comment: str = "#"
) -> Iterator[tuple[int, list[str]]]:
    """
    Yield ``(line_number, fields)`` for every data-bearing row of ``stream``.

    Fields are split with the :mod:`csv` module (quoted fields may contain the
    delimiter) and trimmed. Comment lines and empty lines are skipped.
    """
    lines = _CommentFilter(stream, comment)
    for fields in csv.reader(lines, delimiter=delimiter):
        if not fields:
            continue
        yield lines.line_number, [f.strip() for f in fields]


def is_integer_token(token: str, kind: DataKind = DataKind.INT64) -> bool:
    """Return True if ``token`` is an integer inside the range of ``kind``."""
    if not _INT_RE.match(token):
        return False
    bounds = _INT_BOUNDS[kind]
    return bounds.min <= int(token) <= bounds.max


def is_float_token(token: str) -> bool:
    return _FLOAT_RE.match(token) is not None


def parse_token(token: str, kind: DataKind):
    """
    Parse a non-null ``token`` according to ``kind``.

    Raises
    ------
    ValueError
        If the token is not a valid spelling of ``kind`` (integers out of
        range included).
    """
    if kind.is_integer:
        if not is_integer_token(token, kind):
            raise ValueError(token)
        return int(token)
    if kind.is_numeric:
        if not is_float_token(token):
            raise ValueError(token)
        return float(token)
    return token
