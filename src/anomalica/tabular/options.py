"""
Options shared by the schema inferencer and the chunked reader.

Classes
-------
ReaderOptions
    Frozen set of parsing options: delimiter, comment prefix, header flag,
    batch size, null tokens and background prefetch depth.

Notes
-----
Defaults are read from ``config/defaults.json`` (section ``reader``). The
default null tokens ``NULL``, ``null``, ``""``, ``N/A`` and ``n/a`` are always
recognised; ``null_values`` can only add to them.

Examples
--------
>>> from anomalica.tabular import ReaderOptions
>>> opts = ReaderOptions(delimiter=";", null_values=("-",))
>>> sorted(opts.null_tokens)
['', '-', 'N/A', 'NULL', 'n/a', 'null']
"""

from dataclasses import dataclass, field
from numbers import Real
from typing import Iterable

from anomalica._utils import (
    read_config,
    validate_natural_number,
    validate_single_char,
    validate_string_flag,
)

_defaults = read_config("defaults")["reader"]
_errors = read_config("messages")["errors"]

DEFAULT_NULL_VALUES = frozenset(_defaults["null_values"])


@dataclass(frozen=True)
class ReaderOptions:
    """
    Parsing options for delimited input.

    Parameters
    ----------
    delimiter : str, default=","
        Single-character field separator.
    comment : str, default="#"
        Lines starting with this character are skipped entirely. An empty
        string disables comment handling.
    has_header : bool, default=True
        Whether the first non-comment row holds column names. When True the
        reader skips it; the inferencer takes names from it.
    batch_size : int, default=1024
        Maximum number of rows per batch.
    null_values : Iterable[str], default=()
        Additional null tokens, unioned with the default ones.
    prefetch : {0, 1, 2}, default=0
        Depth of the background read-ahead queue. ``0`` reads synchronously.
    poll_interval : float, default=0.05
        Seconds between cancellation checks while waiting for a prefetched
        batch.

    Raises
    ------
    ValueError
        If any option is invalid.
    """

    delimiter: str = _defaults["delimiter"]
    comment: str = _defaults["comment"]
    has_header: bool = _defaults["has_header"]
    batch_size: int = _defaults["batch_size"]
    null_values: Iterable[str] = field(default_factory=tuple)
    prefetch: int = _defaults["prefetch"]
    poll_interval: float = _defaults["poll_interval"]

    def __post_init__(self):
        validate_single_char(
            self.delimiter, _errors["invalid_delimiter_f"].format(self.delimiter)
        )
        validate_single_char(
            self.comment,
            _errors["invalid_comment_f"].format(self.comment),
            allow_empty=True,
        )
        validate_natural_number(
            self.batch_size,
            _errors["not_natural_number_f"].format("batch_size", self.batch_size),
        )
        validate_string_flag(
            self.prefetch, {0, 1, 2}, _errors["invalid_prefetch_f"].format(self.prefetch)
        )
        if not isinstance(self.poll_interval, Real) or not self.poll_interval > 0:
            raise ValueError(
                f"poll_interval must be a positive number, got {self.poll_interval}."
            )
        if isinstance(self.null_values, str):
            raise ValueError("null_values must be an iterable of tokens, not a string.")
        object.__setattr__(self, "batch_size", int(self.batch_size))
        object.__setattr__(self, "null_values", tuple(self.null_values))

    @property
    def null_tokens(self) -> frozenset:
        """Every token read as null: the defaults plus ``null_values``."""
        return DEFAULT_NULL_VALUES | frozenset(self.null_values)

    @classmethod
    def from_dict(cls, params: dict) -> "ReaderOptions":
        """Build options from a mapping, ignoring ``None`` values."""
        return cls(**{k: v for k, v in params.items() if v is not None})
