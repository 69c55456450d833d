"""
Schema model and schema inference for delimited input.

Classes
-------
Field
    A (name, kind) pair.
Schema
    Immutable, ordered collection of uniquely named fields.

Methods
-------
infer_schema(source, options=None, sample_rows=1024)
    Read the header and a bounded sample of rows and classify every column
    as ``int64``, ``float64`` or ``text``.

Notes
-----
Inference is a pure read-ahead: when ``source`` is an open stream it is
consumed, and the caller must rewind it (``stream.seek(0)``) before opening a
reader on it. When ``source`` is a path the file is opened and closed here.

Examples
--------
>>> import io
>>> from anomalica.tabular import infer_schema
>>> schema = infer_schema(io.StringIO("id,temp,site\\n1,20.5,a\\n2,NULL,b\\n"))
>>> schema.to_dict()
{'id': 'int64', 'temp': 'float64', 'site': 'text'}
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, Mapping, Optional

from anomalica._utils import (
    open_source,
    read_config,
    validate_header_names,
    validate_natural_number,
    validate_string_flag,
)
from anomalica.exceptions import ColumnNotFoundError, EmptyInputError
from anomalica.types import DataKind

from ._parsing import is_float_token, is_integer_token, iter_rows
from .options import ReaderOptions

logger = logging.getLogger(__name__)

_errors = read_config("messages")["errors"]
_SAMPLE_ROWS = read_config("defaults")["inference"]["sample_rows"]


@dataclass(frozen=True)
class Field:
    """A named, typed column of a schema."""

    name: str
    kind: DataKind

    def __post_init__(self):
        if not isinstance(self.kind, DataKind):
            validate_string_flag(
                self.kind,
                {k.value for k in DataKind},
                _errors["unsupported_method_f"].format(
                    self.kind, [k.value for k in DataKind]
                ),
            )
            object.__setattr__(self, "kind", DataKind(self.kind))


class Schema:
    """
    Ordered sequence of uniquely named fields.

    Parameters
    ----------
    fields : Iterable[Field]
        Fields in column order.

    Raises
    ------
    ValueError
        If a field name is empty or occurs more than once.

    Examples
    --------
    >>> schema = Schema.from_mapping({"a": "int64", "b": "float32"})
    >>> schema.index("b")
    1
    >>> schema.field(1).kind
    <DataKind.FLOAT32: 'float32'>
    """

    __slots__ = ("_fields", "_index")

    def __init__(self, fields: Iterable[Field]):
        fields = tuple(fields)
        validate_header_names([f.name for f in fields])
        self._fields = fields
        self._index = {f.name: i for i, f in enumerate(fields)}

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, "DataKind | str"]) -> "Schema":
        """Build a schema from an ordered ``{name: kind}`` mapping."""
        return cls(Field(name, kind) for name, kind in mapping.items())

    @property
    def names(self) -> list:
        return [f.name for f in self._fields]

    @property
    def fields(self) -> tuple:
        return self._fields

    def field(self, i: int) -> Field:
        return self._fields[i]

    def index(self, name: str) -> int:
        """
        Return the position of column ``name``.

        Raises
        ------
        ColumnNotFoundError
            If the schema has no such column.
        """
        try:
            return self._index[name]
        except KeyError:
            raise ColumnNotFoundError(name, available=self.names) from None

    def to_dict(self) -> dict:
        """Return ``{name: kind value}`` in column order."""
        return {f.name: f.kind.value for f in self._fields}

    def __len__(self):
        return len(self._fields)

    def __iter__(self) -> Iterator[Field]:
        return iter(self._fields)

    def __contains__(self, name):
        return name in self._index

    def __eq__(self, other):
        if not isinstance(other, Schema):
            return NotImplemented
        return self._fields == other._fields

    def __hash__(self):
        return hash(self._fields)

    def __repr__(self):
        inner = ", ".join(f"{f.name}: {f.kind.value}" for f in self._fields)
        return f"Schema({inner})"


def infer_schema(
    source,
    options: Optional[ReaderOptions] = None,
    sample_rows: int = _SAMPLE_ROWS,
) -> Schema:
    """
    Infer a schema from the header and a sample of rows.

    Parameters
    ----------
    source : str, os.PathLike or text stream
        Delimited input. Streams are consumed and not rewound.
    options : ReaderOptions, optional
        Delimiter, comment prefix, header flag and null tokens to use.
    sample_rows : int, default=1024
        Maximum number of data rows inspected.

    Returns
    -------
    Schema
        One field per column. Kinds are chosen per column over the sampled
        non-null tokens:
        - ``int64`` if every token is an integer within the int64 range,
        - ``float64`` if every token is numeric and at least one is not an
          int64 integer,
        - ``text`` if any token is not numeric.
        Columns whose sampled tokens are all null are ``float64``.

    Raises
    ------
    EmptyInputError
        If the input has no header or no data row to sample.
    ValueError
        If header names are empty or duplicated, or ``sample_rows`` is not a
        natural number.
    """
    options = options or ReaderOptions()
    validate_natural_number(
        sample_rows, _errors["not_natural_number_f"].format("sample_rows", sample_rows)
    )
    stream, owned = open_source(source)
    try:
        header, sample = _read_sample(stream, options, int(sample_rows))
    finally:
        if owned:
            stream.close()

    nulls = options.null_tokens
    fields = []
    for i, name in enumerate(header):
        tokens = [row[i] for row in sample if i < len(row) and row[i] not in nulls]
        fields.append(Field(name, _classify(tokens)))
    schema = Schema(fields)
    logger.debug("Inferred %r from %d sampled rows.", schema, len(sample))
    return schema


def _read_sample(stream, options: ReaderOptions, sample_rows: int):
    rows = iter_rows(stream, delimiter=options.delimiter, comment=options.comment)
    first = next(rows, None)
    if first is None:
        raise EmptyInputError()
    _, first_fields = first
    if options.has_header:
        header = first_fields
        validate_header_names(header)
        sample = []
    else:
        header = [f"f{i}" for i in range(len(first_fields))]
        sample = [first_fields]
    for _, fields in rows:
        if len(sample) >= sample_rows:
            break
        sample.append(fields)
    if not sample:
        raise EmptyInputError()
    return header, sample


def _classify(tokens: list) -> DataKind:
    if not tokens:
        return DataKind.FLOAT64
    if all(is_integer_token(t) for t in tokens):
        return DataKind.INT64
    if all(is_float_token(t) for t in tokens):
        return DataKind.FLOAT64
    return DataKind.TEXT
