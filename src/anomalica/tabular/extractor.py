"""
Extraction of a single numeric column from a batch stream.

Methods
-------
extract_column(reader, column_name)
    Drain a reader and concatenate one column into an
    :class:`~anomalica.types.ExtractedColumn`.
first_numeric_column(schema)
    Name of the first numeric column of a schema.

Notes
-----
Batches are appended to a growing output buffer as they arrive (capacity
doubles when full), so memory is proportional to the number of rows and no
batch is retained after the reader advances. ``int32``, ``int64`` and
``float32`` columns are widened to ``float64`` during the append.
"""

import logging

import numpy as np

from anomalica._utils import read_config
from anomalica.exceptions import EmptyColumnError, TypeMismatchError
from anomalica.types import ExtractedColumn

from .reader import ChunkedReader
from .schema import Schema

logger = logging.getLogger(__name__)

_errors = read_config("messages")["errors"]


class _ColumnBuffer:
    """Amortised-growth float64 buffer with a parallel validity array."""

    def __init__(self, capacity: int = 1024):
        self.values = np.empty(capacity, dtype=np.float64)
        self.validity = np.empty(capacity, dtype=bool)
        self.size = 0

    def append(self, values: np.ndarray, validity: np.ndarray) -> None:
        n = values.shape[0]
        needed = self.size + n
        if needed > self.values.shape[0]:
            capacity = max(needed, 2 * self.values.shape[0])
            self.values = _grow(self.values, capacity, self.size)
            self.validity = _grow(self.validity, capacity, self.size)
        end = self.size + n
        self.values[self.size:end] = values.astype(np.float64, copy=False)
        self.validity[self.size:end] = validity
        self.values[self.size:end][~validity] = 0.0
        self.size = end

    def finish(self, name) -> ExtractedColumn:
        return ExtractedColumn(
            name=name,
            values=self.values[: self.size].copy(),
            validity=self.validity[: self.size].copy(),
        )


def _grow(array: np.ndarray, capacity: int, size: int) -> np.ndarray:
    grown = np.empty(capacity, dtype=array.dtype)
    grown[:size] = array[:size]
    return grown


def extract_column(reader: ChunkedReader, column_name: str) -> ExtractedColumn:
    """
    Concatenate one column of every batch of ``reader``.

    Parameters
    ----------
    reader : ChunkedReader
        Open reader; it is drained but not closed.
    column_name : str
        Column to extract.

    Returns
    -------
    ExtractedColumn
        float64 values and validity, in input order.

    Raises
    ------
    ColumnNotFoundError
        If ``column_name`` is not in the reader's schema, or a batch has fewer
        columns than the schema.
    TypeMismatchError
        If the column is a text column (raised when the first batch arrives).
    EmptyColumnError
        If the reader yields no batch.
    MalformedRowError, CancellationError
        Propagated from the reader; no partial column is returned.

    Examples
    --------
    >>> import io
    >>> from anomalica.tabular import infer_schema, open_reader, extract_column
    >>> text = "a,b\\n1,x\\nNULL,y\\n3,z\\n"
    >>> schema = infer_schema(io.StringIO(text))
    >>> with open_reader(io.StringIO(text), schema) as reader:
    ...     col = extract_column(reader, "a")
    >>> col.values, col.validity
    (array([1., 0., 3.]), array([ True, False,  True]))
    """
    index = reader.schema.index(column_name)
    kind = reader.schema.field(index).kind
    buffer = _ColumnBuffer(reader.options.batch_size)
    batches = 0
    for batch in reader:
        if batches == 0 and not kind.is_numeric:
            raise TypeMismatchError(column_name, kind.value)
        buffer.append(batch.values(index), batch.validity(index))
        batches += 1
    if batches == 0:
        raise EmptyColumnError(column_name)
    column = buffer.finish(column_name)
    logger.info(
        "Extracted column '%s': %d rows (%d null) from %d batches.",
        column_name,
        len(column),
        column.null_count,
        batches,
    )
    return column


def first_numeric_column(schema: Schema) -> str:
    """
    Return the name of the first numeric column of ``schema``.

    Raises
    ------
    TypeMismatchError
        If the schema has no numeric column.
    """
    for f in schema:
        if f.kind.is_numeric:
            return f.name
    raise TypeMismatchError(None, None, message=_errors["no_numeric_columns"])
