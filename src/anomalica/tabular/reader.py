"""
Chunked, schema-driven reader for delimited input.

The reader streams an input as a sequence of fixed-capacity batches. Every
batch holds, for each schema column, a boolean validity array and a value
array of the column's dtype. Null tokens clear the validity bit; they are
never stored as sentinel values.

Classes
-------
Batch
    Columnar slice of at most ``batch_size`` rows.
ChunkedReader
    Produces batches in input order, synchronously or through a bounded
    background queue.

Methods
-------
open_reader(source, schema, options=None, cancel_event=None)
    Open a :class:`ChunkedReader` on a path or text stream.

Notes
-----
Buffer ownership
    A batch returned by :meth:`ChunkedReader.next` is valid until the next
    call to ``next()`` or until the reader is closed; it is then *released*
    and any access raises ``RuntimeError``. In synchronous mode the reader
    refills the same buffers for every batch. Call :meth:`Batch.copy` to keep
    data beyond the next read.
Row errors
    A row with the wrong number of fields, or a non-null token that does not
    parse as its column kind, raises :class:`MalformedRowError`. The bad row
    is dropped and rows read before it are kept, so the caller may call
    ``next()`` again to skip it, or stop.
Cancellation
    When ``cancel_event`` is set, the next ``next()`` call raises
    :class:`CancellationError`. A reader given a ``cancel_event`` always
    reads through the background producer (queue depth ``prefetch``, at
    least 1), and the consumer waits on the queue in ``poll_interval``
    slices, so it never blocks on a stalled input. Only a reader without a
    ``cancel_event`` and with ``prefetch=0`` reads in the calling thread.

Examples
--------
>>> import io
>>> from anomalica.tabular import Schema, open_reader, END_OF_INPUT
>>> schema = Schema.from_mapping({"x": "float64"})
>>> with open_reader(io.StringIO("x\\n1.5\\nNULL\\n"), schema) as reader:
...     batch = reader.next()
...     batch.validity(0)
array([ True, False])
"""

import csv
import logging
import queue
import threading
from typing import Iterator, Optional

import numpy as np
import pandas as pd

from anomalica._utils import open_source, read_config
from anomalica.exceptions import (
    CancellationError,
    ColumnNotFoundError,
    MalformedRowError,
)
from anomalica.types import DataKind

from ._parsing import iter_rows, parse_token
from .options import ReaderOptions
from .schema import Schema

logger = logging.getLogger(__name__)

_errors = read_config("messages")["errors"]


class _EndOfInput:
    """Sentinel returned by :meth:`ChunkedReader.next` once input is exhausted."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return "END_OF_INPUT"


END_OF_INPUT = _EndOfInput()


class Batch:
    """
    Columnar slice of consecutive rows.

    Parameters
    ----------
    schema : Schema
        Schema of the columns, in order.
    values : list[np.ndarray]
        One value array per column; entries at null positions are
        unspecified.
    validity : list[np.ndarray]
        One boolean array per column; ``False`` marks a null.
    num_rows : int
        Number of rows, equal to the length of every array.
    offset : int, default=0
        Number of rows delivered by the reader before this batch, i.e. the
        position of the first row in the concatenation of all batches.

    Notes
    -----
    Batches produced by a reader are released when the reader advances.
    Batches created by :meth:`copy` own their arrays and are never released
    implicitly.
    """

    def __init__(self, schema, values, validity, num_rows, offset=0):
        self.schema = schema
        self.num_rows = num_rows
        self.offset = offset
        self._values = values
        self._validity = validity
        self._released = False

    @property
    def num_columns(self) -> int:
        return len(self.schema)

    @property
    def released(self) -> bool:
        return self._released

    def __len__(self):
        return self.num_rows

    def _check(self, i: int):
        if self._released:
            raise RuntimeError(_errors["batch_released"])
        if not 0 <= i < len(self._values):
            name = self.schema.field(i).name if 0 <= i < len(self.schema) else str(i)
            raise ColumnNotFoundError(
                name,
                message=_errors["column_out_of_range_f"].format(
                    name, i, len(self._values)
                ),
            )

    def values(self, i: int) -> np.ndarray:
        """Value array of column ``i``."""
        self._check(i)
        return self._values[i]

    def validity(self, i: int) -> np.ndarray:
        """Validity array of column ``i``."""
        self._check(i)
        return self._validity[i]

    def column(self, name: str) -> tuple[np.ndarray, np.ndarray]:
        """Return ``(values, validity)`` of the column called ``name``."""
        i = self.schema.index(name)
        return self.values(i), self.validity(i)

    def release(self) -> None:
        """Drop references to the buffers. Idempotent."""
        self._released = True
        self._values = []
        self._validity = []

    def copy(self) -> "Batch":
        """Return a batch owning copies of every buffer."""
        if self._released:
            raise RuntimeError(_errors["batch_released"])
        return Batch(
            self.schema,
            [v.copy() for v in self._values],
            [m.copy() for m in self._validity],
            self.num_rows,
            offset=self.offset,
        )

    def to_frame(self) -> pd.DataFrame:
        """
        Return the batch as a DataFrame with nullable columns.

        Integer and float columns use pandas masked arrays (``Int32``,
        ``Int64``, ``Float32``, ``Float64``); text columns are ``object``
        with ``None`` at null positions. The index continues across batches.
        """
        data = {}
        for i, f in enumerate(self.schema):
            values, validity = self.values(i), self.validity(i)
            if f.kind.is_integer:
                data[f.name] = pd.arrays.IntegerArray(values.copy(), ~validity)
            elif f.kind.is_numeric:
                data[f.name] = pd.arrays.FloatingArray(values.copy(), ~validity)
            else:
                data[f.name] = np.where(validity, values, None)
        index = pd.RangeIndex(self.offset, self.offset + self.num_rows)
        return pd.DataFrame(data, index=index)

    def __repr__(self):
        state = "released" if self._released else f"{self.num_rows} rows"
        return f"Batch({state}, columns={self.schema.names})"


class _BatchBuilder:
    """Preallocated per-column buffers filled row by row."""

    def __init__(self, schema: Schema, capacity: int):
        self.schema = schema
        self.capacity = capacity
        self.values = [
            np.full(capacity, None, dtype=object)
            if f.kind is DataKind.TEXT
            else np.zeros(capacity, dtype=f.kind.dtype)
            for f in schema
        ]
        self.validity = [np.zeros(capacity, dtype=bool) for _ in schema]
        self.size = 0
        self.offset = 0

    @property
    def full(self) -> bool:
        return self.size >= self.capacity

    def append(self, parsed: list, valid: list) -> None:
        pos = self.size
        for values, validity, value, ok in zip(
            self.values, self.validity, parsed, valid
        ):
            values[pos] = value
            validity[pos] = ok
        self.size += 1

    def build(self) -> Batch:
        n = self.size
        batch = Batch(
            self.schema,
            [v[:n] for v in self.values],
            [m[:n] for m in self.validity],
            n,
            offset=self.offset,
        )
        self.offset += n
        self.size = 0
        return batch


class ChunkedReader:
    """
    Stream batches of rows from delimited input.

    Parameters
    ----------
    source : str, os.PathLike or text stream
        Input to read. A path is opened (and later closed) by the reader;
        a stream is read from its current position and left open.
    schema : Schema
        Column names and kinds. Usually produced by :func:`infer_schema`.
    options : ReaderOptions, optional
        Parsing options; see :class:`ReaderOptions`.
    cancel_event : threading.Event, optional
        When set, the next call to :meth:`next` raises
        :class:`CancellationError`, even while input is stalled. Supplying
        one turns on read-ahead with a queue depth of at least 1.

    Attributes
    ----------
    rows_read : int
        Data rows consumed so far, malformed rows included.
    batches_read : int
        Batches handed to the consumer so far.
    """

    def __init__(
        self,
        source,
        schema: Schema,
        options: Optional[ReaderOptions] = None,
        cancel_event: Optional[threading.Event] = None,
    ):
        self.schema = schema
        self.options = options or ReaderOptions()
        self.rows_read = 0
        self.batches_read = 0
        self._cancel_event = cancel_event or threading.Event()
        self._nulls = self.options.null_tokens
        self._stream, self._owns_stream = open_source(source)
        self._rows = iter_rows(
            self._stream, delimiter=self.options.delimiter, comment=self.options.comment
        )
        self._header_pending = self.options.has_header
        self._exhausted = False
        self._closed = False
        self._current: Optional[Batch] = None
        self._builder = _BatchBuilder(schema, self.options.batch_size)

        self._queue: Optional[queue.Queue] = None
        self._stop = threading.Event()
        self._producer: Optional[threading.Thread] = None
        # a cancellable reader must not block the caller on a stalled read
        depth = self.options.prefetch or (1 if cancel_event is not None else 0)
        if depth:
            self._queue = queue.Queue(maxsize=depth)
            self._producer = threading.Thread(
                target=self._produce, name="anomalica-reader", daemon=True
            )
            self._producer.start()

    # -- public API -----------------------------------------------------

    def next(self):
        """
        Return the next batch, or ``END_OF_INPUT`` once input is exhausted.

        The batch returned by the previous call is released first.

        Raises
        ------
        MalformedRowError
            If a row cannot be parsed; reading may continue with another call.
        CancellationError
            If the cancellation event is set.
        RuntimeError
            If the reader is closed.
        """
        if self._closed:
            raise RuntimeError("Reader is closed.")
        self._release_current()
        if self._cancel_event.is_set():
            raise CancellationError()
        if self._queue is not None:
            item = self._take()
        else:
            item = self._read_batch(self._builder)
        if item is END_OF_INPUT:
            return END_OF_INPUT
        self._current = item
        self.batches_read += 1
        logger.debug(
            "Batch %d: %d rows at offset %d.",
            self.batches_read,
            item.num_rows,
            item.offset,
        )
        return item

    def __iter__(self) -> Iterator[Batch]:
        while True:
            batch = self.next()
            if batch is END_OF_INPUT:
                return
            yield batch

    def close(self) -> None:
        """Release the current batch, stop read-ahead and close owned input."""
        if self._closed:
            return
        self._closed = True
        self._release_current()
        if self._producer is not None:
            self._stop.set()
            self._drain()
            self._producer.join(timeout=self.options.poll_interval * 4)
        if self._owns_stream:
            self._stream.close()
        logger.info(
            "Reader closed after %d rows in %d batches.",
            self.rows_read,
            self.batches_read,
        )

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # -- parsing ----------------------------------------------------------

    def _release_current(self):
        if self._current is not None:
            self._current.release()
            self._current = None

    def _read_batch(self, builder: _BatchBuilder):
        """Fill ``builder`` up to capacity; return a batch or END_OF_INPUT."""
        while not builder.full and not self._exhausted:
            if self._cancel_event.is_set() or self._stop.is_set():
                raise CancellationError()
            try:
                line, fields = next(self._rows)
            except StopIteration:
                self._exhausted = True
                break
            except csv.Error as e:
                self._exhausted = True
                raise MalformedRowError(
                    self.rows_read + 1, message=f"Row {self.rows_read + 1}: {e}"
                ) from e
            if self._header_pending:
                self._header_pending = False
                continue
            self.rows_read += 1
            parsed, valid = self._parse_row(fields, line)
            builder.append(parsed, valid)
        if builder.size == 0:
            return END_OF_INPUT
        return builder.build()

    def _parse_row(self, fields: list, line: int):
        row = self.rows_read
        if len(fields) != len(self.schema):
            raise MalformedRowError(
                row,
                line=line,
                message=_errors["field_count_f"].format(
                    row, line, len(self.schema), len(fields)
                ),
            )
        parsed, valid = [], []
        for f, token in zip(self.schema, fields):
            if token in self._nulls:
                parsed.append(None if f.kind is DataKind.TEXT else 0)
                valid.append(False)
                continue
            try:
                parsed.append(parse_token(token, f.kind))
            except ValueError:
                raise MalformedRowError(
                    row,
                    column=f.name,
                    token=token,
                    line=line,
                    message=_errors["malformed_row_f"].format(
                        row, line, f.name, token, f.kind.value
                    ),
                ) from None
            valid.append(True)
        return parsed, valid

    # -- read-ahead -------------------------------------------------------

    def _produce(self):
        builder = _BatchBuilder(self.schema, self.options.batch_size)
        while not self._stop.is_set():
            try:
                item = self._read_batch(builder)
            except MalformedRowError as e:
                if not self._put(e):
                    return
                continue
            except CancellationError:
                return
            except Exception as e:  # handed to the consumer in order
                self._put(e)
                return
            if not self._put(item) or item is END_OF_INPUT:
                return
            offset = builder.offset
            builder = _BatchBuilder(self.schema, self.options.batch_size)
            builder.offset = offset

    def _put(self, item) -> bool:
        while not self._stop.is_set():
            if self._cancel_event.is_set():
                return False
            try:
                self._queue.put(item, timeout=self.options.poll_interval)
                return True
            except queue.Full:
                continue
        return False

    def _take(self):
        while True:
            if self._cancel_event.is_set():
                raise CancellationError()
            if not self._producer.is_alive() and self._queue.empty():
                return END_OF_INPUT
            try:
                item = self._queue.get(timeout=self.options.poll_interval)
            except queue.Empty:
                continue
            if isinstance(item, BaseException):
                raise item
            return item

    def _drain(self):
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                return


def open_reader(
    source,
    schema: Schema,
    options: Optional[ReaderOptions] = None,
    cancel_event: Optional[threading.Event] = None,
) -> ChunkedReader:
    """
    Open a :class:`ChunkedReader` on ``source``.

    Parameters
    ----------
    source : str, os.PathLike or text stream
        Input to read. Streams must be positioned at the start of the input
        (rewind them after :func:`infer_schema`).
    schema : Schema
        Column names and kinds.
    options : ReaderOptions, optional
        Parsing options.
    cancel_event : threading.Event, optional
        Cancellation signal observed by every ``next()`` call.

    Returns
    -------
    ChunkedReader
        Use as a context manager to guarantee the input is closed.
    """
    return ChunkedReader(source, schema, options=options, cancel_event=cancel_event)
