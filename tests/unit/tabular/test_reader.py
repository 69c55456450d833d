import io
import os
import threading

import pytest
import numpy as np
import pandas as pd

from anomalica import CancellationError, ColumnNotFoundError, MalformedRowError
from anomalica.tabular import (
    END_OF_INPUT, Batch, ChunkedReader, ReaderOptions, Schema, infer_schema, open_reader)
from .constants import SENSORS_CSV, MALFORMED_CSV, numbered_csv


def read_all(reader):
    """Copy every batch of ``reader`` and return the copies."""
    return [batch.copy() for batch in reader]

def concat(batches, i):
    values = np.concatenate([b.values(i) for b in batches])
    validity = np.concatenate([b.validity(i) for b in batches])
    return values, validity

X_SCHEMA = Schema.from_mapping({"x": "int64"})


# tests for ChunkedReader: batching

@pytest.mark.parametrize("n_rows, batch_size, sizes", [
    (10, 4, [4, 4, 2]), (8, 4, [4, 4]), (3, 1024, [3]), (1, 1, [1])])
def test_reader_batch_sizes(n_rows, batch_size, sizes):
    options = ReaderOptions(batch_size=batch_size)
    with open_reader(io.StringIO(numbered_csv(n_rows)), X_SCHEMA, options) as reader:
        batches = read_all(reader)
    assert [len(b) for b in batches] == sizes
    assert [b.offset for b in batches] == list(np.cumsum([0] + sizes[:-1]))
    values, validity = concat(batches, 0)
    np.testing.assert_array_equal(values, np.arange(n_rows))
    assert validity.all()

def test_reader_end_of_input_repeats():
    reader = open_reader(io.StringIO(numbered_csv(2)), X_SCHEMA)
    assert reader.next() is not END_OF_INPUT
    assert reader.next() is END_OF_INPUT
    assert reader.next() is END_OF_INPUT
    assert not END_OF_INPUT
    reader.close()

def test_reader_header_only():
    with open_reader(io.StringIO("x\n"), X_SCHEMA) as reader:
        assert reader.next() is END_OF_INPUT
        assert reader.rows_read == 0

def test_reader_counters():
    options = ReaderOptions(batch_size=3)
    with open_reader(io.StringIO(numbered_csv(7)), X_SCHEMA, options) as reader:
        read_all(reader)
        assert reader.rows_read == 7
        assert reader.batches_read == 3

# tests for ChunkedReader: nulls, comments and kinds

def test_reader_nulls_and_comments():
    schema = infer_schema(io.StringIO(SENSORS_CSV))
    with open_reader(io.StringIO(SENSORS_CSV), schema) as reader:
        batch = reader.next()
        assert batch.num_rows == 4
        temp, temp_valid = batch.column("temperature")
        assert temp_valid.tolist() == [True, True, False, True]
        np.testing.assert_array_equal(temp[temp_valid], [23.5, 24.1, 22.0])
        assert batch.validity(1).tolist() == [True, True, True, False]
        assert batch.values(1).dtype == np.int64
        assert batch.values(2)[batch.validity(2)].tolist() == ["north", "south", "east"]

def test_reader_custom_null_token_and_delimiter():
    options = ReaderOptions(delimiter=";", null_values=["-"])
    with open_reader(io.StringIO("x\n1\n-\n3\n"), X_SCHEMA, options) as reader:
        batch = reader.next()
        assert batch.validity(0).tolist() == [True, False, True]

def test_reader_without_header():
    options = ReaderOptions(has_header=False)
    schema = Schema.from_mapping({"f0": "float64"})
    with open_reader(io.StringIO("1.5\n2.5\n"), schema, options) as reader:
        assert reader.next().values(0).tolist() == [1.5, 2.5]

def test_reader_narrow_kinds():
    schema = Schema.from_mapping({"a": "int32", "b": "float32"})
    with open_reader(io.StringIO("a,b\n1,2.5\n"), schema) as reader:
        batch = reader.next()
        assert batch.values(0).dtype == np.int32
        assert batch.values(1).dtype == np.float32

def test_reader_int32_overflow_is_malformed():
    schema = Schema.from_mapping({"a": "int32"})
    with open_reader(io.StringIO("a\n3000000000\n"), schema) as reader:
        with pytest.raises(MalformedRowError) as e:
            reader.next()
    assert e.value.token == "3000000000"

def test_reader_from_path(tmp_path):
    path = tmp_path / "x.csv"
    path.write_text(numbered_csv(3))
    reader = open_reader(path, X_SCHEMA)
    assert reader.next().values(0).tolist() == [0, 1, 2]
    reader.close()
    assert reader._stream.closed

def test_reader_leaves_foreign_stream_open():
    stream = io.StringIO(numbered_csv(3))
    with open_reader(stream, X_SCHEMA) as reader:
        reader.next()
    assert not stream.closed

# tests for ChunkedReader: malformed rows

def test_reader_malformed_row_details():
    schema = Schema.from_mapping({"temperature": "float64", "humidity": "float64"})
    with open_reader(io.StringIO(MALFORMED_CSV), schema) as reader:
        with pytest.raises(MalformedRowError) as e:
            reader.next()
        assert e.value.row == 2
        assert e.value.line == 3
        assert e.value.column == "temperature"
        assert e.value.token == "invalid_number"
        assert isinstance(e.value, ValueError)
        # the bad row is dropped, the rows around it are kept
        batch = reader.next()
        assert batch.validity(0).tolist() == [True, False]
        assert batch.values(1).tolist() == [45.2, 47.1]
        assert reader.next() is END_OF_INPUT

def test_reader_field_count_mismatch():
    schema = Schema.from_mapping({"a": "int64", "b": "int64"})
    with open_reader(io.StringIO("a,b\n1,2\n3\n4,5,6\n"), schema) as reader:
        with pytest.raises(MalformedRowError, match="expected 2 fields, got 1") as e:
            reader.next()
        assert e.value.column is None
        with pytest.raises(MalformedRowError, match="got 3"):
            reader.next()
        assert reader.next().values(0).tolist() == [1]

# tests for Batch

def test_batch_released_on_advance():
    options = ReaderOptions(batch_size=2)
    with open_reader(io.StringIO(numbered_csv(4)), X_SCHEMA, options) as reader:
        first = reader.next()
        kept = first.copy()
        reader.next()
        assert first.released
        with pytest.raises(RuntimeError, match="released"):
            first.values(0)
        with pytest.raises(RuntimeError):
            first.copy()
        assert kept.values(0).tolist() == [0, 1]
        assert not kept.released

def test_batch_released_on_close():
    reader = open_reader(io.StringIO(numbered_csv(2)), X_SCHEMA)
    batch = reader.next()
    reader.close()
    with pytest.raises(RuntimeError):
        batch.validity(0)

def test_batch_column_out_of_range():
    with open_reader(io.StringIO(numbered_csv(2)), X_SCHEMA) as reader:
        batch = reader.next()
        with pytest.raises(ColumnNotFoundError, match="out of range"):
            batch.values(3)
        with pytest.raises(ColumnNotFoundError):
            batch.column("missing")

def test_batch_release_idempotent():
    batch = Batch(X_SCHEMA, [np.array([1])], [np.array([True])], 1)
    batch.release()
    batch.release()
    assert batch.released
    assert "released" in repr(batch)

def test_batch_to_frame():
    schema = Schema.from_mapping({"a": "int64", "b": "float64", "c": "text"})
    options = ReaderOptions(batch_size=2)
    text = "a,b,c\n1,1.5,x\n2,2.5,y\nNULL,NULL,NULL\n"
    with open_reader(io.StringIO(text), schema, options) as reader:
        reader.next()
        frame = reader.next().to_frame()
    assert list(frame.index) == [2]
    assert frame["a"].dtype == pd.Int64Dtype()
    assert frame["b"].dtype == pd.Float64Dtype()
    assert frame.isna().all(axis=None)

# tests for ChunkedReader: lifecycle

def test_reader_close_idempotent():
    reader = open_reader(io.StringIO(numbered_csv(2)), X_SCHEMA)
    reader.close()
    reader.close()
    assert reader.closed
    with pytest.raises(RuntimeError, match="closed"):
        reader.next()

def test_reader_cancellation():
    event = threading.Event()
    options = ReaderOptions(batch_size=2)
    with open_reader(io.StringIO(numbered_csv(6)), X_SCHEMA, options, event) as reader:
        reader.next()
        event.set()
        with pytest.raises(CancellationError):
            reader.next()

def test_reader_cancellation_while_input_stalls():
    read_fd, write_fd = os.pipe()
    os.write(write_fd, b"x\n1\n")
    stream = os.fdopen(read_fd, "r")
    event = threading.Event()
    options = ReaderOptions(poll_interval=0.01)
    timer = threading.Timer(0.1, event.set)
    timer.start()
    reader = open_reader(stream, X_SCHEMA, options, event)
    try:
        # the write end stays open, so a blocking read would never return
        with pytest.raises(CancellationError):
            reader.next()
    finally:
        timer.cancel()
        reader.close()
        os.close(write_fd)
        reader._producer.join(timeout=1)
        stream.close()
    assert not reader._producer.is_alive()

def test_reader_with_cancel_event_reads_ahead():
    event = threading.Event()
    with open_reader(io.StringIO(numbered_csv(5)), X_SCHEMA, cancel_event=event) as reader:
        assert reader._producer is not None
        values, validity = concat(read_all(reader), 0)
        assert values.tolist() == list(range(5))
        assert validity.all()
    with open_reader(io.StringIO(numbered_csv(5)), X_SCHEMA) as reader:
        assert reader._producer is None

# tests for ChunkedReader: prefetch

@pytest.mark.parametrize("prefetch", [1, 2])
def test_prefetch_matches_sync(prefetch):
    text = numbered_csv(25) + "NULL\n"
    sync_opts = ReaderOptions(batch_size=4)
    async_opts = ReaderOptions(batch_size=4, prefetch=prefetch, poll_interval=0.01)
    with open_reader(io.StringIO(text), X_SCHEMA, sync_opts) as reader:
        expected = read_all(reader)
    with open_reader(io.StringIO(text), X_SCHEMA, async_opts) as reader:
        actual = read_all(reader)
        assert reader.next() is END_OF_INPUT
    assert [b.offset for b in actual] == [b.offset for b in expected]
    for a, e in zip(actual, expected):
        np.testing.assert_array_equal(a.values(0), e.values(0))
        np.testing.assert_array_equal(a.validity(0), e.validity(0))

def test_prefetch_malformed_row_in_order():
    schema = Schema.from_mapping({"temperature": "float64", "humidity": "float64"})
    options = ReaderOptions(prefetch=1, poll_interval=0.01)
    with open_reader(io.StringIO(MALFORMED_CSV), schema, options) as reader:
        with pytest.raises(MalformedRowError) as e:
            reader.next()
        assert e.value.row == 2
        assert reader.next().num_rows == 2
        assert reader.next() is END_OF_INPUT

def test_prefetch_cancellation():
    event = threading.Event()
    event.set()
    options = ReaderOptions(prefetch=2, poll_interval=0.01)
    reader = open_reader(io.StringIO(numbered_csv(100)), X_SCHEMA, options, event)
    with pytest.raises(CancellationError):
        reader.next()
    reader.close()
    assert reader.closed

def test_prefetch_close_before_drain():
    options = ReaderOptions(batch_size=1, prefetch=1, poll_interval=0.01)
    reader = open_reader(io.StringIO(numbered_csv(50)), X_SCHEMA, options)
    reader.next()
    reader.close()
    reader._producer.join(timeout=1)
    assert not reader._producer.is_alive()

class _FailingStream:
    def __iter__(self):
        yield "x\n"
        yield "1\n"
        raise OSError("disk went away")

def test_prefetch_fatal_error_is_delivered():
    options = ReaderOptions(batch_size=1, prefetch=1, poll_interval=0.01)
    with ChunkedReader(_FailingStream(), X_SCHEMA, options) as reader:
        assert reader.next().values(0).tolist() == [1]
        with pytest.raises(OSError, match="disk went away"):
            reader.next()
        assert reader.next() is END_OF_INPUT
