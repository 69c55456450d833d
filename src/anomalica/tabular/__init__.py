"""
Chunked reading of delimited tabular input.

This subpackage turns a delimited text input into typed, null-aware columnar
batches and extracts single numeric columns from them. Key utilities exported
at the top level:

- infer_schema: classify columns from a header and a sample of rows.
- ReaderOptions, open_reader, ChunkedReader, Batch, END_OF_INPUT: stream
  fixed-size batches with validity tracking.
- extract_column, first_numeric_column: concatenate one column as float64.
"""

from .options import DEFAULT_NULL_VALUES, ReaderOptions
from .schema import Field, Schema, infer_schema
from .reader import END_OF_INPUT, Batch, ChunkedReader, open_reader
from .extractor import extract_column, first_numeric_column

__all__ = [
    "DEFAULT_NULL_VALUES",
    "ReaderOptions",
    "Field",
    "Schema",
    "infer_schema",
    "END_OF_INPUT",
    "Batch",
    "ChunkedReader",
    "open_reader",
    "extract_column",
    "first_numeric_column",
]
