"""
anomalica: chunked CSV reading and null-aware z-score anomaly detection.

Features include:
- Schema inference for delimited files (int64 / float64 / text columns)
- Streaming, fixed-size columnar batches with null tracking
- Extraction of a numeric column as a null-aware float64 sequence
- Population z-score outlier detection
- A small command line (``anomalica -f data.csv -c column -t 3``)
"""
import logging

from .exceptions import (
    AnomalicaError,
    CancellationError,
    ColumnNotFoundError,
    EmptyColumnError,
    EmptyInputError,
    MalformedRowError,
    NoValidDataError,
    TypeMismatchError,
)
from .types import DataKind, DetectionResult, ExtractedColumn
from .tabular import (
    END_OF_INPUT,
    Batch,
    ChunkedReader,
    ReaderOptions,
    Schema,
    extract_column,
    first_numeric_column,
    infer_schema,
    open_reader,
)
from .detection import detect_zscore
from .pipeline import AnalysisReport, analyze_file

__version__ = "0.1.0"

__all__ = [
    "AnomalicaError",
    "CancellationError",
    "ColumnNotFoundError",
    "EmptyColumnError",
    "EmptyInputError",
    "MalformedRowError",
    "NoValidDataError",
    "TypeMismatchError",
    "DataKind",
    "DetectionResult",
    "ExtractedColumn",
    "END_OF_INPUT",
    "Batch",
    "ChunkedReader",
    "ReaderOptions",
    "Schema",
    "extract_column",
    "first_numeric_column",
    "infer_schema",
    "open_reader",
    "detect_zscore",
    "AnalysisReport",
    "analyze_file",
]

logger = logging.getLogger("anomalica")
if not logger.hasHandlers():
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(handler)
logger.setLevel(logging.WARNING)
