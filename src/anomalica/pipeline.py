"""
End-to-end analysis of one column of a delimited file.

Methods
-------
analyze_file(path, threshold=3.0, column=None, options=None, ...)
    Infer the schema, stream the file, extract a column and detect outliers.

Classes
-------
AnalysisReport
    Everything a result consumer needs: path, column name, schema, the
    extracted column and the detection result.

Examples
--------
>>> import anomalica
>>> report = anomalica.analyze_file("sensors.csv", threshold=2.5, column="temp")
>>> report.result.anomalies
[78.1, -12.4]

# verbose=True logs each stage at info level without changing the result
>>> report = anomalica.analyze_file("sensors.csv", verbose=True)
"""

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ._utils import (
    open_source,
    read_config,
    validate_input_path,
    validate_positive,
    verbose_context,
)
from .detection import detect_zscore
from .tabular import (
    ReaderOptions,
    Schema,
    extract_column,
    first_numeric_column,
    infer_schema,
    open_reader,
)
from .types import DetectionResult, ExtractedColumn

logger = logging.getLogger(__name__)

_errors = read_config("messages")["errors"]
_defaults = read_config("defaults")


@dataclass
class AnalysisReport:
    """
    Result of :func:`analyze_file`.

    Parameters
    ----------
    path : Path
        Analysed file.
    column : str
        Analysed column (the requested one, or the first numeric column).
    schema : Schema
        Inferred schema of the file.
    extracted : ExtractedColumn
        The column as read.
    result : DetectionResult
        Mask, anomalies and scores.
    """

    path: Path
    column: str
    schema: Schema
    extracted: ExtractedColumn
    result: DetectionResult

    def to_dict(self) -> dict:
        """JSON-friendly dict: the detection result plus the file path."""
        return {"file": str(self.path), **self.result.to_dict()}


def analyze_file(
    path,
    threshold: float = _defaults["detection"]["threshold"],
    column: Optional[str] = None,
    options: Optional[ReaderOptions] = None,
    cancel_event: Optional[threading.Event] = None,
    inclusive: bool = _defaults["detection"]["inclusive"],
    verbose: bool = False,
    sample_rows: int = _defaults["inference"]["sample_rows"],
) -> AnalysisReport:
    """
    Run schema inference, chunked reading, extraction and z-score detection.

    Parameters
    ----------
    path : str or Path
        Delimited input file.
    threshold : float, default=3.0
        Positive z-score threshold.
    column : str, optional
        Column to analyse. If None, the first numeric column is used.
    options : ReaderOptions, optional
        Parsing options shared by inference and reading.
    cancel_event : threading.Event, optional
        Cancellation signal passed to the reader.
    inclusive : bool, default=False
        Flag values with ``z >= threshold`` instead of ``z > threshold``.
    verbose : bool, default=False
        Enable info-level logging for the duration of the call.
    sample_rows : int, default=1024
        Rows sampled for schema inference.

    Returns
    -------
    AnalysisReport

    Raises
    ------
    ValueError
        If ``threshold`` is not positive.
    FileNotFoundError, PermissionError
        If ``path`` is not a readable file.
    AnomalicaError
        Any error of the reading, extraction or detection stages; the
        pipeline stops at the first one.
    """
    validate_positive(threshold, _errors["threshold_not_positive_f"].format(threshold))
    options = options or ReaderOptions()
    with verbose_context(logging.getLogger("anomalica"), verbose):
        path = validate_input_path(path)
        logger.info("Analysing '%s' (threshold=%g).", path, threshold)
        stream, _ = open_source(path)
        with stream:
            schema = infer_schema(stream, options=options, sample_rows=sample_rows)
            logger.info("Inferred schema: %s", schema.to_dict())
            # inference consumed the stream
            stream.seek(0)
            name = column if column is not None else first_numeric_column(schema)
            with open_reader(stream, schema, options, cancel_event) as reader:
                extracted = extract_column(reader, name)
        result = detect_zscore(extracted, threshold=threshold, inclusive=inclusive)
        logger.info(
            "Analysis of '%s' finished: %d anomalies in %d rows.",
            name,
            result.n_anomalies,
            result.count,
        )
    return AnalysisReport(
        path=path, column=name, schema=schema, extracted=extracted, result=result
    )
