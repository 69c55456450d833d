"""
Plain-text and JSON rendering of analysis reports.

Methods
-------
format_text(report)
    Human-readable summary with one line per anomaly.
format_json(report, indent=2)
    Indented JSON document; NaN statistics become ``null``.
"""

import json

from .pipeline import AnalysisReport


def format_text(report: AnalysisReport) -> str:
    """
    Render ``report`` as plain text.

    Examples
    --------
    >>> print(format_text(report))
    File: sensors.csv
    Column: temp
    Total: 8 (2 null)
    Mean: 100, stddev: 57.735
    Anomalies (z > 1.5): 2
      row 4: 200 (z=1.732)
      row 5: 0 (z=1.732)
    """
    result = report.result
    nulls = result.count - result.valid_count
    comparison = ">=" if result.inclusive else ">"
    lines = [
        f"File: {report.path}",
        f"Column: {report.column}",
        f"Total: {result.count} ({nulls} null)",
        f"Mean: {result.mean:g}, stddev: {result.stddev:g}",
        f"Anomalies (z {comparison} {result.threshold:g}): {result.n_anomalies}",
    ]
    for row, value in zip(result.indices, result.anomalies):
        lines.append(f"  row {row}: {value:g} (z={result.scores[row]:.3f})")
    return "\n".join(lines)


def format_json(report: AnalysisReport, indent: int = 2) -> str:
    """Render ``report`` as a JSON document."""
    return json.dumps(report.to_dict(), indent=indent)
