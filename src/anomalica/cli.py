"""
Command-line entry point: ``anomalica -f data.csv -c temp -t 2.5 [--json]``.

Exit codes
----------
0
    Analysis finished (whether or not anomalies were found).
1
    The analysis failed (empty input, unknown column, malformed row, ...).
2
    Usage or configuration error (missing file, bad threshold, unreadable
    input, invalid settings).
"""

import argparse
import logging
import sys
from typing import Optional

from .exceptions import AnomalicaError
from .formatting import format_json, format_text
from .pipeline import analyze_file
from .settings import load_settings
from .tabular import ReaderOptions

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ANALYSIS_ERROR = 1
EXIT_USAGE_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="anomalica", description="Detect anomalies in a CSV column."
    )
    parser.add_argument(
        "--config", help="JSON settings file (default: ~/.anomalica.json)"
    )
    parser.add_argument("-f", "--file", help="CSV file path (required)")
    parser.add_argument(
        "-c", "--column", help="Column to analyse (default: first numeric column)"
    )
    parser.add_argument(
        "-t", "--threshold", type=float, help="Z-score threshold (default: 3.0)"
    )
    parser.add_argument(
        "-j",
        "--json",
        action="store_true",
        default=None,
        help="Output results in JSON format",
    )
    parser.add_argument("--delimiter", help="Field delimiter (default: ',')")
    parser.add_argument("--batch-size", type=int, help="Rows per batch (default: 1024)")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log progress at info level"
    )
    return parser


def main(argv: Optional[list] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = load_settings(
            config_path=args.config,
            file=args.file,
            column=args.column,
            threshold=args.threshold,
            json_output=args.json,
            delimiter=args.delimiter,
            batch_size=args.batch_size,
        ).require_input()
        options = ReaderOptions(
            delimiter=settings.delimiter, batch_size=settings.batch_size
        )
    except (OSError, ValueError) as e:
        print(f"anomalica: {e}", file=sys.stderr)
        return EXIT_USAGE_ERROR

    try:
        report = analyze_file(
            settings.file,
            threshold=settings.threshold,
            column=settings.column,
            options=options,
            verbose=args.verbose,
        )
    except (AnomalicaError, ValueError) as e:
        logger.error("Analysis of '%s' failed: %s", settings.file, e)
        return EXIT_ANALYSIS_ERROR
    except OSError as e:
        print(f"anomalica: {e}", file=sys.stderr)
        return EXIT_USAGE_ERROR

    print(format_json(report) if settings.json_output else format_text(report))
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
