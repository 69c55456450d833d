"""
Utilities for input path validation and text-source handling.

Functions
---------
validate_input_path(path, readable_check=True)
    Validate that a path points to an existing, readable file.
open_source(source, encoding="utf-8")
    Return a text stream for a path or pass an already open stream through,
    reporting whether the caller owns (and must close) it.
enable_io_logs(io_logger)
    Decorator for I/O functions to log PermissionError, FileNotFoundError
    and other unexpected exceptions before re-raising them.

Notes
-----
- ``validate_input_path`` does not open the file; it only checks the state of
  the filesystem before the reader does.
- ``enable_io_logs`` never swallows exceptions.

Examples
--------
>>> from anomalica._utils import validate_input_path
>>> validate_input_path("data/sensors.csv")
"""

import functools
import io
import logging
import os
from pathlib import Path
from typing import Callable, TextIO

from .readers import read_config

logger = logging.getLogger(__name__)


def validate_input_path(path: str | Path, readable_check: bool = True) -> Path:
    """
    Validate a filesystem path before reading from it.

    Parameters
    ----------
    path : str or Path
        Path of the delimited input file.
    readable_check : bool, default=True
        If True, raises a `PermissionError` when the file is not readable.

    Returns
    -------
    Path
        The validated path.

    Raises
    ------
    FileNotFoundError
        If the path does not exist or is not a regular file.
    PermissionError
        If `readable_check` is True and the file cannot be read.
    """
    errors = read_config("messages")["errors"]
    path_pl = Path(path)
    if not path_pl.is_file():
        raise FileNotFoundError(errors["input_not_file_f"].format(path))
    if readable_check and not os.access(path_pl, os.R_OK):
        raise PermissionError(errors["input_not_readable_f"].format(path))
    return path_pl


def open_source(source, encoding: str = "utf-8") -> tuple[TextIO, bool]:
    """
    Resolve ``source`` into a text stream.

    Parameters
    ----------
    source : str, os.PathLike or text stream
        A path to open, or an object with a ``readline``/``__iter__`` text
        interface (``io.StringIO``, an open file, ...).
    encoding : str, default="utf-8"
        Encoding used when ``source`` is a path.

    Returns
    -------
    tuple[TextIO, bool]
        The stream and ``True`` if this function opened it (the caller owns
        it and must close it), ``False`` otherwise.
    """
    if isinstance(source, (str, os.PathLike)):
        # newline="" lets the csv module handle embedded line breaks
        return _open_text(source, encoding), True
    if isinstance(source, (io.BufferedIOBase, io.RawIOBase)):
        return io.TextIOWrapper(source, encoding=encoding, newline=""), False
    return source, False


def enable_io_logs(io_logger: logging.Logger = None) -> Callable:
    """
    Decorator factory for logging I/O errors with a specified logger.

    Parameters
    ----------
    io_logger : logging.Logger, optional
        Logger instance to emit error messages through. If not provided,
        defaults to the logger of this module (`anomalica._utils.io`).

    Returns
    -------
    Callable
        A decorator to wrap I/O functions.

    Notes
    -----
    - Catches and logs ``PermissionError``, ``FileNotFoundError``,
      ``IsADirectoryError`` and any other ``OSError``.
    - After logging, all exceptions are re-raised unchanged. Non-I/O
      exceptions pass through without being logged.

    Examples
    --------
    >>> import logging
    >>> logger = logging.getLogger("anomalica.pipeline")
    >>> @enable_io_logs(logger)
    ... def _read_bytes(path):
    ...     with open(path, "rb") as f:
    ...         return f.read()
    """
    if io_logger is None:
        io_logger = logger

    def decorator(fn):
        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            try:
                return fn(*args, **kwargs)
            except PermissionError as e:
                io_logger.error("Permission denied in %s: %s", fn.__name__, e)
                raise
            except FileNotFoundError as e:
                io_logger.error("File not found in %s: %s", fn.__name__, e)
                raise
            except OSError as e:
                io_logger.error("Unexpected IO error in %s: %s", fn.__name__, e)
                raise

        return wrapper

    return decorator


@enable_io_logs()
def _open_text(path, encoding):
    return open(path, "r", encoding=encoding, newline="")
