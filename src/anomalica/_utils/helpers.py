"""
General-purpose utilities and temporary helpers.

Methods
-------
temp_log_level(logger, level)
    Temporarily sets the logging level of a logger within a context.
verbose_context(logger, verbose)
    Return ``temp_log_level(logger, INFO)`` if ``verbose`` else a null context.

Examples
--------
>>> import logging
>>> from anomalica._utils import temp_log_level
>>> logger = logging.getLogger("anomalica")
>>> with temp_log_level(logger, logging.INFO):
...     logger.info("shown")
"""

import logging
from contextlib import contextmanager, nullcontext


@contextmanager
def temp_log_level(logger, level):
    """
    Temporarily sets the logging level of a logger within a context.

    Parameters
    ----------
    logger : logging.Logger
        The logger whose level will be temporarily changed.
    level : int
        The logging level to set (e.g., logging.INFO, logging.DEBUG).

    Notes
    -----
    After exiting the context, the original log level is always restored,
    even if an exception occurs.
    """
    old_level = logger.level
    logger.setLevel(level)
    try:
        yield
    finally:
        logger.setLevel(old_level)


def verbose_context(logger, verbose: bool):
    """Context that enables info-level logging on ``logger`` when ``verbose``."""
    if verbose:
        return temp_log_level(logger, level=logging.INFO)
    return nullcontext()
