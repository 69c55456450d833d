"""
Exception hierarchy of anomalica.

Every error raised by the reading, extraction and detection pipeline derives
from :class:`AnomalicaError`. Each class additionally inherits from the
built-in exception a caller would naturally catch (``ValueError``,
``KeyError``, ``TypeError``), so generic handlers keep working.

Classes
-------
AnomalicaError
    Base class.
EmptyInputError
    No header, no data rows, or an empty column.
EmptyColumnError
    The reader yielded zero batches for the requested column.
ColumnNotFoundError
    The requested column is not part of the schema or of a batch.
TypeMismatchError
    The requested column is not numeric.
MalformedRowError
    A row has the wrong number of fields, or a field fails to parse
    against its column kind.
NoValidDataError
    A column has no non-null value at detection time.
CancellationError
    A read was aborted by the caller's cancellation signal.
"""

from ._utils.readers import read_config

_errors = read_config("messages")["errors"]


class AnomalicaError(Exception):
    """Base class of all anomalica errors."""


class EmptyInputError(AnomalicaError, ValueError):
    """Input has no header, no data rows, or the column is empty."""

    def __init__(self, message: str = None):
        super().__init__(message or _errors["empty_input"])


class EmptyColumnError(EmptyInputError):
    """The reader yielded no batches for ``column``."""

    def __init__(self, column: str):
        self.column = column
        super().__init__(_errors["empty_column_f"].format(column))


class ColumnNotFoundError(AnomalicaError, KeyError):
    """``column`` cannot be resolved against a schema or a batch."""

    def __init__(self, column: str, message: str = None, available=None):
        self.column = column
        self.available = list(available) if available is not None else []
        if message is None:
            message = _errors["column_not_found_f"].format(column, self.available)
        super().__init__(message)

    # KeyError.__str__ would repr() the message
    def __str__(self):
        return str(self.args[0])


class TypeMismatchError(AnomalicaError, TypeError):
    """``column`` has a non-numeric kind."""

    def __init__(self, column: str, kind, message: str = None):
        self.column = column
        self.kind = kind
        super().__init__(message or _errors["type_mismatch_f"].format(column, kind))


class MalformedRowError(AnomalicaError, ValueError):
    """
    A row failed to parse.

    Attributes
    ----------
    row : int
        1-based data row number (header and comment lines excluded).
    line : int or None
        1-based physical line number in the input where the row ends.
    column : str or None
        Column whose field failed to parse; ``None`` for field-count errors.
    token : str or None
        The offending (trimmed) token; ``None`` for field-count errors.
    """

    def __init__(self, row: int, column=None, token=None, line=None, message=None):
        self.row = row
        self.line = line
        self.column = column
        self.token = token
        super().__init__(message or f"Row {row}, column '{column}': bad token {token!r}")


class NoValidDataError(AnomalicaError, ValueError):
    """A column has zero non-null values."""

    def __init__(self, column: str = None):
        self.column = column
        if column is None:
            message = _errors["no_valid_data"]
        else:
            message = _errors["no_valid_data_f"].format(column)
        super().__init__(message)


class CancellationError(AnomalicaError):
    """A read was cancelled through the caller's cancellation event."""

    def __init__(self, message: str = None):
        super().__init__(message or _errors["cancelled"])
