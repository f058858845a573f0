"""Exceptions for pgiter.

Errors coming from the database driver are never translated into these
classes; they are raised (or recorded by cursors) exactly as the driver
produced them. The hierarchy below covers misuse of pgiter itself.
"""


class PgIterException(Exception):
    """Base class for other exceptions"""

    code: int = 0
    message: str = ''

    def __init__(self, message: str = '', *args: object, code: int = None) -> None:
        self.args = (
            message,
            code,
            *args
        )
        self.message = message
        self.code = code
        super(PgIterException, self).__init__(message)

    def __repr__(self):
        return f"{self.__class__.__name__}({self.args!r})"

    def __str__(self):
        return f"{self.__class__.__name__}: {self.message}"

    def get(self):
        return self.message


class ProviderError(PgIterException):
    """Database Provider Error"""


class DriverError(PgIterException):
    """Error raised by a Driver outside of the database itself"""


class DataError(PgIterException, ValueError):
    """An error caused by invalid query input."""


class ScanError(DataError):
    """Raise when a row cannot be copied into the given destinations"""


class UninitializedError(ProviderError):
    """Exception when provider cannot be initialized"""


class EmptyStatement(PgIterException):
    """Raise when no Statement was found"""


class CursorClosed(ProviderError):
    """Raise when a statement is issued on a finished transaction"""
