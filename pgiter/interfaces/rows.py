from typing import Any, Optional
from collections.abc import Sequence
from abc import ABC, abstractmethod


def _check_methods(C: type, *methods: str) -> bool:
    mro = C.__mro__
    for method in methods:
        for B in mro:
            if method in B.__dict__:
                if B.__dict__[method] is None:
                    return NotImplemented
                break
        else:
            return NotImplemented
    return True


class RowsBackend(ABC):
    """
    Interface for a Row Cursor.

    One shape shared by the batch returned from a ``FETCH`` and by the
    server-side Cursor itself, so a Cursor can be used wherever a driver
    batch is expected. Any class providing these methods is considered a
    ``RowsBackend``, without inheriting from it.
    """

    __capabilities__ = (
        "next",
        "scan",
        "err",
        "close",
        "field_descriptions",
        "command_tag",
        "raw_values",
        "values",
        "record",
        "conn",
    )

    @classmethod
    def __subclasshook__(cls, C):
        if cls is RowsBackend:
            return _check_methods(C, *cls.__capabilities__)
        return NotImplemented

    @abstractmethod
    async def next(self) -> bool:
        """next.
        Advance to the next row, False when there is nothing left or
        an error was recorded (see ``err``).
        """

    @abstractmethod
    def scan(self, *dest: Any) -> None:
        """scan.
        Copy the current row into destinations.
        """

    @abstractmethod
    def err(self) -> Optional[BaseException]:
        """err.
        First error recorded while iterating, if any.
        """

    @abstractmethod
    async def close(self) -> None:
        """close.
        Release the rows, safe to call more than once.
        """

    @abstractmethod
    def field_descriptions(self) -> Sequence[Any]:
        ...

    @abstractmethod
    def command_tag(self) -> str:
        ...

    @abstractmethod
    def raw_values(self) -> Optional[tuple]:
        ...

    @abstractmethod
    def values(self) -> Optional[list]:
        ...

    @abstractmethod
    def record(self) -> Any:
        """record.
        Current row as the native row object of the driver.
        """

    @abstractmethod
    def conn(self) -> Any:
        """conn.
        Underlying connection handle.
        """
