from typing import Any, Optional
from abc import ABC, abstractmethod
from .rows import RowsBackend, _check_methods


class Transaction(ABC):
    """
    Interface for a Transaction able to run statements.
    """

    __capabilities__ = ("execute", "query", "rollback", "commit", "conn")

    @classmethod
    def __subclasshook__(cls, C):
        if cls is Transaction:
            return _check_methods(C, *cls.__capabilities__)
        return NotImplemented

    @abstractmethod
    async def execute(self, sentence: str, *args, timeout: Optional[float] = None) -> str:
        """execute.
        Run a statement that doesn't return rows, returns the command tag.
        """

    @abstractmethod
    async def query(self, sentence: str, *args, timeout: Optional[float] = None) -> RowsBackend:
        """query.
        Run a statement that returns rows.
        """

    @abstractmethod
    async def rollback(self, timeout: Optional[float] = None) -> None:
        ...

    @abstractmethod
    async def commit(self, timeout: Optional[float] = None) -> None:
        ...

    @abstractmethod
    def conn(self) -> Any:
        ...


class Queryable(ABC):
    """
    Interface for Executors that can open Transactions.
    """

    __capabilities__ = ("begin", )

    @classmethod
    def __subclasshook__(cls, C):
        if cls is Queryable:
            return _check_methods(C, *cls.__capabilities__)
        return NotImplemented

    @abstractmethod
    async def begin(self, timeout: Optional[float] = None) -> Transaction:
        """begin.
        Starts a (pseudo nested) transaction.
        """
