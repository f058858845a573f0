"""
Querier.

Opens a transaction, declares a server-side cursor for a query and hands
back a Cursor that fetches its rows in batches.
"""
import asyncio
import logging
import uuid
from typing import Any, Optional
from .exceptions import EmptyStatement
from .interfaces import Queryable
from .cursor import Cursor


class Querier:
    """Querier.

    Entry point for cursor-based queries. Holds no per-query state, so one
    instance can serve many concurrent ``query`` calls: each one runs in its
    own transaction with its own cursor name.

    Args:
        executor: object able to begin transactions (see ``Queryable``).
        batch_size: maximum number of rows per ``FETCH``, ``None`` (or any
            value ``<= 0``) fetches one row at a time.
        auto_continue: whether cursors fetch the next batch transparently.
        timeout: default timeout in seconds for every statement.
    """

    def __init__(
        self,
        executor: Queryable,
        batch_size: Optional[int] = None,
        auto_continue: bool = True,
        timeout: Optional[float] = None
    ) -> None:
        self._executor = executor
        self._batch_size = batch_size
        self._auto_continue = auto_continue
        self._timeout = timeout
        self._logger = logging.getLogger(f"DB.{self.__class__.__name__}")

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} batch_size={self._batch_size!r}>"

    @property
    def executor(self) -> Queryable:
        return self._executor

    @property
    def batch_size(self) -> Optional[int]:
        return self._batch_size

    @property
    def auto_continue(self) -> bool:
        return self._auto_continue

    @property
    def timeout(self) -> Optional[float]:
        return self._timeout

    @staticmethod
    def cursor_name() -> str:
        return f"c{uuid.uuid4().hex}"

    async def query(self, sentence: str, *args: Any, timeout: Optional[float] = None) -> Cursor:
        """query.

        Declare a cursor for ``sentence`` and return a Cursor over its rows.
        Errors from the executor are raised unchanged; when the declaration
        fails the transaction is rolled back before raising.
        """
        if not sentence:
            raise EmptyStatement(
                f"{__name__!s} Error: cannot use an empty sentence"
            )
        if timeout is None:
            timeout = self._timeout
        name = self.cursor_name()
        tx = await self._executor.begin(timeout=timeout)
        declare = f'DECLARE "{name}" CURSOR FOR {sentence}'
        self._logger.debug(f"Declaring cursor {name}")
        try:
            await tx.execute(declare, *args, timeout=timeout)
        except BaseException:
            try:
                await tx.rollback(timeout=timeout)
            except asyncio.CancelledError:
                raise
            except Exception as ex:  # pylint: disable=W0703
                self._logger.warning(
                    f"Cursor {name}: Rollback Error after failed declare: {ex}"
                )
            raise
        return Cursor(
            tx,
            name,
            batch_size=self._batch_size,
            auto_continue=self._auto_continue,
            timeout=timeout
        )

    # alias
    cursor = query
