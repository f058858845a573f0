"""
Cursor.

Iterates over a server-side cursor declared inside its own transaction,
issuing one ``FETCH`` per batch. Only the current batch is kept in memory.
"""
import asyncio
import logging
from enum import Enum
from typing import Any, Optional
from collections.abc import Sequence
from .interfaces import RowsBackend, Transaction


class CursorState(Enum):
    UNOPENED = "unopened"
    ACTIVE = "active"
    # current batch drained, next FETCH not issued yet (auto_continue=False)
    BOUNDARY = "boundary"
    EXHAUSTED = "exhausted"
    ERRORED = "errored"
    CLOSED = "closed"


class Cursor(RowsBackend):
    """Cursor.

    Row cursor bound to a transaction and a declared server-side cursor.

    The Cursor owns the transaction: it is rolled back on ``close()``, which
    must be called on every exit path (``async with`` does it). A Cursor is
    not safe for concurrent use, all calls must come from one task.

    Args:
        transaction: open transaction in which the cursor was declared.
        name: name of the declared cursor.
        batch_size: rows retrieved per ``FETCH``; ``None`` or ``<= 0``
            fetches a single row each time (``FETCH NEXT``).
        auto_continue: issue the next ``FETCH`` transparently when a batch is
            drained. When False, ``next()`` returns False at every batch
            boundary and the following call fetches the next batch.
        timeout: timeout in seconds applied to every statement.
    """

    def __init__(
        self,
        transaction: Transaction,
        name: str,
        batch_size: Optional[int] = None,
        auto_continue: bool = True,
        timeout: Optional[float] = None
    ) -> None:
        self._tx = transaction
        self._name = name
        self._batch_size = batch_size if batch_size and batch_size > 0 else 0
        self._auto_continue = auto_continue
        self._timeout = timeout
        self._rows: Optional[RowsBackend] = None
        self._error: Optional[BaseException] = None
        self._state = CursorState.UNOPENED
        self._logger = logging.getLogger(f"DB.{self.__class__.__name__}")

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self._name!r} state={self._state.value}>"

    @property
    def name(self) -> str:
        return self._name

    @property
    def batch_size(self) -> int:
        return self._batch_size

    @property
    def state(self) -> CursorState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._state is CursorState.CLOSED

    @property
    def exhausted(self) -> bool:
        return self._state is CursorState.EXHAUSTED

    @property
    def fetch_statement(self) -> str:
        if self._batch_size > 0:
            return f"FETCH {self._batch_size} FROM {self._name}"
        return f"FETCH NEXT FROM {self._name}"

### Row Cursor interface
    async def next(self) -> bool:
        if self._state in (
            CursorState.CLOSED, CursorState.ERRORED, CursorState.EXHAUSTED
        ):
            return False
        if self._rows is not None:
            if await self._rows.next():
                return True
            if not await self._release():
                return False
            if not self._auto_continue:
                self._state = CursorState.BOUNDARY
                return False
        return await self._fetch()

    def scan(self, *dest: Any) -> None:
        if self._rows is not None:
            return self._rows.scan(*dest)
        # noop
        return None

    def err(self) -> Optional[BaseException]:
        if self._error is not None:
            return self._error
        if self._rows is not None:
            return self._rows.err()
        return None

    async def close(self) -> None:
        if self._state is CursorState.CLOSED:
            return
        self._state = CursorState.CLOSED
        try:
            if self._rows is not None:
                await self._release()
        finally:
            self._logger.debug(f"Cursor {self._name}: rollback")
            try:
                await self._tx.rollback(timeout=self._timeout)
            except asyncio.CancelledError as err:
                self._fail(err)
                raise
            except Exception as err:  # pylint: disable=W0703
                self._logger.warning(
                    f"Cursor {self._name}: Rollback Error: {err}"
                )
                self._fail(err)

    def field_descriptions(self) -> Sequence[Any]:
        if self._rows is not None:
            return self._rows.field_descriptions()
        # noop
        return []

    def command_tag(self) -> str:
        if self._rows is not None:
            return self._rows.command_tag()
        # noop
        return ""

    def raw_values(self) -> Optional[tuple]:
        if self._rows is not None:
            return self._rows.raw_values()
        # noop
        return None

    def values(self) -> Optional[list]:
        if self._rows is not None:
            return self._rows.values()
        # noop
        return None

    def record(self) -> Any:
        if self._rows is not None:
            return self._rows.record()
        # noop
        return None

    def conn(self) -> Any:
        return self._tx.conn()

### Magic Context Methods for Cursors.
    async def __aenter__(self) -> "Cursor":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def __aiter__(self) -> "Cursor":
        """The cursor is also an async iterator."""
        return self

    async def __anext__(self) -> Any:
        """Use `cursor.next()` to provide an async iterable.

        raise: the recorded error if the iteration stopped on a failure,
        StopAsyncIteration when done.
        """
        if await self.next():
            return self._rows.record()
        if self._state is CursorState.ERRORED:
            raise self._error
        raise StopAsyncIteration

    def __del__(self):
        try:
            if self._state is not CursorState.CLOSED:
                self._logger.warning(
                    f"Cursor {self._name} was never closed, "
                    "its transaction remains open"
                )
        except AttributeError:
            pass

### internals
    async def _fetch(self) -> bool:
        sentence = self.fetch_statement
        self._logger.debug(f"Cursor {self._name}: {sentence}")
        try:
            self._rows = await self._tx.query(sentence, timeout=self._timeout)
        except asyncio.CancelledError as err:
            self._fail(err)
            raise
        except Exception as err:  # pylint: disable=W0703
            self._logger.debug(f"Cursor {self._name}: Fetch Error: {err}")
            self._fail(err)
            return False
        if await self._rows.next():
            self._state = CursorState.ACTIVE
            return True
        # an empty FETCH is the end of the data
        if await self._release():
            self._state = CursorState.EXHAUSTED
        return False

    async def _release(self) -> bool:
        """Close the current batch, recording its error if any."""
        rows, self._rows = self._rows, None
        try:
            await rows.close()
        except Exception as err:  # pylint: disable=W0703
            self._fail(err)
            return False
        if (error := rows.err()) is not None:
            self._fail(error)
            return False
        return True

    def _fail(self, error: BaseException) -> None:
        if self._error is None:
            self._error = error
        else:
            self._logger.warning(
                f"Cursor {self._name}: keeping first error {self._error!r}, "
                f"discarding {error!r}"
            )
        if self._state is not CursorState.CLOSED:
            self._state = CursorState.ERRORED
