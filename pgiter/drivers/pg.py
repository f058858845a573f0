""" pg PostgreSQL Executor.
Notes on pg Executor
--------------------
Runs the statements issued by a Querier on asyncpg: a connection or a pool
(given, or created from a DSN) opens the transactions, and every FETCH is
returned as an in-memory batch of asyncpg Records.
"""
import asyncio
import logging
import os
from functools import partial
from collections.abc import Awaitable, Callable, MutableMapping, MutableSequence, Sequence
from typing import Any, Optional, Union

import asyncpg
import uvloop
from asyncpg.exceptions import (
    ConnectionDoesNotExistError,
    InterfaceError,
    InternalClientError,
    TooManyConnectionsError,
)
from asyncpg.pool import PoolConnectionProxy

from pgiter.exceptions import (
    CursorClosed,
    DriverError,
    ProviderError,
    ScanError,
    UninitializedError,
)
from pgiter.interfaces import Queryable, RowsBackend, Transaction
from pgiter.querier import Querier
from pgiter.utils import SafeDict

asyncio.set_event_loop_policy(uvloop.EventLoopPolicy())


class pgRows(RowsBackend):
    """pgRows.

    Batch of records returned by a single statement.
    """

    def __init__(
        self,
        records: Optional[Sequence[asyncpg.Record]] = None,
        attributes: Optional[Sequence[Any]] = None,
        status: str = "",
        connection: Optional[asyncpg.Connection] = None
    ) -> None:
        self._records = list(records) if records else []
        self._attributes = list(attributes) if attributes else []
        self._status = status or ""
        self._connection = connection
        self._index = -1
        self._current: Optional[asyncpg.Record] = None
        self._error: Optional[BaseException] = None
        self._closed = False

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"<pgRows {self._status!r} rows={len(self._records)}>"

    async def next(self) -> bool:
        if self._closed:
            return False
        self._index += 1
        if self._index < len(self._records):
            self._current = self._records[self._index]
            return True
        self._current = None
        return False

    def scan(self, *dest: Any) -> None:
        """scan.

        Copy the current record into ``dest``:
          - a mapping is updated with column/value pairs.
          - a list gets its contents replaced by the values.
          - any other object gets one attribute per column.
        Without a current record nothing is touched.
        """
        row = self._current
        if row is None:
            return None
        if len(dest) != 1:
            raise ScanError(
                f"Scan Error: expected one destination, got {len(dest)}"
            )
        target = dest[0]
        if isinstance(target, MutableMapping):
            target.update(row.items())
        elif isinstance(target, MutableSequence):
            try:
                target[:] = list(row.values())
            except (TypeError, ValueError) as err:
                raise ScanError(
                    f"Scan Error: cannot scan into {type(target).__name__}: {err}"
                ) from err
        elif target is None or isinstance(target, Sequence):
            raise ScanError(
                f"Scan Error: cannot scan into {type(target).__name__}"
            )
        else:
            for column, value in row.items():
                try:
                    setattr(target, column, value)
                except (AttributeError, TypeError) as err:
                    raise ScanError(
                        f"Scan Error: cannot set {column} on {type(target).__name__}: {err}"
                    ) from err
        return None

    def err(self) -> Optional[BaseException]:
        return self._error

    async def close(self) -> None:
        self._closed = True
        self._current = None
        self._records = []

    def field_descriptions(self) -> list:
        return self._attributes

    def command_tag(self) -> str:
        return self._status

    def raw_values(self) -> Optional[tuple]:
        if self._current is None:
            return None
        return tuple(self._current.values())

    def values(self) -> Optional[list]:
        if self._current is None:
            return None
        return list(self._current.values())

    def record(self) -> Optional[asyncpg.Record]:
        return self._current

    def conn(self) -> Optional[asyncpg.Connection]:
        return self._connection


class pgTransaction(Transaction):
    """pgTransaction.

    asyncpg transaction, nested ones become savepoints.
    A pooled connection goes back to the pool when the transaction ends.
    """

    def __init__(
        self,
        connection: asyncpg.Connection,
        transaction: Any,
        release: Optional[Callable[[], Awaitable]] = None
    ) -> None:
        self._connection = connection
        self._transaction = transaction
        self._release = release
        self._finished = False
        self._logger = logging.getLogger(f"DB.{self.__class__.__name__}")

    @property
    def finished(self) -> bool:
        return self._finished

    def conn(self) -> asyncpg.Connection:
        return self._connection

    async def execute(self, sentence: str, *args, timeout: Optional[float] = None) -> str:
        self._check()
        return await self._connection.execute(sentence, *args, timeout=timeout)

    async def query(self, sentence: str, *args, timeout: Optional[float] = None) -> pgRows:
        self._check()
        stmt = await self._connection.prepare(sentence, timeout=timeout)
        records = await stmt.fetch(*args, timeout=timeout)
        return pgRows(
            records,
            attributes=stmt.get_attributes(),
            status=stmt.get_statusmsg(),
            connection=self._connection
        )

    async def rollback(self, timeout: Optional[float] = None) -> None:
        await self._finish(self._transaction.rollback, timeout)

    async def commit(self, timeout: Optional[float] = None) -> None:
        await self._finish(self._transaction.commit, timeout)

    def _check(self) -> None:
        if self._finished:
            raise CursorClosed(
                "Transaction is already finished"
            )

    async def _finish(self, fn: Callable[[], Awaitable], timeout: Optional[float]) -> None:
        if self._finished:
            return
        self._finished = True
        try:
            if timeout:
                await asyncio.wait_for(fn(), timeout=timeout)
            else:
                await fn()
        finally:
            if self._release is not None:
                try:
                    await self._release()
                except (InterfaceError, InternalClientError) as err:
                    self._logger.warning(
                        f"Connection release Error: {err}"
                    )


class pgQueryable(Queryable):
    """pgQueryable.

    Opens transactions on an asyncpg Connection, on an asyncpg Pool, or on
    a Pool created from ``dsn`` or ``params`` on first use.

    Transactions opened on a single Connection share it: cursors from
    them must not be used concurrently. With a Pool every transaction gets
    its own connection.
    """

    def __init__(
        self,
        connection: Optional[asyncpg.Connection] = None,
        pool: Optional[asyncpg.Pool] = None,
        dsn: Optional[str] = None,
        params: Optional[dict] = None,
        **kwargs
    ) -> None:
        self._dsn = "postgres://{user}:{password}@{host}:{port}/{database}"
        self.application_name = os.getenv('APP_NAME', "pgiter")
        self._connection = connection
        self._pool = pool
        self._owns_pool = False
        self._timeout = kwargs.get("timeout", 600)
        self._min_size = kwargs.get("min_size", 1)
        self._max_clients = kwargs.get("max_clients", 10)
        self._server_settings = kwargs.get("server_settings", {})
        if "application_name" in self._server_settings:
            self.application_name = self._server_settings["application_name"]
        self._lock = asyncio.Lock()
        self._logger = logging.getLogger(f"DB.{self.__class__.__name__}")
        if dsn:
            self._dsn = dsn
        elif params:
            self._dsn = self.create_dsn(params)
        else:
            self._dsn = None

    def create_dsn(self, params: dict) -> str:
        try:
            return self._dsn.format_map(SafeDict(**params))
        except TypeError as err:
            self._logger.error(err)
            raise DriverError(f"Error creating DSN connection: {err}") from err

    def get_dsn(self) -> Optional[str]:
        return self._dsn

    def is_connected(self) -> bool:
        if self._connection is not None:
            return not self._connection.is_closed()
        return self._pool is not None

    async def connect(self) -> "pgQueryable":
        """
        Creates the Pool used by begin() when no connection was given.
        """
        async with self._lock:
            if self._pool is not None or self._connection is not None:
                return self
            if not self._dsn:
                raise UninitializedError(
                    "pg: no connection, pool or DSN was provided"
                )
            self._logger.debug(
                f"AsyncPg (Pool): Connecting to {self._dsn}"
            )
            server_settings = {
                "application_name": self.application_name,
                **self._server_settings
            }
            try:
                self._pool = await asyncpg.create_pool(
                    dsn=self._dsn,
                    min_size=self._min_size,
                    max_size=self._max_clients,
                    command_timeout=self._timeout,
                    server_settings=server_settings,
                )
            except ConnectionRefusedError as err:
                raise UninitializedError(
                    f"Unable to connect to database, connection Refused: {err}"
                ) from err
            except TooManyConnectionsError as err:
                raise UninitializedError(
                    f"Too Many Connections Error: {err}"
                ) from err
            except ConnectionDoesNotExistError as err:
                raise ProviderError(
                    f"Connection Error: {err}"
                ) from err
            except InterfaceError as err:
                raise ProviderError(
                    f"Interface Error: {err}"
                ) from err
            self._owns_pool = True
            return self

    async def begin(self, timeout: Optional[float] = None) -> pgTransaction:
        release = None
        if self._connection is not None:
            connection = self._connection
        else:
            if self._pool is None:
                await self.connect()
            connection = await self._pool.acquire(timeout=timeout)
            release = partial(self._pool.release, connection)
        transaction = connection.transaction()
        try:
            await transaction.start()
        except BaseException:
            if release is not None:
                await release()
            raise
        return pgTransaction(connection, transaction, release=release)

    async def close(self, timeout: int = 5) -> None:
        """
        Closing the Pool created by connect()
        """
        if self._owns_pool and self._pool is not None:
            try:
                await asyncio.wait_for(self._pool.close(), timeout=timeout)
            except asyncio.TimeoutError:
                self._logger.warning(
                    "Pool close timed out, terminating"
                )
                self._pool.terminate()
            finally:
                self._pool = None
                self._owns_pool = False

    async def __aenter__(self) -> "pgQueryable":
        if self._connection is None and self._pool is None:
            await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


def querier(
    executor: Union[asyncpg.Connection, asyncpg.Pool, Queryable],
    **kwargs
):
    """querier.

    Build a Querier on top of an asyncpg Connection or Pool.
    """
    if isinstance(executor, asyncpg.Pool):
        executor = pgQueryable(pool=executor)
    elif isinstance(executor, (asyncpg.Connection, PoolConnectionProxy)):
        executor = pgQueryable(connection=executor)
    return Querier(executor, **kwargs)
