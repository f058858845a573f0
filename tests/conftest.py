import re
from typing import Any, Optional
import pytest


FETCH = re.compile(r"^FETCH (NEXT|\d+) FROM (\w+)$")


class FakeRows:
    """In-memory batch, the same shape as a driver batch."""

    def __init__(self, records: list, error: Optional[BaseException] = None):
        self.records = records
        self.error = error
        self.closed = False
        self._index = -1

    async def next(self) -> bool:
        if self.closed:
            return False
        self._index += 1
        return self._index < len(self.records)

    def _current(self):
        if self.closed or not 0 <= self._index < len(self.records):
            return None
        return self.records[self._index]

    def scan(self, *dest: Any) -> None:
        row = self._current()
        for target in dest:
            if isinstance(target, dict):
                target.update(row)
            else:
                target[:] = list(row.values())

    def err(self):
        return self.error

    async def close(self) -> None:
        self.closed = True

    def field_descriptions(self):
        return list(self.records[0].keys()) if self.records else []

    def command_tag(self) -> str:
        return f"FETCH {len(self.records)}"

    def raw_values(self):
        row = self._current()
        return tuple(row.values()) if row is not None else None

    def values(self):
        row = self._current()
        return list(row.values()) if row is not None else None

    def record(self):
        return self._current()

    def conn(self):
        return "connection"


class FakeTransaction:
    """Records every statement; serves FETCH from ``data``."""

    def __init__(
        self,
        data: list,
        declare_error: Optional[BaseException] = None,
        fetch_errors: Optional[dict] = None,
        batch_errors: Optional[dict] = None,
        rollback_error: Optional[BaseException] = None,
    ):
        self.data = list(data)
        self.declare_error = declare_error
        self.fetch_errors = fetch_errors or {}
        self.batch_errors = batch_errors or {}
        self.rollback_error = rollback_error
        self.statements: list = []
        self.fetches: list = []
        self.batches: list = []
        self.rollbacks = 0
        self.commits = 0
        self.timeouts: list = []
        self._position = 0

    def conn(self):
        return "connection"

    async def execute(self, sentence, *args, timeout=None):
        self.statements.append((sentence, args))
        self.timeouts.append(timeout)
        if self.declare_error is not None:
            raise self.declare_error
        return "DECLARE CURSOR"

    async def query(self, sentence, *args, timeout=None):
        self.statements.append((sentence, args))
        self.timeouts.append(timeout)
        number = len(self.fetches) + 1
        if number in self.fetch_errors:
            self.fetches.append(0)
            raise self.fetch_errors[number]
        match = FETCH.match(sentence)
        assert match is not None, sentence
        size = 1 if match.group(1) == "NEXT" else int(match.group(1))
        rows = self.data[self._position:self._position + size]
        self._position += len(rows)
        self.fetches.append(len(rows))
        batch = FakeRows(rows, error=self.batch_errors.get(number))
        self.batches.append(batch)
        return batch

    async def rollback(self, timeout=None):
        self.rollbacks += 1
        if self.rollback_error is not None:
            raise self.rollback_error

    async def commit(self, timeout=None):
        self.commits += 1


class FakeExecutor:
    """Executor double, keeps every transaction it opened."""

    def __init__(self, data: Optional[list] = None, begin_error=None, **kwargs):
        self.data = data or []
        self.begin_error = begin_error
        self.kwargs = kwargs
        self.transactions: list = []

    async def begin(self, timeout=None):
        if self.begin_error is not None:
            raise self.begin_error
        tx = FakeTransaction(self.data, **self.kwargs)
        self.transactions.append(tx)
        return tx

    @property
    def tx(self) -> FakeTransaction:
        return self.transactions[-1]


def make_rows(count: int) -> list:
    return [{"id": i, "name": f"user{i}"} for i in range(count)]


@pytest.fixture()
def executor():
    def _executor(rows: int = 0, **kwargs) -> FakeExecutor:
        return FakeExecutor(make_rows(rows), **kwargs)
    return _executor
