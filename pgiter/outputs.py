"""
Model Outputs.

Build model instances (dataclasses or any class accepting the columns as
keyword arguments) from the rows of a cursor.
"""
from typing import Any, Optional, TypeVar
from collections.abc import AsyncIterator, Callable
from dataclasses import fields, is_dataclass
from .exceptions import DataError
from .interfaces import RowsBackend

T = TypeVar("T")


def _model_fields(model: type) -> Optional[set]:
    if is_dataclass(model):
        return {f.name for f in fields(model) if f.init}
    return None


def row_to_model(rows: RowsBackend, model: Callable[..., T], strict: bool = True) -> T:
    """row_to_model.

    Build a ``model`` from the current row of ``rows``, matching columns
    to fields by name. For dataclasses, extra columns raise a DataError
    when ``strict``, otherwise they are ignored.
    """
    row = rows.record()
    if row is None:
        raise DataError("No current row: call next() first")
    data = dict(row.items())
    names = _model_fields(model)
    if names is not None:
        if extra := set(data) - names:
            if strict:
                raise DataError(
                    f"Columns {sorted(extra)} have no field in {model.__name__}"
                )
            data = {k: v for k, v in data.items() if k in names}
    try:
        return model(**data)
    except TypeError as err:
        raise DataError(
            f"Cannot build {getattr(model, '__name__', model)!s}: {err}"
        ) from err


async def models(rows: RowsBackend, model: Callable[..., T], strict: bool = True) -> AsyncIterator[T]:
    """models.

    Async generator of ``model`` instances, one per remaining row.
    Raises the error recorded by ``rows`` if the iteration stopped on one.
    """
    while await rows.next():
        yield row_to_model(rows, model, strict=strict)
    if (error := rows.err()) is not None:
        raise error


async def collect(rows: RowsBackend, fn: Optional[Callable[[RowsBackend], Any]] = None) -> list:
    """collect.

    Drain ``rows`` into a list, by default of native records, then close it.
    """
    result = []
    try:
        while await rows.next():
            result.append(fn(rows) if fn else rows.record())
        if (error := rows.err()) is not None:
            raise error
    finally:
        await rows.close()
    return result
