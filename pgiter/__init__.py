# -*- coding: utf-8 -*-
"""pgiter.

Server-side cursor iteration for asyncpg.
"""
from .querier import Querier
from .cursor import Cursor, CursorState
from .interfaces import Queryable, RowsBackend, Transaction
from .version import __author__, __author_email__, __description__, __title__, __version__

__all__ = (
    'Querier',
    'Cursor',
    'CursorState',
    'Queryable',
    'RowsBackend',
    'Transaction',
)
