from .rows import RowsBackend
from .executor import Queryable, Transaction

__all__ = ('RowsBackend', 'Queryable', 'Transaction', )
