"""pgiter Meta information."""

__title__ = "pgiter"
__description__ = "Memory-bounded iteration over PostgreSQL results \
    using server-side cursors on asyncpg."
__version__ = "0.4.1"
__copyright__ = "Copyright (c) 2024 pgiter developers"
__author__ = "pgiter developers"
__author_email__ = "pgiter@users.noreply.github.com"
__license__ = "BSD"
