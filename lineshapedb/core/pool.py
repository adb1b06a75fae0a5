"""
Pooled SQLite connections for line-shape databases.

A pool is keyed by database path and access mode. Read-only pools open
the file with ``mode=ro`` so they can never write; ``init`` pools may
create the file.
"""

from typing import Dict, Optional, Tuple
from contextlib import contextmanager
import threading
from queue import Queue, Empty, Full
from pathlib import Path
import sqlite3

from lineshapedb.core.logging_config import get_logger

logger = get_logger("core.pool")

# sqlite3 URI open modes per database access mode
_URI_MODES = {"ro": "ro", "rw": "rw", "init": "rwc"}


def _pool_key(db_path: str, access: str) -> Tuple[str, str]:
    return str(Path(db_path).resolve()), access


class DatabaseConnectionPool:
    """
    Bounded set of SQLite connections to one line-shape database.

    Every connection enforces foreign keys, so deleting a radiator or a
    dataset cascades through the schema.

    Parameters
    ----------
    db_path : str
        Database file
    access : str
        'ro', 'rw' or 'init' (read-write, creating the file if needed)
    max_connections : int
        Upper bound on open connections
    timeout : float
        Seconds to wait for a free connection once the bound is reached
    """

    def __init__(
        self, db_path: str, access: str = "ro", max_connections: int = 5, timeout: float = 5.0
    ):
        if access not in _URI_MODES:
            raise ValueError(f"Unknown access mode: {access}")

        self.db_path = db_path
        self.access = access
        self.max_connections = max_connections
        self.timeout = timeout
        self._idle: Queue = Queue(maxsize=max_connections)
        self._open = 0
        self._lock = threading.Lock()

        logger.debug(f"Pool for {db_path} ({access}, up to {max_connections} connections)")

    @property
    def uri(self) -> str:
        return f"{Path(self.db_path).resolve().as_uri()}?mode={_URI_MODES[self.access]}"

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.uri, uri=True, check_same_thread=False)
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def _acquire(self) -> sqlite3.Connection:
        try:
            return self._idle.get_nowait()
        except Empty:
            pass

        conn: Optional[sqlite3.Connection] = None
        with self._lock:
            if self._open < self.max_connections:
                conn = self._connect()
                self._open += 1
                logger.debug(f"Opened connection {self._open} to {self.db_path}")

        if conn is None:
            conn = self._idle.get(timeout=self.timeout)
        return conn

    def _release(self, conn: sqlite3.Connection) -> None:
        try:
            self._idle.put_nowait(conn)
        except Full:
            conn.close()
            with self._lock:
                self._open -= 1

    @contextmanager
    def get_connection(self):
        """
        Borrow a connection for the duration of a ``with`` block.

        >>> with pool.get_connection() as conn:
        ...     conn.execute("SELECT value FROM lsdb WHERE property = 'format'")
        """
        conn = self._acquire()
        try:
            yield conn
        finally:
            self._release(conn)

    def close_all(self) -> None:
        """Close every idle connection and reset the count."""
        while True:
            try:
                self._idle.get_nowait().close()
            except Empty:
                break

        with self._lock:
            self._open = 0

        logger.debug(f"Closed connections to {self.db_path} ({self.access})")


_pools: Dict[Tuple[str, str], DatabaseConnectionPool] = {}


def get_pool(db_path: str, access: str = "ro", **kwargs) -> DatabaseConnectionPool:
    """
    Shared pool for (`db_path`, `access`), created on first use.

    Extra keyword arguments go to :class:`DatabaseConnectionPool` and only
    matter when the pool is created.
    """
    key = _pool_key(db_path, access)
    if key not in _pools:
        _pools[key] = DatabaseConnectionPool(db_path, access=access, **kwargs)

    return _pools[key]


def release_pool(db_path: str, access: str = "ro") -> None:
    """Close and forget the pool for one database and access mode."""
    pool = _pools.pop(_pool_key(db_path, access), None)
    if pool is not None:
        pool.close_all()


def close_all_pools() -> None:
    for pool in _pools.values():
        pool.close_all()
    _pools.clear()
