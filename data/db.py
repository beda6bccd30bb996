import os
import queue
import sqlite3
import threading
from typing import Dict, Optional, Tuple

from core.exceptions import DatabaseError
from core.types import DatabaseResult

SCHEMA_FILE = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'database.sql')

class Database:
    """Handles all low-level interactions with the SQLite database."""

    # Connection pools per database file
    _pools: Dict[str, queue.Queue] = {}
    _locks: Dict[str, threading.Lock] = {}

    def __init__(self, db_file: str, pool_size: int = 5, timeout: float = 30) -> None:
        """Initialize the database connection and pool."""

        self.db_file = db_file
        self.pool_size = max(1, pool_size)
        self.timeout = timeout
        directory = os.path.dirname(self.db_file)
        if directory:
            os.makedirs(directory, exist_ok=True)
        self.conn: Optional[sqlite3.Connection] = None

        # Ensure a pool exists for this database file
        if db_file not in Database._locks:
            Database._locks[db_file] = threading.Lock()
        self._ensure_pool()

    # Internal helpers -------------------------------------------------

    def _ensure_pool(self) -> None:
        """Create a connection pool for the database file if needed."""
        if self.db_file in Database._pools:
            return
        with Database._locks[self.db_file]:
            if self.db_file in Database._pools:
                return
            pool = queue.Queue(maxsize=self.pool_size)
            try:
                for _ in range(pool.maxsize):
                    conn = sqlite3.connect(self.db_file, timeout=self.timeout, check_same_thread=False)
                    conn.row_factory = sqlite3.Row
                    pool.put(conn)
            except sqlite3.Error as e:
                raise DatabaseError(f"Failed to open database {self.db_file}: {e}")
            Database._pools[self.db_file] = pool

    def _get_from_pool(self) -> sqlite3.Connection:
        self._ensure_pool()
        return Database._pools[self.db_file].get()

    def _return_to_pool(self, conn: sqlite3.Connection) -> None:
        self._ensure_pool()
        Database._pools[self.db_file].put(conn)

    def connect(self) -> None:
        """Retrieve a connection from the pool."""
        if not self.conn:
            try:
                self.conn = self._get_from_pool()
            except sqlite3.Error as e:
                raise DatabaseError(f"Failed to retrieve database connection: {e}")

    def disconnect(self) -> None:
        """Return the connection to the pool."""
        if self.conn:
            self._return_to_pool(self.conn)
            self.conn = None

    def close(self) -> None:
        """Close every pooled connection for this database file."""
        self.disconnect()
        with Database._locks[self.db_file]:
            pool = Database._pools.pop(self.db_file, None)
        while pool is not None and not pool.empty():
            pool.get_nowait().close()

    def ping(self) -> None:
        """Verify the database file can be opened and its header read."""
        try:
            self.connect()
            self.conn.execute("PRAGMA schema_version").fetchone()
        except sqlite3.Error as e:
            raise DatabaseError(f"Database ping failed: {e}")
        finally:
            self.disconnect()

    def execute_query(self, query: str, params: Tuple = ()) -> DatabaseResult:
        """
        Executes a given SQL query (e.g., SELECT, INSERT, UPDATE, DELETE).
        For queries that modify data, this method handles commit and rollback.

        Args:
            query (str): The SQL query to execute.
            params (tuple): The parameters to substitute into the query.

        Returns:
            list: A list of rows for SELECT queries, otherwise an empty list.
        """
        try:
            self.connect()
            cursor = self.conn.cursor()
            cursor.execute(query, params)

            if query.strip().upper().startswith("SELECT"):
                result: DatabaseResult = [dict(row) for row in cursor.fetchall()]
                return result
            else:
                self.conn.commit()
                return []
        except sqlite3.Error as e:
            if self.conn:
                self.conn.rollback()
            raise DatabaseError(f"Database query failed: {e}")
        finally:
            self.disconnect()

    def execute_script(self, script: str) -> None:
        """
        Executes a multi-statement SQL script.

        Args:
            script (str): The SQL script to execute.
        """
        try:
            self.connect()
            cursor = self.conn.cursor()
            cursor.executescript(script)
            self.conn.commit()
        except sqlite3.Error as e:
            if self.conn:
                self.conn.rollback()
            raise DatabaseError(f"Database script execution failed: {e}")
        finally:
            self.disconnect()

    def apply_schema(self, schema_file: str = SCHEMA_FILE) -> None:
        """Create the panel tables if they do not exist yet."""
        try:
            with open(schema_file, 'r') as f:
                schema = f.read()
        except IOError as e:
            raise DatabaseError(f"Failed to read schema file {schema_file}: {e}")
        self.execute_script(schema)
