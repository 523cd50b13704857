# src/linkmanager/managers/database_manager.py
import logging
import sqlite3
import threading
from pathlib import Path
from typing import List, Optional

from linkmanager.database_schema import DEFAULT_SCHEMA_SCRIPT
from linkmanager.utils.path_utils import PathUtils

logger = logging.getLogger(__name__)

# Thread-local storage to ensure SQLite connections are not shared across threads
thread_local_storage = threading.local()


class DatabaseManager:
    """
    A 'dumb' Database Manager for the link store.

    Responsibility:
        - Handles SQLite connection lifecycles (opening, closing, caching per thread).
        - Executes raw SQL queries and scripts.
        - Manages database schema initialization via a constant.

    Constraints:
        - It does NOT contain business logic or link semantics.
        - It acts as a low-level data access layer.
    """

    def __init__(self, base_dir: Optional[Path] = None):
        """
        Args:
            base_dir (Optional[Path]): Directory holding links.db.
                                       Defaults to the application cache root.
        """
        self.base_dir = Path(base_dir) if base_dir else PathUtils.get_cache_root()
        self.db_path = PathUtils.get_store_db_path(self.base_dir)
        self._open_connections: List[sqlite3.Connection] = []
        self._conn_lock = threading.Lock()
        logger.debug("DatabaseManager initialized at: %s", self.db_path)

    # --- CONNECTION METHODS ---

    def get_connection(self) -> sqlite3.Connection:
        """Retrieves a thread-local SQLite connection for the link store."""
        db_path_str = str(self.db_path)

        if not hasattr(thread_local_storage, 'connections'):
            thread_local_storage.connections = {}

        if db_path_str in thread_local_storage.connections:
            cached_conn = thread_local_storage.connections[db_path_str]
            try:
                cached_conn.execute("SELECT 1;")
                return cached_conn
            except sqlite3.Error:
                # Connection is dead, remove it and reconnect
                thread_local_storage.connections.pop(db_path_str, None)

        try:
            conn = sqlite3.connect(
                db_path_str,
                isolation_level=None,  # Autocommit mode
                check_same_thread=False
            )
            conn.execute("PRAGMA journal_mode=WAL;")
            conn.execute("PRAGMA synchronous=NORMAL;")

            thread_local_storage.connections[db_path_str] = conn
            with self._conn_lock:
                self._open_connections.append(conn)
            return conn
        except sqlite3.Error as e:
            logger.error("Fatal error opening DB %s: %s", db_path_str, e, exc_info=True)
            raise

    def close_connections(self) -> None:
        """Closes all open connections and forces a WAL checkpoint to clean up files."""
        db_path_str = str(self.db_path)
        with self._conn_lock:
            connections, self._open_connections = self._open_connections, []
        for conn in connections:
            try:
                conn.execute("PRAGMA wal_checkpoint(TRUNCATE);")
                conn.close()
            except sqlite3.Error as e:
                logger.debug("Could not checkpoint/close connection: %s", e)

        if hasattr(thread_local_storage, 'connections'):
            thread_local_storage.connections.pop(db_path_str, None)
        logger.debug("Connections for %s closed.", db_path_str)

    # --- EXECUTION METHODS ---

    def execute_query(self, query: str, params: tuple = ()) -> int:
        """Executes a single statement that does not return data and returns the affected row count."""
        conn = self.get_connection()
        try:
            with conn:
                return conn.execute(query, params).rowcount
        except sqlite3.Error as e:
            logger.error("Query failed: %s | Query: %s", e, query)
            raise

    def execute_insert(self, query: str, params: tuple = ()) -> int:
        """
        Executes an INSERT statement and returns the `lastrowid`.
        Returns -1 on failure.
        """
        conn = self.get_connection()
        try:
            with conn:
                return conn.execute(query, params).lastrowid
        except sqlite3.Error as e:
            logger.error("Insert failed: %s", e)
            return -1

    def execute_script(self, script: str) -> None:
        """Executes a raw SQL script (multiple statements)."""
        conn = self.get_connection()
        try:
            with conn:
                conn.executescript(script)
        except sqlite3.Error as e:
            logger.error("Script execution failed: %s", e)
            raise

    # --- READ METHODS ---

    def fetch_all(self, query: str, params: tuple = ()) -> List[tuple]:
        """Executes a query and returns all rows as a list of tuples."""
        conn = self.get_connection()
        try:
            return conn.execute(query, params).fetchall()
        except sqlite3.Error as e:
            logger.error("Fetch failed: %s", e)
            return []

    def fetch_one(self, query: str, params: tuple = ()) -> Optional[tuple]:
        """Executes a query and returns a single row, or None."""
        conn = self.get_connection()
        try:
            return conn.execute(query, params).fetchone()
        except sqlite3.Error:
            return None

    # --- WRITE METHODS ---

    def save_batch(self, sql_query: str, data_tuples: List[tuple]) -> None:
        """Executes a synchronous batch insert using `executemany`."""
        if not data_tuples:
            return
        conn = self.get_connection()
        try:
            with conn:
                conn.executemany(sql_query, data_tuples)
        except sqlite3.Error as e:
            logger.error("Batch execution failed: %s", e)
            logger.debug("Sample tuple: %s", data_tuples[0])
            raise

    def clear_tables(self, table_names: List[str]) -> None:
        """Deletes all rows from the specified tables."""
        if not table_names:
            return
        conn = self.get_connection()
        try:
            with conn:
                for table in table_names:
                    conn.execute(f"DELETE FROM {table}")
            logger.debug("Cleared tables: %s", ", ".join(table_names))
        except sqlite3.Error as e:
            logger.error("Failed to clear tables %s: %s", table_names, e)

    # --- SCHEMA METHODS ---

    def init_schema(self) -> None:
        """Creates the links table and its indexes if they do not exist yet."""
        self.execute_script(DEFAULT_SCHEMA_SCRIPT)
