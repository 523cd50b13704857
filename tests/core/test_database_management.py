from __future__ import annotations
import sqlite3
from typing import List

import pytest

from linkmanager.database_schema import LINK_INSERT_SQL
from linkmanager.managers.database_manager import DatabaseManager


@pytest.fixture
def dm(tmp_path) -> DatabaseManager:
    m = DatabaseManager(tmp_path)
    m.init_schema()
    yield m
    m.close_connections()


def _fetch_all(conn: sqlite3.Connection, sql: str, params: tuple = ()) -> List[tuple]:
    cur = conn.cursor()
    cur.execute(sql, params)
    return cur.fetchall()


def test_store_lives_in_base_dir(tmp_path, dm: DatabaseManager):
    assert dm.db_path == tmp_path / "links.db"
    assert dm.db_path.exists()


def test_init_schema_is_repeatable(dm: DatabaseManager):
    dm.init_schema()
    tables = _fetch_all(dm.get_connection(), "SELECT name FROM sqlite_master WHERE type='table' AND name='links'")
    assert tables == [("links",)]


def test_connection_is_cached_per_thread(dm: DatabaseManager):
    assert dm.get_connection() is dm.get_connection()


def test_save_batch_persistence(dm: DatabaseManager):
    rows = [
        (1, "https://other.com", "other.com", "Other", 1, 2),
        (1, "https://example.com/x", "example.com", "X", 0, 1),
    ]
    dm.save_batch(LINK_INSERT_SQL, rows)
    stored = _fetch_all(dm.get_connection(), "SELECT url, link_count, last_updated FROM links ORDER BY id")
    assert [(r[0], r[1]) for r in stored] == [("https://other.com", 2), ("https://example.com/x", 1)]
    assert all(r[2] for r in stored)


def test_execute_insert_returns_row_id(dm: DatabaseManager):
    first = dm.execute_insert(LINK_INSERT_SQL, (1, "https://a.com", "a.com", "a", 1, 1))
    second = dm.execute_insert(LINK_INSERT_SQL, (1, "https://b.com", "b.com", "b", 1, 1))
    assert first > 0
    assert second == first + 1


def test_execute_insert_failure_returns_minus_one(dm: DatabaseManager):
    assert dm.execute_insert(LINK_INSERT_SQL, (1, None, "a.com", "a", 1, 1)) == -1


def test_execute_query_returns_rowcount_and_raises_on_error(dm: DatabaseManager):
    dm.save_batch(LINK_INSERT_SQL, [(7, "https://a.com", "a.com", "a", 1, 1)] * 3)
    assert dm.execute_query("DELETE FROM links WHERE document_id = ?", (7,)) == 3
    with pytest.raises(sqlite3.Error):
        dm.execute_query("DELETE FROM missing_table")


def test_fetch_helpers(dm: DatabaseManager):
    dm.save_batch(LINK_INSERT_SQL, [(2, "https://a.com", "a.com", "a", 1, 1)])
    assert dm.fetch_one("SELECT COUNT(*) FROM links") == (1,)
    assert dm.fetch_all("SELECT url FROM links") == [("https://a.com",)]
    assert dm.fetch_all("SELECT nope FROM links") == []
    assert dm.fetch_one("SELECT nope FROM links") is None


def test_clear_tables(dm: DatabaseManager):
    dm.save_batch(LINK_INSERT_SQL, [(3, "https://wipe.com", "wipe.com", "w", 1, 1)])
    dm.clear_tables(["links"])
    assert _fetch_all(dm.get_connection(), "SELECT COUNT(*) FROM links")[0][0] == 0


def test_close_connections_opens_a_fresh_one(dm: DatabaseManager):
    first = dm.get_connection()
    dm.close_connections()
    assert dm.get_connection() is not first
