from datetime import time, timedelta

import pytest

from src.hrms_attendance.hrms_attendance.database.bootstrap import iter_sql_statements
from src.hrms_attendance.hrms_attendance.database.connection import DatabaseConnection, DBConfig
from src.hrms_attendance.hrms_attendance.database.mysql_base import db_cursor, in_clause, normalize_mysql_time


class FakeCursor:
    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self):
        self.started = 0
        self.commits = 0
        self.rollbacks = 0
        self.closed = False
        self.cursors = []

    def cursor(self, dictionary=False):
        cur = FakeCursor()
        self.cursors.append(cur)
        return cur

    def start_transaction(self):
        self.started += 1

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1

    def close(self):
        self.closed = True


@pytest.fixture
def db(monkeypatch):
    factory = DatabaseConnection(DBConfig(host="localhost", port=3306, user="u", password="p", database="hrms_test_db"))
    opened = []

    def connect():
        conn = FakeConnection()
        opened.append(conn)
        return conn

    monkeypatch.setattr(factory, "connect", connect)
    factory.opened = opened
    return factory


def test_cursor_commits_and_closes(db):
    with db_cursor(db) as (conn, cur):
        pass

    assert conn.commits == 1
    assert conn.rollbacks == 0
    assert conn.closed and cur.closed


def test_cursor_rolls_back_on_error(db):
    with pytest.raises(RuntimeError):
        with db_cursor(db):
            raise RuntimeError("boom")

    conn = db.opened[0]
    assert conn.rollbacks == 1
    assert conn.commits == 0
    assert conn.closed


def test_transaction_shares_one_connection(db):
    with db.transaction():
        with db_cursor(db) as (first, _):
            pass
        with db_cursor(db) as (second, _):
            pass
        assert first.commits == 0

    assert first is second
    assert len(db.opened) == 1
    assert first.started == 1
    assert first.commits == 1
    assert first.closed
    assert all(c.closed for c in first.cursors)
    assert db.current() is None


def test_nested_transaction_joins_outer(db):
    with db.transaction():
        with db.transaction():
            with db_cursor(db):
                pass

    assert len(db.opened) == 1
    assert db.opened[0].commits == 1


def test_transaction_rolls_back_as_a_unit(db):
    with pytest.raises(ValueError):
        with db.transaction():
            with db_cursor(db):
                pass
            raise ValueError("second write failed")

    conn = db.opened[0]
    assert conn.commits == 0
    assert conn.rollbacks == 1
    assert conn.closed
    assert db.current() is None


def test_in_clause():
    assert in_clause([1, 2, 3]) == "%s, %s, %s"
    with pytest.raises(ValueError):
        in_clause([])


def test_normalize_mysql_time():
    assert normalize_mysql_time(None) is None
    assert normalize_mysql_time(time(9, 30)) == time(9, 30)
    assert normalize_mysql_time(timedelta(hours=22, minutes=15)) == time(22, 15)
    assert normalize_mysql_time("08:30") == time(8, 30)
    assert normalize_mysql_time("18:00:05") == time(18, 0, 5)
    with pytest.raises(TypeError):
        normalize_mysql_time(930)


def test_sql_splitter_skips_comments_and_quoted_semicolons():
    sql = """
    -- tables
    CREATE TABLE a (id INT); -- trailing note
    INSERT INTO a VALUES ('x;y');
    CREATE TABLE b (id INT)
    """

    statements = list(iter_sql_statements(sql))

    assert statements == [
        "CREATE TABLE a (id INT)",
        "INSERT INTO a VALUES ('x;y')",
        "CREATE TABLE b (id INT)",
    ]
