"""Shared fixtures: a small SQLite database built through SQLAlchemy."""

import pytest
from sqlalchemy import create_engine, text

from dbfs.vfs import DatabaseVFS

LONG_BIO = "line one\n" + "y" * 200

USERS = [
    {"id": 1, "email": "a@example.com", "name": "Alice", "city": "Paris", "bio": "short"},
    {"id": 2, "email": "b@example.com", "name": "Bob", "city": "Paris", "bio": LONG_BIO},
    {"id": 3, "email": "c@example.com", "name": "Carol", "city": "Oslo", "bio": None},
]

FILES = [
    {"id": 1, "data": b"abc"},
    {"id": 2, "data": b"\x00\x01"},
]


@pytest.fixture
def db_path(tmp_path):
    """SQLite file with users, orders and an empty table.

    users:  three rows; two share city "Paris"; one bio is long and
            multi-line; one bio is NULL
    orders: quoted column name, DECIMAL(10, 2), table-level foreign key
    empty:  no rows
    files:  BLOB column; one printable value, one with control bytes
    """
    path = tmp_path / "shop.db"
    engine = create_engine(f"sqlite:///{path}")
    with engine.begin() as conn:
        conn.execute(text(
            "CREATE TABLE users (id INTEGER PRIMARY KEY, email TEXT, "
            "name TEXT, city TEXT, bio TEXT)"
        ))
        conn.execute(text(
            "CREATE TABLE orders (id INTEGER PRIMARY KEY, user_id INTEGER, "
            "amount DECIMAL(10, 2), \"order note\" TEXT, "
            "FOREIGN KEY (user_id) REFERENCES users(id))"
        ))
        conn.execute(text("CREATE TABLE empty (id INTEGER)"))
        conn.execute(text("CREATE TABLE files (id INTEGER PRIMARY KEY, data BLOB)"))
        conn.execute(
            text("INSERT INTO files (id, data) VALUES (:id, :data)"),
            FILES,
        )
        conn.execute(
            text("INSERT INTO users (id, email, name, city, bio) "
                 "VALUES (:id, :email, :name, :city, :bio)"),
            USERS,
        )
        conn.execute(text(
            "INSERT INTO orders (id, user_id, amount, \"order note\") "
            "VALUES (10, 1, 9.5, 'first')"
        ))
    engine.dispose()
    return path


@pytest.fixture
def vfs(db_path):
    """DatabaseVFS over the test database."""
    fs = DatabaseVFS.open(str(db_path))
    yield fs
    fs.close()
