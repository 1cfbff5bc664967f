"""
Pytest configuration and fixtures.

Every test that touches storage gets its own SQLite file under
``tmp_path``, migrated and seeded with two members and three breads.
"""

import asyncio
import dataclasses

import pytest

from bakery_reservation_api.app.core.config import settings
from bakery_reservation_api.app.core.db import get_connection, get_cursor, init_db
from bakery_reservation_api.app.core.security import create_access_token


MEMBERS = [
    ("client@bakery.com", "Client", "CLIENT"),
    ("other@bakery.com", "Other", "CLIENT"),
    ("admin@bakery.com", "Admin", "ADMIN"),
]

BREADS = [
    ("Baguette", 5),
    ("Croissant", 3),
    ("Sourdough", 8),
]


@pytest.fixture
def run():
    """Run a coroutine to completion."""
    return asyncio.run


@pytest.fixture
def db(tmp_path, monkeypatch):
    """Point the application at a fresh, seeded database."""
    monkeypatch.setattr(settings, "database_url", str(tmp_path / "bakery_test.db"))
    init_db()
    with get_cursor() as cursor:
        cursor.executemany("INSERT INTO members (email, name, role) VALUES (?, ?, ?)", MEMBERS)
        cursor.executemany("INSERT INTO breads (name, price) VALUES (?, ?)", BREADS)
    yield


@pytest.fixture
def count_rows(db):
    """Return the number of rows in a table."""

    def _count(table: str) -> int:
        conn = get_connection()
        try:
            return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
        finally:
            conn.close()

    return _count


@pytest.fixture
def insert_reservation(db):
    """Insert a reservation row directly, bypassing the pickup window rules."""

    def _insert(email: str, bring_time: str, status: str = "PENDING", breads=(("Baguette", 1),)) -> int:
        with get_cursor() as cursor:
            member_id = cursor.execute("SELECT id FROM members WHERE email = ?", (email,)).fetchone()["id"]
            price = 0
            bread_rows = []
            for name, count in breads:
                bread = cursor.execute("SELECT id, price FROM breads WHERE name = ?", (name,)).fetchone()
                price += bread["price"] * count
                bread_rows.append((bread["id"], count))
            cursor.execute(
                "INSERT INTO reservations (member_id, bring_time, price, status, created_at) "
                "VALUES (?, ?, ?, ?, ?)",
                (member_id, bring_time, price, status, "2026-10-01T12:00:00"),
            )
            reservation_id = cursor.lastrowid
            cursor.executemany(
                "INSERT INTO reservation_infos (reservation_id, bread_id, bread_count) VALUES (?, ?, ?)",
                [(reservation_id, bread_id, count) for bread_id, count in bread_rows],
            )
        return reservation_id

    return _insert


@pytest.fixture
def client(db):
    """Test client for an app without the background rollup scheduler."""
    from fastapi.testclient import TestClient

    from bakery_reservation_api.app.main import create_app

    app = create_app(dataclasses.replace(settings, sales_rollup_enabled=False))
    with TestClient(app) as test_client:
        yield test_client


def auth_headers(email: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': email})}"}


@pytest.fixture
def client_headers():
    return auth_headers("client@bakery.com")


@pytest.fixture
def other_headers():
    return auth_headers("other@bakery.com")


@pytest.fixture
def admin_headers():
    return auth_headers("admin@bakery.com")
