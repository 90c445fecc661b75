# tests/database/conftest.py
"""
Shared fixtures for database operations tests.

Provides a mocked connection chain so SQL and parameter handling can be
checked without a running PostgreSQL.
"""

from datetime import datetime, timezone

import pytest
from unittest.mock import MagicMock


@pytest.fixture
def mock_sync_db():
    """
    Mock sync database connection for testing sync database operations.

    Returns:
        tuple: (db_mock, connection_mock, cursor_mock) for easy access in tests
    """
    db = MagicMock()
    conn = MagicMock()
    cursor = MagicMock()

    db.get_connection.return_value.__enter__.return_value = conn
    db.get_connection.return_value.__exit__.return_value = False
    conn.cursor.return_value.__enter__.return_value = cursor
    conn.cursor.return_value.__exit__.return_value = False

    return db, conn, cursor


@pytest.fixture
def failure_row():
    """Row as returned by psycopg's dict_row factory for failed_images."""
    return {
        "id": "A",
        "index": 1,
        "url": "https://x/a.png",
        "error": "HTTP 404",
        "attempts": 2,
        "last_attempt": datetime(2024, 3, 1, 12, 0),
    }
