"""
Tests for database URL handling and timestamps
"""

import pytest
from datetime import datetime, timedelta, timezone

from churchflow.core.clock import utcnow
from churchflow.core.database import async_database_url


@pytest.mark.parametrize("url,expected", [
    ("postgres://u:p@db:5432/cf", "postgresql+asyncpg://u:p@db:5432/cf"),
    ("postgresql://u:p@db:5432/cf", "postgresql+asyncpg://u:p@db:5432/cf"),
    ("postgresql+asyncpg://u:p@db:5432/cf", "postgresql+asyncpg://u:p@db:5432/cf"),
    ("sqlite+aiosqlite:///:memory:", "sqlite+aiosqlite:///:memory:"),
])
def test_async_database_url(url, expected):
    assert async_database_url(url) == expected


def test_utcnow_is_naive_utc():
    now = utcnow()
    assert now.tzinfo is None
    assert abs(now - datetime.now(timezone.utc).replace(tzinfo=None)) < timedelta(seconds=5)
