"""
Shared fixtures: a mock async session, a recording event broker and an
authenticated admin.
"""

from unittest.mock import AsyncMock, MagicMock
from uuid import UUID

import pytest

from registrar.core.auth import AdminUser
from registrar.core.events import EventBroker


@pytest.fixture
def mock_db():
    """Mock async session whose begin_nested() works as a savepoint context."""
    db = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.refresh = AsyncMock()
    db.flush = AsyncMock()
    db.add = MagicMock()
    db.add_all = MagicMock()

    savepoint = AsyncMock()
    savepoint.__aenter__.return_value = savepoint
    savepoint.__aexit__.return_value = False
    db.begin_nested = MagicMock(return_value=savepoint)
    return db


@pytest.fixture
def broker():
    """Broker with one recording subscriber; frames land in ``broker.frames``."""
    broker = EventBroker(heartbeat_interval=5)
    broker.frames = []
    broker.subscribe("recorder", broker.frames.append)
    return broker


@pytest.fixture
def admin():
    return AdminUser(
        id=UUID("00000000-0000-0000-0000-0000000000aa"),
        email="registrar@hau.edu.ph",
        role="admin",
        name="Registrar Staff",
    )
