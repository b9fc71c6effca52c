"""
Core module - Configuration, database, security, events and utilities.
"""

from registrar.core.config import get_settings, settings
from registrar.core.database import Base, close_db, get_db, init_db
from registrar.core.events import EventBroker, EventType, get_event_broker
from registrar.core.redis import close_redis, get_redis, init_redis
from registrar.core.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    verify_password,
)

__all__ = [
    # Config
    "settings",
    "get_settings",
    # Database
    "Base",
    "get_db",
    "init_db",
    "close_db",
    # Events
    "EventBroker",
    "EventType",
    "get_event_broker",
    # Redis
    "get_redis",
    "init_redis",
    "close_redis",
    # Security
    "hash_password",
    "verify_password",
    "create_access_token",
    "create_refresh_token",
    "decode_token",
]
