"""Database connection and profile persistence."""

from src.profiles.services.database.connection import (
    close_database_pool,
    create_database_pool,
    get_database_pool,
    initialize_database,
    set_database_pool,
)
from src.profiles.services.database.models import UserProfile
from src.profiles.services.database.profile_store import ProfileStore, get_profile_store

__all__ = [
    "close_database_pool",
    "create_database_pool",
    "get_database_pool",
    "initialize_database",
    "set_database_pool",
    "UserProfile",
    "ProfileStore",
    "get_profile_store",
]
