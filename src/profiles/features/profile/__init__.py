"""User profile feature."""

from src.profiles.features.profile.handlers import router

__all__ = ["router"]
