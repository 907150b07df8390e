"""System feature: injected secret delivery."""

from src.profiles.features.system.handlers import router

__all__ = ["router"]
