"""Shared services: persistence and rate limiting."""
