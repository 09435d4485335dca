"""Persistence layer for blobworks."""

from blobworks.persistence.db import create_engine, health_check

__all__ = [
    "create_engine",
    "health_check",
]
