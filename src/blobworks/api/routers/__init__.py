"""API routers for blobworks."""

from blobworks.api.routers import blob_storage, health, metrics

__all__ = ["blob_storage", "health", "metrics"]
