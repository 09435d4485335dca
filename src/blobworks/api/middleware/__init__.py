"""HTTP middleware for the blobworks API."""

from blobworks.api.middleware.correlation import CorrelationMiddleware

__all__ = ["CorrelationMiddleware"]
