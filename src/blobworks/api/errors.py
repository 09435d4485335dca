"""Error responses for the blobworks REST API.

Every error is rendered as a Result holding one Message, whether it is
raised as an ApiError by a router or as a domain BlobStorageError by the
service:
- ValidationError, NamespaceMismatchError -> 400
- NotFoundError -> 404
- GeneralError and anything unexpected -> 500
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from enum import Enum

from fastapi import HTTPException, Request
from fastapi.responses import ORJSONResponse
from pydantic import BaseModel, Field

from blobworks.errors import (
    BlobStorageError,
    NamespaceMismatchError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class MessageType(str, Enum):
    """Type of message in error response."""

    ERROR = "Error"
    WARNING = "Warning"
    INFO = "Info"
    EXCEPTION = "Exception"


class Message(BaseModel):
    """Error message."""

    model_config = {"extra": "forbid", "populate_by_name": True}

    code: str
    message_type: MessageType = Field(alias="messageType")
    text: str
    timestamp: str | None = None


class Result(BaseModel):
    """Result wrapper for errors."""

    model_config = {"extra": "forbid"}

    messages: list[Message]


def _result(code: str, text: str, message_type: MessageType = MessageType.ERROR) -> Result:
    return Result(
        messages=[
            Message(
                code=code,
                messageType=message_type,
                text=text,
                timestamp=datetime.now(UTC).isoformat(),
            )
        ]
    )


class ApiError(HTTPException):
    """Base exception for API errors."""

    def __init__(
        self,
        status_code: int,
        code: str,
        text: str,
        message_type: MessageType = MessageType.ERROR,
    ):
        self.code = code
        self.text = text
        self.message_type = message_type
        super().__init__(status_code=status_code, detail=text)

    def to_result(self) -> Result:
        return _result(self.code, self.text, self.message_type)


class BadRequestError(ApiError):
    """Invalid request (400)."""

    def __init__(self, text: str):
        super().__init__(status_code=400, code="BadRequest", text=text)


def status_for(exc: BlobStorageError) -> int:
    """HTTP status code for a domain error."""
    if isinstance(exc, (ValidationError, NamespaceMismatchError)):
        return 400
    if isinstance(exc, NotFoundError):
        return 404
    return 500


async def api_exception_handler(request: Request, exc: ApiError) -> ORJSONResponse:
    """Exception handler for API errors."""
    return ORJSONResponse(
        status_code=exc.status_code,
        content=exc.to_result().model_dump(by_alias=True),
    )


async def blob_storage_exception_handler(
    request: Request, exc: BlobStorageError
) -> ORJSONResponse:
    """Exception handler for domain errors raised by the service."""
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error(f"Blob storage failure on {request.method} {request.url.path}: {exc}")
        # Cause is logged, never returned
        result = _result(type(exc).__name__, f"{exc.source}: {exc.message}", MessageType.EXCEPTION)
    else:
        result = _result(type(exc).__name__, str(exc))
    return ORJSONResponse(status_code=status_code, content=result.model_dump(by_alias=True))


async def generic_exception_handler(request: Request, exc: Exception) -> ORJSONResponse:
    """Exception handler for unexpected errors."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return ORJSONResponse(
        status_code=500,
        content=_result(
            "InternalServerError", "An unexpected error occurred", MessageType.EXCEPTION
        ).model_dump(by_alias=True),
    )
