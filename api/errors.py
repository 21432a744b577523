"""
API Error Handling

Standardized error handling for the API.
"""

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from api.models.responses import ErrorResponse, ErrorDetail
from core.schemas.errors import ErrorCodes, MerkleTreeException


# Tree error code -> HTTP status
STATUS_BY_CODE: dict[str, int] = {
    ErrorCodes.CONFIG_ERROR: 400,
    ErrorCodes.TREE_NOT_FOUND: 404,
    ErrorCodes.OUT_OF_RANGE: 400,
    ErrorCodes.INVALID_LEAF_SIZE: 400,
    ErrorCodes.HASH_PATH_INVALID: 400,
    ErrorCodes.PERSISTENCE_ERROR: 500,
    ErrorCodes.CORRUPT_SNAPSHOT: 500,
    ErrorCodes.CORRUPT_METADATA: 500,
}


class APIError(Exception):
    """Base API error with structured response."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            ok=False,
            error=ErrorDetail(
                code=self.code,
                message=self.message,
                details=self.details,
            ),
        )


class InvalidRequestError(APIError):
    """Invalid request parameters."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            code="INVALID_REQUEST",
            message=message,
            status_code=400,
            details=details,
        )


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handle APIError exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(),
    )


async def tree_error_handler(request: Request, exc: MerkleTreeException) -> JSONResponse:
    """Handle errors raised by the tree engine and its storage."""
    return JSONResponse(
        status_code=STATUS_BY_CODE.get(exc.code, 500),
        content=ErrorResponse(
            ok=False,
            error=ErrorDetail(
                code=exc.code,
                message=exc.message,
                details=exc.details,
            ),
        ).model_dump(),
    )


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            ok=False,
            error=ErrorDetail(
                code="INTERNAL_ERROR",
                message="An unexpected error occurred",
                details={"type": type(exc).__name__},
            ),
        ).model_dump(),
    )
