"""API request and response models."""

from api.models.requests import CreateTreeRequest, UpdateLeafRequest, VerifyPathRequest
from api.models.responses import (
    HealthResponse,
    TreeResponse,
    UpdateResponse,
    HashPathResponse,
    VerifyResponse,
    ErrorDetail,
    ErrorResponse,
)

__all__ = [
    "CreateTreeRequest",
    "UpdateLeafRequest",
    "VerifyPathRequest",
    "HealthResponse",
    "TreeResponse",
    "UpdateResponse",
    "HashPathResponse",
    "VerifyResponse",
    "ErrorDetail",
    "ErrorResponse",
]
