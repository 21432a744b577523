"""
API Response Models

Pydantic models for API response serialization.
"""

from typing import Any

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for GET /health endpoint."""

    ok: bool = True
    service: str = "hashpath-api"
    version: str = "v1"


class TreeResponse(BaseModel):
    """Response for POST /trees and GET /trees/{name}."""

    ok: bool = True
    name: str = Field(..., description="Tree name")
    depth: int = Field(..., description="Fixed tree depth")
    root: str = Field(..., description="Current root hash (0x hex)")


class UpdateResponse(BaseModel):
    """Response for PUT /trees/{name}/leaves/{index}."""

    ok: bool = True
    name: str = Field(..., description="Tree name")
    index: int = Field(..., description="Updated leaf index")
    root: str = Field(..., description="New root hash (0x hex)")
    previous_root: str = Field(..., description="Root before the update (0x hex)")


class HashPathResponse(BaseModel):
    """Response for GET /trees/{name}/hash-path/{index}."""

    ok: bool = True
    name: str = Field(..., description="Tree name")
    index: int = Field(..., description="Leaf index")
    root: str = Field(..., description="Root the path proves against (0x hex)")
    depth: int = Field(..., description="Number of pairs")
    pairs: list[list[str]] = Field(
        default_factory=list,
        description="(left, right) sibling pairs as hex, leaf level first",
    )


class VerifyResponse(BaseModel):
    """Response for POST /trees/{name}/verify."""

    ok: bool = True
    valid: bool = Field(..., description="Whether the hash path proves the value")
    index: int = Field(..., description="Leaf index")
    root: str = Field(..., description="Root checked against (0x hex)")


class ErrorDetail(BaseModel):
    """Detailed error information."""

    code: str = Field(..., description="Error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """Standard error response."""

    ok: bool = False
    error: ErrorDetail = Field(..., description="Error details")
