"""
API Request Models

Pydantic models for API request validation.
"""

from typing import Literal

from pydantic import BaseModel, Field


class CreateTreeRequest(BaseModel):
    """Request body for POST /trees endpoint."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=256,
        description="Tree name, used as the storage key",
    )
    depth: int | None = Field(
        default=None,
        description="Depth for a new tree (default: from config); ignored when restoring",
    )


class UpdateLeafRequest(BaseModel):
    """Request body for PUT /trees/{name}/leaves/{index} endpoint."""

    value: str = Field(
        ...,
        description="Leaf value: 64 bytes as hex (0x prefix optional), or text with encoding='utf8'",
    )
    encoding: Literal["hex", "utf8"] = Field(
        default="hex",
        description="How to interpret value; utf8 text is zero-padded to 64 bytes",
    )


class VerifyPathRequest(BaseModel):
    """Request body for POST /trees/{name}/verify endpoint."""

    index: int = Field(..., description="Leaf index")
    value: str = Field(..., description="Leaf value: 64 bytes as hex")
    pairs: list[tuple[str, str]] = Field(
        ...,
        description="Hash path pairs (left, right) as hex, leaf level first",
    )
    root: str | None = Field(
        default=None,
        description="Root to verify against (default: current tree root)",
    )
