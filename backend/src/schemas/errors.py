"""Error response schema shared by every endpoint."""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ErrorResponse(BaseModel):
    """Standard error envelope for all 4xx and 5xx responses."""

    success: bool = False
    error: str = Field(
        ...,
        description="Human-readable error message",
        examples=["Invalid file ID", "File not found"],
    )
    details: Optional[list | dict] = Field(
        None,
        description="Additional error context (field validation errors, etc.)",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"success": False, "error": "No file uploaded"},
                {"success": False, "error": "File not found"},
                {"success": False, "error": "Failed to upload file"},
            ]
        }
    )
