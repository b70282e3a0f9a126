"""Pydantic models for admin user deletion request/response."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class AdminDeleteUserRequest(BaseModel):
    """Validation model for admin delete user request."""

    model_config = ConfigDict(str_strip_whitespace=True)

    user_id: str = Field(
        ...,
        min_length=1,
        description="Id of the user to delete",
    )


class AdminDeleteUserResponse(BaseModel):
    """Response model for a completed (or degraded) deletion."""

    status: Literal["deleted", "domain_only"] = Field(..., description="Deletion outcome")
    user_id: str = Field(..., description="Deleted user id")
    deleted_rows: dict[str, int] = Field(..., description="Rows removed per domain table")
    warning: str | None = Field(None, description="Set when the identity account survived")
    detail: str | None = Field(None, description="Identity provider error detail")
