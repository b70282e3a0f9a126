"""Shared catalog and identity models."""

from pydantic import BaseModel, Field, StrictStr


class TargetRecord(BaseModel):
    """Catalog row linking an image, its compiled descriptor, and a video."""

    target_id: StrictStr = Field(..., description="Synthetic target identifier")
    image_url: StrictStr = Field(..., description="Public URL of the reference image")
    video_url: StrictStr = Field(..., description="Video played when the target is tracked")
    mind_url: StrictStr = Field(..., description="Public URL of the compiled .mind descriptor")
    created_at: StrictStr = Field(..., description="ISO-8601 creation timestamp (UTC)")

    user_id: StrictStr | None = Field(None, description="Owning user, if the upload was authenticated")

    def to_item(self) -> dict[str, str]:
        """Serialize to a DynamoDB item, omitting unset attributes."""
        return self.model_dump(exclude_none=True)


class Identity(BaseModel):
    """Caller identity resolved from a bearer credential."""

    user_id: StrictStr = Field(..., min_length=1, description="Identity provider user id")
    email: StrictStr | None = Field(None, description="Primary e-mail, when known")
