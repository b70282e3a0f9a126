"""Pydantic models for target generation request/response."""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from core.utils.constants import MAX_IMAGE_SIZE, get_max_image_size_mb


class TargetUploadRequest(BaseModel):
    """Validation model for a multipart upload (`file` + `videoUrl`)."""

    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    file: bytes = Field(..., description="Raw reference image bytes")
    filename: str | None = Field(None, description="Client-side file name")
    content_type: str | None = Field(None, description="Content type of the file part")
    video_url: str = Field(..., alias="videoUrl", min_length=1, description="Video reference")

    @field_validator("file")
    @classmethod
    def validate_file(cls, value: bytes) -> bytes:
        """
        Validate image payload:
        - must not be empty
        - must not exceed MAX_IMAGE_SIZE
        """
        if not value:
            raise ValueError("Missing image file")

        if len(value) > MAX_IMAGE_SIZE:
            raise ValueError(f"File size exceeds {get_max_image_size_mb()}MB limit")

        return value


class TargetFromUrlRequest(BaseModel):
    """Validation model for the JSON variant (`imageUrl` + `videoUrl`)."""

    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    image_url: str = Field(..., alias="imageUrl", min_length=1, description="Source image URL")
    video_url: str = Field(..., alias="videoUrl", min_length=1, description="Video reference")

    @field_validator("image_url")
    @classmethod
    def validate_image_url(cls, value: str) -> str:
        if not value.lower().startswith(("http://", "https://")):
            raise ValueError("Image URL must use http or https")
        return value


class GenerateTargetResponse(BaseModel):
    """Response model for a successfully generated target."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = Field(True, description="Always true for 200 responses")
    message: str = Field(..., description="Success message")
    target_id: str = Field(..., description="Catalog id of the new target")
    mind_url: str = Field(..., description="Public URL of the .mind descriptor")
    image_url: str | None = Field(None, description="Public URL of the stored image")
