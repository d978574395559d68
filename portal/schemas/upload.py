"""Response schema for the upload endpoint."""

from pydantic import BaseModel, Field


class UploadResponse(BaseModel):
    """Opaque references to the stored files."""

    files: list[str] = Field(
        default_factory=list,
        description="URLs of the stored files, in upload order.",
    )
    message: str = Field(default="Files uploaded.", description="Human-readable status.")
