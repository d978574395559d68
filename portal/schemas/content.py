"""Request/response schemas for news items and project listings."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

TITLE_MAX_LENGTH = 255
BODY_MAX_LENGTH = 100_000


class News(BaseModel):
    """Stored news item."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    content: str
    files: list[str] = Field(default_factory=list)
    user_id: int
    created_at: datetime
    updated_at: datetime


class NewsCreate(BaseModel):
    """Payload for creating a news item; the owner is stamped from the session."""

    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    content: str = Field(..., min_length=1, max_length=BODY_MAX_LENGTH)
    files: list[str] = Field(default_factory=list)


class NewsUpdate(BaseModel):
    """Partial update for a news item."""

    title: str | None = Field(default=None, min_length=1, max_length=TITLE_MAX_LENGTH)
    content: str | None = Field(default=None, min_length=1, max_length=BODY_MAX_LENGTH)
    files: list[str] | None = None


class Project(BaseModel):
    """Stored project listing."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str
    image_url: str = ""
    url: str = ""
    files: list[str] = Field(default_factory=list)
    user_id: int
    created_at: datetime
    updated_at: datetime


class ProjectCreate(BaseModel):
    """Payload for creating a project listing."""

    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str = Field(..., min_length=1, max_length=BODY_MAX_LENGTH)
    image_url: str = ""
    url: str = ""
    files: list[str] = Field(default_factory=list)


class ProjectUpdate(BaseModel):
    """Partial update for a project listing."""

    title: str | None = Field(default=None, min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str | None = Field(default=None, min_length=1, max_length=BODY_MAX_LENGTH)
    image_url: str | None = None
    url: str | None = None
    files: list[str] | None = None
