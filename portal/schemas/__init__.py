"""Pydantic request/response schemas."""

from portal.schemas.accounts import (
    Account,
    AccountPublic,
    LoginRequest,
    NewAccount,
    ProfileUpdate,
    RegisterRequest,
    Role,
    RoleUpdate,
)
from portal.schemas.content import (
    News,
    NewsCreate,
    NewsUpdate,
    Project,
    ProjectCreate,
    ProjectUpdate,
)
from portal.schemas.health import HealthResponse
from portal.schemas.upload import UploadResponse

__all__ = [
    "Account",
    "AccountPublic",
    "HealthResponse",
    "LoginRequest",
    "NewAccount",
    "News",
    "NewsCreate",
    "NewsUpdate",
    "ProfileUpdate",
    "Project",
    "ProjectCreate",
    "ProjectUpdate",
    "RegisterRequest",
    "Role",
    "RoleUpdate",
    "UploadResponse",
]
