"""Account, session and auth request/response schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from portal.core.security import (
    BIO_MAX_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
)

# Closed set of roles; admin privileges are a superset of user privileges.
Role = Literal["user", "admin"]


class Account(BaseModel):
    """
    Account as returned by the account stores.

    password_hash is excluded from every dump so it cannot leak into a response payload.
    """

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    password_hash: str = Field(..., exclude=True, repr=False)
    avatar: str | None = None
    bio: str | None = None
    role: Role = "user"
    created_at: datetime

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class NewAccount(BaseModel):
    """Candidate account handed to AccountStore.create (password already hashed)."""

    username: str
    password_hash: str = Field(..., repr=False)
    role: Role = "user"


class AccountPublic(BaseModel):
    """Account as exposed over HTTP (no password field)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    avatar: str | None = None
    bio: str | None = None
    role: Role
    created_at: datetime


class RegisterRequest(BaseModel):
    """Registration payload. role=admin is only honored when an administrator registers the account."""

    username: str = Field(..., min_length=USERNAME_MIN_LEN, max_length=USERNAME_MAX_LEN)
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    role: Role = "user"


class LoginRequest(BaseModel):
    """Credentials for login."""

    username: str = Field(..., min_length=1, max_length=255, description="Username")
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN, description="Password")


class ProfileUpdate(BaseModel):
    """Self-service profile patch. Only fields present in the request are applied."""

    model_config = ConfigDict(extra="forbid")

    username: str | None = Field(
        default=None, min_length=USERNAME_MIN_LEN, max_length=USERNAME_MAX_LEN
    )
    avatar: str | None = None
    bio: str | None = Field(default=None, max_length=BIO_MAX_LEN)


class RoleUpdate(BaseModel):
    """Administrator elevation/demotion payload."""

    role: Role
