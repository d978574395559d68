"""Storage contracts shared by the in-memory and database backends."""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any, Protocol, TypeVar

from pydantic import BaseModel

from portal.schemas.accounts import Account, NewAccount, ProfileUpdate, Role

ItemT = TypeVar("ItemT", bound=BaseModel)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


def profile_changes(patch: ProfileUpdate) -> dict[str, Any]:
    """Fields the caller actually sent. A null username means 'unchanged'; avatar/bio may be cleared."""
    changes = patch.model_dump(exclude_unset=True)
    if changes.get("username") is None:
        changes.pop("username", None)
    return changes


class AccountStore(Protocol):
    """Durable account records. Username uniqueness is enforced here, not by callers."""

    async def get_by_id(self, account_id: int) -> Account | None: ...

    async def get_by_username(self, username: str) -> Account | None: ...

    async def list_all(self) -> list[Account]: ...

    async def create(self, candidate: NewAccount) -> Account:
        """Insert candidate with a new id. Raises ConflictError if the username exists."""
        ...

    async def update_profile(self, account_id: int, patch: ProfileUpdate) -> Account | None:
        """Apply username/avatar/bio from patch. None if account_id is unknown."""
        ...

    async def set_role(self, account_id: int, role: Role) -> Account | None: ...


class SessionStore(Protocol):
    """Session id -> account id mapping with expiry. Expired records resolve as absent."""

    async def create(self, account_id: int, ttl: timedelta) -> str: ...

    async def resolve(self, session_id: str) -> int | None: ...

    async def destroy(self, session_id: str) -> None:
        """Remove the session. Idempotent."""
        ...

    async def purge_expired(self) -> int: ...


class ContentStore(Protocol[ItemT]):
    """CRUD by id for one content kind (news or projects)."""

    async def list_all(self) -> list[ItemT]: ...

    async def get(self, item_id: int) -> ItemT | None: ...

    async def create(self, data: BaseModel, user_id: int) -> ItemT: ...

    async def update(self, item_id: int, patch: BaseModel) -> ItemT | None: ...

    async def delete(self, item_id: int) -> bool: ...
