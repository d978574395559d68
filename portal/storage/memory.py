"""
In-memory storage backend.

Everything lives in process dictionaries and is lost on restart. There is no
I/O, so these stores never raise StorageError.
"""

import asyncio
import itertools
from datetime import datetime, timedelta
from typing import Generic

from pydantic import BaseModel

from portal.core.security import new_session_id
from portal.errors import ConflictError
from portal.schemas.accounts import Account, NewAccount, ProfileUpdate, Role
from portal.storage.base import Clock, ItemT, profile_changes, utc_now


class MemoryAccountStore:
    """Accounts keyed by id, with a username index guarded by a lock."""

    def __init__(self, clock: Clock = utc_now) -> None:
        self._accounts: dict[int, Account] = {}
        self._ids_by_username: dict[str, int] = {}
        self._next_id = itertools.count(1)
        self._lock = asyncio.Lock()
        self._clock = clock

    async def get_by_id(self, account_id: int) -> Account | None:
        return self._accounts.get(account_id)

    async def get_by_username(self, username: str) -> Account | None:
        account_id = self._ids_by_username.get(username)
        if account_id is None:
            return None
        return self._accounts.get(account_id)

    async def list_all(self) -> list[Account]:
        return list(self._accounts.values())

    async def create(self, candidate: NewAccount) -> Account:
        async with self._lock:
            if candidate.username in self._ids_by_username:
                raise ConflictError("Username is already taken.")
            account = Account(
                id=next(self._next_id),
                username=candidate.username,
                password_hash=candidate.password_hash,
                role=candidate.role or "user",
                created_at=self._clock(),
            )
            self._accounts[account.id] = account
            self._ids_by_username[account.username] = account.id
            return account

    async def update_profile(self, account_id: int, patch: ProfileUpdate) -> Account | None:
        async with self._lock:
            current = self._accounts.get(account_id)
            if current is None:
                return None
            changes = profile_changes(patch)
            new_username = changes.get("username")
            if new_username is not None and new_username != current.username:
                if new_username in self._ids_by_username:
                    raise ConflictError("Username is already taken.")
                del self._ids_by_username[current.username]
                self._ids_by_username[new_username] = account_id
            updated = current.model_copy(update=changes)
            self._accounts[account_id] = updated
            return updated

    async def set_role(self, account_id: int, role: Role) -> Account | None:
        async with self._lock:
            current = self._accounts.get(account_id)
            if current is None:
                return None
            updated = current.model_copy(update={"role": role})
            self._accounts[account_id] = updated
            return updated


class MemorySessionStore:
    """Session records in a dict; expired entries are dropped when touched or purged."""

    def __init__(self, clock: Clock = utc_now) -> None:
        self._sessions: dict[str, tuple[int, datetime]] = {}
        self._clock = clock

    async def create(self, account_id: int, ttl: timedelta) -> str:
        session_id = new_session_id()
        self._sessions[session_id] = (account_id, self._clock() + ttl)
        return session_id

    async def resolve(self, session_id: str) -> int | None:
        record = self._sessions.get(session_id)
        if record is None:
            return None
        account_id, expires_at = record
        if expires_at <= self._clock():
            self._sessions.pop(session_id, None)
            return None
        return account_id

    async def destroy(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    async def purge_expired(self) -> int:
        now = self._clock()
        expired = [sid for sid, (_, expires_at) in self._sessions.items() if expires_at <= now]
        for sid in expired:
            del self._sessions[sid]
        return len(expired)


class MemoryContentStore(Generic[ItemT]):
    """News or project records keyed by id; item_model is the schema stored and returned."""

    def __init__(self, item_model: type[ItemT], clock: Clock = utc_now) -> None:
        self._item_model = item_model
        self._items: dict[int, ItemT] = {}
        self._next_id = itertools.count(1)
        self._clock = clock

    async def list_all(self) -> list[ItemT]:
        return list(self._items.values())

    async def get(self, item_id: int) -> ItemT | None:
        return self._items.get(item_id)

    async def create(self, data: BaseModel, user_id: int) -> ItemT:
        now = self._clock()
        item = self._item_model(
            **data.model_dump(),
            id=next(self._next_id),
            user_id=user_id,
            created_at=now,
            updated_at=now,
        )
        self._items[item.id] = item
        return item

    async def update(self, item_id: int, patch: BaseModel) -> ItemT | None:
        current = self._items.get(item_id)
        if current is None:
            return None
        changes = patch.model_dump(exclude_unset=True, exclude_none=True)
        changes["updated_at"] = self._clock()
        updated = current.model_copy(update=changes)
        self._items[item_id] = updated
        return updated

    async def delete(self, item_id: int) -> bool:
        return self._items.pop(item_id, None) is not None
