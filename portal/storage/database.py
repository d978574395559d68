"""
Relational storage backend (SQLAlchemy).

Each operation opens its own ORM session and runs in Starlette's thread pool
so blocking driver calls never stall the event loop. Driver and connection
failures are logged and re-raised as StorageError.
"""

import logging
from collections.abc import Callable
from datetime import timedelta
from typing import Generic, TypeVar

from pydantic import BaseModel
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from starlette.concurrency import run_in_threadpool

from portal.core.security import new_session_id
from portal.errors import ConflictError, StorageError
from portal.models import AccountRow, SessionRow
from portal.models.base import Base
from portal.schemas.accounts import Account, NewAccount, ProfileUpdate, Role
from portal.storage.base import Clock, ItemT, profile_changes, utc_now

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _DatabaseStore:
    """Shared plumbing: session per call, thread pool, error translation."""

    def __init__(self, session_factory: sessionmaker[Session], clock: Clock = utc_now) -> None:
        self._session_factory = session_factory
        self._clock = clock

    async def _run(self, operation: str, fn: Callable[[Session], T]) -> T:
        return await run_in_threadpool(self._call, operation, fn)

    def _call(self, operation: str, fn: Callable[[Session], T]) -> T:
        session = self._session_factory()
        try:
            return fn(session)
        except SQLAlchemyError as e:
            session.rollback()
            logger.exception(
                "Storage operation failed",
                extra={"operation": operation, "error_type": type(e).__name__},
            )
            raise StorageError(f"Storage operation failed: {operation}", cause=e) from e
        finally:
            session.close()


class DatabaseAccountStore(_DatabaseStore):
    """Accounts table; the unique index on username is the single authority for uniqueness."""

    async def get_by_id(self, account_id: int) -> Account | None:
        def op(session: Session) -> Account | None:
            row = session.get(AccountRow, account_id)
            return Account.model_validate(row) if row is not None else None

        return await self._run("accounts.get_by_id", op)

    async def get_by_username(self, username: str) -> Account | None:
        def op(session: Session) -> Account | None:
            row = session.scalars(
                select(AccountRow).where(AccountRow.username == username)
            ).first()
            return Account.model_validate(row) if row is not None else None

        return await self._run("accounts.get_by_username", op)

    async def list_all(self) -> list[Account]:
        def op(session: Session) -> list[Account]:
            rows = session.scalars(select(AccountRow).order_by(AccountRow.id)).all()
            return [Account.model_validate(r) for r in rows]

        return await self._run("accounts.list_all", op)

    async def create(self, candidate: NewAccount) -> Account:
        def op(session: Session) -> Account:
            row = AccountRow(
                username=candidate.username,
                password_hash=candidate.password_hash,
                role=candidate.role or "user",
                created_at=self._clock(),
            )
            session.add(row)
            try:
                session.commit()
            except IntegrityError as e:
                session.rollback()
                raise ConflictError("Username is already taken.") from e
            return Account.model_validate(row)

        return await self._run("accounts.create", op)

    async def update_profile(self, account_id: int, patch: ProfileUpdate) -> Account | None:
        changes = profile_changes(patch)

        def op(session: Session) -> Account | None:
            row = session.get(AccountRow, account_id)
            if row is None:
                return None
            for field, value in changes.items():
                setattr(row, field, value)
            try:
                session.commit()
            except IntegrityError as e:
                session.rollback()
                raise ConflictError("Username is already taken.") from e
            return Account.model_validate(row)

        return await self._run("accounts.update_profile", op)

    async def set_role(self, account_id: int, role: Role) -> Account | None:
        def op(session: Session) -> Account | None:
            row = session.get(AccountRow, account_id)
            if row is None:
                return None
            row.role = role
            session.commit()
            return Account.model_validate(row)

        return await self._run("accounts.set_role", op)


class DatabaseSessionStore(_DatabaseStore):
    """Sessions table; survives process restart."""

    async def create(self, account_id: int, ttl: timedelta) -> str:
        session_id = new_session_id()
        expires_at = self._clock() + ttl

        def op(session: Session) -> str:
            session.add(SessionRow(id=session_id, account_id=account_id, expires_at=expires_at))
            session.commit()
            return session_id

        return await self._run("sessions.create", op)

    async def resolve(self, session_id: str) -> int | None:
        now = self._clock()

        def op(session: Session) -> int | None:
            return session.scalars(
                select(SessionRow.account_id).where(
                    SessionRow.id == session_id,
                    SessionRow.expires_at > now,
                )
            ).first()

        return await self._run("sessions.resolve", op)

    async def destroy(self, session_id: str) -> None:
        def op(session: Session) -> None:
            session.execute(delete(SessionRow).where(SessionRow.id == session_id))
            session.commit()

        await self._run("sessions.destroy", op)

    async def purge_expired(self) -> int:
        now = self._clock()

        def op(session: Session) -> int:
            result = session.execute(delete(SessionRow).where(SessionRow.expires_at <= now))
            session.commit()
            return result.rowcount or 0

        return await self._run("sessions.purge_expired", op)


class DatabaseContentStore(_DatabaseStore, Generic[ItemT]):
    """CRUD over one content table (news or projects)."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        row_model: type[Base],
        item_model: type[ItemT],
        clock: Clock = utc_now,
    ) -> None:
        super().__init__(session_factory, clock)
        self._row_model = row_model
        self._item_model = item_model
        self._name = row_model.__tablename__

    async def list_all(self) -> list[ItemT]:
        def op(session: Session) -> list[ItemT]:
            rows = session.scalars(select(self._row_model).order_by(self._row_model.id)).all()
            return [self._item_model.model_validate(r) for r in rows]

        return await self._run(f"{self._name}.list_all", op)

    async def get(self, item_id: int) -> ItemT | None:
        def op(session: Session) -> ItemT | None:
            row = session.get(self._row_model, item_id)
            return self._item_model.model_validate(row) if row is not None else None

        return await self._run(f"{self._name}.get", op)

    async def create(self, data: BaseModel, user_id: int) -> ItemT:
        now = self._clock()

        def op(session: Session) -> ItemT:
            row = self._row_model(
                **data.model_dump(),
                user_id=user_id,
                created_at=now,
                updated_at=now,
            )
            session.add(row)
            session.commit()
            return self._item_model.model_validate(row)

        return await self._run(f"{self._name}.create", op)

    async def update(self, item_id: int, patch: BaseModel) -> ItemT | None:
        changes = patch.model_dump(exclude_unset=True, exclude_none=True)
        now = self._clock()

        def op(session: Session) -> ItemT | None:
            row = session.get(self._row_model, item_id)
            if row is None:
                return None
            for field, value in changes.items():
                setattr(row, field, value)
            row.updated_at = now
            session.commit()
            return self._item_model.model_validate(row)

        return await self._run(f"{self._name}.update", op)

    async def delete(self, item_id: int) -> bool:
        def op(session: Session) -> bool:
            result = session.execute(
                delete(self._row_model).where(self._row_model.id == item_id)
            )
            session.commit()
            return (result.rowcount or 0) > 0

        return await self._run(f"{self._name}.delete", op)
