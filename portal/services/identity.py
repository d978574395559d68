"""Identity manager: registration, login, session resolution and logout over the store contracts."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from starlette.concurrency import run_in_threadpool

from portal.core.security import (
    PASSWORD_MAX_BYTES,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
    dummy_password_hash,
    hash_password,
    verify_password,
)
from portal.errors import AuthFailure, Forbidden, NotFoundError, ValidationError
from portal.schemas.accounts import Account, NewAccount, ProfileUpdate, Role
from portal.services.authorization import require_admin
from portal.storage.base import AccountStore, Clock, SessionStore, utc_now

logger = logging.getLogger(__name__)

# Same message for unknown user and wrong password so usernames cannot be enumerated.
AUTH_FAILURE_MESSAGE = "Invalid username or password."


@dataclass(frozen=True)
class LoginResult:
    """Authenticated account plus the freshly issued session."""

    account: Account
    session_id: str
    expires_at: datetime


def _validate_username(username: str) -> None:
    if not username or not username.strip():
        raise ValidationError("Username must not be blank.")
    if not (USERNAME_MIN_LEN <= len(username) <= USERNAME_MAX_LEN):
        raise ValidationError(
            f"Username must be {USERNAME_MIN_LEN}-{USERNAME_MAX_LEN} characters."
        )


def _validate_password(password: str) -> None:
    if len(password) < PASSWORD_MIN_LEN:
        raise ValidationError(f"Password must be at least {PASSWORD_MIN_LEN} characters.")
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValidationError(f"Password must not exceed {PASSWORD_MAX_BYTES} bytes.")


class IdentityManager:
    """
    Orchestrates credentials, sessions and current-caller resolution.

    Depends only on the AccountStore and SessionStore contracts; which backend
    implements them is decided once at start-up.
    """

    def __init__(
        self,
        accounts: AccountStore,
        sessions: SessionStore,
        session_ttl: timedelta,
        clock: Clock = utc_now,
    ) -> None:
        self.accounts = accounts
        self.sessions = sessions
        self.session_ttl = session_ttl
        self._clock = clock

    async def register(
        self,
        username: str,
        password: str,
        role: Role = "user",
        actor: Account | None = None,
    ) -> Account:
        """
        Create an account storing only the password hash.

        role="admin" is honored only when actor is an administrator; a client
        cannot grant itself the admin role. Raises ValidationError, Forbidden
        or ConflictError.
        """
        username = username.strip()
        _validate_username(username)
        _validate_password(password)
        if role == "admin" and not require_admin(actor):
            logger.warning(
                "Rejected admin-role registration from non-admin caller",
                extra={"username": username, "actor_id": actor.id if actor else None},
            )
            raise Forbidden("Only an administrator can create administrator accounts.")

        password_hash = await run_in_threadpool(hash_password, password)
        account = await self.accounts.create(
            NewAccount(username=username, password_hash=password_hash, role=role)
        )
        logger.info(
            "Account registered",
            extra={"account_id": account.id, "role": account.role},
        )
        return account

    async def login(self, username: str, password: str) -> LoginResult:
        """Verify credentials and issue a new session. Raises AuthFailure on any mismatch."""
        account = await self.accounts.get_by_username(username.strip())
        if account is None:
            await run_in_threadpool(verify_password, password, dummy_password_hash())
            logger.info("Login failed", extra={"reason": "credentials"})
            raise AuthFailure(AUTH_FAILURE_MESSAGE)
        if not await run_in_threadpool(verify_password, password, account.password_hash):
            logger.info("Login failed", extra={"reason": "credentials"})
            raise AuthFailure(AUTH_FAILURE_MESSAGE)

        result = await self.start_session(account)
        logger.info("Login succeeded", extra={"account_id": account.id})
        return result

    async def start_session(self, account: Account) -> LoginResult:
        """Issue a new session for an already-authenticated account."""
        expires_at = self._clock() + self.session_ttl
        session_id = await self.sessions.create(account.id, self.session_ttl)
        return LoginResult(account=account, session_id=session_id, expires_at=expires_at)

    async def resolve_current(self, session_id: str | None) -> Account | None:
        """Return the caller's account, or None (anonymous) if the session or account is gone."""
        if not session_id:
            return None
        account_id = await self.sessions.resolve(session_id)
        if account_id is None:
            return None
        return await self.accounts.get_by_id(account_id)

    async def logout(self, session_id: str | None) -> None:
        """Destroy the session. Safe to call with a missing or already-destroyed session."""
        if not session_id:
            return
        await self.sessions.destroy(session_id)
        logger.info("Session destroyed")

    async def update_profile(self, account: Account, patch: ProfileUpdate) -> Account:
        """Apply username/avatar/bio changes to the caller's own account."""
        if patch.username is not None:
            username = patch.username.strip()
            _validate_username(username)
            patch = patch.model_copy(update={"username": username})
        updated = await self.accounts.update_profile(account.id, patch)
        if updated is None:
            raise NotFoundError("Account not found.")
        return updated

    async def set_role(self, actor: Account | None, account_id: int, role: Role) -> Account:
        """Administrator-only elevation path; the only way a role changes after registration."""
        require_admin(actor).raise_for_denial()
        updated = await self.accounts.set_role(account_id, role)
        if updated is None:
            raise NotFoundError("Account not found.")
        logger.info(
            "Account role changed",
            extra={"account_id": account_id, "role": role, "actor_id": actor.id},
        )
        return updated
