"""Request dependencies: storage, identity manager, session cookie and current caller."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from portal.core.config import Settings
from portal.core.security import decode_session_cookie
from portal.schemas.accounts import Account, AccountPublic
from portal.services.authorization import Decision, require_admin, require_authenticated
from portal.services.identity import IdentityManager
from portal.storage import Storage


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage(request: Request) -> Storage:
    return request.app.state.storage


def get_identity_manager(request: Request) -> IdentityManager:
    return request.app.state.identity


def get_session_id(
    request: Request,
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> str | None:
    """Session id from the signed cookie, or None when missing or invalid."""
    return decode_session_cookie(
        request.cookies.get(settings.SESSION_COOKIE_NAME),
        settings.SESSION_SECRET.get_secret_value(),
    )


async def get_current_identity(
    session_id: Annotated[str | None, Depends(get_session_id)],
    identity: Annotated[IdentityManager, Depends(get_identity_manager)],
) -> Account | None:
    """Dependency: the caller's account, or None when anonymous."""
    return await identity.resolve_current(session_id)


def enforce(decision: Decision) -> None:
    """Translate a policy denial into 401/403."""
    if decision.allowed:
        return
    if decision.reason == "unauthenticated":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=decision.message)
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=decision.message)


def get_current_account(
    caller: Annotated[Account | None, Depends(get_current_identity)],
) -> Account:
    """Dependency: require an authenticated caller. Raises 401 when anonymous."""
    enforce(require_authenticated(caller))
    return caller


def get_admin_account(
    caller: Annotated[Account | None, Depends(get_current_identity)],
) -> Account:
    """Dependency: require an administrator. Raises 401 when anonymous, 403 for non-admins."""
    enforce(require_admin(caller))
    return caller


def to_public(account: Account) -> AccountPublic:
    """Outward view of an account; never includes the password hash."""
    return AccountPublic.model_validate(account, from_attributes=True)
