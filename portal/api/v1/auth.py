"""Session auth endpoints: register, login, logout and current user."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status

from portal.api.deps import (
    get_app_settings,
    get_current_account,
    get_current_identity,
    get_identity_manager,
    get_session_id,
    to_public,
)
from portal.core.config import Settings
from portal.core.security import encode_session_cookie
from portal.errors import AuthFailure, ConflictError, Forbidden, ValidationError
from portal.schemas.accounts import Account, AccountPublic, LoginRequest, RegisterRequest
from portal.services.identity import IdentityManager, LoginResult

router = APIRouter()


def _set_session_cookie(response: Response, settings: Settings, result: LoginResult) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=encode_session_cookie(
            result.session_id,
            result.expires_at,
            settings.SESSION_SECRET.get_secret_value(),
        ),
        max_age=settings.SESSION_TTL_HOURS * 3600,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
        path="/",
    )


def _clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )


@router.post("/register", response_model=AccountPublic, status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    response: Response,
    identity: Annotated[IdentityManager, Depends(get_identity_manager)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    caller: Annotated[Account | None, Depends(get_current_identity)],
    previous_session: Annotated[str | None, Depends(get_session_id)],
) -> AccountPublic:
    """
    Create an account and sign the new user in.

    Requesting role=admin requires an administrator session; when an
    administrator registers someone else their own session is left untouched.
    """
    try:
        account = await identity.register(
            body.username, body.password, role=body.role, actor=caller
        )
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e
    except Forbidden as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.message) from e
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message) from e

    if caller is None:
        await identity.logout(previous_session)
        _set_session_cookie(response, settings, await identity.start_session(account))
    return to_public(account)


@router.post("/login", response_model=AccountPublic)
async def login(
    body: LoginRequest,
    response: Response,
    identity: Annotated[IdentityManager, Depends(get_identity_manager)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    previous_session: Annotated[str | None, Depends(get_session_id)],
) -> AccountPublic:
    """Authenticate with username and password; sets a fresh session cookie."""
    try:
        result = await identity.login(body.username, body.password)
    except AuthFailure as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=e.message) from e
    # A new login always gets a new session id; drop whatever the client held before.
    await identity.logout(previous_session)
    _set_session_cookie(response, settings, result)
    return to_public(result.account)


@router.post("/logout")
async def logout(
    response: Response,
    identity: Annotated[IdentityManager, Depends(get_identity_manager)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    session_id: Annotated[str | None, Depends(get_session_id)],
) -> dict[str, str]:
    """Destroy the current session. Succeeds whether or not a session existed."""
    await identity.logout(session_id)
    _clear_session_cookie(response, settings)
    return {"status": "ok"}


@router.get("/user", response_model=AccountPublic)
def current_user(
    account: Annotated[Account, Depends(get_current_account)],
) -> AccountPublic:
    """Return the signed-in account; 401 when anonymous."""
    return to_public(account)
