"""User endpoints: admin listing, self-service profile update, admin role changes."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from portal.api.deps import (
    get_admin_account,
    get_current_account,
    get_identity_manager,
    get_storage,
    to_public,
)
from portal.errors import ConflictError, NotFoundError, ValidationError
from portal.schemas.accounts import Account, AccountPublic, ProfileUpdate, RoleUpdate
from portal.services.identity import IdentityManager
from portal.storage import Storage

router = APIRouter()


@router.get("", response_model=list[AccountPublic])
async def list_users(
    _admin: Annotated[Account, Depends(get_admin_account)],
    storage: Annotated[Storage, Depends(get_storage)],
) -> list[AccountPublic]:
    """List all accounts (admin only). Password hashes are never included."""
    accounts = await storage.accounts.list_all()
    return [to_public(a) for a in accounts]


@router.put("/profile", response_model=AccountPublic)
async def update_profile(
    body: ProfileUpdate,
    account: Annotated[Account, Depends(get_current_account)],
    identity: Annotated[IdentityManager, Depends(get_identity_manager)],
) -> AccountPublic:
    """Update the caller's username, avatar or bio. Role and password cannot be changed here."""
    try:
        updated = await identity.update_profile(account, body)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message) from e
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message) from e
    return to_public(updated)


@router.put("/{account_id}/role", response_model=AccountPublic)
async def set_role(
    account_id: int,
    body: RoleUpdate,
    admin: Annotated[Account, Depends(get_admin_account)],
    identity: Annotated[IdentityManager, Depends(get_identity_manager)],
) -> AccountPublic:
    """Grant or revoke the admin role (admin only)."""
    try:
        updated = await identity.set_role(admin, account_id, body.role)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message) from e
    return to_public(updated)
