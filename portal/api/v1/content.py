"""
Router factory for owner-stamped content (news items, project listings).

Reads are public. Creation is admin-only and stamps the caller as owner.
Update and delete require the owner or an administrator.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel

from portal.api.deps import enforce, get_admin_account, get_current_account, get_storage
from portal.schemas.accounts import Account
from portal.services.authorization import require_owner_or_admin
from portal.storage import ContentStore, Storage


def content_router(
    store_name: str,
    label: str,
    item_model: type[BaseModel],
    create_model: type[BaseModel],
    update_model: type[BaseModel],
) -> APIRouter:
    """Build list/get/create/update/delete routes over storage.<store_name>."""
    router = APIRouter()
    not_found = f"{label} not found."

    def store_of(storage: Storage) -> ContentStore[Any]:
        return getattr(storage, store_name)

    async def load(storage: Storage, item_id: int) -> Any:
        item = await store_of(storage).get(item_id)
        if item is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=not_found)
        return item

    @router.get("", response_model=list[item_model])
    async def list_items(storage: Annotated[Storage, Depends(get_storage)]) -> list[Any]:
        return await store_of(storage).list_all()

    @router.get("/{item_id}", response_model=item_model)
    async def get_item(
        item_id: int,
        storage: Annotated[Storage, Depends(get_storage)],
    ) -> Any:
        return await load(storage, item_id)

    @router.post("", response_model=item_model, status_code=status.HTTP_201_CREATED)
    async def create_item(
        body: create_model,  # type: ignore[valid-type]
        admin: Annotated[Account, Depends(get_admin_account)],
        storage: Annotated[Storage, Depends(get_storage)],
    ) -> Any:
        return await store_of(storage).create(body, user_id=admin.id)

    @router.put("/{item_id}", response_model=item_model)
    async def update_item(
        item_id: int,
        body: update_model,  # type: ignore[valid-type]
        caller: Annotated[Account, Depends(get_current_account)],
        storage: Annotated[Storage, Depends(get_storage)],
    ) -> Any:
        item = await load(storage, item_id)
        enforce(require_owner_or_admin(caller, item.user_id))
        updated = await store_of(storage).update(item_id, body)
        if updated is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=not_found)
        return updated

    @router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_item(
        item_id: int,
        caller: Annotated[Account, Depends(get_current_account)],
        storage: Annotated[Storage, Depends(get_storage)],
    ) -> Response:
        item = await load(storage, item_id)
        enforce(require_owner_or_admin(caller, item.user_id))
        if not await store_of(storage).delete(item_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=not_found)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router
