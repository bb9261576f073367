# inventory_studio/routers/items.py
"""
Items Router - item creation (custom ID composition) and version-checked edits.
"""
from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from inventory_studio.database import get_session
from inventory_studio.models import ItemCreate, ItemUpdate, ItemOut, ItemList
from inventory_studio.routers.deps import get_principal
from inventory_studio.services.entities import VersionedEntityStore
from inventory_studio.services.principals import Principal

router = APIRouter(tags=["Items"])


@router.get("/inventories/{inventory_id}/items", response_model=ItemList)
async def list_items(inventory_id: int, db: AsyncSession = Depends(get_session)):
    """Items of an inventory, newest first."""
    items = await VersionedEntityStore(db).list_items(inventory_id)
    return ItemList(items=items)


@router.post("/inventories/{inventory_id}/items", response_model=ItemOut, status_code=201)
async def create_item(
    inventory_id: int,
    request: Optional[ItemCreate] = Body(None),
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_session),
):
    """
    Create an item.

    Without ``customId`` one is composed from the inventory's format. A
    duplicate custom ID answers 409; regenerate and resubmit.
    """
    return await VersionedEntityStore(db).create_item(principal, inventory_id, request or ItemCreate())


@router.get("/items/{item_id}", response_model=ItemOut)
async def get_item(item_id: int, db: AsyncSession = Depends(get_session)):
    return await VersionedEntityStore(db).get_item(item_id)


@router.patch("/items/{item_id}", response_model=ItemOut)
async def update_item(
    item_id: int,
    request: ItemUpdate,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_session),
):
    return await VersionedEntityStore(db).update_item(principal, item_id, request)
