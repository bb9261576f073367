# inventory_studio/routers/inventories.py
"""
Inventory Router - inventory attributes, field schema, custom ID format, statistics.
"""
from __future__ import annotations
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from inventory_studio.database import get_session
from inventory_studio.models import (
    InventoryCreate, InventoryUpdate, InventoryOut,
    FieldsReplace, FieldList, FieldOut,
    CustomIdFormatIn, CustomIdFormat, CustomIdElementOut, CustomIdPreview,
    InventoryStats,
)
from inventory_studio.routers.deps import get_principal
from inventory_studio.services.entities import VersionedEntityStore
from inventory_studio.services.principals import Principal
from inventory_studio.services.schema_registry import SchemaRegistry
from inventory_studio.services.stats import compute_stats

router = APIRouter(prefix="/inventories", tags=["Inventories"])


def _field_out(field) -> FieldOut:
    return FieldOut(
        id=field.id,
        type=field.field_type,
        title=field.title,
        description=field.description,
        show_in_table=field.show_in_table,
        order_index=field.order_index,
    )


def _element_out(element) -> CustomIdElementOut:
    return CustomIdElementOut(
        id=element.id,
        type=element.element_type,
        order_index=element.order_index,
        fixed_text=element.fixed_text,
        number_width=element.number_width,
    )


# ============================================================================
# Inventory attributes
# ============================================================================

@router.post("", response_model=InventoryOut, status_code=201)
async def create_inventory(
    request: InventoryCreate,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_session),
):
    return await VersionedEntityStore(db).create_inventory(principal, request)


@router.get("/{inventory_id}", response_model=InventoryOut)
async def get_inventory(inventory_id: int, db: AsyncSession = Depends(get_session)):
    return await VersionedEntityStore(db).get_inventory(inventory_id)


@router.patch("/{inventory_id}", response_model=InventoryOut)
async def update_inventory(
    inventory_id: int,
    request: InventoryUpdate,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_session),
):
    """
    Update inventory attributes.

    ``version`` must match the stored version; otherwise 409 with the
    current inventory under ``current``.
    """
    return await VersionedEntityStore(db).update_inventory(principal, inventory_id, request)


# ============================================================================
# Field schema
# ============================================================================

@router.get("/{inventory_id}/fields", response_model=FieldList)
async def get_fields(inventory_id: int, db: AsyncSession = Depends(get_session)):
    fields = await SchemaRegistry(db).list_fields(inventory_id)
    return FieldList(fields=[_field_out(f) for f in fields])


@router.put("/{inventory_id}/fields", response_model=FieldList)
async def replace_fields(
    inventory_id: int,
    request: FieldsReplace,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_session),
):
    """Replace the field set; rejected wholesale on any validation error."""
    fields = await SchemaRegistry(db).replace_fields(inventory_id, request.fields)
    return FieldList(fields=[_field_out(f) for f in fields])


# ============================================================================
# Custom ID format
# ============================================================================

@router.get("/{inventory_id}/custom-id", response_model=CustomIdFormat)
async def get_custom_id_format(inventory_id: int, db: AsyncSession = Depends(get_session)):
    elements = await SchemaRegistry(db).list_custom_id_elements(inventory_id)
    return CustomIdFormat(elements=[_element_out(e) for e in elements])


@router.put("/{inventory_id}/custom-id", response_model=CustomIdFormat)
async def replace_custom_id_format(
    inventory_id: int,
    request: CustomIdFormatIn,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_session),
):
    elements = await SchemaRegistry(db).replace_custom_id_elements(inventory_id, request.elements)
    return CustomIdFormat(elements=[_element_out(e) for e in elements])


@router.get("/{inventory_id}/custom-id/preview", response_model=CustomIdPreview)
async def preview_custom_id(inventory_id: int, db: AsyncSession = Depends(get_session)):
    preview = await VersionedEntityStore(db).preview_custom_id(inventory_id)
    return CustomIdPreview(preview=preview)


# ============================================================================
# Statistics
# ============================================================================

@router.get("/{inventory_id}/stats", response_model=InventoryStats)
async def get_stats(inventory_id: int, db: AsyncSession = Depends(get_session)):
    return await compute_stats(db, inventory_id)
