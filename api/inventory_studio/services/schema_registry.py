# inventory_studio/services/schema_registry.py
"""
Schema Registry - per-inventory field definitions and custom ID format.

Handles:
- Validation of a submitted field list (title, type, per-type cap)
- Identity-preserving replacement of the field set (unchanged fields keep
  their ids and values, removed fields are deleted with their values)
- Replace-all editing of the custom ID element list
"""
from __future__ import annotations
import logging
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from inventory_studio.database import transaction
from inventory_studio.db_models import (
    Inventory, InventoryField, ItemFieldValue, CustomIdElement,
    FieldType, CustomIdElementType,
)
from inventory_studio.errors import NotFoundError, ValidationFailed
from inventory_studio.services.custom_ids import MAX_NUMBER_WIDTH, WIDTH_TYPES

logger = logging.getLogger(__name__)

MAX_FIELDS_PER_TYPE = 3


@dataclass
class FieldSpec:
    """A validated, normalized field definition."""
    field_type: FieldType
    title: str
    description: Optional[str] = None
    show_in_table: bool = False
    id: Optional[int] = None


@dataclass
class ElementSpec:
    """A validated, normalized custom ID element."""
    element_type: CustomIdElementType
    order_index: int
    fixed_text: Optional[str] = None
    number_width: Optional[int] = None


# ============================================================================
# Validation (pure)
# ============================================================================

def validate_fields(submitted: Sequence) -> List[FieldSpec]:
    """
    Validate a submitted field list as a whole.

    Checks, in order: every title is non-blank, every type is recognized,
    no type occurs more than MAX_FIELDS_PER_TYPE times. The first failing
    check rejects the entire list.
    """
    for field in submitted:
        if not (field.title or "").strip():
            raise ValidationFailed("Field title is required for all fields.")

    types: List[FieldType] = []
    for field in submitted:
        try:
            types.append(FieldType(field.type))
        except ValueError:
            raise ValidationFailed(f"Unsupported field type: {field.type}")

    for field_type, count in Counter(types).items():
        if count > MAX_FIELDS_PER_TYPE:
            raise ValidationFailed(
                f"Too many fields of type {field_type.value}. Maximum is {MAX_FIELDS_PER_TYPE}."
            )

    specs = []
    for field, field_type in zip(submitted, types):
        description = (field.description or "").strip() or None
        specs.append(FieldSpec(
            field_type=field_type,
            title=field.title.strip(),
            description=description,
            show_in_table=bool(field.show_in_table),
            id=field.id,
        ))
    return specs


def validate_custom_id_elements(submitted: Sequence) -> List[ElementSpec]:
    """
    Validate element parameters and assign a dense order.

    A submitted ``order_index`` is honoured as a sort hint (ties keep
    submission order); the stored order is always 0..n-1.
    """
    staged = []
    for position, element in enumerate(submitted):
        try:
            element_type = CustomIdElementType(element.type)
        except ValueError:
            raise ValidationFailed(f"Unsupported custom ID element type: {element.type}")

        width = element.number_width
        if element_type in WIDTH_TYPES:
            if width is not None and not (0 < width <= MAX_NUMBER_WIDTH):
                raise ValidationFailed(
                    f"numberWidth for {element_type.value} must be between 1 and {MAX_NUMBER_WIDTH}."
                )
        else:
            width = None

        fixed_text = None
        if element_type == CustomIdElementType.FIXED_TEXT:
            fixed_text = element.fixed_text or ""

        hint = element.order_index if element.order_index is not None else position
        staged.append((hint, position, element_type, fixed_text, width))

    staged.sort(key=lambda row: (row[0], row[1]))
    return [
        ElementSpec(element_type=element_type, order_index=index, fixed_text=fixed_text, number_width=width)
        for index, (_, _, element_type, fixed_text, width) in enumerate(staged)
    ]


def match_fields(existing: Sequence[InventoryField], specs: Sequence[FieldSpec]) -> Dict[int, InventoryField]:
    """
    Map submitted positions to the existing fields they keep.

    An explicit id naming a field of the same type wins; otherwise the first
    unclaimed field with the same (type, title) is reused. Everything left
    unclaimed is removed by the caller.
    """
    by_id = {f.id: f for f in existing}
    claimed = set()
    matches: Dict[int, InventoryField] = {}

    for position, spec in enumerate(specs):
        if spec.id is None:
            continue
        current = by_id.get(spec.id)
        if current is not None and current.field_type == spec.field_type and current.id not in claimed:
            claimed.add(current.id)
            matches[position] = current

    for position, spec in enumerate(specs):
        if position in matches:
            continue
        for current in existing:
            if current.id in claimed:
                continue
            if current.field_type == spec.field_type and current.title == spec.title:
                claimed.add(current.id)
                matches[position] = current
                break

    return matches


# ============================================================================
# Registry
# ============================================================================

class SchemaRegistry:
    """Reads and replaces an inventory's field set and custom ID format."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_inventory(self, inventory_id: int, lock: bool = False) -> Inventory:
        stmt = select(Inventory).where(Inventory.id == inventory_id)
        if lock:
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        inventory = result.scalar_one_or_none()
        if inventory is None:
            raise NotFoundError("Inventory not found")
        return inventory

    # =========================================================================
    # Fields
    # =========================================================================

    async def list_fields(self, inventory_id: int) -> List[InventoryField]:
        await self._get_inventory(inventory_id)
        return await self.load_fields(inventory_id)

    async def load_fields(self, inventory_id: int) -> List[InventoryField]:
        stmt = (
            select(InventoryField)
            .where(InventoryField.inventory_id == inventory_id)
            .order_by(InventoryField.order_index, InventoryField.id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def replace_fields(self, inventory_id: int, submitted: Sequence) -> List[InventoryField]:
        """
        Replace the inventory's field set in one transaction.

        Validation happens before any write; a rejected list leaves the
        stored fields untouched.
        """
        specs = validate_fields(submitted)

        async with transaction(self.db):
            await self._get_inventory(inventory_id, lock=True)
            existing = await self.load_fields(inventory_id)
            matches = match_fields(existing, specs)

            kept_ids = {f.id for f in matches.values()}
            removed_ids = [f.id for f in existing if f.id not in kept_ids]
            if removed_ids:
                await self.db.execute(
                    delete(ItemFieldValue).where(ItemFieldValue.field_id.in_(removed_ids))
                )
                await self.db.execute(
                    delete(InventoryField).where(InventoryField.id.in_(removed_ids))
                )

            for position, spec in enumerate(specs):
                field = matches.get(position)
                if field is None:
                    field = InventoryField(inventory_id=inventory_id, field_type=spec.field_type)
                    self.db.add(field)
                field.title = spec.title
                field.description = spec.description
                field.show_in_table = spec.show_in_table
                field.order_index = position
            await self.db.flush()

            fields = await self.load_fields(inventory_id)

        logger.info(
            "Replaced fields of inventory %s: %d kept, %d added, %d removed",
            inventory_id, len(kept_ids), len(specs) - len(kept_ids), len(removed_ids),
        )
        return fields

    # =========================================================================
    # Custom ID format
    # =========================================================================

    async def list_custom_id_elements(self, inventory_id: int) -> List[CustomIdElement]:
        await self._get_inventory(inventory_id)
        return await self.load_elements(inventory_id)

    async def load_elements(self, inventory_id: int) -> List[CustomIdElement]:
        stmt = (
            select(CustomIdElement)
            .where(CustomIdElement.inventory_id == inventory_id)
            .order_by(CustomIdElement.order_index, CustomIdElement.id)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def replace_custom_id_elements(self, inventory_id: int, submitted: Sequence) -> List[CustomIdElement]:
        """Delete-all-then-recreate; an empty list clears the format."""
        specs = validate_custom_id_elements(submitted)

        async with transaction(self.db):
            await self._get_inventory(inventory_id, lock=True)
            await self.db.execute(
                delete(CustomIdElement).where(CustomIdElement.inventory_id == inventory_id)
            )
            for spec in specs:
                self.db.add(CustomIdElement(
                    inventory_id=inventory_id,
                    element_type=spec.element_type,
                    order_index=spec.order_index,
                    fixed_text=spec.fixed_text,
                    number_width=spec.number_width,
                ))
            await self.db.flush()
            elements = await self.load_elements(inventory_id)

        logger.info("Replaced custom ID format of inventory %s (%d elements)", inventory_id, len(elements))
        return elements
