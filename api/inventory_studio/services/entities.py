# inventory_studio/services/entities.py
"""
Versioned Entity Store - optimistic concurrency for inventories and items.

Every update is a single conditional write keyed on ``(id, expected version)``
that bumps the version in the same statement; zero affected rows means the
caller's snapshot is stale (or the entity is gone). Dependent writes (tags,
field values) run in the same transaction, after the version check.
"""
from __future__ import annotations
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

from sqlalchemy import select, update, delete, insert
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from inventory_studio.database import transaction
from inventory_studio.db_models import (
    Inventory, InventoryTag, Tag, Item, ItemFieldValue,
)
from inventory_studio.errors import NotFoundError, ValidationFailed, VersionConflict, UniquenessConflict
from inventory_studio.models import (
    InventoryCreate, InventoryUpdate, InventoryOut,
    ItemCreate, ItemUpdate, ItemOut, ItemFieldOut, ItemSummary,
)
from inventory_studio.services.custom_ids import compose
from inventory_studio.services.field_values import resolve_value, to_columns, from_row, SLOT_NAMES
from inventory_studio.services.principals import Principal
from inventory_studio.services.schema_registry import SchemaRegistry

logger = logging.getLogger(__name__)

INVENTORY_CONFLICT_MESSAGE = "Inventory has been modified by someone else."
ITEM_CONFLICT_MESSAGE = "Item has been modified by someone else."
DUPLICATE_CUSTOM_ID_MESSAGE = "Custom ID already exists in this inventory. Please choose another value."


def normalize_tags(names: Iterable[str]) -> List[str]:
    """Trim, drop blanks, de-duplicate keeping first occurrence."""
    seen: Dict[str, None] = {}
    for name in names:
        name = (name or "").strip()
        if name:
            seen.setdefault(name, None)
    return list(seen)


def _clean_custom_id(custom_id: Optional[str]) -> Optional[str]:
    if custom_id is None:
        return None
    custom_id = custom_id.strip()
    if not custom_id:
        raise ValidationFailed("Custom ID cannot be empty.")
    return custom_id


class VersionedEntityStore:
    """Create, read and version-checked update of inventories and items."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.schema = SchemaRegistry(db)

    # =========================================================================
    # Inventories
    # =========================================================================

    async def _load_inventory(self, inventory_id: int) -> Optional[Inventory]:
        stmt = (
            select(Inventory)
            .options(selectinload(Inventory.owner))
            .options(selectinload(Inventory.tag_links).selectinload(InventoryTag.tag))
            .where(Inventory.id == inventory_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    def inventory_to_out(inventory: Inventory) -> InventoryOut:
        return InventoryOut(
            id=inventory.id,
            title=inventory.title,
            description=inventory.description or "",
            category=inventory.category,
            is_public=inventory.is_public,
            version=inventory.version,
            image_url=inventory.image_url,
            tags=inventory.tag_names,
            owner_name=inventory.owner.display_name,
            created_at=inventory.created_at,
            updated_at=inventory.updated_at,
        )

    async def get_inventory(self, inventory_id: int) -> InventoryOut:
        inventory = await self._load_inventory(inventory_id)
        if inventory is None:
            raise NotFoundError("Inventory not found")
        return self.inventory_to_out(inventory)

    async def create_inventory(self, principal: Principal, data: InventoryCreate) -> InventoryOut:
        async with transaction(self.db):
            inventory = Inventory(
                title=data.title,
                description=(data.description or "").strip() or None,
                category=data.category,
                is_public=data.is_public,
                image_url=data.image_url,
                version=1,
                item_sequence=0,
                owner_id=principal.id,
            )
            self.db.add(inventory)
            await self.db.flush()

            if data.tags:
                await self._set_tags(inventory.id, normalize_tags(data.tags))

            out = self.inventory_to_out(await self._load_inventory(inventory.id))

        logger.info("Inventory %s created by %s", out.id, principal.email)
        return out

    async def update_inventory(self, principal: Principal, inventory_id: int, patch: InventoryUpdate) -> InventoryOut:
        """
        Apply ``patch`` if ``patch.version`` matches the stored version.

        Omitted (or null) attributes keep their stored values. On a stale
        version raises VersionConflict carrying the current inventory.
        """
        values = {
            key: value
            for key, value in patch.model_dump(exclude={"version", "tags"}).items()
            if value is not None
        }
        if "description" in values:
            values["description"] = values["description"].strip() or None
        tags = normalize_tags(patch.tags) if patch.tags is not None else None

        async with transaction(self.db):
            stmt = (
                update(Inventory)
                .where(Inventory.id == inventory_id, Inventory.version == patch.version)
                .values(version=Inventory.version + 1, **values)
                .execution_options(synchronize_session=False)
            )
            result = await self.db.execute(stmt)
            if result.rowcount != 1:
                current = await self._load_inventory(inventory_id)
                if current is None:
                    raise NotFoundError("Inventory not found")
                logger.info(
                    "Version conflict on inventory %s: expected %s, stored %s (%s)",
                    inventory_id, patch.version, current.version, principal.email,
                )
                raise VersionConflict(
                    INVENTORY_CONFLICT_MESSAGE,
                    current=self.inventory_to_out(current).model_dump(mode="json", by_alias=True),
                )

            if tags is not None:
                await self._set_tags(inventory_id, tags)

            out = self.inventory_to_out(await self._load_inventory(inventory_id))

        return out

    async def _set_tags(self, inventory_id: int, names: Sequence[str]) -> None:
        """Make the inventory's tag set exactly ``names`` (already normalized)."""
        if not names:
            await self.db.execute(delete(InventoryTag).where(InventoryTag.inventory_id == inventory_id))
            return

        dialect = self.db.get_bind().dialect.name
        insert_fn = pg_insert if dialect == "postgresql" else sqlite_insert
        await self.db.execute(
            insert_fn(Tag)
            .values([{"name": name} for name in names])
            .on_conflict_do_nothing(index_elements=["name"])
        )

        result = await self.db.execute(select(Tag.id).where(Tag.name.in_(names)))
        tag_ids = set(result.scalars().all())

        await self.db.execute(
            delete(InventoryTag).where(
                InventoryTag.inventory_id == inventory_id,
                InventoryTag.tag_id.not_in(list(tag_ids)),
            )
        )
        result = await self.db.execute(
            select(InventoryTag.tag_id).where(InventoryTag.inventory_id == inventory_id)
        )
        missing = tag_ids - set(result.scalars().all())
        if missing:
            await self.db.execute(
                insert(InventoryTag),
                [{"inventory_id": inventory_id, "tag_id": tag_id} for tag_id in sorted(missing)],
            )

    # =========================================================================
    # Items
    # =========================================================================

    async def _load_item(self, item_id: int) -> Optional[Item]:
        stmt = (
            select(Item)
            .options(selectinload(Item.created_by))
            .options(selectinload(Item.field_values).selectinload(ItemFieldValue.field))
            .where(Item.id == item_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    def item_to_out(item: Item) -> ItemOut:
        fields = []
        for row in sorted(item.field_values, key=lambda v: (v.field.order_index, v.field_id)):
            value = from_row(row, row.field.field_type)
            columns = to_columns(value) if value is not None else {name: None for name in SLOT_NAMES}
            fields.append(ItemFieldOut(
                field_id=row.field_id,
                title=row.field.title,
                type=row.field.field_type,
                description=row.field.description,
                **columns,
            ))
        return ItemOut(
            id=item.id,
            inventory_id=item.inventory_id,
            custom_id=item.custom_id,
            version=item.version,
            created_at=item.created_at,
            created_by_name=item.created_by.display_name,
            fields=fields,
        )

    async def get_item(self, item_id: int) -> ItemOut:
        item = await self._load_item(item_id)
        if item is None:
            raise NotFoundError("Item not found")
        return self.item_to_out(item)

    async def list_items(self, inventory_id: int) -> List[ItemSummary]:
        if await self.db.get(Inventory, inventory_id) is None:
            raise NotFoundError("Inventory not found")
        stmt = (
            select(Item)
            .options(selectinload(Item.created_by))
            .where(Item.inventory_id == inventory_id)
            .order_by(Item.created_at.desc(), Item.id.desc())
        )
        result = await self.db.execute(stmt)
        return [
            ItemSummary(
                id=item.id,
                custom_id=item.custom_id,
                version=item.version,
                created_by_name=item.created_by.display_name,
                created_at=item.created_at,
            )
            for item in result.scalars().all()
        ]

    async def preview_custom_id(self, inventory_id: int) -> str:
        """One sample identifier from the current format; nothing is reserved."""
        inventory = await self.db.get(Inventory, inventory_id, populate_existing=True)
        if inventory is None:
            raise NotFoundError("Inventory not found")
        elements = await self.schema.load_elements(inventory_id)
        return compose(elements, inventory.item_sequence)

    async def create_item(self, principal: Principal, inventory_id: int, data: ItemCreate) -> ItemOut:
        """
        Insert an item under the per-inventory custom ID constraint.

        The sequence counter is bumped in the same transaction, so concurrent
        creations never compose the same sequence number. A duplicate custom
        ID raises UniquenessConflict and nothing is inserted; regenerating and
        retrying is left to the caller.
        """
        custom_id = _clean_custom_id(data.custom_id)

        async with transaction(self.db):
            result = await self.db.execute(
                update(Inventory)
                .where(Inventory.id == inventory_id)
                # counter bump only; the inventory itself is not edited
                .values(item_sequence=Inventory.item_sequence + 1, updated_at=Inventory.updated_at)
                .returning(Inventory.item_sequence)
                .execution_options(synchronize_session=False)
            )
            sequence = result.scalar_one_or_none()
            if sequence is None:
                raise NotFoundError("Inventory not found")

            if custom_id is None:
                elements = await self.schema.load_elements(inventory_id)
                custom_id = compose(elements, sequence - 1)

            item = Item(
                inventory_id=inventory_id,
                custom_id=custom_id,
                version=1,
                created_by_id=principal.id,
            )
            self.db.add(item)
            try:
                await self.db.flush()
            except IntegrityError as e:
                logger.info("Duplicate custom ID %r in inventory %s", custom_id, inventory_id)
                raise UniquenessConflict(DUPLICATE_CUSTOM_ID_MESSAGE) from e

            if data.fields:
                await self._apply_field_values(item.id, inventory_id, data.fields)

            out = self.item_to_out(await self._load_item(item.id))

        return out

    async def update_item(self, principal: Principal, item_id: int, patch: ItemUpdate) -> ItemOut:
        """
        Version-checked item update.

        The conditional write happens first; a stale version raises
        VersionConflict (with the current item) before any field value is
        touched. Submitted values naming unknown fields are dropped; empty
        values remove the stored value for that field.
        """
        values: Dict[str, Any] = {}
        custom_id = _clean_custom_id(patch.custom_id)
        if custom_id is not None:
            values["custom_id"] = custom_id

        async with transaction(self.db):
            stmt = (
                update(Item)
                .where(Item.id == item_id, Item.version == patch.version)
                .values(version=Item.version + 1, **values)
                .execution_options(synchronize_session=False)
            )
            try:
                result = await self.db.execute(stmt)
            except IntegrityError as e:
                logger.info("Duplicate custom ID %r on item %s", custom_id, item_id)
                raise UniquenessConflict(DUPLICATE_CUSTOM_ID_MESSAGE) from e

            if result.rowcount != 1:
                current = await self._load_item(item_id)
                if current is None:
                    raise NotFoundError("Item not found")
                logger.info(
                    "Version conflict on item %s: expected %s, stored %s (%s)",
                    item_id, patch.version, current.version, principal.email,
                )
                raise VersionConflict(
                    ITEM_CONFLICT_MESSAGE,
                    current=self.item_to_out(current).model_dump(mode="json", by_alias=True),
                )

            if patch.fields is not None:
                result = await self.db.execute(select(Item.inventory_id).where(Item.id == item_id))
                await self._apply_field_values(item_id, result.scalar_one(), patch.fields)

            out = self.item_to_out(await self._load_item(item_id))

        return out

    async def _apply_field_values(self, item_id: int, inventory_id: int, submitted: Sequence) -> None:
        """Upsert/delete sparse values against the inventory's current fields."""
        fields = {f.id: f for f in await self.schema.load_fields(inventory_id)}

        # last entry per field wins
        latest = {}
        for entry in submitted:
            if entry.field_id in fields:
                latest[entry.field_id] = entry

        result = await self.db.execute(
            select(ItemFieldValue).where(ItemFieldValue.item_id == item_id)
        )
        existing = {row.field_id: row for row in result.scalars().all()}

        for field_id, entry in latest.items():
            value = resolve_value(fields[field_id].field_type, entry)
            row = existing.get(field_id)
            if value is None:
                if row is not None:
                    await self.db.delete(row)
                continue
            columns = to_columns(value)
            if row is None:
                self.db.add(ItemFieldValue(item_id=item_id, field_id=field_id, **columns))
            else:
                for name, slot in columns.items():
                    setattr(row, name, slot)

        await self.db.flush()
