# inventory_studio/services/stats.py
"""
Read-time statistics over typed field values.

Recomputed on every call: one pass over the inventory's NUMBER and text
values, no incremental bookkeeping.
"""
from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from inventory_studio.db_models import Inventory, InventoryField, Item, ItemFieldValue, FieldType
from inventory_studio.errors import NotFoundError
from inventory_studio.models import InventoryStats, NumericFieldStats, TextFieldStats, TextValueCount
from inventory_studio.services.field_values import TEXT_TYPES

TOP_TEXT_VALUES = 5

# (field_id, title, field_type, value_string, value_number)
StatsRow = Tuple[int, str, FieldType, Optional[str], Optional[float]]


@dataclass
class _NumericAccumulator:
    title: str
    count: int = 0
    min: float = 0.0
    max: float = 0.0
    total: float = 0.0

    def add(self, value: float) -> None:
        if self.count == 0:
            self.min = self.max = value
        else:
            self.min = min(self.min, value)
            self.max = max(self.max, value)
        self.count += 1
        self.total += value


@dataclass
class _TextAccumulator:
    title: str
    counts: Counter = field(default_factory=Counter)


def aggregate(item_count: int, rows: Iterable[StatsRow]) -> InventoryStats:
    numeric: Dict[int, _NumericAccumulator] = {}
    text: Dict[int, _TextAccumulator] = {}

    for field_id, title, field_type, value_string, value_number in rows:
        field_type = FieldType(field_type)
        if field_type == FieldType.NUMBER:
            if value_number is None:
                continue
            numeric.setdefault(field_id, _NumericAccumulator(title)).add(value_number)
        elif field_type in TEXT_TYPES:
            value = (value_string or "").strip()
            if not value:
                continue
            text.setdefault(field_id, _TextAccumulator(title)).counts[value] += 1

    numeric_fields = [
        NumericFieldStats(
            field_id=field_id,
            title=acc.title,
            count=acc.count,
            min=acc.min,
            max=acc.max,
            avg=acc.total / acc.count if acc.count > 0 else 0.0,
        )
        for field_id, acc in numeric.items()
    ]
    numeric_fields.sort(key=lambda s: (s.title, s.field_id))

    text_fields = []
    for field_id, acc in text.items():
        ranked = sorted(acc.counts.items(), key=lambda kv: (-kv[1], kv[0]))[:TOP_TEXT_VALUES]
        text_fields.append(TextFieldStats(
            field_id=field_id,
            title=acc.title,
            top_values=[TextValueCount(value=value, count=count) for value, count in ranked],
        ))
    text_fields.sort(key=lambda s: (s.title, s.field_id))

    return InventoryStats(
        item_count=item_count,
        numeric_fields=numeric_fields,
        text_fields=text_fields,
    )


async def compute_stats(db: AsyncSession, inventory_id: int) -> InventoryStats:
    inventory = await db.get(Inventory, inventory_id)
    if inventory is None:
        raise NotFoundError("Inventory not found")

    count_stmt = select(func.count()).select_from(Item).where(Item.inventory_id == inventory_id)
    item_count = (await db.execute(count_stmt)).scalar() or 0

    stmt = (
        select(
            InventoryField.id,
            InventoryField.title,
            InventoryField.field_type,
            ItemFieldValue.value_string,
            ItemFieldValue.value_number,
        )
        .join(ItemFieldValue, ItemFieldValue.field_id == InventoryField.id)
        .join(Item, Item.id == ItemFieldValue.item_id)
        .where(
            Item.inventory_id == inventory_id,
            InventoryField.field_type.in_([FieldType.NUMBER, *TEXT_TYPES]),
        )
    )
    result = await db.execute(stmt)
    return aggregate(item_count, result.all())
