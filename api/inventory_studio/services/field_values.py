# inventory_studio/services/field_values.py
"""
Typed field values.

A stored value is a tagged variant selected by the owning field's type:
Text (single/multi-line), Number, Boolean or Link. Only the slot that
matches the field type is read from a submitted payload; the other
slots are ignored. Empty values are never persisted (sparse storage).
"""
from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from inventory_studio.db_models import FieldType, ItemFieldValue


@dataclass(frozen=True)
class TextValue:
    value: str


@dataclass(frozen=True)
class NumberValue:
    value: float


@dataclass(frozen=True)
class BooleanValue:
    value: bool


@dataclass(frozen=True)
class LinkValue:
    value: str


FieldValue = Union[TextValue, NumberValue, BooleanValue, LinkValue]

TEXT_TYPES = (FieldType.SINGLE_LINE_TEXT, FieldType.MULTI_LINE_TEXT)

# Storage column per variant
_COLUMNS = {
    TextValue: "value_string",
    NumberValue: "value_number",
    BooleanValue: "value_boolean",
    LinkValue: "value_link",
}

SLOT_NAMES = tuple(_COLUMNS.values())


def _blank(v: Optional[str]) -> bool:
    return v is None or not v.strip()


def resolve_value(field_type: FieldType, payload) -> Optional[FieldValue]:
    """
    Pick the active slot of a submitted value for ``field_type``.

    ``payload`` is anything exposing value_string / value_number /
    value_boolean / value_link. Returns None when the active slot is empty.
    """
    field_type = FieldType(field_type)

    if field_type in TEXT_TYPES:
        text = payload.value_string
        return None if _blank(text) else TextValue(text)

    if field_type == FieldType.NUMBER:
        number = payload.value_number
        if number is None or isinstance(number, bool):
            return None
        number = float(number)
        if math.isnan(number) or math.isinf(number):
            return None
        return NumberValue(number)

    if field_type == FieldType.BOOLEAN:
        flag = payload.value_boolean
        return None if not isinstance(flag, bool) else BooleanValue(flag)

    if field_type == FieldType.LINK:
        link = payload.value_link
        return None if _blank(link) else LinkValue(link.strip())

    raise ValueError(f"Unsupported field type: {field_type}")


def to_columns(value: FieldValue) -> Dict[str, Any]:
    """Storage columns for a variant; inactive slots are explicitly NULL."""
    columns: Dict[str, Any] = {name: None for name in SLOT_NAMES}
    columns[_COLUMNS[type(value)]] = value.value
    return columns


def from_row(row: ItemFieldValue, field_type: FieldType) -> Optional[FieldValue]:
    """Read the active slot of a stored row back into its variant."""
    field_type = FieldType(field_type)
    if field_type in TEXT_TYPES:
        return None if row.value_string is None else TextValue(row.value_string)
    if field_type == FieldType.NUMBER:
        return None if row.value_number is None else NumberValue(row.value_number)
    if field_type == FieldType.BOOLEAN:
        return None if row.value_boolean is None else BooleanValue(row.value_boolean)
    if field_type == FieldType.LINK:
        return None if row.value_link is None else LinkValue(row.value_link)
    raise ValueError(f"Unsupported field type: {field_type}")
