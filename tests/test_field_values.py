import math

import pytest
from pydantic import ValidationError

from inventory_studio.db_models import FieldType, ItemFieldValue
from inventory_studio.models import FieldValueIn
from inventory_studio.services.field_values import (
    TextValue, NumberValue, BooleanValue, LinkValue, resolve_value, to_columns, from_row,
)


def payload(**kwargs):
    return FieldValueIn(field_id=1, **kwargs)


def test_text_field_reads_only_string_slot():
    value = resolve_value(FieldType.SINGLE_LINE_TEXT, payload(value_string="a ", value_number=3))
    assert value == TextValue("a ")
    assert to_columns(value) == {"value_string": "a ", "value_number": None, "value_boolean": None, "value_link": None}


def test_blank_text_is_empty():
    assert resolve_value(FieldType.MULTI_LINE_TEXT, payload(value_string="   ")) is None
    assert resolve_value(FieldType.MULTI_LINE_TEXT, payload()) is None


def test_number_slot():
    assert resolve_value(FieldType.NUMBER, payload(value_number=2)) == NumberValue(2.0)
    assert resolve_value(FieldType.NUMBER, payload(value_string="2")) is None
    assert resolve_value(FieldType.NUMBER, payload(value_number=math.nan)) is None


def test_boolean_false_is_a_value():
    value = resolve_value(FieldType.BOOLEAN, payload(value_boolean=False))
    assert value == BooleanValue(False)
    assert to_columns(value)["value_boolean"] is False


def test_link_is_trimmed():
    assert resolve_value(FieldType.LINK, payload(value_link=" https://example.com ")) == LinkValue("https://example.com")
    assert resolve_value(FieldType.LINK, payload(value_string="https://example.com")) is None


def test_unknown_type_is_rejected():
    with pytest.raises(ValueError):
        resolve_value("DATE", payload(value_string="x"))


def test_from_row_reads_active_slot():
    row = ItemFieldValue(value_number=4.5)
    assert from_row(row, FieldType.NUMBER) == NumberValue(4.5)
    assert from_row(row, FieldType.SINGLE_LINE_TEXT) is None


def test_number_slot_rejects_booleans():
    with pytest.raises(ValidationError):
        payload(value_number=True)
    assert payload(value_number=3).value_number == 3
    assert payload(value_number=2.5).value_number == 2.5
