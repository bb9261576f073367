import pytest

from inventory_studio.db_models import FieldType, CustomIdElementType, InventoryField
from inventory_studio.errors import ValidationFailed
from inventory_studio.models import FieldIn, CustomIdElementIn
from inventory_studio.services.schema_registry import (
    validate_fields, validate_custom_id_elements, match_fields, FieldSpec,
)


def f(type_, title, **kwargs):
    return FieldIn(type=type_, title=title, **kwargs)


def test_fields_are_normalized():
    specs = validate_fields([f("NUMBER", "  Weight ", description="  "), f("BOOLEAN", "Broken", show_in_table=True)])
    assert [(s.field_type, s.title, s.description, s.show_in_table) for s in specs] == [
        (FieldType.NUMBER, "Weight", None, False),
        (FieldType.BOOLEAN, "Broken", None, True),
    ]


def test_blank_title_is_checked_before_type():
    with pytest.raises(ValidationFailed, match="title"):
        validate_fields([f("DATE", "Due"), f("NUMBER", "  ")])


def test_unsupported_type():
    with pytest.raises(ValidationFailed, match="Unsupported field type: DATE"):
        validate_fields([f("DATE", "Due")])


def test_per_type_cap():
    validate_fields([f("NUMBER", str(i)) for i in range(3)])
    with pytest.raises(ValidationFailed, match="Maximum is 3"):
        validate_fields([f("NUMBER", str(i)) for i in range(4)])


def test_cap_is_per_type():
    fields = [f(t.value, f"{t.value}-{i}") for t in FieldType for i in range(3)]
    assert len(validate_fields(fields)) == 15


def test_elements_get_dense_order():
    specs = validate_custom_id_elements([
        CustomIdElementIn(type="SEQUENCE", order_index=10),
        CustomIdElementIn(type="FIXED_TEXT", fixed_text="X-", order_index=3),
        CustomIdElementIn(type="GUID"),
    ])
    assert [(s.element_type, s.order_index) for s in specs] == [
        (CustomIdElementType.GUID, 0),
        (CustomIdElementType.FIXED_TEXT, 1),
        (CustomIdElementType.SEQUENCE, 2),
    ]


def test_element_width_rules():
    with pytest.raises(ValidationFailed):
        validate_custom_id_elements([CustomIdElementIn(type="SEQUENCE", number_width=0)])
    with pytest.raises(ValidationFailed):
        validate_custom_id_elements([CustomIdElementIn(type="RANDOM_6_DIGITS", number_width=17)])
    (spec,) = validate_custom_id_elements([CustomIdElementIn(type="GUID", number_width=5)])
    assert spec.number_width is None
    (spec,) = validate_custom_id_elements([CustomIdElementIn(type="FIXED_TEXT")])
    assert spec.fixed_text == ""


def test_unsupported_element_type():
    with pytest.raises(ValidationFailed):
        validate_custom_id_elements([CustomIdElementIn(type="EMOJI")])


def existing_field(id_, type_, title):
    return InventoryField(id=id_, inventory_id=1, field_type=type_, title=title, order_index=0)


def test_match_by_type_and_title():
    existing = [existing_field(1, FieldType.NUMBER, "Weight"), existing_field(2, FieldType.LINK, "Manual")]
    specs = [FieldSpec(FieldType.BOOLEAN, "Broken"), FieldSpec(FieldType.NUMBER, "Weight")]
    matches = match_fields(existing, specs)
    assert {pos: fld.id for pos, fld in matches.items()} == {1: 1}


def test_match_by_explicit_id_allows_rename_but_not_type_change():
    existing = [existing_field(1, FieldType.NUMBER, "Weight"), existing_field(2, FieldType.LINK, "Manual")]
    specs = [FieldSpec(FieldType.NUMBER, "Mass", id=1), FieldSpec(FieldType.SINGLE_LINE_TEXT, "Manual", id=2)]
    matches = match_fields(existing, specs)
    assert {pos: fld.id for pos, fld in matches.items()} == {0: 1}


def test_each_existing_field_is_claimed_once():
    existing = [existing_field(1, FieldType.NUMBER, "Weight")]
    specs = [FieldSpec(FieldType.NUMBER, "Weight"), FieldSpec(FieldType.NUMBER, "Weight")]
    assert list(match_fields(existing, specs)) == [0]
