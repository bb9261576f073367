import re
import uuid
from datetime import datetime, timezone

from inventory_studio.db_models import CustomIdElementType as T
from inventory_studio.services.custom_ids import compose, fallback_custom_id
from inventory_studio.services.schema_registry import ElementSpec

NOW = datetime(2026, 10, 18, 12, 34, 56, tzinfo=timezone.utc)


def el(kind, order=0, text=None, width=None):
    return ElementSpec(element_type=kind, order_index=order, fixed_text=text, number_width=width)


def test_fixed_text_only():
    assert compose([el(T.FIXED_TEXT, text="INV-")], 10, NOW) == "INV-"


def test_empty_fixed_text_renders_nothing():
    assert compose([el(T.FIXED_TEXT, text=None), el(T.SEQUENCE, 1, width=2)], 0, NOW) == "01"


def test_elements_render_in_order_index_order():
    elements = [el(T.SEQUENCE, 2, width=3), el(T.FIXED_TEXT, 0, text="A-"), el(T.FIXED_TEXT, 1, text="B-")]
    assert compose(elements, 0, NOW) == "A-B-001"


def test_sequence_uses_count_plus_one():
    assert compose([el(T.SEQUENCE, width=3)], 4, NOW) == "005"


def test_sequence_default_width():
    assert compose([el(T.SEQUENCE)], 41, NOW) == "000042"


def test_random_six_digits_is_zero_padded():
    for _ in range(200):
        value = compose([el(T.RANDOM_6_DIGITS, width=6)], 0, NOW)
        assert re.fullmatch(r"\d{6}", value)
        assert 0 <= int(value) <= 999999


def test_random_digits_wider_than_width_are_not_truncated():
    value = compose([el(T.RANDOM_9_DIGITS, width=3)], 0, NOW, randbelow=lambda n: 123456789)
    assert value == "123456789"


def test_random_digit_defaults():
    assert compose([el(T.RANDOM_6_DIGITS)], 0, NOW, randbelow=lambda n: 42) == "000042"
    assert compose([el(T.RANDOM_9_DIGITS)], 0, NOW, randbelow=lambda n: 42) == "000000042"


def test_random_bits_are_upper_hex_with_exclusive_bounds():
    bounds = []

    def top(n):
        bounds.append(n)
        return n - 1

    assert compose([el(T.RANDOM_20_BITS)], 0, NOW, randbelow=top) == "FFFFF"
    assert compose([el(T.RANDOM_32_BITS)], 0, NOW, randbelow=top) == "7FFFFFFF"
    assert bounds == [2 ** 20, 2 ** 31]


def test_random_bits_have_no_fixed_width():
    assert compose([el(T.RANDOM_20_BITS)], 0, NOW, randbelow=lambda n: 10) == "A"


def test_guid_is_canonical():
    fixed = uuid.UUID("12345678-1234-5678-1234-567812345678")
    assert compose([el(T.GUID)], 0, NOW, make_uuid=lambda: fixed) == "12345678-1234-5678-1234-567812345678"
    assert re.fullmatch(r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}", compose([el(T.GUID)], 0, NOW))


def test_datetime_is_compact_utc_second_precision():
    assert compose([el(T.DATETIME)], 0, NOW) == "20261018T123456"


def test_empty_format_uses_fallback():
    assert re.fullmatch(r"INV-[0-9A-Z]{6}", compose([], 0, NOW))


def test_fallback_uses_random_source():
    assert fallback_custom_id(randbelow=lambda n: 0) == "INV-000000"
    assert fallback_custom_id(randbelow=lambda n: n - 1) == "INV-ZZZZZZ"
