# inventory_studio/services/custom_ids.py
"""
Custom ID Composer - builds human-facing item identifiers.

An inventory's format is an ordered list of elements (fixed text, random
numbers, GUID, timestamp, sequence). ``compose`` renders them in ascending
``order_index`` and concatenates the parts. Composing is a suggestion, not a
reservation: the item insert is still guarded by the per-inventory unique
constraint and a collision surfaces as ``UniquenessConflict``.
"""
from __future__ import annotations
import secrets
import string
import uuid
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

from inventory_studio.db_models import CustomIdElementType

FALLBACK_PREFIX = "INV-"
FALLBACK_SUFFIX_LENGTH = 6
FALLBACK_ALPHABET = string.digits + string.ascii_uppercase

MAX_NUMBER_WIDTH = 16

# Standard width per width-bearing element type
DEFAULT_WIDTHS = {
    CustomIdElementType.RANDOM_6_DIGITS: 6,
    CustomIdElementType.RANDOM_9_DIGITS: 9,
    CustomIdElementType.SEQUENCE: 6,
}

WIDTH_TYPES = frozenset(DEFAULT_WIDTHS)

# Exclusive upper bound of the secure draw
RANDOM_BOUNDS = {
    CustomIdElementType.RANDOM_20_BITS: 2 ** 20,
    CustomIdElementType.RANDOM_32_BITS: 2 ** 31,
    CustomIdElementType.RANDOM_6_DIGITS: 10 ** 6,
    CustomIdElementType.RANDOM_9_DIGITS: 10 ** 9,
}

DATETIME_FORMAT = "%Y%m%dT%H%M%S"


def render_element(
    element,
    next_sequence: int,
    now: datetime,
    randbelow: Callable[[int], int] = secrets.randbelow,
    make_uuid: Callable[[], uuid.UUID] = uuid.uuid4,
) -> str:
    """Render a single element (anything with element_type / fixed_text / number_width)."""
    kind = CustomIdElementType(element.element_type)

    if kind == CustomIdElementType.FIXED_TEXT:
        return element.fixed_text or ""

    if kind in (CustomIdElementType.RANDOM_20_BITS, CustomIdElementType.RANDOM_32_BITS):
        return format(randbelow(RANDOM_BOUNDS[kind]), "X")

    if kind in (CustomIdElementType.RANDOM_6_DIGITS, CustomIdElementType.RANDOM_9_DIGITS):
        # zfill never truncates: a value wider than the width is emitted in full
        value = randbelow(RANDOM_BOUNDS[kind])
        return str(value).zfill(element_width(element))

    if kind == CustomIdElementType.GUID:
        return str(make_uuid())

    if kind == CustomIdElementType.DATETIME:
        return now.astimezone(timezone.utc).strftime(DATETIME_FORMAT)

    if kind == CustomIdElementType.SEQUENCE:
        return str(next_sequence).zfill(element_width(element))

    raise ValueError(f"Unsupported custom ID element type: {kind}")


def element_width(element) -> int:
    kind = CustomIdElementType(element.element_type)
    return element.number_width or DEFAULT_WIDTHS[kind]


def fallback_custom_id(randbelow: Callable[[int], int] = secrets.randbelow) -> str:
    suffix = "".join(
        FALLBACK_ALPHABET[randbelow(len(FALLBACK_ALPHABET))]
        for _ in range(FALLBACK_SUFFIX_LENGTH)
    )
    return f"{FALLBACK_PREFIX}{suffix}"


def compose(
    elements: Iterable,
    current_item_count: int,
    now: Optional[datetime] = None,
    randbelow: Callable[[int], int] = secrets.randbelow,
    make_uuid: Callable[[], uuid.UUID] = uuid.uuid4,
) -> str:
    """
    Synthesize a custom ID from an ordered element list.

    Args:
        elements: Format elements; rendered by ascending ``order_index``
        current_item_count: Sequence base; the SEQUENCE element emits this + 1
        now: Instant for DATETIME elements (defaults to the current UTC time)

    Returns:
        The concatenated identifier, or the ``INV-XXXXXX`` fallback when the
        format is empty.
    """
    ordered = sorted(elements, key=lambda e: e.order_index)
    if not ordered:
        return fallback_custom_id(randbelow)

    if now is None:
        now = datetime.now(timezone.utc)
    next_sequence = current_item_count + 1

    return "".join(
        render_element(e, next_sequence, now, randbelow=randbelow, make_uuid=make_uuid)
        for e in ordered
    )
