# inventory_studio/db_models.py
"""
SQLAlchemy ORM Models for Inventory Studio.

Inventories own an ordered field schema and an ordered custom-ID format.
Items carry sparse, typed field values (one active slot per row).
"""
from __future__ import annotations
from datetime import datetime
from typing import Optional, List
import enum

from sqlalchemy import (
    String, Integer, BigInteger, Boolean, Text, DateTime, Float,
    ForeignKey, Index, CheckConstraint, UniqueConstraint,
    Enum as SQLEnum, func
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inventory_studio.database import Base

# SQLite only autoincrements INTEGER PRIMARY KEY
BigIntPK = BigInteger().with_variant(Integer, "sqlite")

# ============================================================================
# ENUMS
# ============================================================================

class InventoryCategory(str, enum.Enum):
    EQUIPMENT = "EQUIPMENT"
    FURNITURE = "FURNITURE"
    BOOK = "BOOK"
    OTHER = "OTHER"


class FieldType(str, enum.Enum):
    SINGLE_LINE_TEXT = "SINGLE_LINE_TEXT"
    MULTI_LINE_TEXT = "MULTI_LINE_TEXT"
    NUMBER = "NUMBER"
    LINK = "LINK"
    BOOLEAN = "BOOLEAN"


class CustomIdElementType(str, enum.Enum):
    FIXED_TEXT = "FIXED_TEXT"
    RANDOM_20_BITS = "RANDOM_20_BITS"
    RANDOM_32_BITS = "RANDOM_32_BITS"
    RANDOM_6_DIGITS = "RANDOM_6_DIGITS"
    RANDOM_9_DIGITS = "RANDOM_9_DIGITS"
    GUID = "GUID"
    DATETIME = "DATETIME"
    SEQUENCE = "SEQUENCE"


# ============================================================================
# MIXIN for updated_at
# ============================================================================

class TimestampMixin:
    """Mixin for created_at and updated_at columns."""
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=func.now(),
        onupdate=func.now(),
        nullable=False
    )


# ============================================================================
# 1. USERS
# ============================================================================

class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[Optional[str]] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=func.now(), nullable=False)

    @property
    def display_name(self) -> str:
        return self.name or self.email


# ============================================================================
# 2. INVENTORIES
# ============================================================================

class Inventory(TimestampMixin, Base):
    __tablename__ = "inventories"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    category: Mapped[InventoryCategory] = mapped_column(
        SQLEnum(InventoryCategory, name="inventory_category"),
        default=InventoryCategory.OTHER,
        nullable=False
    )
    image_url: Mapped[Optional[str]] = mapped_column(Text)
    is_public: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    # Last sequence number handed out; bumped in the same transaction as the item insert
    item_sequence: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    owner_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)

    # Relationships
    owner: Mapped["User"] = relationship()
    tag_links: Mapped[List["InventoryTag"]] = relationship(
        back_populates="inventory",
        cascade="all, delete-orphan",
    )
    fields: Mapped[List["InventoryField"]] = relationship(
        back_populates="inventory",
        order_by="InventoryField.order_index",
        cascade="all, delete-orphan",
    )
    custom_id_elements: Mapped[List["CustomIdElement"]] = relationship(
        back_populates="inventory",
        order_by="CustomIdElement.order_index",
        cascade="all, delete-orphan",
    )
    items: Mapped[List["Item"]] = relationship(back_populates="inventory")

    __table_args__ = (
        CheckConstraint("version >= 1", name="chk_inventories_version_positive"),
        Index("idx_inventories_owner", "owner_id"),
    )

    @property
    def tag_names(self) -> List[str]:
        return sorted(link.tag.name for link in self.tag_links)


# ============================================================================
# 3. TAGS
# ============================================================================

class Tag(Base):
    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=func.now(), nullable=False)


class InventoryTag(Base):
    __tablename__ = "inventory_tags"

    inventory_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("inventories.id", ondelete="CASCADE"), primary_key=True)
    tag_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True)

    inventory: Mapped["Inventory"] = relationship(back_populates="tag_links")
    tag: Mapped["Tag"] = relationship()


# ============================================================================
# 4. INVENTORY FIELDS (per-inventory schema)
# ============================================================================

class InventoryField(Base):
    __tablename__ = "inventory_fields"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    inventory_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("inventories.id", ondelete="CASCADE"), nullable=False)
    field_type: Mapped[FieldType] = mapped_column(
        SQLEnum(FieldType, name="inventory_field_type"),
        nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    show_in_table: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False)

    inventory: Mapped["Inventory"] = relationship(back_populates="fields")

    __table_args__ = (
        CheckConstraint("order_index >= 0", name="chk_inventory_fields_order_index"),
        Index("idx_inventory_fields_inventory", "inventory_id", "order_index"),
    )


# ============================================================================
# 5. ITEMS
# ============================================================================

class Item(TimestampMixin, Base):
    __tablename__ = "items"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    inventory_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("inventories.id", ondelete="CASCADE"), nullable=False)
    custom_id: Mapped[str] = mapped_column(String(255), nullable=False)
    version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    created_by_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)

    # Relationships
    inventory: Mapped["Inventory"] = relationship(back_populates="items")
    created_by: Mapped["User"] = relationship()
    field_values: Mapped[List["ItemFieldValue"]] = relationship(
        back_populates="item",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        UniqueConstraint("inventory_id", "custom_id", name="uq_items_inventory_custom_id"),
        CheckConstraint("version >= 1", name="chk_items_version_positive"),
        Index("idx_items_inventory_created", "inventory_id", "created_at"),
    )


# ============================================================================
# 6. ITEM FIELD VALUES (sparse, exactly one typed slot set)
# ============================================================================

class ItemFieldValue(Base):
    __tablename__ = "item_field_values"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    item_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("items.id", ondelete="CASCADE"), nullable=False)
    field_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("inventory_fields.id", ondelete="CASCADE"), nullable=False)
    value_string: Mapped[Optional[str]] = mapped_column(Text)
    value_number: Mapped[Optional[float]] = mapped_column(Float)
    value_boolean: Mapped[Optional[bool]] = mapped_column(Boolean)
    value_link: Mapped[Optional[str]] = mapped_column(Text)

    # Relationships
    item: Mapped["Item"] = relationship(back_populates="field_values")
    field: Mapped["InventoryField"] = relationship()

    __table_args__ = (
        UniqueConstraint("item_id", "field_id", name="uq_item_field_values_item_field"),
        CheckConstraint(
            "(CASE WHEN value_string IS NOT NULL THEN 1 ELSE 0 END)"
            " + (CASE WHEN value_number IS NOT NULL THEN 1 ELSE 0 END)"
            " + (CASE WHEN value_boolean IS NOT NULL THEN 1 ELSE 0 END)"
            " + (CASE WHEN value_link IS NOT NULL THEN 1 ELSE 0 END) = 1",
            name="chk_item_field_values_single_slot",
        ),
        Index("idx_item_field_values_field", "field_id"),
    )


# ============================================================================
# 7. CUSTOM ID ELEMENTS (per-inventory identifier format)
# ============================================================================

class CustomIdElement(Base):
    __tablename__ = "custom_id_elements"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    inventory_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("inventories.id", ondelete="CASCADE"), nullable=False)
    element_type: Mapped[CustomIdElementType] = mapped_column(
        SQLEnum(CustomIdElementType, name="custom_id_element_type"),
        nullable=False
    )
    order_index: Mapped[int] = mapped_column(Integer, nullable=False)
    fixed_text: Mapped[Optional[str]] = mapped_column(Text)
    number_width: Mapped[Optional[int]] = mapped_column(Integer)

    inventory: Mapped["Inventory"] = relationship(back_populates="custom_id_elements")

    __table_args__ = (
        CheckConstraint("number_width IS NULL OR number_width > 0", name="chk_custom_id_elements_width"),
        Index("idx_custom_id_elements_inventory", "inventory_id", "order_index"),
    )
