# inventory_studio/models.py
"""
Request/response models for the HTTP API (camelCase on the wire).
"""
from __future__ import annotations
from datetime import datetime
from typing import Annotated, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StringConstraints, field_validator
from pydantic.alias_generators import to_camel

from inventory_studio.db_models import InventoryCategory, FieldType, CustomIdElementType

# Column limits in db_models
TITLE_MAX_LENGTH = 255
TAG_MAX_LENGTH = 100
CUSTOM_ID_MAX_LENGTH = 255

TagName = Annotated[str, StringConstraints(max_length=TAG_MAX_LENGTH)]


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ============================================================================
# Inventories
# ============================================================================

class InventoryCreate(ApiModel):
    title: str = Field(max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = None
    category: InventoryCategory = InventoryCategory.OTHER
    is_public: bool = False
    tags: Optional[List[TagName]] = None
    image_url: Optional[str] = None

    @field_validator("title")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("title is required")
        return v


class InventoryUpdate(ApiModel):
    title: Optional[str] = Field(None, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = None
    category: Optional[InventoryCategory] = None
    is_public: Optional[bool] = None
    tags: Optional[List[TagName]] = None
    image_url: Optional[str] = None
    version: int

    @field_validator("title")
    @classmethod
    def _strip_optional(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("title cannot be empty")
        return v


class InventoryOut(ApiModel):
    id: int
    title: str
    description: str = ""
    category: InventoryCategory
    is_public: bool
    version: int
    image_url: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    owner_name: str
    created_at: datetime
    updated_at: datetime


# ============================================================================
# Fields (schema)
# ============================================================================

class FieldIn(ApiModel):
    # type/title are validated by the schema registry so the whole list
    # is rejected with one domain error instead of a 422 per entry
    id: Optional[int] = None
    type: str
    title: Optional[str] = Field(None, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = None
    show_in_table: bool = False


class FieldOut(ApiModel):
    id: int
    type: FieldType
    title: str
    description: Optional[str] = None
    show_in_table: bool
    order_index: int


class FieldsReplace(ApiModel):
    fields: List[FieldIn] = Field(default_factory=list)


class FieldList(ApiModel):
    fields: List[FieldOut]


# ============================================================================
# Custom ID format
# ============================================================================

class CustomIdElementIn(ApiModel):
    type: str
    order_index: Optional[int] = None
    fixed_text: Optional[str] = None
    number_width: Optional[int] = None


class CustomIdElementOut(ApiModel):
    id: int
    type: CustomIdElementType
    order_index: int
    fixed_text: Optional[str] = None
    number_width: Optional[int] = None


class CustomIdFormatIn(ApiModel):
    elements: List[CustomIdElementIn] = Field(default_factory=list)


class CustomIdFormat(ApiModel):
    elements: List[CustomIdElementOut]


class CustomIdPreview(ApiModel):
    preview: str


# ============================================================================
# Items
# ============================================================================

class FieldValueIn(ApiModel):
    field_id: int
    value_string: Optional[str] = None
    value_number: Optional[Union[StrictInt, StrictFloat]] = None
    value_boolean: Optional[bool] = None
    value_link: Optional[str] = None


class ItemCreate(ApiModel):
    custom_id: Optional[str] = Field(None, max_length=CUSTOM_ID_MAX_LENGTH)
    fields: Optional[List[FieldValueIn]] = None


class ItemUpdate(ApiModel):
    custom_id: Optional[str] = Field(None, max_length=CUSTOM_ID_MAX_LENGTH)
    version: int
    fields: Optional[List[FieldValueIn]] = None


class ItemFieldOut(ApiModel):
    field_id: int
    title: str
    type: FieldType
    description: Optional[str] = None
    value_string: Optional[str] = None
    value_number: Optional[float] = None
    value_boolean: Optional[bool] = None
    value_link: Optional[str] = None


class ItemOut(ApiModel):
    id: int
    inventory_id: int
    custom_id: str
    version: int
    created_at: datetime
    created_by_name: str
    fields: List[ItemFieldOut] = Field(default_factory=list)


class ItemSummary(ApiModel):
    id: int
    custom_id: str
    version: int
    created_by_name: str
    created_at: datetime


class ItemList(ApiModel):
    items: List[ItemSummary]


# ============================================================================
# Statistics
# ============================================================================

class NumericFieldStats(ApiModel):
    field_id: int
    title: str
    count: int
    min: float
    max: float
    avg: float


class TextValueCount(ApiModel):
    value: str
    count: int


class TextFieldStats(ApiModel):
    field_id: int
    title: str
    top_values: List[TextValueCount]


class InventoryStats(ApiModel):
    item_count: int
    numeric_fields: List[NumericFieldStats]
    text_fields: List[TextFieldStats]
