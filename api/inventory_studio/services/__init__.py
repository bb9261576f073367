# inventory_studio/services/__init__.py
"""
Business logic services for Inventory Studio.
"""
from inventory_studio.services.entities import VersionedEntityStore
from inventory_studio.services.schema_registry import SchemaRegistry
from inventory_studio.services.stats import compute_stats
from inventory_studio.services.custom_ids import compose

__all__ = [
    "VersionedEntityStore",
    "SchemaRegistry",
    "compute_stats",
    "compose",
]
