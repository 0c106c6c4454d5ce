"""Checklist items: per-facility rows of boolean cleaning statuses."""

from .crud import create_item, get_item, list_items, update_item_field
from .fields import ChecklistField, parse_field

__all__ = [
    "ChecklistField",
    "parse_field",
    "create_item",
    "get_item",
    "list_items",
    "update_item_field",
]
