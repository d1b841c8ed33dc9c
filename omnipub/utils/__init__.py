"""Utility exports."""

from .file_helper import discover_items, ensure_parent, read_item_list, write_item_list
from .logging import configure_logging, get_logger

__all__ = [
    "discover_items",
    "ensure_parent",
    "read_item_list",
    "write_item_list",
    "configure_logging",
    "get_logger",
]
