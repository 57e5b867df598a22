"""Scheduling and assistant engine for calboard."""

from calboard.engine.bucketing import classify, group_by_column, column_title
from calboard.engine.free_slots import find_free_slots
from calboard.engine.moves import plan_column_move, plan_date_move, apply_update
from calboard.engine.importer import map_import_item, map_import_items, ImportItemError

__all__ = [
    "classify",
    "group_by_column",
    "column_title",
    "find_free_slots",
    "plan_column_move",
    "plan_date_move",
    "apply_update",
    "map_import_item",
    "map_import_items",
    "ImportItemError",
]
