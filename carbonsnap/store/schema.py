"""Typed mirror of the hosted store's tables.

Each table has three shapes: ``Row`` (what a select returns), ``Insert``
(identity and server-defaulted columns optional) and ``Update`` (every
column optional). Rows are plain dicts as returned by the store client.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, TypedDict

Json = Any


@dataclass(frozen=True)
class Relationship:
    """A foreign key from ``columns`` to ``referenced_relation``."""

    foreign_key_name: str
    columns: tuple[str, ...]
    referenced_relation: str
    referenced_columns: tuple[str, ...]
    is_one_to_one: bool = False


# ── receipt_items ──


class ReceiptItemsRow(TypedDict):
    carbon_category: str | None
    carbon_footprint: float
    category: str | None
    created_at: str
    id: str
    product_name: str
    quantity: str | None
    scanned_item_id: str | None
    unit_price: float | None


class _ReceiptItemsInsertRequired(TypedDict):
    carbon_footprint: float
    product_name: str


class ReceiptItemsInsert(_ReceiptItemsInsertRequired, total=False):
    carbon_category: str | None
    category: str | None
    created_at: str
    id: str
    quantity: str | None
    scanned_item_id: str | None
    unit_price: float | None


class ReceiptItemsUpdate(TypedDict, total=False):
    carbon_category: str | None
    carbon_footprint: float
    category: str | None
    created_at: str
    id: str
    product_name: str
    quantity: str | None
    scanned_item_id: str | None
    unit_price: float | None


# ── scanned_items ──


class ScannedItemsRow(TypedDict):
    barcode: str | None
    brand: str | None
    carbon_category: str | None
    carbon_footprint: float
    created_at: str
    details: Json | None
    id: str
    image_url: str | None
    item_type: str
    product_name: str | None
    receipt_date: str | None
    receipt_total: float | None
    scan_method: str | None
    store_name: str | None
    updated_at: str
    user_id: str | None


class _ScannedItemsInsertRequired(TypedDict):
    carbon_footprint: float
    item_type: str


class ScannedItemsInsert(_ScannedItemsInsertRequired, total=False):
    barcode: str | None
    brand: str | None
    carbon_category: str | None
    created_at: str
    details: Json | None
    id: str
    image_url: str | None
    product_name: str | None
    receipt_date: str | None
    receipt_total: float | None
    scan_method: str | None
    store_name: str | None
    updated_at: str
    user_id: str | None


class ScannedItemsUpdate(TypedDict, total=False):
    barcode: str | None
    brand: str | None
    carbon_category: str | None
    carbon_footprint: float
    created_at: str
    details: Json | None
    id: str
    image_url: str | None
    item_type: str
    product_name: str | None
    receipt_date: str | None
    receipt_total: float | None
    scan_method: str | None
    store_name: str | None
    updated_at: str
    user_id: str | None


# ── user_goals ──


class UserGoalsRow(TypedDict):
    created_at: str
    id: str
    monthly_goal: float | None
    updated_at: str
    user_id: str | None
    weekly_goal: float | None
    yearly_goal: float | None


class UserGoalsInsert(TypedDict, total=False):
    created_at: str
    id: str
    monthly_goal: float | None
    updated_at: str
    user_id: str | None
    weekly_goal: float | None
    yearly_goal: float | None


class UserGoalsUpdate(UserGoalsInsert, total=False):
    pass


# ── reference tables (read-only from this client) ──


class CarbonCategoryRow(TypedDict):
    id: str
    name: str
    base_emission_factor: float
    unit: str
    description: str | None
    created_at: str


class UserAchievementRow(TypedDict):
    id: str
    user_id: str
    achievement_type: str
    title: str
    description: str | None
    icon: str | None
    earned_date: str


@dataclass(frozen=True)
class TableSchema:
    name: str
    row: type
    insert: type | None = None
    update: type | None = None
    relationships: tuple[Relationship, ...] = field(default_factory=tuple)


TABLES: dict[str, TableSchema] = {
    "receipt_items": TableSchema(
        name="receipt_items",
        row=ReceiptItemsRow,
        insert=ReceiptItemsInsert,
        update=ReceiptItemsUpdate,
        relationships=(
            Relationship(
                foreign_key_name="receipt_items_scanned_item_id_fkey",
                columns=("scanned_item_id",),
                referenced_relation="scanned_items",
                referenced_columns=("id",),
            ),
        ),
    ),
    "scanned_items": TableSchema(
        name="scanned_items",
        row=ScannedItemsRow,
        insert=ScannedItemsInsert,
        update=ScannedItemsUpdate,
    ),
    "user_goals": TableSchema(
        name="user_goals",
        row=UserGoalsRow,
        insert=UserGoalsInsert,
        update=UserGoalsUpdate,
    ),
    "carbon_categories": TableSchema(name="carbon_categories", row=CarbonCategoryRow),
    "user_achievements": TableSchema(name="user_achievements", row=UserAchievementRow),
}
