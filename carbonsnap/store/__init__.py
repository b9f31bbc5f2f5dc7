"""Hosted relational store: schema mirror, client and table accessors."""

from .client import create_store_client
from .dashboard import (
    DEFAULT_GOALS,
    TIMEFRAMES,
    DashboardStore,
    EmissionsSummary,
    period_start,
)
from .goals import GoalStore
from .receipts import ReceiptStore
from .schema import TABLES, Relationship, TableSchema

__all__ = [
    "DEFAULT_GOALS",
    "DashboardStore",
    "EmissionsSummary",
    "GoalStore",
    "ReceiptStore",
    "Relationship",
    "TABLES",
    "TIMEFRAMES",
    "TableSchema",
    "create_store_client",
    "period_start",
]
