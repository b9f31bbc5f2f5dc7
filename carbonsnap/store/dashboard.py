"""Emission totals per period, compared against the user's goals."""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from .goals import GoalStore

logger = logging.getLogger(__name__)

TIMEFRAMES = ("week", "month", "year")

# kg CO2e targets used when the user has not set goals
DEFAULT_GOALS: dict[str, float] = {"week": 15.0, "month": 60.0, "year": 700.0}

_GOAL_COLUMNS = {"week": "weekly_goal", "month": "monthly_goal", "year": "yearly_goal"}
_RECENT_LIMIT = 10


@dataclass
class CategoryEmissions:
    name: str
    emissions_kg: float
    count: int
    percentage: int


@dataclass
class DailyEmissions:
    date: str  # YYYY-MM-DD (UTC)
    day: str  # Mon, Tue, ...
    emissions_kg: float


@dataclass
class RecentScan:
    id: str
    name: str | None
    carbon_kg: float
    category: str | None
    created_at: str
    item_type: str


@dataclass
class EmissionsSummary:
    """A user's emissions over one timeframe."""

    timeframe: str
    total_kg: float
    previous_kg: float
    change_pct: float  # vs. the previous period; 0 when there is none
    goal_kg: float
    scans: int
    categories: list[CategoryEmissions] = field(default_factory=list)
    daily: list[DailyEmissions] = field(default_factory=list)
    recent: list[RecentScan] = field(default_factory=list)

    @property
    def remaining_kg(self) -> float:
        return round(self.goal_kg - self.total_kg, 1)

    @property
    def on_track(self) -> bool:
        return self.total_kg <= self.goal_kg


def period_start(timeframe: str, end: datetime) -> datetime:
    """Return the start of the timeframe ending at ``end``.

    Month and year steps keep the day of month, clamped to the target
    month's length (Mar 31 -> Feb 29).
    """
    match timeframe:
        case "week":
            return end - timedelta(days=7)
        case "month":
            year, month = (end.year, end.month - 1) if end.month > 1 else (end.year - 1, 12)
        case "year":
            year, month = end.year - 1, end.month
        case _:
            raise ValueError(
                f"Unknown timeframe: {timeframe!r} (choose one of week / month / year)"
            )
    day = min(end.day, calendar.monthrange(year, month)[1])
    return end.replace(year=year, month=month, day=day)


class DashboardStore:
    """Read-only emission summaries over scanned_items and user_goals."""

    def __init__(self, client: Any) -> None:
        self._client = client

    def emissions_summary(
        self,
        user_id: str,
        timeframe: str = "month",
        *,
        now: datetime | None = None,
    ) -> EmissionsSummary:
        """Summarize the user's emissions for the timeframe ending ``now``."""
        end = now or datetime.now(timezone.utc)
        start = period_start(timeframe, end)
        prev_start = period_start(timeframe, start)

        resp = (
            self._client.table("scanned_items")
            .select("*, receipt_items(*)")
            .eq("user_id", user_id)
            .gte("created_at", start.isoformat())
            .lte("created_at", end.isoformat())
            .order("created_at", desc=True)
            .execute()
        )
        rows = list(resp.data)

        prev_resp = (
            self._client.table("scanned_items")
            .select("carbon_footprint")
            .eq("user_id", user_id)
            .gte("created_at", prev_start.isoformat())
            .lt("created_at", start.isoformat())
            .execute()
        )

        total = sum(_footprint(r) for r in rows)
        previous = sum(_footprint(r) for r in prev_resp.data)
        change = (total - previous) / previous * 100 if previous > 0 else 0.0

        summary = EmissionsSummary(
            timeframe=timeframe,
            total_kg=round(total, 1),
            previous_kg=round(previous, 1),
            change_pct=round(change, 1),
            goal_kg=self._goal(user_id, timeframe),
            scans=len(rows),
            categories=_categories(rows, total),
            daily=_daily(rows, end),
            recent=[_recent(r) for r in rows[:_RECENT_LIMIT]],
        )
        logger.info(
            "Emissions for %s over the last %s: %.1f / %.1f kg CO2e (%d scans)",
            user_id,
            timeframe,
            summary.total_kg,
            summary.goal_kg,
            summary.scans,
        )
        return summary

    def _goal(self, user_id: str, timeframe: str) -> float:
        goals = GoalStore(self._client).get_goals(user_id) or {}
        value = goals.get(_GOAL_COLUMNS[timeframe])
        return float(value) if value is not None else DEFAULT_GOALS[timeframe]


def _footprint(row: dict) -> float:
    return float(row.get("carbon_footprint") or 0)


def _categories(rows: list[dict], total: float) -> list[CategoryEmissions]:
    """Group emissions by item category; receipts contribute per line item."""
    sums: dict[str, list[float]] = {}

    def add(category: str | None, kg: float) -> None:
        entry = sums.setdefault((category or "other").lower(), [0.0, 0])
        entry[0] += kg
        entry[1] += 1

    for row in rows:
        items = row.get("receipt_items")
        if row.get("item_type") == "receipt" and items:
            for item in items:
                add(item.get("category"), _footprint(item))
        else:
            details = row.get("details") or {}
            add(details.get("category") if isinstance(details, dict) else None, _footprint(row))

    result = [
        CategoryEmissions(
            name=name.capitalize(),
            emissions_kg=round(kg, 1),
            count=int(count),
            percentage=round(kg / total * 100) if total > 0 else 0,
        )
        for name, (kg, count) in sums.items()
    ]
    result.sort(key=lambda c: c.emissions_kg, reverse=True)
    return result


def _daily(rows: list[dict], end: datetime) -> list[DailyEmissions]:
    """Emissions per UTC day for the seven days ending at ``end``."""
    last = end.astimezone(timezone.utc).date()
    days = [last - timedelta(days=i) for i in range(6, -1, -1)]
    sums = {d.isoformat(): 0.0 for d in days}
    for row in rows:
        day = str(row.get("created_at") or "")[:10]
        if day in sums:
            sums[day] += _footprint(row)
    result = []
    for d in days:
        key = d.isoformat()
        result.append(
            DailyEmissions(date=key, day=d.strftime("%a"), emissions_kg=round(sums[key], 1))
        )
    return result


def _recent(row: dict) -> RecentScan:
    is_receipt = row.get("item_type") == "receipt"
    return RecentScan(
        id=row.get("id", ""),
        name=f"{row.get('store_name')} Receipt" if is_receipt else row.get("product_name"),
        carbon_kg=_footprint(row),
        category=row.get("carbon_category"),
        created_at=row.get("created_at", ""),
        item_type=row.get("item_type", ""),
    )
