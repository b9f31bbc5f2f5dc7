"""User carbon goals (weekly / monthly / yearly kg CO2e)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .schema import UserGoalsInsert, UserGoalsRow


class GoalStore:
    """Manages the user_goals table."""

    def __init__(self, client: Any) -> None:
        self._client = client

    def get_goals(self, user_id: str) -> UserGoalsRow | None:
        resp = (
            self._client.table("user_goals")
            .select("*")
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        return resp.data[0] if resp.data else None

    def set_goals(
        self,
        user_id: str,
        *,
        weekly: float | None = None,
        monthly: float | None = None,
        yearly: float | None = None,
    ) -> UserGoalsRow:
        """Create or update the user's goals.

        Only the given periods are written; on first insert the others take
        the table defaults.
        """
        row: UserGoalsInsert = {"user_id": user_id}
        if weekly is not None:
            row["weekly_goal"] = weekly
        if monthly is not None:
            row["monthly_goal"] = monthly
        if yearly is not None:
            row["yearly_goal"] = yearly

        resp = (
            self._client.table("user_goals")
            .upsert(row, on_conflict="user_id")
            .execute()
        )
        return resp.data[0]
