"""Supabase repository for meal reminder candidates and push subscriptions."""

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from supabase import Client

from meal_reminders.domain.reminders import (
    Account,
    ClientSnapshot,
    Diet,
    Meal,
    MenuItem,
    NewDietCandidate,
    NotificationPreference,
    PushEndpoint,
)
from meal_reminders.services.clock import as_utc
from meal_reminders.services.dispatch import EndpointStore
from meal_reminders.services.eligibility import NewDietRepository, ReminderRepository

PAGE_SIZE = 1000
IN_FILTER_CHUNK_SIZE = 200


@dataclass
class SupabaseReminderRepository(ReminderRepository, NewDietRepository, EndpointStore):
    """Supabase implementation for reminder reads and endpoint pruning.

    Reads are paged with ``range`` and ``in_`` filters are split into chunks,
    so results are complete past the PostgREST row limit.
    """

    client: Client
    page_size: int = PAGE_SIZE
    chunk_size: int = IN_FILTER_CHUNK_SIZE

    def list_reminder_candidates(
        self, cutoff: datetime, user_id: int | None = None
    ) -> list[ClientSnapshot]:
        """Return linked clients with their latest diet dated on or after cutoff."""
        client_filter: list[int] | None = None
        if user_id is not None:
            client_filter = [
                row["id"]
                for row in self._select("clients", "id", "user_id", [user_id])
            ]
            if not client_filter:
                return []

        if client_filter is None:
            diet_rows = self._fetch_all(lambda: self._recent_diets_query(cutoff))
        else:
            diet_rows = []
            for chunk in self._chunks(client_filter):
                diet_rows.extend(
                    self._fetch_all(
                        lambda chunk=chunk: self._recent_diets_query(cutoff, chunk)
                    )
                )

        latest_by_client: dict[int, dict[str, Any]] = {}
        for row in diet_rows:
            client_id = row.get("client_id")
            if client_id is None:
                continue
            current = latest_by_client.get(client_id)
            if current is None or _is_newer(row, current):
                latest_by_client[client_id] = row
        if not latest_by_client:
            return []

        client_rows = self._load_linked_clients(list(latest_by_client))
        if not client_rows:
            return []

        accounts = self._load_accounts(sorted({row["user_id"] for row in client_rows}))
        meals_by_diet = self._load_meals(
            [latest_by_client[row["id"]]["id"] for row in client_rows]
        )

        snapshots = []
        for row in client_rows:
            diet_row = latest_by_client[row["id"]]
            snapshots.append(
                _snapshot(
                    row,
                    accounts,
                    Diet(
                        id=diet_row["id"],
                        plan_date=_parse_datetime(diet_row.get("tarih")),
                        meals=meals_by_diet.get(diet_row["id"], []),
                    ),
                )
            )
        return snapshots

    def list_new_diets(
        self, since: datetime, until: datetime
    ) -> list[NewDietCandidate]:
        """Return diets created between since and until for linked clients."""
        diet_rows = self._fetch_all(
            lambda: self.client.table("diets")
            .select("id, client_id, created_at")
            .gte("created_at", since.isoformat())
            .lte("created_at", until.isoformat())
            .order("id", desc=False)
        )
        client_ids = sorted(
            {row["client_id"] for row in diet_rows if row.get("client_id") is not None}
        )
        if not client_ids:
            return []

        client_rows = {row["id"]: row for row in self._load_linked_clients(client_ids)}
        if not client_rows:
            return []
        accounts = self._load_accounts(
            sorted({row["user_id"] for row in client_rows.values()})
        )
        return [
            NewDietCandidate(
                diet_id=row["id"],
                created_at=_parse_datetime(row.get("created_at")),
                client=_snapshot(client_rows[row["client_id"]], accounts, None),
            )
            for row in diet_rows
            if row.get("client_id") in client_rows
        ]

    def delete_endpoint(self, endpoint: str) -> None:
        """Delete a push subscription by endpoint."""
        self.client.table("push_subscriptions").delete().eq(
            "endpoint", endpoint
        ).execute()

    def _recent_diets_query(
        self, cutoff: datetime, client_ids: list[int] | None = None
    ) -> Any:
        query = (
            self.client.table("diets")
            .select("id, client_id, tarih")
            .gte("tarih", cutoff.isoformat())
        )
        if client_ids is not None:
            query = query.in_("client_id", client_ids)
        return query.order("id", desc=False)

    def _load_linked_clients(self, client_ids: list[int]) -> list[dict[str, Any]]:
        return [
            row
            for row in self._select(
                "clients", "id, name, surname, user_id", "id", client_ids
            )
            if row.get("user_id") is not None
        ]

    def _load_accounts(self, user_ids: list[int]) -> dict[int, Account]:
        existing = {row["id"] for row in self._select("users", "id", "id", user_ids)}
        preferences = {
            row["user_id"]: NotificationPreference(
                meal_reminders=_flag(row, "meal_reminders"),
                diet_updates=_flag(row, "diet_updates"),
            )
            for row in self._select(
                "notification_preferences",
                "user_id, meal_reminders, diet_updates",
                "user_id",
                user_ids,
            )
        }
        endpoints: dict[int, list[PushEndpoint]] = {}
        for row in self._select(
            "push_subscriptions",
            "user_id, endpoint, auth, p256dh",
            "user_id",
            user_ids,
        ):
            endpoints.setdefault(row["user_id"], []).append(
                PushEndpoint(
                    endpoint=row["endpoint"],
                    p256dh=row.get("p256dh") or "",
                    auth=row.get("auth") or "",
                )
            )
        return {
            user_id: Account(
                id=user_id,
                preference=preferences.get(user_id),
                endpoints=endpoints.get(user_id, []),
            )
            for user_id in user_ids
            if user_id in existing
        }

    def _load_meals(self, diet_ids: list[int]) -> dict[int, list[Meal]]:
        if not diet_ids:
            return {}
        meal_rows = self._select(
            "oguns",
            "id, diet_id, name, time, detail",
            "diet_id",
            diet_ids,
            order="id",
        )
        items_by_meal: dict[int, list[MenuItem]] = {}
        meal_ids = [row["id"] for row in meal_rows]
        if meal_ids:
            for row in self._select(
                "menu_items",
                "id, ogun_id, miktar, besin:besins(name), birim:birims(name)",
                "ogun_id",
                meal_ids,
                order="id",
            ):
                items_by_meal.setdefault(row["ogun_id"], []).append(
                    MenuItem(
                        quantity=row.get("miktar"),
                        unit=_embedded_name(row.get("birim")),
                        food_name=_embedded_name(row.get("besin")),
                    )
                )
        meals: dict[int, list[Meal]] = {}
        for row in meal_rows:
            meals.setdefault(row["diet_id"], []).append(
                Meal(
                    id=row["id"],
                    name=str(row.get("name") or ""),
                    time=row.get("time"),
                    detail=row.get("detail"),
                    items=items_by_meal.get(row["id"], []),
                )
            )
        return meals

    def _select(
        self,
        table: str,
        columns: str,
        column: str,
        values: list[int],
        order: str | None = None,
    ) -> list[dict[str, Any]]:
        rows: list[dict[str, Any]] = []
        for chunk in self._chunks(values):

            def build(chunk: list[int] = chunk) -> Any:
                query = self.client.table(table).select(columns).in_(column, chunk)
                if order is not None:
                    query = query.order(order, desc=False)
                return query

            rows.extend(self._fetch_all(build))
        return rows

    def _fetch_all(self, build: Callable[[], Any]) -> list[dict[str, Any]]:
        """Read every page of a query until a short page comes back."""
        rows: list[dict[str, Any]] = []
        start = 0
        while True:
            page = build().range(start, start + self.page_size - 1).execute().data
            page = page or []
            rows.extend(page)
            if len(page) < self.page_size:
                return rows
            start += self.page_size

    def _chunks(self, values: list[int]) -> Iterator[list[int]]:
        for start in range(0, len(values), self.chunk_size):
            yield values[start : start + self.chunk_size]


def _snapshot(
    row: dict[str, Any], accounts: dict[int, Account], diet: Diet | None
) -> ClientSnapshot:
    return ClientSnapshot(
        id=row["id"],
        name=str(row.get("name") or ""),
        surname=str(row.get("surname") or ""),
        user_id=row["user_id"],
        account=accounts.get(row["user_id"]),
        latest_diet=diet,
    )


def _is_newer(row: dict[str, Any], current: dict[str, Any]) -> bool:
    row_date = _parse_datetime(row.get("tarih"))
    current_date = _parse_datetime(current.get("tarih"))
    if row_date is None:
        return False
    if current_date is None:
        return True
    row_date, current_date = as_utc(row_date), as_utc(current_date)
    if row_date != current_date:
        return row_date > current_date
    return row["id"] > current["id"]


def _flag(row: dict[str, Any], column: str) -> bool:
    value = row.get(column)
    return True if value is None else bool(value)


def _embedded_name(value: object) -> str | None:
    if isinstance(value, dict):
        name = value.get("name")
        return str(name) if name is not None else None
    return None


def _parse_datetime(value: object) -> datetime | None:
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    return None
