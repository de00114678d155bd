from __future__ import annotations

import itertools
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import pytest

from pizzeria_delivery.db import supabase as supabase_db
from pizzeria_delivery.models.domain import Coordinate, GeocodeResult

HOME = Coordinate(latitude=-23.5505, longitude=-46.6333)


class FakeResponse:
    def __init__(self, data: list[dict[str, Any]]):
        self.data = data


class FakeQuery:
    """Tiny stand-in for the PostgREST query builder used by the store layer."""

    def __init__(self, db: "FakeSupabase", table: str) -> None:
        self.db = db
        self.table_name = table
        self.op = "select"
        self.payload: Any = None
        self.filters: list[Callable[[dict[str, Any]], bool]] = []
        self.order_by: tuple[str, bool] | None = None
        self.row_limit: int | None = None
        self.on_conflict = ""
        self.ignore_duplicates = False

    def select(self, *columns: str, **kwargs: Any) -> "FakeQuery":
        self.op = "select"
        return self

    def insert(self, rows: Any) -> "FakeQuery":
        self.op = "insert"
        self.payload = rows
        return self

    def upsert(self, rows: Any, on_conflict: str = "", ignore_duplicates: bool = False, **kwargs: Any) -> "FakeQuery":
        self.op = "upsert"
        self.payload = rows
        self.on_conflict = on_conflict
        self.ignore_duplicates = ignore_duplicates
        return self

    def update(self, values: dict[str, Any]) -> "FakeQuery":
        self.op = "update"
        self.payload = values
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column: str, values: list[Any]) -> "FakeQuery":
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def gte(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append(lambda row: row.get(column) is not None and row.get(column) >= value)
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self.order_by = (column, desc)
        return self

    def limit(self, count: int) -> "FakeQuery":
        self.row_limit = count
        return self

    def _matches(self, row: dict[str, Any]) -> bool:
        return all(check(row) for check in self.filters)

    def execute(self) -> FakeResponse:
        self.db.calls.append((self.table_name, self.op))
        if self.table_name in self.db.failing_tables:
            raise RuntimeError(f"relation {self.table_name} is unreachable")
        rows = self.db.tables.setdefault(self.table_name, [])

        if self.op == "select":
            matched = [dict(row) for row in rows if self._matches(row)]
            if self.order_by:
                column, desc = self.order_by
                matched.sort(key=lambda row: row.get(column), reverse=desc)
            if self.row_limit is not None:
                matched = matched[: self.row_limit]
            return FakeResponse(matched)

        payload = self.payload if isinstance(self.payload, list) else [self.payload]
        if self.op == "insert":
            inserted = []
            for row in payload:
                new_row = dict(row)
                new_row.setdefault("id", next(self.db.ids))
                rows.append(new_row)
                inserted.append(dict(new_row))
            return FakeResponse(inserted)

        if self.op == "upsert":
            written = []
            for row in payload:
                existing = next((r for r in rows if r.get(self.on_conflict) == row.get(self.on_conflict)), None)
                if existing is None:
                    new_row = dict(row)
                    new_row.setdefault("id", next(self.db.ids))
                    rows.append(new_row)
                    written.append(dict(new_row))
                elif not self.ignore_duplicates:
                    existing.update(row)
                    written.append(dict(existing))
            return FakeResponse(written)

        updated = []
        for row in rows:
            if self._matches(row):
                row.update(self.payload)
                updated.append(dict(row))
        return FakeResponse(updated)


class FakeSupabase:
    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self.calls: list[tuple[str, str]] = []
        self.failing_tables: set[str] = set()
        self.ids = itertools.count(1)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def calls_to(self, table: str) -> list[str]:
        return [op for name, op in self.calls if name == table]

    def rows(self, table: str) -> list[dict[str, Any]]:
        return self.tables.get(table, [])

    def seed_settings(self, **overrides: str) -> None:
        values = {
            "pizzaria_latitude": str(HOME.latitude),
            "pizzaria_longitude": str(HOME.longitude),
            "pizzaria_address": "Praça da Sé, São Paulo",
            "max_delivery_radius_km": "15",
            "enable_geolocation_delivery": "true",
            "fallback_delivery_fee": "8.00",
            "google_maps_api_key": "test-api-key",
            "geocoding_cache_hours": "168",
        }
        values.update(overrides)
        self.tables["admin_settings"] = [
            {"setting_key": key, "setting_value": value, "setting_type": "geolocation", "description": ""}
            for key, value in values.items()
        ]

    def seed_zones(self) -> None:
        self.tables["delivery_zones"] = [
            _zone_row(1, "Centro", 0, 3, "0.00", 25, "#10B981"),
            _zone_row(2, "Zona Próxima", 3.01, 7, "5.00", 35, "#3B82F6"),
            _zone_row(3, "Zona Intermediária", 7.01, 12, "8.00", 45, "#F59E0B"),
            _zone_row(4, "Zona Distante", 12.01, 15, "12.00", 60, "#EF4444"),
        ]
        self.ids = itertools.count(100)


def _zone_row(zone_id, name, min_km, max_km, fee, eta, color, active=True) -> dict[str, Any]:
    return {
        "id": zone_id,
        "name": name,
        "min_distance_km": min_km,
        "max_distance_km": max_km,
        "delivery_fee": fee,
        "estimated_time_minutes": eta,
        "color_hex": color,
        "active": active,
        "description": None,
    }


class DummyGeocoder:
    """Geocoder double that records calls and answers from a lookup table."""

    def __init__(self, answers: dict[str, Any] | None = None) -> None:
        self.answers = answers or {}
        self.calls: list[tuple[str, str]] = []

    def geocode(self, address: str, credential: str) -> GeocodeResult:
        self.calls.append((address, credential))
        answer = self.answers[address]
        if isinstance(answer, Exception):
            raise answer
        return answer


def geocoded(lat: float, lon: float, formatted: str = "Rua Teste, 100 - São Paulo, SP") -> GeocodeResult:
    return GeocodeResult(
        coordinate=Coordinate(latitude=lat, longitude=lon),
        formatted_address=formatted,
        city="São Paulo",
        state="SP",
        postal_code="01001-000",
    )


class FrozenClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


@pytest.fixture
def fake_db(monkeypatch: pytest.MonkeyPatch) -> FakeSupabase:
    db = FakeSupabase()
    monkeypatch.setattr(supabase_db, "get_supabase_client", lambda: db)
    return db


@pytest.fixture
def no_db(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(supabase_db, "get_supabase_client", lambda: None)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc))
