"""Shared helpers for talking to the Supabase row store."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from ..db import supabase as supabase_db
from ..errors import StoreUnavailable


def require_client() -> Any:
    """Return the Supabase client or raise ``StoreUnavailable`` when unconfigured."""

    client = supabase_db.get_supabase_client()
    if client is None:
        raise StoreUnavailable("Supabase is not configured.")
    return client


def run_query(query: Any, description: str) -> list[dict[str, Any]]:
    """Execute a PostgREST query builder and return its rows."""

    try:
        response = query.execute()
    except Exception as exc:
        raise StoreUnavailable(f"{description} failed: {exc}") from exc
    return list(response.data or [])


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> datetime:
    """Parse a timestamptz value returned by PostgREST into an aware datetime."""

    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
