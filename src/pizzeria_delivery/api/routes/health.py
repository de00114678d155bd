"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...db import supabase as supabase_db

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/database", status_code=status.HTTP_200_OK)
def check_database() -> dict:
    """Check database connection and delivery table status."""
    return supabase_db.database_status()
