"""Shared helpers for Supabase-backed repositories."""

import logging
from datetime import datetime
from typing import Any
from uuid import UUID

import httpx
from postgrest.exceptions import APIError

from brewvote.domain.errors import StorageFailureError

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"


def execute(query: Any, description: str, *, conflict_ok: bool = False) -> Any:
    """Execute a PostgREST query, translating transport and API failures.

    With ``conflict_ok`` a unique violation is re-raised as the original
    ``APIError`` so the caller can map it to a domain error.
    """
    try:
        return query.execute()
    except APIError as exc:
        if conflict_ok and exc.code == UNIQUE_VIOLATION:
            raise
        logger.exception("Supabase request failed: %s", description)
        raise StorageFailureError(f"Failed to {description}") from exc
    except httpx.HTTPError as exc:
        logger.exception("Supabase unreachable: %s", description)
        raise StorageFailureError(f"Failed to {description}") from exc


def parse_uuid(raw: str) -> UUID | None:
    """Return an id as a UUID, or None when it cannot name a row."""
    try:
        return UUID(str(raw))
    except ValueError:
        return None


def parse_timestamp(raw: object) -> datetime | None:
    """Parse an ISO timestamp column."""
    if isinstance(raw, str) and raw:
        return datetime.fromisoformat(raw)
    return None
