"""
Firestore query helpers shared by the service layer.

NOTE: For firebase_admin SDK, we use positional arguments to where(), which
still work. The in-memory mock database accepts the same form.
"""

import asyncio
import functools
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, TypeVar

from firebase_admin import firestore

ASCENDING = firestore.Query.ASCENDING
DESCENDING = firestore.Query.DESCENDING

T = TypeVar("T")


def where_filter(query, field_path: str, op_string: str, value):
    """
    Helper function for Firestore queries.

    Usage:
        query = where_filter(collection, "ward_number", "==", 3)
        query = where_filter(query, "status", "in", ["Open", "In Progress"])
    """
    return query.where(field_path, op_string, value)


async def run_blocking(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """
    Run a blocking Firestore call in the default executor.

    The Firestore client is synchronous; handlers await this so the event loop
    keeps serving other requests while the store round-trip is in flight.
    """
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, functools.partial(func, *args, **kwargs))


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def snapshot_to_dict(doc) -> Optional[Dict[str, Any]]:
    """Convert a document snapshot to a plain dict with its id attached."""
    if doc is None or not doc.exists:
        return None
    data = doc.to_dict() or {}
    data["id"] = doc.id
    return data


def count_documents(query) -> int:
    return sum(1 for _ in query.stream())
