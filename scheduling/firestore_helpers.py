"""Small Firestore helpers shared by the schedule store and the janitor."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, Optional

from google.cloud.firestore_v1 import FieldFilter

from scheduling.config import MAX_BATCH_WRITES


def firestore_where(query: Any, field: str, op: str, value: Any) -> Any:
    """Apply a ``where`` clause using the keyword ``filter`` form."""

    return query.where(filter=FieldFilter(field, op, value))


def snapshot_data(snap: Any) -> Dict[str, Any]:
    try:
        data = snap.to_dict()
    except Exception:
        data = {}
    return data if isinstance(data, dict) else {}


def ensure_utc(ts: datetime) -> datetime:
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def coerce_timestamp(value: Any) -> Optional[datetime]:
    """Return ``value`` as an aware UTC datetime when it looks like a timestamp."""

    if isinstance(value, datetime):
        return ensure_utc(value)
    if hasattr(value, "to_datetime"):
        try:
            return ensure_utc(value.to_datetime())
        except Exception:
            return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(float(value), timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str) and value.strip():
        try:
            return ensure_utc(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))
        except ValueError:
            return None
    return None


def commit_in_batches(
    db: Any,
    refs: Iterable[Any],
    apply: Callable[[Any, Any], None],
    *,
    batch_size: int = MAX_BATCH_WRITES,
    on_commit: Optional[Callable[[int], None]] = None,
) -> int:
    """Apply ``apply(batch, ref)`` to every ref, committing every ``batch_size`` writes.

    Batches commit one after another; a failure leaves earlier batches
    committed.  ``on_commit`` receives the running total after each commit.
    Returns the number of committed writes.
    """

    batch_size = max(1, min(int(batch_size), MAX_BATCH_WRITES))
    committed = 0
    batch = db.batch()
    ops = 0
    for ref in refs:
        apply(batch, ref)
        ops += 1
        if ops >= batch_size:
            batch.commit()
            committed += ops
            if on_commit is not None:
                on_commit(committed)
            batch = db.batch()
            ops = 0

    if ops:
        batch.commit()
        committed += ops
        if on_commit is not None:
            on_commit(committed)
    return committed


__all__ = [
    "commit_in_batches",
    "coerce_timestamp",
    "ensure_utc",
    "firestore_where",
    "snapshot_data",
]
