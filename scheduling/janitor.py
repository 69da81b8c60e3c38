"""Periodic sweeps that age out live sessions and old recordings.

``close_inactive_sessions`` runs every 15 minutes and completes active
sessions nobody has touched for a while.  ``cleanup_old_data`` runs once a
day and deletes old sessions, stale active sessions and unimportant
recordings.  Writes are committed in batches of at most 500; a failure part
way through leaves the earlier batches committed.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

from firebase_admin import firestore
from google.api_core.exceptions import GoogleAPICallError

from scheduling.config import MAX_BATCH_WRITES, Settings
from scheduling.errors import Internal
from scheduling.firestore_helpers import (
    coerce_timestamp,
    commit_in_batches,
    firestore_where,
    snapshot_data,
)
from scheduling.schedule_store import SESSION_ACTIVE, SESSION_COMPLETED, SESSIONS_COL

RECORDINGS_COL = "recordings"
STATS_COL = "cleanupStats"

END_REASON_INACTIVITY = "inactivity"


@dataclass
class CleanupStats:
    old_sessions: int = 0
    stale_active_sessions: int = 0
    recordings: int = 0
    recording_files: int = 0

    @property
    def total(self) -> int:
        return self.old_sessions + self.stale_active_sessions + self.recordings


class SessionJanitor:
    def __init__(
        self,
        db: Any,
        *,
        bucket: Any = None,
        batch_size: int = MAX_BATCH_WRITES,
        inactivity_minutes: int = 30,
        retention_days: int = 30,
        stale_active_hours: int = 24,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.db = db
        self.bucket = bucket
        self.batch_size = batch_size
        self.inactivity = timedelta(minutes=inactivity_minutes)
        self.retention = timedelta(days=retention_days)
        self.stale_active = timedelta(hours=stale_active_hours)
        self.clock = clock

    @classmethod
    def from_settings(cls, db: Any, settings: Settings, *, bucket: Any = None) -> "SessionJanitor":
        return cls(
            db,
            bucket=bucket,
            batch_size=settings.batch_size,
            inactivity_minutes=settings.inactivity_minutes,
            retention_days=settings.retention_days,
            stale_active_hours=settings.stale_active_hours,
        )

    def _now(self, now: Optional[datetime]) -> datetime:
        current = now or self.clock()
        if current.tzinfo is None:
            current = current.replace(tzinfo=timezone.utc)
        return current

    # ------------------------------------------------------------------
    # Inactivity sweep
    # ------------------------------------------------------------------
    def close_inactive_sessions(self, now: Optional[datetime] = None) -> int:
        """Mark active sessions idle past the threshold as completed."""

        current = self._now(now)
        cutoff = current - self.inactivity
        query = firestore_where(self.db.collection(SESSIONS_COL), "status", "==", SESSION_ACTIVE)
        query = firestore_where(query, "lastActivity", "<=", cutoff)

        def complete(batch: Any, ref: Any) -> None:
            batch.update(
                ref,
                {
                    "status": SESSION_COMPLETED,
                    "endTime": current,
                    "endReason": END_REASON_INACTIVITY,
                },
            )

        try:
            refs = [snap.reference for snap in query.stream()]
            closed = commit_in_batches(self.db, refs, complete, batch_size=self.batch_size)
        except GoogleAPICallError as exc:
            logging.exception("Error closing inactive sessions: %s", exc)
            raise Internal("Error closing inactive sessions") from exc

        logging.info("Closed %d inactive sessions", closed)
        return closed

    # ------------------------------------------------------------------
    # Retention sweep
    # ------------------------------------------------------------------
    def _old_sessions(self, cutoff: datetime) -> List[Any]:
        query = firestore_where(self.db.collection(SESSIONS_COL), "startTime", "<=", cutoff)
        return [snap.reference for snap in query.stream()]

    def _stale_active_sessions(self, cutoff: datetime, skip: set) -> List[Any]:
        query = firestore_where(self.db.collection(SESSIONS_COL), "status", "==", SESSION_ACTIVE)
        query = firestore_where(query, "startTime", "<=", cutoff)
        refs = []
        for snap in query.stream():
            if snap.id in skip:
                continue
            data = snapshot_data(snap)
            # A session that picked up activity again is left alone.
            last = coerce_timestamp(data.get("lastActivity")) or coerce_timestamp(data.get("startTime"))
            if last is not None and last <= cutoff:
                refs.append(snap.reference)
        return refs

    def _old_recordings(self, cutoff: datetime) -> List[Any]:
        query = firestore_where(self.db.collection(RECORDINGS_COL), "createdAt", "<=", cutoff)
        return [snap for snap in query.stream() if not snapshot_data(snap).get("isImportant")]

    def _remove_recording_file(self, path: str) -> bool:
        try:
            self.bucket.blob(path).delete()
            return True
        except Exception as exc:  # pragma: no cover - runtime depends on Storage
            logging.warning("Failed to delete recording file %s: %s", path, exc)
            return False

    def cleanup_old_data(self, now: Optional[datetime] = None) -> CleanupStats:
        """Delete expired sessions and recordings and record the run's totals."""

        current = self._now(now)
        retention_cutoff = current - self.retention
        stale_cutoff = current - self.stale_active
        stats = CleanupStats()

        def delete(batch: Any, ref: Any) -> None:
            batch.delete(ref)

        def counter(field_name: str) -> Callable[[int], None]:
            def update(total: int) -> None:
                setattr(stats, field_name, total)

            return update

        try:
            old_refs = self._old_sessions(retention_cutoff)
            commit_in_batches(
                self.db, old_refs, delete,
                batch_size=self.batch_size, on_commit=counter("old_sessions"),
            )

            stale_refs = self._stale_active_sessions(
                stale_cutoff, skip={ref.id for ref in old_refs}
            )
            commit_in_batches(
                self.db, stale_refs, delete,
                batch_size=self.batch_size, on_commit=counter("stale_active_sessions"),
            )

            recordings = self._old_recordings(retention_cutoff)
            if self.bucket is not None:
                for snap in recordings:
                    path = snapshot_data(snap).get("storagePath")
                    if path and self._remove_recording_file(path):
                        stats.recording_files += 1
            commit_in_batches(
                self.db, [snap.reference for snap in recordings], delete,
                batch_size=self.batch_size, on_commit=counter("recordings"),
            )
        except Exception as exc:
            logging.error(
                "Cleanup failed after deleting %d documents: %s", stats.total, exc
            )
            self._record_stats(current, stats, error=str(exc))
            if isinstance(exc, GoogleAPICallError):
                raise Internal("Error cleaning up old data") from exc
            raise

        logging.info(
            "Cleanup deleted %d old sessions, %d stale active sessions, %d recordings",
            stats.old_sessions,
            stats.stale_active_sessions,
            stats.recordings,
        )
        self._record_stats(current, stats)
        return stats

    def _record_stats(self, now: datetime, stats: CleanupStats, *, error: Optional[str] = None) -> None:
        payload: Dict[str, Any] = {
            **asdict(stats),
            "total": stats.total,
            "lastRun": now,
            "error": error,
            "updatedAt": firestore.SERVER_TIMESTAMP,
        }
        try:
            self.db.collection(STATS_COL).document(now.date().isoformat()).set(payload)
        except Exception as exc:  # pragma: no cover - runtime depends on Firestore
            logging.warning("Failed to record cleanup stats: %s", exc)


__all__ = [
    "END_REASON_INACTIVITY",
    "RECORDINGS_COL",
    "STATS_COL",
    "CleanupStats",
    "SessionJanitor",
]
