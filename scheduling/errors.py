"""Error kinds raised by the scheduling components.

The ``code`` strings match the Firebase callable error codes so clients that
already understand ``HttpsError`` codes can treat both the same way.
"""

from __future__ import annotations


class SchedulingError(Exception):
    code = "unknown"
    http_status = 500

    def to_dict(self) -> dict:
        return {"error": self.code, "message": str(self)}


class NotFound(SchedulingError):
    code = "not-found"
    http_status = 404


class InvalidArgument(SchedulingError):
    code = "invalid-argument"
    http_status = 400


class PermissionDenied(SchedulingError):
    code = "permission-denied"
    http_status = 403


class Internal(SchedulingError):
    code = "internal"
    http_status = 500


__all__ = [
    "SchedulingError",
    "NotFound",
    "InvalidArgument",
    "PermissionDenied",
    "Internal",
]
