"""
TrekPrep Error Hierarchy — Structured exceptions with JSON-serializable context.

Only TrekPrepLoadError is meant to reach the user as a hard failure; the rest
are caught at the session / write-queue boundary and logged.

Hierarchy:
    TrekPrepError
    ├── TrekPrepValidationError   — Malformed input at a boundary
    ├── TrekPrepNotFoundError     — Trek / task lookup failed
    ├── TrekPrepPersistenceError  — External key-value API call failed
    ├── TrekPrepConfigError       — Invalid trekprep.yaml
    ├── TrekPrepNavigationError   — Illegal page transition
    └── TrekPrepLoadError         — Seeding or fetch failed at startup
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional


class TrekPrepError(Exception):
    """
    Base error for all TrekPrep failures.
    All context is kept serializable so it can go straight into the JSONL logs.
    """

    def __init__(self, message: str, **context: Any):
        self.message = message
        self.error_type: str = self.__class__.__name__
        self.context: Dict[str, Any] = context
        self.trek_name: Optional[str] = context.get("trek_name")
        self.task_id: Optional[str] = context.get("task_id")
        self.timestamp: str = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize error to a JSON-compatible dict for logging."""
        return {
            "error_type": self.error_type,
            "message": self.message,
            "trek_name": self.trek_name,
            "task_id": self.task_id,
            "timestamp": self.timestamp,
            "context": {
                k: str(v) for k, v in self.context.items()
                if k not in ("trek_name", "task_id")
            },
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)

    def __repr__(self) -> str:
        parts = [f"{self.error_type}: {self.message}"]
        if self.trek_name:
            parts.append(f"trek_name={self.trek_name}")
        if self.task_id:
            parts.append(f"task_id={self.task_id}")
        return " | ".join(parts)


class TrekPrepValidationError(TrekPrepError):
    """
    Input failed validation at a boundary (unknown update field, bad record).
    Includes field-level error details.
    """

    def __init__(self, message: str, **context: Any):
        self.validation_errors: Optional[list] = context.get("validation_errors")
        super().__init__(message, **context)

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["validation_errors"] = self.validation_errors
        return d


class TrekPrepNotFoundError(TrekPrepError):
    """A trek or task referenced by name / id does not exist."""
    pass


class TrekPrepPersistenceError(TrekPrepError):
    """
    External key-value API call failed — non-2xx response or transport error.
    The API reports failures as ``{"error": ..., "details": ...}``.
    """

    def __init__(self, message: str, **context: Any):
        self.status_code: Optional[int] = context.get("status_code")
        self.error: Optional[str] = context.get("error")
        self.details: Optional[str] = context.get("details")
        self.method: Optional[str] = context.get("method")
        self.url: Optional[str] = context.get("url")
        super().__init__(message, **context)

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["status_code"] = self.status_code
        d["error"] = self.error
        d["details"] = self.details
        return d


class TrekPrepConfigError(TrekPrepError):
    """Configuration error — invalid trekprep.yaml."""
    pass


class TrekPrepNavigationError(TrekPrepError):
    """Requested page transition is not allowed from the current page."""

    def __init__(self, message: str, **context: Any):
        self.page: Optional[str] = context.get("page")
        super().__init__(message, **context)


class TrekPrepLoadError(TrekPrepError):
    """
    Initial load (seeding or fetch) failed. The only user-visible hard failure:
    the caller shows a full-page error with a reload action.
    """
    pass
