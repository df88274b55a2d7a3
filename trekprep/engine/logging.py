"""
TrekPrep Logging — stdlib logging for diagnostics plus structured JSONL event files.

Implements:
- FileLogger: per-object-type, per-category JSONL files (daily rotation)
- Log entry builders for task updates, persistence calls, seeding, system events
- A global file logger installed by init_logging()

Files: {directory}/{object_type}/{category}/{YYYY-MM-DD}.jsonl
"""

from __future__ import annotations

import json
import logging
import sys
import threading
from collections import defaultdict
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger("trekprep.engine.logging")

# Valid object types and their permitted categories
OBJECT_TYPE_CATEGORIES = {
    "tasks": ["execution", "errors"],
    "persistence": ["execution", "errors"],
    "seeding": ["execution", "errors"],
    "system": ["execution", "errors"],
}

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Set up stdlib logging for the ``trekprep`` logger tree (CLI use)."""
    root = logging.getLogger("trekprep")
    root.setLevel(level.upper())
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)


class LogEntry:
    """A structured log entry destined for a specific file."""

    __slots__ = ("object_type", "category", "data")

    def __init__(self, object_type: str, category: str, data: Dict[str, Any]):
        self.object_type = object_type
        self.category = category
        self.data = data

    def to_json(self) -> str:
        return json.dumps(self.data, default=str, separators=(",", ":"))


class FileLogger:
    """
    Writes structured JSON log entries to per-object-type, per-category files.

    Thread-safe — uses a lock per file path.
    """

    def __init__(self, log_dir: str = ".trekprep/logs"):
        self._log_dir = Path(log_dir)
        self._file_locks: Dict[str, threading.Lock] = defaultdict(threading.Lock)
        self._ensure_directories()

    def _ensure_directories(self) -> None:
        for obj_type, categories in OBJECT_TYPE_CATEGORIES.items():
            for cat in categories:
                (self._log_dir / obj_type / cat).mkdir(parents=True, exist_ok=True)

    def write(self, entry: LogEntry) -> None:
        """Append a single entry to today's file for its object type/category."""
        file_path = self._resolve_path(entry.object_type, entry.category)
        with self._file_locks[str(file_path)]:
            with open(file_path, "a", encoding="utf-8") as f:
                f.write(entry.to_json())
                f.write("\n")

    def _resolve_path(self, object_type: str, category: str) -> Path:
        if object_type not in OBJECT_TYPE_CATEGORIES:
            object_type = "system"
        if category not in OBJECT_TYPE_CATEGORIES[object_type]:
            category = "execution"
        return self._log_dir / object_type / category / f"{date.today().isoformat()}.jsonl"

    @property
    def log_dir(self) -> Path:
        return self._log_dir

    def query(
        self,
        object_type: str,
        category: str,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        filters: Optional[Dict[str, Any]] = None,
        limit: int = 500,
    ) -> List[Dict[str, Any]]:
        """
        Read entries back for an object_type/category.

        Args:
            start_date: Earliest date to include (defaults to 7 days before end_date).
            end_date: Latest date to include (defaults to today).
            filters: Exact-match key/value pairs on top-level entry keys.
            limit: Max number of entries.

        Returns:
            Parsed entries, oldest first.
        """
        if end_date is None:
            end_date = date.today()
        if start_date is None:
            start_date = end_date - timedelta(days=7)

        base = self._log_dir / object_type / category
        if not base.exists():
            return []

        results: List[Dict[str, Any]] = []
        current = start_date
        while current <= end_date and len(results) < limit:
            file_path = base / f"{current.isoformat()}.jsonl"
            if file_path.exists():
                results.extend(self._read_jsonl(file_path, filters, limit - len(results)))
            current += timedelta(days=1)
        return results

    @staticmethod
    def _read_jsonl(
        path: Path,
        filters: Optional[Dict[str, Any]],
        remaining: int,
    ) -> List[Dict[str, Any]]:
        entries: List[Dict[str, Any]] = []
        try:
            with open(path, "r", encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        data = json.loads(line)
                    except json.JSONDecodeError:
                        continue
                    if filters and not all(data.get(k) == v for k, v in filters.items()):
                        continue
                    entries.append(data)
                    if len(entries) >= remaining:
                        break
        except OSError as exc:
            logger.warning("Could not read log file %s: %s", path, exc)
        return entries


# ---------------------------------------------------------------------------
# Log Entry Builders
# ---------------------------------------------------------------------------

def _base_entry(event: str, level: str, **extra: Any) -> Dict[str, Any]:
    entry: Dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "level": level,
        "event": event,
    }
    entry.update({k: v for k, v in extra.items() if v is not None})
    return entry


def log_task_update(
    task_id: str,
    trek_name: str,
    fields_changed: List[str],
    revision: int,
    status: Optional[str] = None,
) -> LogEntry:
    """Build a local task mutation entry."""
    data = _base_entry(
        event="task_updated",
        level="INFO",
        task_id=task_id,
        trek_name=trek_name,
        fields_changed=fields_changed,
        revision=revision,
        status=status,
    )
    return LogEntry("tasks", "execution", data)


def log_persistence_call(
    method: str,
    url: str,
    status_code: int,
    duration_ms: float,
    success: bool,
    task_id: Optional[str] = None,
    error: Optional[str] = None,
) -> LogEntry:
    """Build an external key-value API call entry."""
    data = _base_entry(
        event="persistence_call",
        level="INFO" if success else "ERROR",
        method=method,
        url=url,
        status_code=status_code,
        duration_ms=round(duration_ms, 2),
        success=success,
        task_id=task_id,
        error=error,
    )
    return LogEntry("persistence", "execution" if success else "errors", data)


def log_seed_event(
    event: str,
    created_treks: Optional[List[str]] = None,
    skipped_treks: Optional[List[str]] = None,
    error: Optional[str] = None,
) -> LogEntry:
    """Build a seeding entry (seed_started / seed_completed / seed_failed)."""
    failed = error is not None
    data = _base_entry(
        event=event,
        level="ERROR" if failed else "INFO",
        created_treks=created_treks,
        skipped_treks=skipped_treks,
        error=error,
    )
    return LogEntry("seeding", "errors" if failed else "execution", data)


def log_system_event(
    event: str,
    level: str = "INFO",
    details: Optional[Dict[str, Any]] = None,
) -> LogEntry:
    """Build a system event entry (load, shutdown, config)."""
    data = _base_entry(event=event, level=level, details=details)
    return LogEntry("system", "errors" if level == "ERROR" else "execution", data)


# ---------------------------------------------------------------------------
# Convenience: Global File Logger
# ---------------------------------------------------------------------------

_file_logger: Optional[FileLogger] = None


def init_logging(log_dir: str = ".trekprep/logs") -> FileLogger:
    """Install the global file logger."""
    global _file_logger
    _file_logger = FileLogger(log_dir=log_dir)
    return _file_logger


def get_file_logger() -> Optional[FileLogger]:
    return _file_logger


def log(entry: LogEntry) -> bool:
    """Write an entry through the global file logger, if installed."""
    if _file_logger is None:
        logger.debug("File logger not initialized, %s entry dropped", entry.data.get("event"))
        return False
    try:
        _file_logger.write(entry)
    except OSError as e:
        logger.warning(f"Could not write {entry.object_type}/{entry.category} entry: {e}")
        return False
    return True


def shutdown_logging() -> None:
    global _file_logger
    _file_logger = None
