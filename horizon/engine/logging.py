"""
Horizon Logging System — Structured JSON event log for export runs.

Implements:
- FileLogger: Per-object-type, per-category JSONL files (daily rotation)
- Log entry builders for artifacts, export lifecycle and system events
- A module-level event log that the exporter writes through

Human-readable progress goes through the standard ``logging`` module
(``horizon.*`` loggers); this module only keeps the machine-readable trail.
"""

from __future__ import annotations

import json
import logging
import threading
from collections import defaultdict
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger("horizon.engine.logging")

# Valid object types and their permitted categories
OBJECT_TYPE_CATEGORIES = {
    "artifacts": ["execution"],
    "exports": ["execution", "errors"],
    "system": ["execution"],
}


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
    Files rotate daily: {log_dir}/{object_type}/{category}/{YYYY-MM-DD}.jsonl
    """

    def __init__(self, log_dir: str = ".horizon/logs"):
        self._log_dir = Path(log_dir)
        self._file_locks: Dict[str, threading.Lock] = defaultdict(threading.Lock)
        self._ensure_directories()

    def _ensure_directories(self) -> None:
        for obj_type, categories in OBJECT_TYPE_CATEGORIES.items():
            for cat in categories:
                (self._log_dir / obj_type / cat).mkdir(parents=True, exist_ok=True)

    def write(self, entry: LogEntry) -> None:
        """Write a single log entry to the appropriate file."""
        if entry.category not in OBJECT_TYPE_CATEGORIES.get(entry.object_type, []):
            raise ValueError(
                f"Unknown log destination {entry.object_type}/{entry.category}"
            )
        file_path = self._resolve_path(entry.object_type, entry.category)
        with self._file_locks[str(file_path)]:
            with open(file_path, "a", encoding="utf-8") as f:
                f.write(entry.to_json())
                f.write("\n")

    def _resolve_path(self, object_type: str, category: str) -> Path:
        today = date.today().isoformat()
        return self._log_dir / object_type / category / f"{today}.jsonl"

    @property
    def log_dir(self) -> Path:
        return self._log_dir

    def read_today(self, object_type: str, category: str) -> List[Dict[str, Any]]:
        """Read back today's entries for one destination, oldest first."""
        path = self._resolve_path(object_type, category)
        if not path.exists():
            return []
        entries: List[Dict[str, Any]] = []
        with open(path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    entries.append(json.loads(line))
                except json.JSONDecodeError:
                    logger.warning(f"Skipping malformed log line in {path}")
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


def log_artifact_written(
    prefix: str,
    name: str,
    path: str,
    size_bytes: int,
    module: Optional[str] = None,
) -> LogEntry:
    """Build an entry for one file written to the output directory."""
    data = _base_entry(
        "artifact_written",
        "INFO",
        prefix=prefix,
        name=name,
        path=path,
        size_bytes=size_bytes,
        module=module,
    )
    return LogEntry("artifacts", "execution", data)


def log_export_event(
    event: str,
    tree_id: str,
    branch: Optional[str] = None,
    level: str = "INFO",
    details: Optional[Dict[str, Any]] = None,
) -> LogEntry:
    """Build an export lifecycle entry (started, completed, failed)."""
    data = _base_entry(event, level, tree_id=tree_id, branch=branch)
    if details:
        data["details"] = details
    category = "errors" if level in ("ERROR", "CRITICAL") else "execution"
    return LogEntry("exports", category, data)


def log_system_event(
    event: str,
    level: str = "INFO",
    details: Optional[Dict[str, Any]] = None,
) -> LogEntry:
    """Build a system event log entry (startup, config loaded)."""
    data = _base_entry(event, level)
    if details:
        data["details"] = details
    return LogEntry("system", "execution", data)


# ---------------------------------------------------------------------------
# Convenience: Global Event Log Singleton
# ---------------------------------------------------------------------------

_event_log: Optional[FileLogger] = None


def init_logging(log_dir: str = ".horizon/logs") -> FileLogger:
    """Initialize the global structured event log."""
    global _event_log
    _event_log = FileLogger(log_dir=log_dir)
    return _event_log


def get_event_log() -> Optional[FileLogger]:
    return _event_log


def log(entry: LogEntry) -> bool:
    """Write an entry to the global event log. No-op when not initialized."""
    if _event_log is None:
        return False
    _event_log.write(entry)
    return True


def shutdown_logging() -> None:
    global _event_log
    _event_log = None
