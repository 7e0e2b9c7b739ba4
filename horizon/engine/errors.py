"""
Horizon Error Hierarchy — Structured exceptions for export runs.

All errors carry a free-form context (tree_id, branch, unit_id, ...) that is
serializable to JSON for the structured event log.

Hierarchy:
    HorizonError
    ├── HorizonConfigError          — Invalid horizon.yaml
    ├── HorizonPlatformError        — Platform HTTP call failed
    │   └── HorizonWorkingCopyError — Temporary working copy unavailable
    ├── HorizonLoadError            — Unit could not be loaded
    └── HorizonNameCollisionError   — Two nodes sanitize to one identifier
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional


class HorizonError(Exception):
    """
    Base error for all Horizon failures.
    All context is kept serializable so it can go to the event log as-is.
    """

    def __init__(self, message: str, **context: Any):
        self.message = message
        self.tree_id: Optional[str] = context.get("tree_id")
        self.branch: Optional[str] = context.get("branch")
        self.error_type: str = self.__class__.__name__
        self.context: Dict[str, Any] = context
        self.timestamp: str = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize error to a JSON-compatible dict for logging."""
        return {
            "error_type": self.error_type,
            "message": self.message,
            "tree_id": self.tree_id,
            "branch": self.branch,
            "timestamp": self.timestamp,
            "context": {
                k: str(v) for k, v in self.context.items()
                if k not in ("tree_id", "branch")
            },
        }

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), default=str)

    def __repr__(self) -> str:
        parts = [f"{self.error_type}: {self.message}"]
        if self.tree_id:
            parts.append(f"tree_id={self.tree_id}")
        if self.branch:
            parts.append(f"branch={self.branch}")
        return " | ".join(parts)


class HorizonConfigError(HorizonError):
    """Configuration error — invalid horizon.yaml."""
    pass


class HorizonPlatformError(HorizonError):
    """Platform HTTP call failed."""

    def __init__(self, message: str, **context: Any):
        self.status_code: Optional[int] = context.get("status_code")
        self.url: Optional[str] = context.get("url")
        super().__init__(message, **context)

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["status_code"] = self.status_code
        d["url"] = self.url
        return d


class HorizonWorkingCopyError(HorizonPlatformError):
    """
    A temporary working copy could not be created or opened.
    The only failure the CLI catches; the run stops before any output is written.
    """

    def __init__(self, message: str, **context: Any):
        self.app_name: Optional[str] = context.get("app_name")
        super().__init__(message, **context)

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["app_name"] = self.app_name
        return d


class HorizonLoadError(HorizonError):
    """A unit referenced by the tree index could not be loaded."""

    def __init__(self, message: str, **context: Any):
        self.unit_id: Optional[str] = context.get("unit_id")
        super().__init__(message, **context)


class HorizonNameCollisionError(HorizonError):
    """Two distinct nodes sanitize to the same script identifier."""

    def __init__(self, message: str, **context: Any):
        self.identifier: Optional[str] = context.get("identifier")
        self.module: Optional[str] = context.get("module")
        self.names: list = list(context.get("names", []))
        super().__init__(message, **context)

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["identifier"] = self.identifier
        d["module"] = self.module
        d["names"] = self.names
        return d
