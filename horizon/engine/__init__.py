"""Horizon Engine — Traversal, script accumulation, artifact writing, config, logging."""

from horizon.engine.exporter import ExportSummary, TreeExporter  # noqa: F401
from horizon.engine.script_buffer import ScriptBuffer  # noqa: F401
from horizon.engine.walker import FolderWalker  # noqa: F401
from horizon.engine.writer import ArtifactWriter  # noqa: F401

__all__ = [
    "TreeExporter",
    "ExportSummary",
    "ScriptBuffer",
    "FolderWalker",
    "ArtifactWriter",
]
