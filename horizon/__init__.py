"""
Horizon — Design-document tree exporter.
Version: 1.0

Walks a versioned design-document repository and writes, per node, a
canonical JSON snapshot and a regeneration script that rebuilds the node
against a fresh tree.
"""

__version__ = "1.0.0"
__all__ = ["engine", "generators", "platform", "utilities"]
