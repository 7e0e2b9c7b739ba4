"""
Horizon Platform — Tree index models and the working-copy collaborators.

Working copies are both the source of the tree index (open_model) and the
UnitSource the exporter loads documents through (load_unit).
"""

from horizon.platform.models import Document, DocumentRef, Folder, Module, Tree, UnitRef, UnitSource

__all__ = [
    "Document",
    "DocumentRef",
    "Folder",
    "Module",
    "Tree",
    "UnitRef",
    "UnitSource",
]
