"""
Horizon Tree Models — Pydantic definitions of the exported repository.

Tree: Modules plus the flat navigation and project-security collections.
Module: Named top-level container; the unit of script aggregation.
Folder: Named container of documents and sub-folders.
UnitRef / DocumentRef: Index entries, loaded on demand through a UnitSource.
Document: A loaded unit with its opaque structural content.

The index mirrors the platform's JSON (camelCase aliases) so the same models
parse both the HTTP model endpoint and local tree export files.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field

from horizon.generators.replay_generator import TYPE_KEY
from horizon.generators.serializer import canonical_json, structure_replay

logger = logging.getLogger("horizon.platform.models")


class _IndexModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


# ---------------------------------------------------------------------------
# Tree index
# ---------------------------------------------------------------------------

class UnitRef(_IndexModel):
    """Reference to a loadable unit (domain model, security, navigation, ...)."""

    id: str = Field(description="Unit identifier within the working copy")
    name: Optional[str] = Field(default=None, description="Display name, if any")
    qualified_name: Optional[str] = Field(default=None, alias="qualifiedName")
    type: Optional[str] = Field(default=None, description="Structural type, e.g. Pages$Page")


class DocumentRef(UnitRef):
    """A named document inside a module or folder."""

    name: str = Field(description="Document name, unique among its siblings")

    @property
    def display_name(self) -> str:
        return self.qualified_name or self.name


class Folder(_IndexModel):
    """
    Folder inside a module. Its parent is never stored here; the walker
    passes the parent down explicitly.
    """

    name: str
    documents: List[DocumentRef] = Field(default_factory=list)
    folders: List["Folder"] = Field(default_factory=list)


class Module(_IndexModel):
    """Top-level container. Exactly one regeneration script per module."""

    name: str
    domain_model: UnitRef = Field(alias="domainModel")
    module_security: UnitRef = Field(alias="moduleSecurity")
    documents: List[DocumentRef] = Field(default_factory=list)
    folders: List[Folder] = Field(default_factory=list)


class Tree(_IndexModel):
    """The whole repository as seen through one working copy."""

    modules: List[Module] = Field(default_factory=list)
    navigation_documents: List[UnitRef] = Field(default_factory=list, alias="navigationDocuments")
    project_securities: List[UnitRef] = Field(default_factory=list, alias="projectSecurities")


# ---------------------------------------------------------------------------
# Loaded units
# ---------------------------------------------------------------------------

class Document(BaseModel):
    """
    A loaded unit. The content is treated as opaque: only its snapshot and
    replay rendering are ever produced from it.
    """

    id: str
    type: str
    name: Optional[str] = None
    qualified_name: Optional[str] = None
    content: Dict[str, Any]

    @classmethod
    def from_unit(cls, ref: UnitRef, content: Dict[str, Any]) -> "Document":
        """Build a Document from its index entry and the loaded content."""
        if not isinstance(content, dict):
            raise TypeError(f"Unit {ref.id} content must be a mapping, got {type(content).__name__}")
        type_name = content.get(TYPE_KEY) or ref.type
        if not type_name:
            raise ValueError(f"Unit {ref.id} has no '{TYPE_KEY}'")
        return cls(
            id=ref.id,
            type=type_name,
            name=content.get("name", ref.name),
            qualified_name=ref.qualified_name or content.get("qualifiedName"),
            content=content,
        )

    def to_snapshot(self) -> str:
        return canonical_json(self.content)

    def replay_statements(self, container: str) -> List[str]:
        """Replay of the content; the index type tags content loaded without one."""
        content = self.content
        if not content.get(TYPE_KEY):
            content = {**content, TYPE_KEY: self.type}
        return structure_replay(content, container)


class UnitSource(Protocol):
    """Loads units referenced by the tree index."""

    async def load_unit(self, ref: UnitRef) -> Document: ...


Folder.model_rebuild()
