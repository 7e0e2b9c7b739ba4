"""
Horizon Folder Walker — Depth-first export of a module's folders.

For every folder:
    1. Append the folder creation to the module's script buffer
    2. Export each document (load → serialize → write DOC- pair → append call)
    3. Recurse into each child folder

Documents always precede child folders, so a replayed module script never
addresses a folder before the statement that creates it.

Identifier collisions:
    - two documents whose regeneration functions sanitize to one name
    - a folder whose identifier shadows the module root, a name imported by
      the preamble, or an ancestor folder that later statements still address
Both are reported through the configured policy (error | warn).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

from horizon.engine.errors import HorizonNameCollisionError
from horizon.engine.script_buffer import ScriptBuffer
from horizon.engine.writer import DOCUMENT, ArtifactWriter
from horizon.generators.serializer import DEFAULT_CAPABILITIES, DocumentSerializer
from horizon.platform.models import DocumentRef, Folder, Module, UnitSource
from horizon.utilities.utils import document_identifier, sanitize

logger = logging.getLogger("horizon.engine.walker")

COLLISION_POLICIES = ("error", "warn")

Container = Union[Module, Folder]
Scope = Tuple[Tuple[str, str], ...]


def indent(depth: int) -> str:
    return "  " * depth


def root_scope(container_name: str, capabilities: Sequence[str] = DEFAULT_CAPABILITIES) -> Scope:
    """
    Identifiers already bound when a module script starts: the container
    the top-level folders are created in, plus every preamble import.
    """
    imports = tuple((capability, f"import {capability}") for capability in capabilities)
    return ((sanitize(container_name), container_name), *imports)


def qualified_name_of(ref: DocumentRef, module_name: str) -> str:
    """Qualified name from the index, falling back to ``module.name``."""
    return ref.qualified_name or f"{module_name}.{ref.name}"


@dataclass(frozen=True)
class Collision:
    """Two node names that map onto one script identifier."""
    kind: str
    module: str
    identifier: str
    names: Tuple[str, str]

    def describe(self) -> str:
        first, second = self.names
        if self.kind == "function":
            return (
                f"Documents '{first}' and '{second}' in module '{self.module}' "
                f"share regeneration function '{self.identifier}'"
            )
        return (
            f"Folder '{second}' in module '{self.module}' shadows '{first}' "
            f"as identifier '{self.identifier}'"
        )


class FolderWalker:
    """
    Walks folders of one module at a time, writing DOC- artifacts and
    appending statements to the module's ScriptBuffer.

    Usage:
        walker = FolderWalker(source, serializer, writer)
        await walker.walk_folder(folder, module, buffer, depth=1)
    """

    def __init__(
        self,
        source: UnitSource,
        serializer: DocumentSerializer,
        writer: ArtifactWriter,
        on_collision: str = "error",
    ):
        if on_collision not in COLLISION_POLICIES:
            raise ValueError(f"on_collision must be error/warn, got '{on_collision}'")
        self.source = source
        self.serializer = serializer
        self.writer = writer
        self.on_collision = on_collision
        self.documents_exported = 0
        self.folders_visited = 0
        self.collisions: List[Collision] = []

    def reset(self) -> None:
        """Clear the counters and collisions of a previous run."""
        self.documents_exported = 0
        self.folders_visited = 0
        self.collisions = []

    async def walk_folder(
        self,
        folder: Folder,
        parent: Container,
        buffer: ScriptBuffer,
        depth: int,
        scope: Optional[Scope] = None,
    ) -> None:
        """
        Export *folder* and its subtree under *parent*.

        Args:
            folder: Folder to export.
            parent: Module or folder the new folder is created in.
            buffer: The owning module's script buffer.
            depth: Nesting level, used for progress indentation only.
            scope: (identifier, name) of the module root, the preamble imports
                and every ancestor folder; derived from *parent* when omitted.
        """
        identifier = sanitize(folder.name)
        parent_identifier = sanitize(parent.name)
        if scope is None:
            scope = root_scope(parent.name, self.serializer.capabilities)

        logger.info(f"{indent(depth)}Folder: {folder.name}")

        for outer_identifier, outer_name in scope:
            if outer_identifier == identifier:
                self._collide(Collision("folder", buffer.module_name, identifier, (outer_name, folder.name)))

        buffer.declare_folder(identifier, parent_identifier, folder.name)
        self.folders_visited += 1

        for ref in folder.documents:
            await self.export_document(ref, folder, buffer, depth + 1)

        inner_scope = (*scope, (identifier, folder.name))
        for child in folder.folders:
            await self.walk_folder(child, folder, buffer, depth + 1, inner_scope)

    async def export_document(
        self,
        ref: DocumentRef,
        parent: Container,
        buffer: ScriptBuffer,
        depth: int,
    ) -> None:
        """Load, serialize and write one document, then append its replay call."""
        logger.info(f"{indent(depth)}Document: {ref.name}")
        document = await self.source.load_unit(ref)

        qualified_name = document.qualified_name or qualified_name_of(ref, buffer.module_name)
        function_name = document_identifier(qualified_name)

        owner = buffer.function_owner(function_name)
        if owner is not None:
            self._collide(Collision("function", buffer.module_name, function_name, (owner, qualified_name)))

        serialized = self.serializer.serialize(document, function_name)
        self.writer.write_pair(DOCUMENT, qualified_name, serialized, module=buffer.module_name)
        buffer.call_document(function_name, sanitize(parent.name), qualified_name)
        self.documents_exported += 1

    def _collide(self, collision: Collision) -> None:
        self.collisions.append(collision)
        if self.on_collision == "error":
            raise HorizonNameCollisionError(
                collision.describe(),
                identifier=collision.identifier,
                module=collision.module,
                names=list(collision.names),
            )
        logger.warning(collision.describe())


# ---------------------------------------------------------------------------
# Index-only collision check
# ---------------------------------------------------------------------------

def find_collisions(
    module: Module,
    capabilities: Sequence[str] = DEFAULT_CAPABILITIES,
) -> List[Collision]:
    """
    Collisions the walker would hit for *module*, found from the tree index
    alone (no unit is loaded). *capabilities* are the names the preamble
    imports.
    """
    collisions: List[Collision] = []
    functions: dict = {}

    def visit_documents(refs: List[DocumentRef]) -> None:
        for ref in refs:
            qualified_name = qualified_name_of(ref, module.name)
            function_name = document_identifier(qualified_name)
            if function_name in functions:
                collisions.append(Collision(
                    "function", module.name, function_name,
                    (functions[function_name], qualified_name),
                ))
            else:
                functions[function_name] = qualified_name

    def visit_folder(folder: Folder, scope: Scope) -> None:
        identifier = sanitize(folder.name)
        for outer_identifier, outer_name in scope:
            if outer_identifier == identifier:
                collisions.append(Collision("folder", module.name, identifier, (outer_name, folder.name)))
        visit_documents(folder.documents)
        inner_scope = (*scope, (identifier, folder.name))
        for child in folder.folders:
            visit_folder(child, inner_scope)

    visit_documents(module.documents)
    module_scope = root_scope(module.name, capabilities)
    for folder in module.folders:
        visit_folder(folder, module_scope)
    return collisions
