"""
Horizon Tree Exporter — Drives a full export of one working copy.

Per module, in tree order:
    1. Fresh ScriptBuffer seeded with the import preamble
    2. Domain model               → DM-{module}.json/.js
    3. Top-level documents        → DOC-{qualifiedName}.json/.js, called on the module root
    4. Top-level folders          → FolderWalker (parent = module)
    5. Flush the buffer           → MOD-{module}.js
    6. Module security            → MSC-{module}.json/.js

Then, by zero-based position:
    Navigation documents          → NAV-{i}.json/.js
    Project security documents    → PSC-{i}.json/.js

Every load is awaited before the next step starts; nothing runs concurrently.
Failures propagate and abort the run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

from horizon.engine.config import HorizonConfig
from horizon.engine.script_buffer import ScriptBuffer
from horizon.engine.walker import FolderWalker
from horizon.engine.writer import (
    DOMAIN_MODEL,
    MODULE_SCRIPT,
    MODULE_SECURITY,
    NAVIGATION,
    PROJECT_SECURITY,
    ArtifactWriter,
)
from horizon.generators.serializer import DocumentSerializer
from horizon.platform.models import Module, Tree, UnitRef, UnitSource
from horizon.utilities.utils import qualified_identifier

logger = logging.getLogger("horizon.engine.exporter")


@dataclass
class ExportSummary:
    """Counts and files produced by one run."""
    modules: int = 0
    documents: int = 0
    folders: int = 0
    navigation_documents: int = 0
    project_securities: int = 0
    files: List[Path] = field(default_factory=list)

    def to_dict(self) -> Dict[str, int]:
        return {
            "modules": self.modules,
            "documents": self.documents,
            "folders": self.folders,
            "navigation_documents": self.navigation_documents,
            "project_securities": self.project_securities,
            "files": len(self.files),
        }


class TreeExporter:
    """
    Exports every module of a tree plus its navigation and project security
    documents.

    Usage:
        exporter = TreeExporter(working_copy, ArtifactWriter("Output"))
        summary = await exporter.run(tree)
    """

    def __init__(
        self,
        source: UnitSource,
        writer: ArtifactWriter,
        serializer: Optional[DocumentSerializer] = None,
        on_collision: str = "error",
    ):
        self.source = source
        self.writer = writer
        self.serializer = serializer or DocumentSerializer()
        self.walker = FolderWalker(source, self.serializer, writer, on_collision=on_collision)

    @classmethod
    def from_config(
        cls,
        source: UnitSource,
        config: HorizonConfig,
        output_dir: Optional[str] = None,
    ) -> "TreeExporter":
        """Build an exporter from horizon.yaml settings."""
        serializer = DocumentSerializer(
            capabilities=config.export.capabilities,
            preamble_module=config.export.preamble_module,
        )
        writer = ArtifactWriter(output_dir or config.export.output_dir)
        return cls(source, writer, serializer=serializer, on_collision=config.export.on_collision)

    async def run(self, tree: Tree) -> ExportSummary:
        """Export the whole tree. Returns a summary of what was written."""
        summary = ExportSummary()
        self.walker.reset()
        first_file = len(self.writer.written)
        logger.info("Load documents")

        for module in tree.modules:
            await self.export_module(module)
            summary.modules += 1

        for position, ref in enumerate(tree.navigation_documents):
            logger.info(f"Opening navigation document {position}")
            await self._export_unit(NAVIGATION, position, ref)
            summary.navigation_documents += 1

        for position, ref in enumerate(tree.project_securities):
            logger.info(f"Opening project security {position}")
            await self._export_unit(PROJECT_SECURITY, position, ref)
            summary.project_securities += 1

        summary.documents = self.walker.documents_exported
        summary.folders = self.walker.folders_visited
        summary.files = self.writer.written[first_file:]
        return summary

    async def export_module(self, module: Module) -> ScriptBuffer:
        """Export one module and flush its regeneration script."""
        logger.info(f"Module: {module.name}")

        buffer = ScriptBuffer(module.name, self.serializer.preamble)

        await self._export_unit(DOMAIN_MODEL, module.name, module.domain_model, module=module.name)

        for ref in module.documents:
            await self.walker.export_document(ref, module, buffer, depth=1)

        for folder in module.folders:
            await self.walker.walk_folder(folder, module, buffer, depth=1)

        self.writer.write_script(MODULE_SCRIPT, module.name, buffer.render(), module=module.name)

        await self._export_unit(MODULE_SECURITY, module.name, module.module_security, module=module.name)
        return buffer

    async def _export_unit(
        self,
        prefix: str,
        name: Union[str, int],
        ref: UnitRef,
        module: Optional[str] = None,
    ) -> None:
        """Load a unit and write its pair under a synthetic ``{prefix}$${name}`` identifier."""
        document = await self.source.load_unit(ref)
        serialized = self.serializer.serialize(document, qualified_identifier(prefix, name))
        self.writer.write_pair(prefix, name, serialized, module=module)
