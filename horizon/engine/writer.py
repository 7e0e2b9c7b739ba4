"""
Horizon Artifact Writer — Writes snapshots and regeneration scripts into a
flat output directory.

File naming (all inside the output directory, no sub-directories):
    DM-{module}.json / .js        domain model
    MSC-{module}.json / .js       module security
    DOC-{qualifiedName}.json/.js  document
    MOD-{module}.js               module regeneration script (no snapshot)
    NAV-{position}.json / .js     navigation document
    PSC-{position}.json / .js     project security
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Union

from horizon.engine.logging import log, log_artifact_written
from horizon.generators.serializer import SerializedDocument

logger = logging.getLogger("horizon.engine.writer")

DOMAIN_MODEL = "DM"
MODULE_SECURITY = "MSC"
DOCUMENT = "DOC"
MODULE_SCRIPT = "MOD"
NAVIGATION = "NAV"
PROJECT_SECURITY = "PSC"

PREFIXES = (DOMAIN_MODEL, MODULE_SECURITY, DOCUMENT, MODULE_SCRIPT, NAVIGATION, PROJECT_SECURITY)

SNAPSHOT_SUFFIX = ".json"
SCRIPT_SUFFIX = ".js"


def artifact_name(prefix: str, name: Union[str, int], suffix: str) -> str:
    """
    Output file name for one artifact.

    Examples:
        artifact_name("DOC", "Sales.Customer", ".json")  → "DOC-Sales.Customer.json"
        artifact_name("NAV", 0, ".js")                   → "NAV-0.js"
    """
    if prefix not in PREFIXES:
        raise ValueError(f"Unknown artifact prefix '{prefix}'")
    return f"{prefix}-{name}{suffix}"


class ArtifactWriter:
    """
    Flat-directory writer. The directory is created on construction if it
    does not exist yet.

    Usage:
        writer = ArtifactWriter("Output")
        writer.write_pair("DOC", "Sales.Customer", serialized)
        writer.write_script("MOD", "Sales", buffer.render())
    """

    def __init__(self, output_dir: str = "Output"):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.written: List[Path] = []

    def write_pair(
        self,
        prefix: str,
        name: Union[str, int],
        serialized: SerializedDocument,
        module: Optional[str] = None,
    ) -> List[Path]:
        """Write the snapshot and the script fragment of one document."""
        return [
            self._write(prefix, name, SNAPSHOT_SUFFIX, serialized.snapshot, module),
            self._write(prefix, name, SCRIPT_SUFFIX, serialized.script, module),
        ]

    def write_script(
        self,
        prefix: str,
        name: Union[str, int],
        script: str,
        module: Optional[str] = None,
    ) -> Path:
        """Write a script-only artifact (module regeneration scripts)."""
        return self._write(prefix, name, SCRIPT_SUFFIX, script, module)

    def _write(self, prefix: str, name: Union[str, int], suffix: str, text: str,
               module: Optional[str]) -> Path:
        path = self.output_dir / artifact_name(prefix, name, suffix)
        data = text.encode("utf-8")
        path.write_bytes(data)
        self.written.append(path)
        log(log_artifact_written(prefix, str(name), str(path), len(data), module=module))
        logger.debug(f"Wrote {path} ({len(data)} bytes)")
        return path
