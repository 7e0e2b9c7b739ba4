"""
Horizon Document Serializer — Produces the snapshot and the regeneration
script fragment for one loaded document.

Generates:
    1. Snapshot: canonical, indented JSON of the full document content
    2. Script fragment: import preamble + one regeneration function

The serializer only relies on the Renderable capabilities of its input and
never inspects the document kind.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Protocol, Sequence

from horizon.generators.replay_generator import render_replay

logger = logging.getLogger("horizon.generators.serializer")

DEFAULT_CAPABILITIES = (
    "domainmodels",
    "projects",
    "texts",
    "pages",
    "IStructure",
    "datatypes",
    "IAbstractUnit",
    "JavaScriptSerializer",
)
DEFAULT_PREAMBLE_MODULE = "mendixmodelsdk"

CONTAINER_PARAM = "container"
MODEL_PARAM = "model"


class Renderable(Protocol):
    """The two capabilities the serializer needs from a document."""

    def to_snapshot(self) -> str: ...

    def replay_statements(self, container: str) -> List[str]: ...


def canonical_json(content: Mapping[str, Any]) -> str:
    """Deterministic, human-diffable JSON text with a trailing newline."""
    return json.dumps(content, indent=2, sort_keys=True, ensure_ascii=False) + "\n"


def structure_replay(content: Mapping[str, Any], container: str) -> List[str]:
    """Replay statements for a structural value, created inside *container*."""
    return render_replay(content, container=container)


def import_preamble(
    capabilities: Sequence[str] = DEFAULT_CAPABILITIES,
    module: str = DEFAULT_PREAMBLE_MODULE,
) -> str:
    """The fixed capability import line every regeneration script starts with."""
    return f'import {{ {", ".join(capabilities)} }} from "{module}";\n'


@dataclass(frozen=True)
class SerializedDocument:
    """Paired artifacts for one document."""
    identifier: str
    snapshot: str
    script: str


class DocumentSerializer:
    """
    Wraps rendered documents into standalone regeneration units.

    Usage:
        serializer = DocumentSerializer()
        out = serializer.serialize(document, "Sales$$Customer")
        out.snapshot, out.script
    """

    def __init__(
        self,
        capabilities: Optional[Sequence[str]] = None,
        preamble_module: str = DEFAULT_PREAMBLE_MODULE,
    ):
        self.capabilities = tuple(capabilities or DEFAULT_CAPABILITIES)
        self.preamble_module = preamble_module

    @property
    def preamble(self) -> str:
        return import_preamble(self.capabilities, self.preamble_module)

    def serialize(self, document: Renderable, identifier: str) -> SerializedDocument:
        """
        Serialize *document* under the already-sanitized function *identifier*.

        Args:
            document: Loaded document exposing the Renderable capabilities.
            identifier: Regeneration function name (see horizon.utilities.utils).

        Returns:
            SerializedDocument with the snapshot and the script fragment.
        """
        snapshot = document.to_snapshot()
        body = document.replay_statements(CONTAINER_PARAM)
        script = "\n".join([
            self.preamble,
            f"function {identifier}({CONTAINER_PARAM}, {MODEL_PARAM}) {{",
            *body,
            "}",
            "",
        ])
        logger.debug(f"Serialized {identifier}: {len(body)} replay statement(s)")
        return SerializedDocument(identifier=identifier, snapshot=snapshot, script=script)
