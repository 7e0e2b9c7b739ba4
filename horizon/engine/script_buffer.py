"""
Horizon Script Buffer — Append-only accumulator for one module's
regeneration script.

The exporter creates one buffer per module, seeded with the import preamble,
and passes it explicitly through every walker call. Nothing else holds a
reference to it, so module traversals never share script state.
"""

from __future__ import annotations

import json
import logging
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger("horizon.engine.script_buffer")

STATEMENT_INDENT = "  "
MODEL_HANDLE = "model"


class ScriptBuffer:
    """
    Ordered statements for one module's ``MOD-`` script.

    Besides the raw statements the buffer remembers which document function
    each call targeted, keyed to the document that produced it, so that two
    documents sanitizing to one function name can be detected.
    """

    def __init__(self, module_name: str, preamble: str):
        self.module_name = module_name
        self._preamble = preamble
        self._statements: List[str] = []
        self._functions: Dict[str, str] = {}

    # -------------------------------------------------------------------
    # Append
    # -------------------------------------------------------------------

    def append(self, statement: str) -> None:
        self._statements.append(f"{STATEMENT_INDENT}{statement}")

    def declare_folder(self, identifier: str, parent_identifier: str, name: str) -> None:
        """Folder creation under *parent_identifier*, then its display name."""
        self.append(f"var {identifier} = projects.Folder.createIn({parent_identifier});")
        self.append(f"{identifier}.name = {json.dumps(name, ensure_ascii=False)};")

    def call_document(self, function_name: str, parent_identifier: str, name: str) -> None:
        """Replay call for one document's regeneration function."""
        self.append(f"{function_name}({parent_identifier}, {MODEL_HANDLE});")
        self._functions[function_name] = name

    # -------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------

    def function_owner(self, function_name: str) -> Optional[str]:
        """Name of the document that already registered *function_name*."""
        return self._functions.get(function_name)

    @property
    def statements(self) -> Tuple[str, ...]:
        return tuple(self._statements)

    def __len__(self) -> int:
        return len(self._statements)

    def render(self) -> str:
        """Preamble followed by every statement in append order."""
        body = "".join(f"{line}\n" for line in self._statements)
        return f"{self._preamble}{body}"
