"""
Horizon Replay Generator — Renders a structural value as replay statements.

A structural value is a JSON-compatible mapping tagged with ``$Type`` in the
``Namespace$Name`` form used by the design-document repository. Rendering
produces JavaScript statements that rebuild the same structure through the
namespace constructors of the target tree:

    {"$Type": "Pages$Page", "name": "Home", "title": {"$Type": "Texts$Text"}}

becomes

    var pagesPage1 = pages.Page.createIn(container);
    pagesPage1.name = "Home";
    var textsText2 = texts.Text.create(model);
    pagesPage1.title = textsText2;

The root structure is created in the supplied container; nested structures
are created against the model and then attached to their owner.
"""

from __future__ import annotations

import json
import logging
from typing import Any, List, Mapping, Optional

logger = logging.getLogger("horizon.generators.replay_generator")

TYPE_KEY = "$Type"
READ_ONLY_KEYS = frozenset({"qualifiedName"})
INDENT = "  "


def is_structure(value: Any) -> bool:
    """True for a mapping tagged with a ``$Type``."""
    return isinstance(value, Mapping) and isinstance(value.get(TYPE_KEY), str)


def split_type(type_name: str) -> tuple:
    """
    Split ``Namespace$Name`` into (namespace module, constructor name).

    Examples:
        split_type("DomainModels$Entity")  → ("domainmodels", "Entity")
        split_type("Folder")               → ("projects", "Folder")
    """
    namespace, sep, name = type_name.partition("$")
    if not sep:
        return "projects", type_name
    return namespace.lower(), name


def literal(value: Any) -> str:
    """JavaScript literal for a JSON-compatible scalar or plain container."""
    return json.dumps(value, ensure_ascii=False, sort_keys=False)


class ReplayGenerator:
    """
    Transcodes one structural value into a list of replay statements.

    One generator instance renders one function body; variable numbering is
    local to that body.

    Usage:
        gen = ReplayGenerator()
        lines = gen.render(content, container="container")
    """

    def __init__(self, indent: str = INDENT):
        self._indent = indent
        self._counter = 0
        self._lines: List[str] = []

    def render(self, value: Mapping[str, Any], container: str = "container") -> List[str]:
        """
        Render *value* as statements creating it inside *container*.

        Raises:
            ValueError if *value* is not a ``$Type``-tagged mapping.
        """
        if not is_structure(value):
            raise ValueError("Replay rendering needs a mapping tagged with '$Type'")
        self._counter = 0
        self._lines = []
        self._emit_structure(value, f"createIn({container})")
        return list(self._lines)

    # -------------------------------------------------------------------
    # Emission
    # -------------------------------------------------------------------

    def _next_var(self, namespace: str, name: str) -> str:
        self._counter += 1
        return f"{namespace}{name}{self._counter}"

    def _emit(self, statement: str) -> None:
        self._lines.append(f"{self._indent}{statement}")

    def _emit_structure(self, value: Mapping[str, Any], creator: str) -> str:
        namespace, name = split_type(value[TYPE_KEY])
        var = self._next_var(namespace, name)
        self._emit(f"var {var} = {namespace}.{name}.{creator};")

        for key, prop in value.items():
            if key.startswith("$") or key in READ_ONLY_KEYS:
                continue
            self._emit_property(var, key, prop)
        return var

    def _emit_property(self, owner: str, key: str, prop: Any) -> None:
        target = f"{owner}.{key}"

        if is_structure(prop):
            child = self._emit_structure(prop, "create(model)")
            self._emit(f"{target} = {child};")
        elif isinstance(prop, list):
            for item in prop:
                if is_structure(item):
                    child = self._emit_structure(item, "create(model)")
                    self._emit(f"{target}.push({child});")
                else:
                    self._emit(f"{target}.push({literal(item)});")
        else:
            self._emit(f"{target} = {literal(prop)};")


def render_replay(value: Mapping[str, Any], container: str = "container",
                  indent: Optional[str] = None) -> List[str]:
    """Shortcut for ``ReplayGenerator().render(...)``."""
    gen = ReplayGenerator(indent=INDENT if indent is None else indent)
    return gen.render(value, container=container)
