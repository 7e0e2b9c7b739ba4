"""
Horizon Shared Utilities — identifier escaping for regeneration scripts.

Every identifier written into a regeneration script is derived from a node
name through ``sanitize``. Qualified identifiers join two sanitized segments
with a double escape so the module/kind segment stays visible.
"""

from __future__ import annotations

import re

ESCAPE = "$"
QUALIFIED_SEPARATOR = ESCAPE * 2

_UNSAFE = re.compile(r"[. ]")


def sanitize(name: str) -> str:
    """
    Replace every space and period in *name* with the escape character.

    Examples:
        sanitize("Admin Tools")     → "Admin$Tools"
        sanitize("Sales.Customer")  → "Sales$Customer"
        sanitize("Plain")           → "Plain"
    """
    return _UNSAFE.sub(ESCAPE, name)


def qualified_identifier(prefix: str, local: str) -> str:
    """
    Join a module/kind segment and a local segment with the double escape.

    Examples:
        qualified_identifier("DM", "Sales")        → "DM$$Sales"
        qualified_identifier("Sales", "Customer")  → "Sales$$Customer"
    """
    return f"{sanitize(str(prefix))}{QUALIFIED_SEPARATOR}{sanitize(str(local))}"


def document_identifier(qualified_name: str) -> str:
    """
    Regeneration function name for a document's qualified name.

    The module segment is everything before the first period; a name without
    a module segment is only sanitized.
    """
    module, sep, local = qualified_name.partition(".")
    if not sep:
        return sanitize(qualified_name)
    return qualified_identifier(module, local)
