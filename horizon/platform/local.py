"""
Horizon Local Working Copy — A tree export read from a YAML or JSON file.

File layout (same index as the platform model endpoint, plus the units):

    modules:
      - name: Sales
        domainModel: {id: dm-sales}
        moduleSecurity: {id: msc-sales}
        documents:
          - {id: doc-1, name: Customer, qualifiedName: Sales.Customer}
        folders: []
    navigationDocuments: [{id: nav-1}]
    projectSecurities: [{id: psc-1}]
    units:
      dm-sales: {$Type: DomainModels$DomainModel, ...}
      ...
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from horizon.engine.errors import HorizonLoadError, HorizonWorkingCopyError
from horizon.platform.models import Document, Tree, UnitRef

logger = logging.getLogger("horizon.platform.local")

TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class TreeExportLoader(yaml.SafeLoader):
    """SafeLoader that keeps unquoted dates and times as strings, as JSON would."""


TreeExportLoader.yaml_implicit_resolvers = {
    first: [(tag, pattern) for tag, pattern in resolvers if tag != TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


class InMemoryUnitSource:
    """UnitSource backed by a dict of unit id → content."""

    def __init__(self, units: Dict[str, Dict[str, Any]]):
        self._units = units
        self.load_count = 0

    async def load_unit(self, ref: UnitRef) -> Document:
        if ref.id not in self._units:
            raise HorizonLoadError(f"Unit not found: {ref.id}", unit_id=ref.id)
        self.load_count += 1
        return Document.from_unit(ref, self._units[ref.id])


class LocalWorkingCopy:
    """
    Working copy materialized from a local export file.

    Usage:
        async with LocalWorkingCopy("tree.yaml") as wc:
            tree = await wc.open_model()
            exporter = TreeExporter(wc, writer)
    """

    def __init__(self, path: str):
        self.path = Path(path)
        self._source: Optional[InMemoryUnitSource] = None
        self._tree: Optional[Tree] = None

    async def __aenter__(self) -> "LocalWorkingCopy":
        self._read()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self._source = None
        self._tree = None

    def _read(self) -> None:
        if not self.path.exists():
            raise HorizonWorkingCopyError(
                f"Tree export not found: {self.path}", path=str(self.path)
            )

        try:
            text = self.path.read_text(encoding="utf-8")
            if self.path.suffix.lower() == ".json":
                raw = json.loads(text)
            else:
                raw = yaml.load(text, Loader=TreeExportLoader) or {}
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise HorizonWorkingCopyError(
                f"Cannot read tree export {self.path}: {e}", path=str(self.path)
            ) from e

        if not isinstance(raw, dict):
            raise HorizonWorkingCopyError(
                f"Tree export {self.path} must be a mapping", path=str(self.path)
            )

        units = raw.pop("units", None) or {}
        if not isinstance(units, dict):
            raise HorizonWorkingCopyError(
                f"Tree export {self.path}: 'units' must be a mapping", path=str(self.path)
            )
        try:
            json.dumps(units)
        except (TypeError, ValueError) as e:
            raise HorizonWorkingCopyError(
                f"Tree export {self.path} holds non-JSON unit content: {e}", path=str(self.path)
            ) from e

        try:
            self._tree = Tree.model_validate(raw)
        except ValidationError as e:
            raise HorizonWorkingCopyError(
                f"Invalid tree index in {self.path}: {e}", path=str(self.path)
            ) from e
        self._source = InMemoryUnitSource({str(k): v for k, v in units.items()})
        logger.info(f"Opened local working copy {self.path} ({len(self._tree.modules)} module(s))")

    async def open_model(self) -> Tree:
        if self._tree is None:
            self._read()
        return self._tree

    async def load_unit(self, ref: UnitRef) -> Document:
        if self._source is None:
            self._read()
        return await self._source.load_unit(ref)
