"""
Horizon Test Suite — Shared fixtures and configuration.

Run:  pytest tests/ -v
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any, Dict

import pytest
import yaml

from horizon.engine.writer import ArtifactWriter
from horizon.platform.local import InMemoryUnitSource
from horizon.platform.models import Tree


# ---------------------------------------------------------------------------
# Global state isolation
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _isolate_globals():
    """Reset the cached config and the event log between tests."""
    import horizon.engine.config as cfg_mod
    import horizon.engine.logging as log_mod

    cfg_mod._config = None
    log_mod.shutdown_logging()
    yield
    cfg_mod._config = None
    log_mod.shutdown_logging()


# ---------------------------------------------------------------------------
# Tree data
# ---------------------------------------------------------------------------

SALES_INDEX: Dict[str, Any] = {
    "modules": [
        {
            "name": "Sales",
            "domainModel": {"id": "dm-sales"},
            "moduleSecurity": {"id": "msc-sales"},
            "documents": [
                {"id": "doc-customer", "name": "Customer", "qualifiedName": "Sales.Customer"},
            ],
            "folders": [],
        }
    ],
    "navigationDocuments": [],
    "projectSecurities": [],
}

SALES_UNITS: Dict[str, Dict[str, Any]] = {
    "dm-sales": {
        "$Type": "DomainModels$DomainModel",
        "entities": [
            {"$Type": "DomainModels$Entity", "name": "Customer", "persistable": True},
        ],
    },
    "msc-sales": {
        "$Type": "Security$ModuleSecurity",
        "moduleRoles": [{"$Type": "Security$ModuleRole", "name": "User"}],
    },
    "doc-customer": {
        "$Type": "Pages$Page",
        "name": "Customer",
        "qualifiedName": "Sales.Customer",
        "title": {"$Type": "Texts$Text", "translations": []},
    },
}


def page(name: str, qualified_name: str) -> Dict[str, Any]:
    return {"$Type": "Pages$Page", "name": name, "qualifiedName": qualified_name}


@pytest.fixture
def sales_index() -> Dict[str, Any]:
    return copy.deepcopy(SALES_INDEX)


@pytest.fixture
def sales_units() -> Dict[str, Dict[str, Any]]:
    return copy.deepcopy(SALES_UNITS)


@pytest.fixture
def sales_tree(sales_index) -> Tree:
    return Tree.model_validate(sales_index)


@pytest.fixture
def sales_source(sales_units) -> InMemoryUnitSource:
    return InMemoryUnitSource(sales_units)


@pytest.fixture
def nested_index() -> Dict[str, Any]:
    """
    Module 'Shop':
        Shop.Home
        Admin Tools/
            Shop.Settings
            Reports/
                Shop.Sales Report
        Archive/
            Shop.Old
    """
    return {
        "modules": [
            {
                "name": "Shop",
                "domainModel": {"id": "dm-shop"},
                "moduleSecurity": {"id": "msc-shop"},
                "documents": [{"id": "home", "name": "Home", "qualifiedName": "Shop.Home"}],
                "folders": [
                    {
                        "name": "Admin Tools",
                        "documents": [
                            {"id": "settings", "name": "Settings", "qualifiedName": "Shop.Settings"},
                        ],
                        "folders": [
                            {
                                "name": "Reports",
                                "documents": [
                                    {"id": "report", "name": "Sales Report",
                                     "qualifiedName": "Shop.Sales Report"},
                                ],
                            }
                        ],
                    },
                    {
                        "name": "Archive",
                        "documents": [{"id": "old", "name": "Old", "qualifiedName": "Shop.Old"}],
                    },
                ],
            }
        ],
    }


@pytest.fixture
def nested_units() -> Dict[str, Dict[str, Any]]:
    return {
        "dm-shop": {"$Type": "DomainModels$DomainModel", "entities": []},
        "msc-shop": {"$Type": "Security$ModuleSecurity", "moduleRoles": []},
        "home": page("Home", "Shop.Home"),
        "settings": page("Settings", "Shop.Settings"),
        "report": page("Sales Report", "Shop.Sales Report"),
        "old": page("Old", "Shop.Old"),
    }


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

@pytest.fixture
def output_dir(tmp_path) -> Path:
    return tmp_path / "Output"


@pytest.fixture
def writer(output_dir) -> ArtifactWriter:
    return ArtifactWriter(str(output_dir))


@pytest.fixture
def tree_file(tmp_path, sales_index, sales_units) -> Path:
    """The Sales tree as a local YAML export."""
    path = tmp_path / "tree.yaml"
    data = dict(sales_index)
    data["units"] = sales_units
    path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    return path
