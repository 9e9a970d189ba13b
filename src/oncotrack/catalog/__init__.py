"""
Oncotrack Catalogs

Drug module and regimen reference data:
- Immutable models
- Name/alias lookup snapshots
- JSON loading and cross-catalog audit
"""

from oncotrack.catalog.models import (
    DrugModule,
    ItemTemplate,
    NadirWindow,
    Regimen,
    RegimenStep,
    TreatmentContext,
)
from oncotrack.catalog.registry import (
    DrugModuleCatalog,
    RegimenCatalog,
    normalize_name,
)
from oncotrack.catalog.loader import load_catalogs, parse_catalogs

__all__ = [
    "DrugModule",
    "ItemTemplate",
    "NadirWindow",
    "Regimen",
    "RegimenStep",
    "TreatmentContext",
    "DrugModuleCatalog",
    "RegimenCatalog",
    "normalize_name",
    "load_catalogs",
    "parse_catalogs",
]
