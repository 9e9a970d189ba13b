"""
Catalog Loader

Loads drug modules and regimens from the JSON catalog format used by the
data-ingestion tooling:

    {
        "drugModules": [{"drugName": ..., "alternativeNames": [...], "items": [...]}],
        "regimens": [{"regimenCode": ..., "drugComposition": [...], "nadirWindow": {...}}]
    }

Alias lists are structured arrays; a comma-joined string is rejected rather
than guessed at.
"""

from typing import Any, Dict, List, Tuple
from pathlib import Path
import json

import structlog
from pydantic import ValidationError

from oncotrack.catalog.models import DrugModule, ItemTemplate, NadirWindow, Regimen, RegimenStep
from oncotrack.catalog.registry import DrugModuleCatalog, RegimenCatalog
from oncotrack.errors import CatalogIntegrityError

logger = structlog.get_logger(__name__)

BUNDLED_CATALOG = Path(__file__).resolve().parent.parent / "data" / "catalog.json"


def _string_list(value: Any, field: str, owner: str) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str) or not isinstance(value, list):
        raise CatalogIntegrityError(
            f"{owner}: {field} must be a JSON array of strings",
            problems=[f"{owner}: {field} is {type(value).__name__}"],
        )
    return [str(v) for v in value]


def parse_drug_module(data: Dict[str, Any]) -> DrugModule:
    """Build a DrugModule from one catalog JSON entry."""
    name = data["drugName"]
    return DrugModule(
        canonical_name=name,
        alternative_names=tuple(_string_list(data.get("alternativeNames"), "alternativeNames", name)),
        items=tuple(
            ItemTemplate(
                item_code=item["itemCode"],
                attribute=item.get("attribute", ""),
                drug_owner=item.get("drugOwner", name),
            )
            for item in data.get("items", [])
        ),
        drug_class=data.get("drugClass"),
        is_myelosuppressive=data.get("isMyelosuppressive", False),
        clinical_notes=data.get("clinicalNotes"),
    )


def parse_regimen(data: Dict[str, Any]) -> Regimen:
    """Build a Regimen from one catalog JSON entry."""
    code = data["regimenCode"]
    window = data.get("nadirWindow") or {}
    
    steps = []
    for step in data.get("steps", []):
        cycles = step.get("cycles", "all")
        steps.append(
            RegimenStep(
                step_name=step.get("stepName"),
                cycles=cycles if cycles == "all" else tuple(cycles),
                drugs=tuple(_string_list(step.get("drugModules"), "drugModules", code)),
            )
        )
    
    return Regimen(
        regimen_code=code,
        regimen_name=data.get("regimenName", code),
        drug_composition=tuple(_string_list(data.get("drugComposition"), "drugComposition", code)),
        cycle_length_days=data.get("cycleLengthDays", 21),
        nadir_window=NadirWindow(start=window.get("start", 0), end=window.get("end", 0)),
        steps=tuple(steps),
        total_cycles=data.get("totalCycles"),
    )


def parse_catalogs(data: Dict[str, Any]) -> Tuple[RegimenCatalog, DrugModuleCatalog]:
    """Build both catalog snapshots from decoded catalog JSON."""
    try:
        modules = [parse_drug_module(d) for d in data.get("drugModules", [])]
        regimen_list = [parse_regimen(r) for r in data.get("regimens", [])]
    except (KeyError, TypeError, AttributeError, ValidationError) as e:
        # Wrong JSON shapes (null lists, non-object entries) surface as integrity problems
        raise CatalogIntegrityError(f"Invalid catalog entry: {e}", problems=[str(e)]) from e
    
    drugs = DrugModuleCatalog(modules)
    regimens = RegimenCatalog(regimen_list)
    return regimens, drugs


def load_catalogs(file_path: str | Path | None = None) -> Tuple[RegimenCatalog, DrugModuleCatalog]:
    """
    Load regimen and drug module catalogs from a JSON file.
    
    Args:
        file_path: Path to catalog JSON; the bundled catalog when omitted
        
    Returns:
        (RegimenCatalog, DrugModuleCatalog)
    """
    path = Path(file_path) if file_path else BUNDLED_CATALOG
    logger.info("Loading catalog from JSON", file_path=str(path))
    
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    
    regimens, drugs = parse_catalogs(data)
    logger.info(
        "Catalog loaded",
        file_path=str(path),
        drug_modules=len(drugs),
        regimens=len(regimens),
    )
    return regimens, drugs
