"""
Catalog Audit

Cross-checks every regimen composition against the drug module catalog so
naming drift (e.g. "Trastuzumab Emtansine" vs "T-DM1") is caught before a
patient receives an empty questionnaire.
"""

from typing import Optional

from pydantic import BaseModel, Field

from oncotrack.catalog.registry import DrugModuleCatalog, RegimenCatalog
from oncotrack.engine.resolver import resolve


class CompositionAudit(BaseModel):
    """Resolution outcome for one regimen composition (or one step of it)."""
    regimen_code: str
    step_name: Optional[str] = None
    entries: list[str] = Field(default_factory=list)
    resolved: list[str] = Field(default_factory=list)
    unresolved: list[str] = Field(default_factory=list)
    ambiguous: dict[str, list[str]] = Field(default_factory=dict)
    
    @property
    def ok(self) -> bool:
        return not self.unresolved and not self.ambiguous


class CatalogAuditReport(BaseModel):
    """Audit of all regimens against a drug catalog."""
    compositions: list[CompositionAudit] = Field(default_factory=list)
    shared_aliases: dict[str, list[str]] = Field(default_factory=dict)
    
    @property
    def ok(self) -> bool:
        return all(c.ok for c in self.compositions)
    
    @property
    def problems(self) -> list[CompositionAudit]:
        return [c for c in self.compositions if not c.ok]


def audit_catalogs(regimens: RegimenCatalog, drugs: DrugModuleCatalog) -> CatalogAuditReport:
    """Resolve every regimen composition and step, collecting failures."""
    report = CatalogAuditReport(
        shared_aliases={k: list(v) for k, v in drugs.ambiguous_aliases.items()},
    )
    
    for regimen in regimens:
        compositions = [(None, regimen.drug_composition)]
        compositions.extend((step.step_name, step.drugs) for step in regimen.steps)
        
        for step_name, entries in compositions:
            result = resolve(entries, drugs)
            report.compositions.append(
                CompositionAudit(
                    regimen_code=regimen.regimen_code,
                    step_name=step_name,
                    entries=list(entries),
                    resolved=list(result.resolved),
                    unresolved=list(result.unresolved),
                    ambiguous={k: list(v) for k, v in result.ambiguous.items()},
                )
            )
    
    return report
