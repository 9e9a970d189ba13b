"""
Drug Resolver

Maps regimen composition entries (clinically authored text) to canonical
drug modules. Entries that match nothing are reported, never dropped, and
entries that match several modules are reported as ambiguous instead of
being resolved arbitrarily.
"""

from dataclasses import dataclass, field
from typing import Sequence

import structlog

from oncotrack.catalog.models import DrugModule
from oncotrack.catalog.registry import DrugModuleCatalog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ResolutionResult:
    """Outcome of resolving one composition against a catalog."""
    modules: tuple[DrugModule, ...] = ()
    unresolved: tuple[str, ...] = ()
    ambiguous: dict[str, tuple[str, ...]] = field(default_factory=dict)
    
    @property
    def resolved(self) -> tuple[str, ...]:
        """Canonical names of resolved modules, in composition order."""
        return tuple(m.canonical_name for m in self.modules)
    
    @property
    def is_complete(self) -> bool:
        return not self.unresolved and not self.ambiguous


def resolve(drug_composition: Sequence[str], catalog: DrugModuleCatalog) -> ResolutionResult:
    """
    Resolve composition entries to canonical drug modules.
    
    Each entry is normalized and looked up by canonical name first, then by
    alias. An entry resolves to at most one module; a module named twice in
    a composition is contributed once.
    
    Args:
        drug_composition: Drug names as authored in the regimen
        catalog: Drug module catalog snapshot
        
    Returns:
        ResolutionResult with modules, unresolved entries and ambiguous entries
    """
    modules: list[DrugModule] = []
    unresolved: list[str] = []
    ambiguous: dict[str, tuple[str, ...]] = {}
    
    for entry in drug_composition:
        matches = catalog.candidates(entry)
        
        if not matches:
            if entry not in unresolved:
                unresolved.append(entry)
            continue
        
        if len(matches) > 1:
            ambiguous[entry] = tuple(m.canonical_name for m in matches)
            continue
        
        module = matches[0]
        if module.canonical_name != entry:
            logger.debug(
                "Drug entry resolved via alias",
                entry=entry,
                canonical_name=module.canonical_name,
            )
        if all(m.canonical_name != module.canonical_name for m in modules):
            modules.append(module)
    
    if unresolved:
        logger.warning(
            "Drug entries did not resolve to any module",
            unresolved=unresolved,
            resolved=[m.canonical_name for m in modules],
        )
    
    return ResolutionResult(
        modules=tuple(modules),
        unresolved=tuple(unresolved),
        ambiguous=ambiguous,
    )
