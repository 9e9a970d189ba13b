"""
Item Aggregator

Unions item templates across resolved drug modules, collapsing shared
symptom items to one question while remembering every drug that asked for
it.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from oncotrack.catalog.models import DrugModule
from oncotrack.engine.models import QuestionnaireItem

# Measurement dimensions encoded as the last underscore segment of an item code
ITEM_SUFFIXES = frozenset({"FREQ", "SEV", "INTERF", "PRESENT", "AMOUNT"})


def symptom_root(item_code: str) -> str:
    """
    Derive the symptom root of an item code.
    
    NAUSEA_FREQ -> NAUSEA, HAND_FOOT_SYNDROME_SEV -> HAND_FOOT_SYNDROME,
    codes without a known suffix are their own root.
    """
    root, sep, suffix = item_code.rpartition("_")
    if sep and root and suffix in ITEM_SUFFIXES:
        return root
    return item_code


@dataclass
class AggregationResult:
    """Deduplicated items plus item-code provenance."""
    items: List[QuestionnaireItem] = field(default_factory=list)
    sources: Dict[str, List[str]] = field(default_factory=dict)
    total_before_dedup: int = 0


def aggregate(resolved_modules: Sequence[DrugModule]) -> AggregationResult:
    """
    Collect items from resolved modules, deduplicated by exact item code.
    
    The first occurrence (in module order, then item order) is kept; later
    modules carrying the same code are recorded as contributors only.
    """
    result = AggregationResult()
    by_code: Dict[str, QuestionnaireItem] = {}
    
    for module in resolved_modules:
        for template in module.items:
            result.total_before_dedup += 1
            code = template.item_code
            
            existing = by_code.get(code)
            if existing is not None:
                if module.canonical_name not in existing.contributing_drugs:
                    existing.contributing_drugs.append(module.canonical_name)
                continue
            
            owner = template.drug_owner or module.canonical_name
            item = QuestionnaireItem(
                item_code=code,
                attribute=template.attribute,
                drug_owner=owner,
                contributing_drugs=[module.canonical_name],
                symptom_root=symptom_root(code),
            )
            by_code[code] = item
            result.items.append(item)
    
    result.sources = {item.item_code: list(item.contributing_drugs) for item in result.items}
    return result


def group_by_symptom_root(items: Sequence[QuestionnaireItem]) -> Dict[str, List[str]]:
    """Reporting view: symptom root -> item codes, in first-seen order."""
    groups: Dict[str, List[str]] = {}
    for item in items:
        groups.setdefault(symptom_root(item.item_code), []).append(item.item_code)
    return groups
