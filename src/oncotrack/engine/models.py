"""
Questionnaire Specification Models

Output of the generation engine, consumed by the persistence/API layer.
"""

from typing import Dict, List, Optional
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field


class GenerationStatus(str, Enum):
    """How complete a generated questionnaire is."""
    COMPLETE = "complete"      # every composition entry resolved
    PARTIAL = "partial"        # some entries unresolved, items still produced
    DEGRADED = "degraded"      # zero items


class WarningKind(str, Enum):
    """Kinds of non-fatal generation warnings."""
    UNRESOLVED_DRUGS = "unresolved_drugs"
    NO_ACTIVE_STEP = "no_active_step"
    NO_ITEMS = "no_items"


class GenerationWarning(BaseModel):
    """A non-fatal problem surfaced in questionnaire metadata."""
    kind: WarningKind
    message: str
    drugs: List[str] = Field(default_factory=list)


class UnresolvedDrugWarning(GenerationWarning):
    """One or more composition entries matched no catalog module."""
    kind: WarningKind = WarningKind.UNRESOLVED_DRUGS


class QuestionnaireItem(BaseModel):
    """One deduplicated, annotated question."""
    item_code: str
    attribute: str
    drug_owner: str
    contributing_drugs: List[str] = Field(default_factory=list)
    symptom_root: str
    heightened_in_nadir: bool = False


class QuestionnaireMetadata(BaseModel):
    """Generation metadata for a questionnaire specification."""
    active_drugs: List[str] = Field(default_factory=list)
    unresolved_drugs: List[str] = Field(default_factory=list)
    total_items: int = 0
    nadir_active: bool = False
    
    regimen_code: str
    regimen_step: Optional[str] = None
    cycle_number: int
    day_in_cycle: int
    nadir_phase: str = "none"
    cycle_phase: str
    
    total_items_before_dedup: int = 0
    symptom_sources: Dict[str, List[str]] = Field(default_factory=dict)
    symptom_groups: Dict[str, List[str]] = Field(default_factory=dict)
    
    status: GenerationStatus = GenerationStatus.COMPLETE
    warnings: List[GenerationWarning] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class QuestionnaireSpecification(BaseModel):
    """Ordered question list plus the metadata describing how it was built."""
    patient_id: str
    items: List[QuestionnaireItem] = Field(default_factory=list)
    metadata: QuestionnaireMetadata
    
    @property
    def item_codes(self) -> List[str]:
        return [item.item_code for item in self.items]
    
    @property
    def is_degraded(self) -> bool:
        return self.metadata.status == GenerationStatus.DEGRADED
