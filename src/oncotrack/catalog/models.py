"""
Catalog Models

Drug modules, regimens and treatment context as immutable Pydantic models.
Catalog snapshots are built from these and shared read-only across requests.
"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ItemTemplate(BaseModel):
    """One symptom question contributed by a drug module."""
    
    model_config = ConfigDict(frozen=True)
    
    item_code: str = Field(min_length=1)
    attribute: str
    drug_owner: Optional[str] = None


class DrugModule(BaseModel):
    """A catalog entry mapping one drug to its symptom item templates."""
    
    model_config = ConfigDict(frozen=True)
    
    canonical_name: str = Field(min_length=1)
    alternative_names: tuple[str, ...] = ()
    items: tuple[ItemTemplate, ...] = ()
    
    drug_class: Optional[str] = None
    is_myelosuppressive: bool = False
    clinical_notes: Optional[str] = None
    
    @model_validator(mode="before")
    @classmethod
    def _assign_item_owner(cls, data: Any) -> Any:
        # Items authored under a module belong to it unless stated otherwise
        if not isinstance(data, dict):
            return data
        owner = data.get("canonical_name")
        items = []
        for item in data.get("items", ()) or ():
            if isinstance(item, dict):
                item = {"drug_owner": owner, **item}
                if item["drug_owner"] is None:
                    item["drug_owner"] = owner
            elif isinstance(item, ItemTemplate) and item.drug_owner is None:
                item = item.model_copy(update={"drug_owner": owner})
            items.append(item)
        return {**data, "items": items}
    
    @property
    def item_codes(self) -> list[str]:
        return [item.item_code for item in self.items]


class NadirWindow(BaseModel):
    """Inclusive day range of expected lowest blood counts; {0, 0} means none."""
    
    model_config = ConfigDict(frozen=True)
    
    start: int = Field(default=0, ge=0)
    end: int = Field(default=0, ge=0)
    
    @model_validator(mode="after")
    def _check_order(self) -> "NadirWindow":
        if self.start > self.end:
            raise ValueError(f"nadir window start {self.start} is after end {self.end}")
        if (self.start == 0) != (self.end == 0):
            raise ValueError("nadir window must be {0, 0} or have both bounds set")
        return self
    
    @property
    def is_applicable(self) -> bool:
        return not (self.start == 0 and self.end == 0)
    
    @property
    def length(self) -> int:
        return self.end - self.start + 1 if self.is_applicable else 0


class RegimenStep(BaseModel):
    """Drugs active for a subset of cycles in a sequential regimen (e.g. AC then T)."""
    
    model_config = ConfigDict(frozen=True)
    
    step_name: Optional[str] = None
    cycles: tuple[int, ...] | Literal["all"] = "all"
    drugs: tuple[str, ...] = ()
    
    def applies_to(self, cycle_number: int) -> bool:
        return self.cycles == "all" or cycle_number in self.cycles


class Regimen(BaseModel):
    """A named chemotherapy protocol with drug composition and cycle timing."""
    
    model_config = ConfigDict(frozen=True)
    
    regimen_code: str = Field(min_length=1)
    regimen_name: str
    drug_composition: tuple[str, ...] = ()
    cycle_length_days: int = Field(default=21, gt=0)
    nadir_window: NadirWindow = Field(default_factory=NadirWindow)
    steps: tuple[RegimenStep, ...] = ()
    total_cycles: Optional[int] = Field(default=None, gt=0)
    
    @model_validator(mode="after")
    def _check_nadir_within_cycle(self) -> "Regimen":
        if self.nadir_window.end > self.cycle_length_days:
            raise ValueError(
                f"nadir window end {self.nadir_window.end} exceeds cycle length {self.cycle_length_days}"
            )
        return self
    
    def composition_for_cycle(self, cycle_number: int) -> tuple[Optional[str], tuple[str, ...], bool]:
        """
        Get the drug composition active in a given cycle.
        
        Returns:
            (step name, drug entries, whether a composition applied). Regimens
            without steps always apply their flat composition.
        """
        if not self.steps:
            return None, self.drug_composition, True
        
        for step in self.steps:
            if step.applies_to(cycle_number):
                return step.step_name, step.drugs, True
        
        return None, (), False


class TreatmentContext(BaseModel):
    """Where a patient currently is in their treatment, supplied by the caller."""
    
    model_config = ConfigDict(frozen=True)
    
    patient_id: str = Field(min_length=1)
    regimen_code: str = Field(min_length=1)
    current_cycle_number: int = Field(default=1, ge=1)
    day_in_cycle: int = 1
    
    @field_validator("regimen_code")
    @classmethod
    def _strip_code(cls, value: str) -> str:
        return value.strip()
