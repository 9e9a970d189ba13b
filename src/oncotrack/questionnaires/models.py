"""
Questionnaire Lifecycle Models

Persisted questionnaire instances and their per-item responses.
"""

from typing import List, Optional
from datetime import datetime, timezone
from enum import Enum
import uuid

from pydantic import BaseModel, ConfigDict, Field, model_validator


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QuestionnaireStatus(str, Enum):
    """Completion status of a delivered questionnaire."""
    PENDING = "pending"
    COMPLETED = "completed"


class TriageState(str, Enum):
    """Combined lifecycle state used for queue views."""
    PENDING = "pending"
    COMPLETED = "completed"
    TRIAGED = "completed+triaged"


class Questionnaire(BaseModel):
    """A questionnaire delivered to a patient."""
    
    model_config = ConfigDict(frozen=True)
    
    questionnaire_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    patient_id: str
    regimen_code: str
    cycle_number: int
    day_in_cycle: int
    item_codes: List[str] = Field(default_factory=list)
    
    status: QuestionnaireStatus = QuestionnaireStatus.PENDING
    created_at: datetime = Field(default_factory=_utcnow)
    completed_at: Optional[datetime] = None
    
    # Triage
    triaged: bool = False
    triaged_at: Optional[datetime] = None
    triaged_by: Optional[str] = None
    
    @model_validator(mode="after")
    def _check_triage_fields(self) -> "Questionnaire":
        has_details = self.triaged_at is not None and self.triaged_by is not None
        no_details = self.triaged_at is None and self.triaged_by is None
        if self.triaged and not has_details:
            raise ValueError("triaged questionnaire requires triaged_at and triaged_by")
        if not self.triaged and not no_details:
            raise ValueError("triaged_at/triaged_by are only set on triaged questionnaires")
        if self.triaged and self.status != QuestionnaireStatus.COMPLETED:
            raise ValueError("only completed questionnaires can be triaged")
        return self
    
    @property
    def state(self) -> TriageState:
        if self.triaged:
            return TriageState.TRIAGED
        if self.status == QuestionnaireStatus.COMPLETED:
            return TriageState.COMPLETED
        return TriageState.PENDING


class QuestionnaireResponse(BaseModel):
    """A patient's answer to one item; unique per (questionnaire_id, item_code)."""
    response_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    questionnaire_id: str
    item_code: str
    response_value: int
    response_label: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
    
    @property
    def key(self) -> tuple[str, str]:
        return (self.questionnaire_id, self.item_code)


class ResponseInput(BaseModel):
    """An answer as submitted by the patient app."""
    item_code: str
    response_value: int
    response_label: Optional[str] = None
