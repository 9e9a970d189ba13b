"""
Questionnaire Service

Ties the generation engine to questionnaire storage:
- Generate and deliver a questionnaire for a patient's treatment context
- Accept response submissions (completion is applied automatically)
- Clinician triage and queue views

Catalog snapshots are passed in at construction and never mutated.
"""

from typing import Any, Dict, Iterable, Optional

import structlog
from pydantic import BaseModel

from oncotrack.catalog.loader import load_catalogs
from oncotrack.catalog.models import TreatmentContext
from oncotrack.catalog.registry import DrugModuleCatalog, RegimenCatalog
from oncotrack.config import Settings, get_settings
from oncotrack.engine.assembler import assemble
from oncotrack.engine.models import QuestionnaireMetadata, QuestionnaireSpecification
from oncotrack.observability.logging import configure_from_settings
from oncotrack.questionnaires.models import Questionnaire, ResponseInput
from oncotrack.questionnaires.store import InMemoryQuestionnaireStore

logger = structlog.get_logger(__name__)


class GeneratedQuestionnaire(BaseModel):
    """A delivered questionnaire and the specification it was built from."""
    questionnaire: Questionnaire
    specification: QuestionnaireSpecification


class QuestionnaireService:
    """
    Service for drug-module based questionnaire generation and lifecycle.
    
    Usage:
        service = QuestionnaireService.from_settings()
        generated = await service.generate_questionnaire("P008", context)
        if generated.specification.is_degraded:
            ...
    """
    
    def __init__(
        self,
        regimens: RegimenCatalog,
        drugs: DrugModuleCatalog,
        store: Optional[InMemoryQuestionnaireStore] = None,
        settings: Optional[Settings] = None,
    ):
        self.regimens = regimens
        self.drugs = drugs
        self.store = store or InMemoryQuestionnaireStore()
        self.settings = settings or get_settings()
    
    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "QuestionnaireService":
        """Build a service using the catalog configured in settings."""
        settings = settings or get_settings()
        configure_from_settings(settings)
        regimens, drugs = load_catalogs(settings.engine.catalog_path)
        return cls(regimens, drugs, settings=settings)
    
    def build_specification(self, context: TreatmentContext) -> QuestionnaireSpecification:
        """Run the generation engine without storing anything."""
        return assemble(
            context,
            self.regimens,
            self.drugs,
            reject_unresolved=self.settings.engine.reject_unresolved,
            reject_empty=self.settings.engine.reject_empty,
        )
    
    async def generate_questionnaire(
        self,
        patient_id: str,
        context: TreatmentContext,
    ) -> GeneratedQuestionnaire:
        """
        Generate and deliver a questionnaire for a patient.
        
        Degraded generations (unresolved drugs, zero items) are still stored
        so they stay visible and queryable; the specification metadata says
        what went wrong.
        """
        if context.patient_id != patient_id:
            raise ValueError(
                f"Treatment context is for patient {context.patient_id}, not {patient_id}"
            )
        
        spec = self.build_specification(context)
        
        questionnaire = Questionnaire(
            patient_id=patient_id,
            regimen_code=spec.metadata.regimen_code,
            cycle_number=spec.metadata.cycle_number,
            day_in_cycle=spec.metadata.day_in_cycle,
            item_codes=spec.item_codes,
        )
        await self.store.create_questionnaire(questionnaire, spec.metadata)
        
        if spec.is_degraded:
            logger.warning(
                "Delivered questionnaire has no items",
                patient_id=patient_id,
                questionnaire_id=questionnaire.questionnaire_id,
                regimen_code=spec.metadata.regimen_code,
                unresolved_drugs=spec.metadata.unresolved_drugs,
                warnings=[w.kind.value for w in spec.metadata.warnings],
            )
        
        return GeneratedQuestionnaire(questionnaire=questionnaire, specification=spec)
    
    async def get_questionnaire_with_metadata(self, questionnaire_id: str) -> Dict[str, Any]:
        """Questionnaire, its responses and the metadata recorded at generation."""
        questionnaire = await self.store.get(questionnaire_id)
        metadata: QuestionnaireMetadata | None = await self.store.get_metadata(questionnaire_id)
        responses = await self.store.list_responses(questionnaire_id)
        return {
            "questionnaire": questionnaire,
            "metadata": metadata,
            "responses": responses,
        }
    
    async def submit_responses(
        self,
        questionnaire_id: str,
        responses: Iterable[ResponseInput],
    ) -> Questionnaire:
        return await self.store.submit_responses(questionnaire_id, responses)
    
    async def mark_triaged(self, questionnaire_id: str, clinician_id: str) -> Questionnaire:
        return await self.store.mark_triaged(questionnaire_id, clinician_id)
    
    async def triage_queue(self, limit: Optional[int] = None) -> list[Questionnaire]:
        """Completed questionnaires awaiting clinician triage."""
        return await self.store.active_queue(limit or self.settings.store.active_queue_limit)
    
    async def triaged_cases(self, limit: Optional[int] = None) -> list[Questionnaire]:
        return await self.store.triaged_cases(limit or self.settings.store.active_queue_limit)
