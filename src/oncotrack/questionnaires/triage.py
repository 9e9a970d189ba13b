"""
Triage State Machine

pending -> completed -> completed+triaged

Completion is driven by response submission and is idempotent; triage is an
explicit clinician action, allowed once, and only after completion.
"""

from typing import Iterable
from datetime import datetime, timezone

import structlog

from oncotrack.errors import TriageStateError
from oncotrack.questionnaires.models import Questionnaire, QuestionnaireStatus

logger = structlog.get_logger(__name__)


def missing_items(questionnaire: Questionnaire, answered_item_codes: Iterable[str]) -> list[str]:
    """Required item codes that have no response yet, in questionnaire order."""
    answered = set(answered_item_codes)
    return [code for code in questionnaire.item_codes if code not in answered]


def complete(
    questionnaire: Questionnaire,
    answered_item_codes: Iterable[str],
    at: datetime | None = None,
) -> Questionnaire:
    """
    Apply the pending -> completed transition if every item is answered.
    
    Already-completed questionnaires are returned unchanged; completion never
    regresses to pending.
    
    Returns:
        The (possibly) transitioned questionnaire
    """
    if questionnaire.status == QuestionnaireStatus.COMPLETED:
        return questionnaire
    
    missing = missing_items(questionnaire, answered_item_codes)
    if missing:
        logger.debug(
            "Questionnaire not yet complete",
            questionnaire_id=questionnaire.questionnaire_id,
            missing=missing,
        )
        return questionnaire
    
    completed = questionnaire.model_copy(
        update={
            "status": QuestionnaireStatus.COMPLETED,
            "completed_at": at or datetime.now(timezone.utc),
        }
    )
    logger.info("Questionnaire completed", questionnaire_id=questionnaire.questionnaire_id)
    return completed


def mark_triaged(
    questionnaire: Questionnaire,
    clinician_id: str,
    at: datetime | None = None,
) -> Questionnaire:
    """
    Apply the completed -> completed+triaged transition.
    
    Raises:
        TriageStateError: questionnaire is not completed, or already triaged
    """
    if not clinician_id:
        raise TriageStateError(questionnaire.questionnaire_id, "Triage requires a clinician identifier")
    
    if questionnaire.status != QuestionnaireStatus.COMPLETED:
        raise TriageStateError(
            questionnaire.questionnaire_id,
            "Only completed questionnaires can be triaged",
        )
    
    if questionnaire.triaged:
        raise TriageStateError(
            questionnaire.questionnaire_id,
            f"Questionnaire already triaged by {questionnaire.triaged_by}",
        )
    
    triaged = questionnaire.model_copy(
        update={
            "triaged": True,
            "triaged_at": at or datetime.now(timezone.utc),
            "triaged_by": clinician_id,
        }
    )
    logger.info(
        "Questionnaire triaged",
        questionnaire_id=questionnaire.questionnaire_id,
        triaged_by=clinician_id,
    )
    return triaged
