"""
Questionnaire Lifecycle

Delivered questionnaires, responses and the completion/triage state machine.
"""

from oncotrack.questionnaires.models import (
    Questionnaire,
    QuestionnaireResponse,
    QuestionnaireStatus,
    ResponseInput,
    TriageState,
)
from oncotrack.questionnaires.triage import complete, mark_triaged, missing_items
from oncotrack.questionnaires.store import InMemoryQuestionnaireStore

__all__ = [
    "Questionnaire",
    "QuestionnaireResponse",
    "QuestionnaireStatus",
    "ResponseInput",
    "TriageState",
    "complete",
    "mark_triaged",
    "missing_items",
    "InMemoryQuestionnaireStore",
]
