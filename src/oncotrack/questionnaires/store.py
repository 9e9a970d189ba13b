"""
Questionnaire Store

In-memory storage for questionnaire instances, generation metadata and
responses.

Concurrency contract:
- Questionnaire creation is a single write of instance + metadata
- Response writes are serialized per (questionnaire_id, item_code);
  upserts are last-write-wins and never produce a second row
- The completion check reads all responses in one step under the
  questionnaire's lock
"""

from collections import defaultdict
from datetime import datetime, timezone
from typing import Iterable, Optional
import asyncio

import structlog

from oncotrack.engine.models import QuestionnaireMetadata
from oncotrack.errors import (
    DuplicateResponseConflict,
    InvalidResponseError,
    QuestionnaireNotFoundError,
    TriageStateError,
)
from oncotrack.questionnaires import triage
from oncotrack.questionnaires.models import (
    Questionnaire,
    QuestionnaireResponse,
    QuestionnaireStatus,
    ResponseInput,
)

logger = structlog.get_logger(__name__)

ResponseKey = tuple[str, str]


class InMemoryQuestionnaireStore:
    """In-memory questionnaire and response storage for development and tests."""
    
    def __init__(self):
        self._questionnaires: dict[str, Questionnaire] = {}
        self._metadata: dict[str, QuestionnaireMetadata] = {}
        self._responses: dict[ResponseKey, QuestionnaireResponse] = {}
        
        self._questionnaire_locks: dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._response_locks: dict[ResponseKey, asyncio.Lock] = defaultdict(asyncio.Lock)
    
    # =========================================================================
    # Questionnaires
    # =========================================================================
    
    async def create_questionnaire(
        self,
        questionnaire: Questionnaire,
        metadata: Optional[QuestionnaireMetadata] = None,
    ) -> Questionnaire:
        """Store a new questionnaire together with its generation metadata."""
        qid = questionnaire.questionnaire_id
        if qid in self._questionnaires:
            raise ValueError(f"Questionnaire already exists: {qid}")
        
        self._questionnaires[qid] = questionnaire
        if metadata is not None:
            self._metadata[qid] = metadata
        
        logger.info(
            "Questionnaire created",
            questionnaire_id=qid,
            patient_id=questionnaire.patient_id,
            items=len(questionnaire.item_codes),
        )
        return questionnaire
    
    async def get(self, questionnaire_id: str) -> Questionnaire:
        questionnaire = self._questionnaires.get(questionnaire_id)
        if questionnaire is None:
            raise QuestionnaireNotFoundError(questionnaire_id)
        return questionnaire
    
    async def get_metadata(self, questionnaire_id: str) -> QuestionnaireMetadata | None:
        await self.get(questionnaire_id)
        return self._metadata.get(questionnaire_id)
    
    async def list_for_patient(self, patient_id: str) -> list[Questionnaire]:
        questionnaires = [q for q in self._questionnaires.values() if q.patient_id == patient_id]
        return sorted(questionnaires, key=lambda q: q.created_at, reverse=True)
    
    # =========================================================================
    # Responses
    # =========================================================================
    
    def _check_items(self, questionnaire: Questionnaire, item_codes: Iterable[str]) -> None:
        known = set(questionnaire.item_codes)
        unknown = [code for code in item_codes if code not in known]
        if unknown:
            raise InvalidResponseError(questionnaire.questionnaire_id, unknown)
    
    def _check_writable(self, questionnaire: Questionnaire) -> None:
        if questionnaire.triaged:
            raise TriageStateError(
                questionnaire.questionnaire_id,
                "Triaged questionnaires no longer accept responses",
            )
    
    async def _write(self, questionnaire_id: str, response: ResponseInput) -> QuestionnaireResponse:
        key = (questionnaire_id, response.item_code)
        async with self._response_locks[key]:
            now = datetime.now(timezone.utc)
            existing = self._responses.get(key)
            if existing is not None:
                stored = existing.model_copy(
                    update={
                        "response_value": response.response_value,
                        "response_label": response.response_label,
                        "updated_at": now,
                    }
                )
            else:
                stored = QuestionnaireResponse(
                    questionnaire_id=questionnaire_id,
                    item_code=response.item_code,
                    response_value=response.response_value,
                    response_label=response.response_label,
                    created_at=now,
                    updated_at=now,
                )
            self._responses[key] = stored
            return stored
    
    async def upsert_response(self, questionnaire_id: str, response: ResponseInput) -> QuestionnaireResponse:
        """Insert a response, or update the existing one for the same item in place."""
        questionnaire = await self.get(questionnaire_id)
        self._check_writable(questionnaire)
        self._check_items(questionnaire, [response.item_code])
        return await self._write(questionnaire_id, response)
    
    async def insert_response(self, questionnaire_id: str, response: ResponseInput) -> QuestionnaireResponse:
        """
        Insert a response, rejecting a second write for the same item.
        
        Raises:
            DuplicateResponseConflict: a response for this item already exists
        """
        questionnaire = await self.get(questionnaire_id)
        self._check_writable(questionnaire)
        self._check_items(questionnaire, [response.item_code])
        
        key = (questionnaire_id, response.item_code)
        async with self._response_locks[key]:
            if key in self._responses:
                raise DuplicateResponseConflict(questionnaire_id, response.item_code)
            stored = QuestionnaireResponse(
                questionnaire_id=questionnaire_id,
                item_code=response.item_code,
                response_value=response.response_value,
                response_label=response.response_label,
            )
            self._responses[key] = stored
            return stored
    
    async def list_responses(self, questionnaire_id: str) -> list[QuestionnaireResponse]:
        """Responses for a questionnaire, in questionnaire item order."""
        questionnaire = await self.get(questionnaire_id)
        return [
            self._responses[(questionnaire_id, code)]
            for code in questionnaire.item_codes
            if (questionnaire_id, code) in self._responses
        ]
    
    async def delete_responses(self, questionnaire_id: str, item_codes: Iterable[str]) -> int:
        """Delete responses for the given items; returns the number removed."""
        questionnaire = await self.get(questionnaire_id)
        self._check_writable(questionnaire)
        
        deleted = 0
        for code in item_codes:
            key = (questionnaire_id, code)
            lock = self._response_locks.get(key)
            if lock is None:
                continue
            async with lock:
                if self._responses.pop(key, None) is not None:
                    deleted += 1
            if not lock.locked():
                self._response_locks.pop(key, None)
        return deleted
    
    # =========================================================================
    # Lifecycle
    # =========================================================================
    
    async def submit_responses(
        self,
        questionnaire_id: str,
        responses: Iterable[ResponseInput],
    ) -> Questionnaire:
        """
        Upsert a batch of responses and apply completion if all items are answered.
        
        Resubmitting to a completed questionnaire updates answers in place and
        keeps it completed.
        """
        responses = list(responses)
        await self.get(questionnaire_id)
        async with self._questionnaire_locks[questionnaire_id]:
            questionnaire = await self.get(questionnaire_id)
            self._check_writable(questionnaire)
            self._check_items(questionnaire, [r.item_code for r in responses])
            
            for response in responses:
                await self._write(questionnaire_id, response)
            
            answered = [code for (qid, code) in list(self._responses) if qid == questionnaire_id]
            updated = triage.complete(questionnaire, answered)
            self._questionnaires[questionnaire_id] = updated
            return updated
    
    async def mark_triaged(self, questionnaire_id: str, clinician_id: str) -> Questionnaire:
        """Record a clinician's triage of a completed questionnaire."""
        await self.get(questionnaire_id)
        async with self._questionnaire_locks[questionnaire_id]:
            questionnaire = await self.get(questionnaire_id)
            updated = triage.mark_triaged(questionnaire, clinician_id)
            self._questionnaires[questionnaire_id] = updated
            return updated
    
    async def active_queue(self, limit: int = 50) -> list[Questionnaire]:
        """Completed, untriaged questionnaires, most recently completed first."""
        queue = [
            q for q in self._questionnaires.values()
            if q.status == QuestionnaireStatus.COMPLETED and not q.triaged
        ]
        queue.sort(key=lambda q: q.completed_at, reverse=True)
        return queue[:limit]
    
    async def triaged_cases(self, limit: int = 50) -> list[Questionnaire]:
        """Triaged questionnaires, most recently triaged first."""
        cases = [q for q in self._questionnaires.values() if q.triaged]
        cases.sort(key=lambda q: q.triaged_at, reverse=True)
        return cases[:limit]
