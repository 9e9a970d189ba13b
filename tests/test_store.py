import asyncio

import pytest
from pydantic import ValidationError

from oncotrack.errors import (
    DuplicateResponseConflict,
    InvalidResponseError,
    QuestionnaireNotFoundError,
    TriageStateError,
)
from oncotrack.questionnaires.models import Questionnaire, QuestionnaireStatus, ResponseInput
from oncotrack.questionnaires.store import InMemoryQuestionnaireStore


ITEMS = ["NAUSEA_FREQ", "VOMITING_FREQ", "FEVER_PRESENT"]


async def _create(store, patient_id="P001", item_codes=ITEMS):
    questionnaire = Questionnaire(
        patient_id=patient_id,
        regimen_code="AC-T",
        cycle_number=1,
        day_in_cycle=9,
        item_codes=list(item_codes),
    )
    return await store.create_questionnaire(questionnaire)


def _answers(values):
    return [ResponseInput(item_code=code, response_value=value) for code, value in values.items()]


@pytest.mark.asyncio
async def test_create_and_get():
    store = InMemoryQuestionnaireStore()
    questionnaire = await _create(store)

    assert await store.get(questionnaire.questionnaire_id) == questionnaire
    assert await store.get_metadata(questionnaire.questionnaire_id) is None
    with pytest.raises(ValueError):
        await store.create_questionnaire(questionnaire)
    with pytest.raises(QuestionnaireNotFoundError):
        await store.get("missing")


@pytest.mark.asyncio
async def test_list_for_patient():
    store = InMemoryQuestionnaireStore()
    first = await _create(store)
    await _create(store, patient_id="P002")

    listed = await store.list_for_patient("P001")

    assert [q.questionnaire_id for q in listed] == [first.questionnaire_id]


@pytest.mark.asyncio
async def test_upsert_twice_keeps_one_row():
    store = InMemoryQuestionnaireStore()
    qid = (await _create(store)).questionnaire_id

    first = await store.upsert_response(qid, ResponseInput(item_code="NAUSEA_FREQ", response_value=1))
    second = await store.upsert_response(qid, ResponseInput(item_code="NAUSEA_FREQ", response_value=3))

    responses = await store.list_responses(qid)
    assert len(responses) == 1
    assert responses[0].response_value == 3
    assert second.response_id == first.response_id
    assert second.created_at == first.created_at


@pytest.mark.asyncio
async def test_concurrent_upserts_keep_one_row():
    store = InMemoryQuestionnaireStore()
    qid = (await _create(store)).questionnaire_id

    await asyncio.gather(*[
        store.upsert_response(qid, ResponseInput(item_code="FEVER_PRESENT", response_value=value))
        for value in range(10)
    ])

    responses = await store.list_responses(qid)
    assert len(responses) == 1
    assert responses[0].response_value in range(10)


@pytest.mark.asyncio
async def test_insert_rejects_second_response():
    store = InMemoryQuestionnaireStore()
    qid = (await _create(store)).questionnaire_id

    await store.insert_response(qid, ResponseInput(item_code="NAUSEA_FREQ", response_value=1))
    with pytest.raises(DuplicateResponseConflict):
        await store.insert_response(qid, ResponseInput(item_code="NAUSEA_FREQ", response_value=2))

    assert len(await store.list_responses(qid)) == 1


@pytest.mark.asyncio
async def test_unknown_item_is_rejected():
    store = InMemoryQuestionnaireStore()
    qid = (await _create(store)).questionnaire_id

    with pytest.raises(InvalidResponseError) as exc_info:
        await store.submit_responses(qid, _answers({"NAUSEA_FREQ": 1, "RASH_PRESENT": 1}))

    assert exc_info.value.item_codes == ["RASH_PRESENT"]
    assert await store.list_responses(qid) == []


@pytest.mark.asyncio
async def test_partial_then_full_submission():
    store = InMemoryQuestionnaireStore()
    qid = (await _create(store)).questionnaire_id

    partial = await store.submit_responses(qid, _answers({"NAUSEA_FREQ": 1, "VOMITING_FREQ": 0}))
    assert partial.status == QuestionnaireStatus.PENDING

    completed = await store.submit_responses(qid, _answers({"FEVER_PRESENT": 1}))
    assert completed.status == QuestionnaireStatus.COMPLETED
    assert [r.item_code for r in await store.list_responses(qid)] == ITEMS


@pytest.mark.asyncio
async def test_resubmission_updates_and_stays_completed():
    store = InMemoryQuestionnaireStore()
    qid = (await _create(store)).questionnaire_id
    completed = await store.submit_responses(qid, _answers({code: 1 for code in ITEMS}))

    resubmitted = await store.submit_responses(qid, _answers({"NAUSEA_FREQ": 4}))

    assert resubmitted.status == QuestionnaireStatus.COMPLETED
    assert resubmitted.completed_at == completed.completed_at
    values = {r.item_code: r.response_value for r in await store.list_responses(qid)}
    assert values == {"NAUSEA_FREQ": 4, "VOMITING_FREQ": 1, "FEVER_PRESENT": 1}


@pytest.mark.asyncio
async def test_deleting_a_response_does_not_reopen():
    store = InMemoryQuestionnaireStore()
    qid = (await _create(store)).questionnaire_id
    await store.submit_responses(qid, _answers({code: 1 for code in ITEMS}))

    assert await store.delete_responses(qid, ["NAUSEA_FREQ", "RASH_PRESENT"]) == 1

    assert (await store.get(qid)).status == QuestionnaireStatus.COMPLETED
    assert len(await store.list_responses(qid)) == 2


@pytest.mark.asyncio
async def test_triage_lifecycle_and_queues():
    store = InMemoryQuestionnaireStore()
    pending = await _create(store)
    first = await _create(store)
    second = await _create(store)

    with pytest.raises(TriageStateError):
        await store.mark_triaged(pending.questionnaire_id, "dr-smith")

    await store.submit_responses(first.questionnaire_id, _answers({code: 0 for code in ITEMS}))
    await store.submit_responses(second.questionnaire_id, _answers({code: 2 for code in ITEMS}))

    queue = await store.active_queue()
    assert {q.questionnaire_id for q in queue} == {first.questionnaire_id, second.questionnaire_id}
    assert queue[0].completed_at >= queue[1].completed_at
    assert len(await store.active_queue(limit=1)) == 1

    triaged = await store.mark_triaged(first.questionnaire_id, "dr-smith")
    assert triaged.triaged_by == "dr-smith"
    with pytest.raises(TriageStateError):
        await store.mark_triaged(first.questionnaire_id, "dr-jones")

    assert [q.questionnaire_id for q in await store.active_queue()] == [second.questionnaire_id]
    assert [q.questionnaire_id for q in await store.triaged_cases()] == [first.questionnaire_id]


@pytest.mark.asyncio
async def test_triaged_questionnaire_rejects_responses():
    store = InMemoryQuestionnaireStore()
    qid = (await _create(store)).questionnaire_id
    await store.submit_responses(qid, _answers({code: 1 for code in ITEMS}))
    await store.mark_triaged(qid, "dr-smith")

    with pytest.raises(TriageStateError):
        await store.submit_responses(qid, _answers({"NAUSEA_FREQ": 3}))
    with pytest.raises(TriageStateError):
        await store.upsert_response(qid, ResponseInput(item_code="NAUSEA_FREQ", response_value=3))


@pytest.mark.asyncio
async def test_unknown_questionnaire_leaves_no_locks_behind():
    store = InMemoryQuestionnaireStore()

    for i in range(20):
        with pytest.raises(QuestionnaireNotFoundError):
            await store.submit_responses(f"missing-{i}", [])
        with pytest.raises(QuestionnaireNotFoundError):
            await store.mark_triaged(f"missing-{i}", "dr-smith")

    assert len(store._questionnaire_locks) == 0
    assert len(store._response_locks) == 0


@pytest.mark.asyncio
async def test_deleted_response_releases_its_lock():
    store = InMemoryQuestionnaireStore()
    qid = (await _create(store)).questionnaire_id
    await store.upsert_response(qid, ResponseInput(item_code="NAUSEA_FREQ", response_value=2))

    assert await store.delete_responses(qid, ["NAUSEA_FREQ", "FEVER_PRESENT"]) == 1

    assert (qid, "NAUSEA_FREQ") not in store._response_locks
    assert (qid, "FEVER_PRESENT") not in store._response_locks


@pytest.mark.asyncio
async def test_stored_questionnaire_cannot_be_mutated():
    store = InMemoryQuestionnaireStore()
    questionnaire = await _create(store)
    await store.submit_responses(questionnaire.questionnaire_id, _answers({code: 1 for code in ITEMS}))

    stored = await store.get(questionnaire.questionnaire_id)
    with pytest.raises(ValidationError):
        stored.triaged = True

    assert (await store.get(questionnaire.questionnaire_id)).triaged is False
    assert await store.triaged_cases() == []
