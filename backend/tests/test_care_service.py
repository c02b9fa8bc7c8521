"""Tests for the orchestration boundary between the AI collaborator and the store."""

import httpx
from openai import APIConnectionError

from care_companion.models.care import Interaction
from care_companion.services.care_service import (
    NOTHING_EXTRACTED,
    extract_and_schedule,
    run_interaction_check,
)

ONE_MEDICINE = {
    "medicines": [
        {"name": "Metformin", "dosage": "500mg", "frequency": "Twice daily",
         "timings": ["Morning", "Evening"], "durationDays": 30}
    ]
}


def test_extraction_schedules_doses(store, storage, fake_ai):
    ai, _ = fake_ai(ONE_MEDICINE)

    result = extract_and_schedule(store, ai, b"img")

    assert result.success
    assert result.count == 1
    assert len(store.state.doses) == 20
    assert store.state.lastExtractionDate is not None
    assert storage.saves == 1


def test_nothing_extracted_leaves_store_alone(store, storage, fake_ai):
    ai, _ = fake_ai({"medicines": []})

    result = extract_and_schedule(store, ai, b"img")

    assert not result.success
    assert result.message == NOTHING_EXTRACTED
    assert store.state.medicines == []
    assert storage.saves == 0


def test_extraction_failure_is_reported(store, storage, fake_ai):
    ai, _ = fake_ai("garbage")

    result = extract_and_schedule(store, ai, b"img")

    assert not result.success
    assert storage.saves == 0


def test_interaction_check_updates_annotations(store, fake_ai, amoxicillin, ibuprofen):
    store.add_medicines([amoxicillin, ibuprofen])
    store.add_remedy("Ginkgo")
    ai, _ = fake_ai({"m2": {"severity": "high", "summary": "Bleeding risk", "detail": "Avoid."}})

    result = run_interaction_check(store, ai)

    assert result.success
    assert result.count == 1
    assert store.state.medicines[1].potentialInteractions.severity == "high"


def test_interaction_failure_keeps_annotations(store, fake_ai, amoxicillin):
    store.add_medicines([amoxicillin])
    store.add_remedy("Ginkgo")
    warning = Interaction(severity="medium", summary="Take apart", detail="Space doses.")
    store.update_interactions({"m1": warning})
    ai, _ = fake_ai(APIConnectionError(request=httpx.Request("POST", "https://example.invalid")))

    result = run_interaction_check(store, ai)

    assert not result.success
    assert store.state.medicines[0].potentialInteractions == warning


def test_no_remedies_clears_without_calling_model(store, fake_ai, amoxicillin):
    store.add_medicines([amoxicillin])
    ai, client = fake_ai()

    result = run_interaction_check(store, ai)

    assert result.success
    assert result.count == 0
    assert client.calls == []


def test_non_positive_duration_falls_back_to_default(store, fake_ai):
    ai, _ = fake_ai({"medicines": [{"name": "Prednisone", "timings": ["Morning"], "durationDays": -3}]})

    result = extract_and_schedule(store, ai, b"img")

    assert result.success
    assert store.state.medicines[0].durationDays == 10
    assert len(store.state.doses) == 10


def test_fractional_duration_keeps_extraction(store, fake_ai):
    ai, _ = fake_ai({"medicines": [{"name": "Prednisone", "timings": ["Morning"], "durationDays": 7.5}]})

    result = extract_and_schedule(store, ai, b"img")

    assert result.success
    assert store.state.medicines[0].durationDays == 8


def test_malformed_record_is_reported_not_raised(store, storage, fake_ai):
    ai, _ = fake_ai({"medicines": [{"name": "Prednisone", "timings": "Morning"}]})

    result = extract_and_schedule(store, ai, b"img")

    assert not result.success
    assert result.message == NOTHING_EXTRACTED
    assert storage.saves == 0


def test_repeated_slots_schedule_once(store, fake_ai):
    ai, _ = fake_ai({"medicines": [{"name": "Prednisone", "timings": ["Morning", "Morning", "Night"]}]})

    extract_and_schedule(store, ai, b"img")

    ids = [d.id for d in store.state.doses]
    assert store.state.medicines[0].timings == ["Morning", "Night"]
    assert len(ids) == len(set(ids)) == 20
