"""Shared fixtures: fixed clock, in-memory storage and a fake chat client."""

import json
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from care_companion.models.care import Medicine
from care_companion.services.ai_service import CareAI
from care_companion.services.care_store import CareStore
from care_companion.services.storage import InMemoryStorage


class FixedClock:
    """Starts at 2024-01-01 08:00 UTC and moves one second per call."""

    def __init__(self, start=datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self):
        current = self.now
        self.now = self.now + timedelta(seconds=1)
        return current


class FakeCompletions:
    def __init__(self, replies):
        self.replies = list(replies)
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        content = reply if isinstance(reply, str) or reply is None else json.dumps(reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class FakeChatClient:
    def __init__(self, *replies):
        self.completions = FakeCompletions(replies)
        self.chat = SimpleNamespace(completions=self.completions)

    @property
    def calls(self):
        return self.completions.calls


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def store(storage, clock):
    return CareStore(storage, clock=clock)


@pytest.fixture
def fake_ai():
    def build(*replies):
        client = FakeChatClient(*replies)
        return CareAI(client=client, deployment="test-deployment"), client

    return build


@pytest.fixture
def amoxicillin():
    return Medicine(
        id="m1",
        name="Amoxicillin",
        dosage="500mg",
        frequency="Twice daily",
        timings=["Morning", "Night"],
        durationDays=7,
    )


@pytest.fixture
def ibuprofen():
    return Medicine(
        id="m2",
        name="Ibuprofen",
        dosage="200mg",
        frequency="Once daily",
        timings=["Afternoon"],
        durationDays=3,
    )
