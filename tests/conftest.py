"""
CogSage Test Configuration
==========================

Shared fixtures: in-memory storage, a recording lookup double and a
fixed clock, so no test touches the network or the real time.
"""

from datetime import datetime

import pytest

from cogsage.agent import CognitiveAgent, PipelineState
from cogsage.clock import FixedClock
from cogsage.knowledge import KnowledgeStore
from cogsage.learning import LearningQueue
from cogsage.seed_data import get_seed_entries
from cogsage.storage import MemoryStorage


class FakeLookup:
    """Lookup double that answers from dicts and records every call"""

    def __init__(self, words=None, topics=None):
        self.words = dict(words or {})
        self.topics = dict(topics or {})
        self.word_calls = []
        self.topic_calls = []

    async def lookup_word(self, word):
        self.word_calls.append(word)
        return self.words.get(word)

    async def lookup_topic(self, topic):
        self.topic_calls.append(topic)
        return self.topics.get(topic)


class FailingStorage(MemoryStorage):
    """Storage whose writes always fail"""

    def save(self, namespace, entries):
        raise OSError("disk full")


# Friday, 15 March 2024, 14:30
FIXED_INSTANT = datetime(2024, 3, 15, 14, 30, 0)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def lookup():
    return FakeLookup()


@pytest.fixture
def clock():
    return FixedClock(FIXED_INSTANT)


@pytest.fixture
def store(storage):
    """Knowledge store seeded with the static entries"""
    knowledge = KnowledgeStore(storage)
    knowledge.seed(get_seed_entries())
    return knowledge


@pytest.fixture
def queue(store, lookup):
    return LearningQueue(store, lookup)


@pytest.fixture
def agent(storage, lookup, clock):
    state = PipelineState.create(storage=storage, lookup=lookup, clock=clock)
    return CognitiveAgent(state)
