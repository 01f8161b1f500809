"""Tests for the background learning queue"""

import asyncio

import pytest

from conftest import FakeLookup
from cogsage.learning import LearningQueue, QUEUE_NAMESPACE, calculate_priority
from cogsage.models import (
    KIND_FACT, KIND_VOCABULARY, QUEUE_TOPIC, QUEUE_WORD, SOURCE_LEARNED,
)

WORD_RECORD = {"definition": "A Mexican salamander.", "part_of_speech": "noun", "examples": []}
TOPIC_RECORD = {"title": "Axolotl", "summary": "The axolotl is a salamander.", "url": "https://example.org"}


@pytest.mark.parametrize("target,domain,expected", [
    ("cat", None, 1),
    ("gravity", "science", 3),
    ("photosynthesis", "science", 4),
    ("closures", "coding", 4),
    ("python decorators", "coding", 5),
    ("a very long general topic", "general_knowledge", 2),
])
def test_calculate_priority(target, domain, expected):
    assert calculate_priority(target, domain) == expected


def test_enqueue_skips_known_targets(queue):
    assert queue.enqueue(QUEUE_WORD, "serendipity") is None
    assert queue.enqueue(QUEUE_TOPIC, "Nikola Tesla") is None
    assert len(queue) == 0
    assert queue.get_stats()["skipped"] == 2


def test_enqueue_skips_duplicates(queue):
    assert queue.enqueue(QUEUE_WORD, "axolotl") is not None
    assert queue.enqueue(QUEUE_WORD, "  AXOLOTL ") is None
    assert queue.enqueue(QUEUE_TOPIC, "axolotl") is not None
    assert len(queue) == 2


def test_pending_order_is_priority_then_fifo(queue):
    queue.enqueue(QUEUE_WORD, "first")
    queue.enqueue(QUEUE_TOPIC, "quantum chromodynamics", domain="science")
    queue.enqueue(QUEUE_WORD, "second")
    assert [item.target for item in queue.pending()] == ["quantum chromodynamics", "first", "second"]


@pytest.mark.asyncio
async def test_drain_tick_learns_word(store):
    lookup = FakeLookup(words={"axolotl": WORD_RECORD})
    queue = LearningQueue(store, lookup)
    queue.enqueue(QUEUE_WORD, "axolotl")

    entry = await queue.drain_tick()

    assert entry.source == SOURCE_LEARNED
    assert entry.confidence == 0.8
    assert store.get(KIND_VOCABULARY, "axolotl").value["definition"] == "A Mexican salamander."
    assert len(queue) == 0
    assert queue.get_stats()["resolved"] == 1


@pytest.mark.asyncio
async def test_drain_tick_learns_topic_with_domain(store):
    lookup = FakeLookup(topics={"axolotl": TOPIC_RECORD})
    queue = LearningQueue(store, lookup)
    queue.enqueue(QUEUE_TOPIC, "axolotl", domain="science")

    await queue.drain_tick()

    entry = store.get(KIND_FACT, "axolotl")
    assert entry.confidence == 0.75
    assert entry.value["domain"] == "science"
    assert lookup.topic_calls == ["axolotl"]


@pytest.mark.asyncio
async def test_failed_lookup_is_dropped(queue, store, lookup):
    queue.enqueue(QUEUE_WORD, "blorft")

    assert await queue.drain_tick() is None
    assert len(queue) == 0
    assert not store.contains(KIND_VOCABULARY, "blorft")
    assert queue.get_stats()["failed"] == 1

    # Not retried
    assert await queue.drain_tick() is None
    assert lookup.word_calls == ["blorft"]


@pytest.mark.asyncio
async def test_drain_tick_on_empty_queue(queue, lookup):
    assert await queue.drain_tick() is None
    assert lookup.word_calls == []


def test_backlog_is_persisted_and_restored(store, storage, lookup):
    queue = LearningQueue(store, lookup)
    queue.enqueue(QUEUE_WORD, "axolotl")
    queue.enqueue(QUEUE_TOPIC, "blockchain consensus", domain="coding")

    saved = storage.load(QUEUE_NAMESPACE)
    assert [record["target"] for record in saved] == ["blockchain consensus", "axolotl"]

    restored = LearningQueue(store, lookup)
    restored.load()
    assert [item.target for item in restored.pending()] == ["blockchain consensus", "axolotl"]
    assert restored.pending()[0].priority == 5


@pytest.mark.asyncio
async def test_background_loop_drains(store):
    lookup = FakeLookup(words={"axolotl": WORD_RECORD})
    queue = LearningQueue(store, lookup)
    queue.enqueue(QUEUE_WORD, "axolotl")

    queue.start(interval=0.01)
    assert queue.running
    for _ in range(100):
        if store.contains(KIND_VOCABULARY, "axolotl"):
            break
        await asyncio.sleep(0.01)
    await queue.stop()

    assert store.contains(KIND_VOCABULARY, "axolotl")
    assert not queue.running
