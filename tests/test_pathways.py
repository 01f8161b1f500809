"""Tests for the six pathway processors"""

import pytest

from conftest import FakeLookup, FIXED_INSTANT
from cogsage.clock import FixedClock
from cogsage.conversation import ConversationLog, USER
from cogsage.learning import LearningQueue
from cogsage.models import (
    KnowledgeEntry, ARITHMETIC, KIND_ARITHMETIC, KIND_FACT, KIND_PERSONAL, KIND_VOCABULARY,
    QUEUE_TOPIC, QUEUE_WORD, SOURCE_CALCULATED, SOURCE_LEARNED, SOURCE_MANUAL,
)
from cogsage.pathways import (
    ArithmeticProcessor, ConversationalProcessor, FactualKnowledgeProcessor,
    PathwayProcessor, PersonalMemoryProcessor, TemporalProcessor, VocabularyProcessor,
    extract_topic, extract_word,
)


# ── Arithmetic ──────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_arithmetic_multiplication(store):
    result = await ArithmeticProcessor().process("12 × 5", 0.9, store)

    assert result.pathway == ARITHMETIC
    assert result.confidence >= 0.9
    assert result.payload["result"] == 60
    assert result.payload["digital_root"] == 6
    assert result.payload["tesla_class"] == "tesla"
    assert "60" in result.answer

    calculated = [e for e in store.entries(KIND_ARITHMETIC) if e.source == SOURCE_CALCULATED]
    assert len(calculated) == 1
    assert calculated[0].value["result"] == 60


@pytest.mark.asyncio
async def test_arithmetic_division_by_zero(store):
    result = await ArithmeticProcessor().process("5 / 0", 0.9, store)

    assert result.payload["result"] is None
    assert result.confidence == 0.3
    assert "division by zero" in " ".join(result.reasoning)
    assert not [e for e in store.entries(KIND_ARITHMETIC) if e.source == SOURCE_CALCULATED]


@pytest.mark.asyncio
async def test_arithmetic_without_expression(store):
    assert await ArithmeticProcessor().process("hello there", 0.9, store) is None


@pytest.mark.asyncio
async def test_below_threshold_returns_none(store):
    assert await ArithmeticProcessor().process("12 × 5", 0.05, store) is None


@pytest.mark.asyncio
async def test_internal_error_becomes_low_confidence_result(store):
    class Broken(PathwayProcessor):
        name = "broken"

        async def _run(self, message, activation, store):
            raise RuntimeError("boom")

    result = await Broken().process("anything", 0.9, store)

    assert result.confidence == 0.1
    assert result.reasoning == ["broken pathway failed: boom"]
    assert result.payload["error"] == "boom"


# ── Vocabulary ──────────────────────────────────────────────────────────────

@pytest.mark.parametrize("message,expected", [
    ("define serendipity", "serendipity"),
    ("What does ephemeral mean?", "ephemeral"),
    ("what's the meaning of the word axolotl?", "axolotl"),
    ("what is an axolotl", "axolotl"),
    ("what is the time", None),
    ("how are you", None),
])
def test_extract_word(message, expected):
    assert extract_word(message) == expected


@pytest.mark.asyncio
async def test_stored_word_skips_lookup(store, queue, lookup):
    result = await VocabularyProcessor(lookup, queue).process("define serendipity", 0.9, store)

    assert result.confidence == 0.95
    assert "happy or beneficial" in result.answer
    assert lookup.word_calls == []


@pytest.mark.asyncio
async def test_looked_up_word_is_learned(store):
    lookup = FakeLookup(words={"axolotl": {
        "definition": "A Mexican salamander.", "part_of_speech": "noun", "examples": [],
    }})
    queue = LearningQueue(store, lookup)

    result = await VocabularyProcessor(lookup, queue).process("define axolotl", 0.9, store)

    assert result.confidence == 0.8
    entry = store.get(KIND_VOCABULARY, "axolotl")
    assert entry.source == SOURCE_LEARNED
    assert entry.confidence == 0.8
    assert len(queue) == 0


@pytest.mark.asyncio
async def test_unknown_word_is_queued(store, queue, lookup):
    result = await VocabularyProcessor(lookup, queue).process("define blorft", 0.9, store)

    assert result.confidence == 0.3
    assert "blorft" in result.answer
    assert [(item.kind, item.target) for item in queue.pending()] == [(QUEUE_WORD, "blorft")]


@pytest.mark.asyncio
async def test_long_phrase_is_not_a_word(store, queue, lookup):
    result = await VocabularyProcessor(lookup, queue).process(
        "define the quick brown fox jumps", 0.9, store
    )

    assert result is None
    assert lookup.word_calls == []


# ── Personal memory ─────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_name_round_trip(store):
    processor = PersonalMemoryProcessor()

    stored = await processor.process("My name is Sam", 0.9, store)
    assert "Sam" in stored.answer
    entry = store.get(KIND_PERSONAL, "name")
    assert entry.value["value"] == "Sam"
    assert entry.source == SOURCE_MANUAL

    recalled = await processor.process("What's my name?", 0.9, store)
    assert recalled.confidence == 0.95
    assert recalled.answer.startswith("Your name is Sam!")


@pytest.mark.asyncio
async def test_name_is_capitalized(store):
    await PersonalMemoryProcessor().process("call me alex", 0.9, store)
    assert store.get(KIND_PERSONAL, "name").value["value"] == "Alex"


@pytest.mark.asyncio
@pytest.mark.parametrize("message", [
    "call me at 555-1234", "call me back later", "my name is not important",
])
async def test_non_names_are_not_stored(store, message):
    processor = PersonalMemoryProcessor()
    await processor.process("my name is Sam", 0.9, store)

    assert await processor.process(message, 0.9, store) is None
    assert store.get(KIND_PERSONAL, "name").value["value"] == "Sam"


@pytest.mark.asyncio
async def test_recall_without_stored_name(store):
    result = await PersonalMemoryProcessor().process("what is my name", 0.9, store)

    assert result.confidence == 0.5
    assert result.payload["value"] is None


@pytest.mark.asyncio
async def test_several_facts_in_one_message(store):
    processor = PersonalMemoryProcessor()
    await processor.process("I live in Lisbon and I work as a nurse", 0.9, store)

    assert store.get(KIND_PERSONAL, "location").value["value"] == "Lisbon"
    assert store.get(KIND_PERSONAL, "occupation").value["value"] == "as a nurse"

    where = await processor.process("where do I live?", 0.9, store)
    assert where.answer == "You live in Lisbon."


@pytest.mark.asyncio
async def test_recall_everything(store):
    processor = PersonalMemoryProcessor()
    empty = await processor.process("what do you remember about me?", 0.9, store)
    assert empty.confidence == 0.5

    await processor.process("My name is Sam. I am 30 years old", 0.9, store)
    result = await processor.process("what do you remember about me?", 0.9, store)

    assert result.confidence == 0.9
    assert result.payload["facts"] == {"name": "Sam", "age": "30"}
    assert result.answer.index("Sam") < result.answer.index("30")


@pytest.mark.asyncio
async def test_personal_reasoning_mentions_memory_context(store):
    conversation = ConversationLog()
    conversation.append(USER, "hello")
    result = await PersonalMemoryProcessor(conversation).process("my name is Sam", 0.9, store)

    assert "Memory context: 1 recent user turns" in result.reasoning


@pytest.mark.asyncio
async def test_unrelated_message_has_no_personal_result(store):
    assert await PersonalMemoryProcessor().process("tell me about gravity", 0.5, store) is None


# ── Temporal ────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
@pytest.mark.parametrize("message,expected", [
    ("what time is it?", "It's 2:30 PM."),
    ("what's the date today?", "Today's date is Friday, March 15, 2024."),
    ("what day is it", "Today is Friday."),
    ("which month are we in", "It's March 2024."),
    ("what year is it", "It's 2024."),
    ("what is today?", "It's 2:30 PM on Friday, March 15, 2024."),
])
async def test_temporal_formats(store, clock, message, expected):
    result = await TemporalProcessor(clock).process(message, 0.9, store)

    assert result.answer == expected
    assert result.confidence == 0.95


@pytest.mark.asyncio
@pytest.mark.parametrize("message", [
    "I had a great day", "tell me about the history of time", "it was a long year",
])
async def test_mentioned_clock_word_is_not_a_question(store, clock, message):
    assert await TemporalProcessor(clock).process(message, 0.5, store) is None


@pytest.mark.asyncio
async def test_temporal_follows_the_clock(store):
    processor = TemporalProcessor(FixedClock(FIXED_INSTANT.replace(hour=9, minute=5)))

    result = await processor.process("what time is it", 0.9, store)
    assert result.answer == "It's 9:05 AM."


# ── Factual knowledge ───────────────────────────────────────────────────────

@pytest.mark.parametrize("message,expected", [
    ("Tell me about Nikola Tesla", "nikola tesla"),
    ("what is the speed of light?", "speed of light"),
    ("what do you know about photosynthesis", "photosynthesis"),
    ("tell me about myself", None),
    ("what is 12 times 5", None),
    ("what time is it", None),
])
def test_extract_topic(message, expected):
    assert extract_topic(message) == expected


@pytest.mark.asyncio
async def test_seed_fact_answers_without_lookup(store, queue, lookup):
    result = await FactualKnowledgeProcessor(lookup, queue).process("tell me about gravity", 0.8, store)

    assert result.confidence == 0.9
    assert "fundamental force" in result.answer
    assert lookup.topic_calls == []


@pytest.mark.asyncio
async def test_coding_notes_are_searched(store, queue, lookup):
    result = await FactualKnowledgeProcessor(lookup, queue).process("explain recursion", 0.8, store)

    assert "calls itself" in result.answer
    assert lookup.topic_calls == []


@pytest.mark.asyncio
async def test_unknown_topic_is_learned(store):
    lookup = FakeLookup(topics={"axolotl": {
        "title": "Axolotl", "summary": "The axolotl is a salamander.", "url": "https://example.org",
    }})
    queue = LearningQueue(store, lookup)

    result = await FactualKnowledgeProcessor(lookup, queue).process(
        "tell me about the axolotl", 0.8, store
    )

    assert result.confidence == 0.75
    assert result.answer == "The axolotl is a salamander."
    entry = store.get(KIND_FACT, "axolotl")
    assert entry.source == SOURCE_LEARNED
    assert entry.value["domain"] == "general_knowledge"


@pytest.mark.asyncio
async def test_failed_topic_lookup_is_queued(store, queue, lookup):
    result = await FactualKnowledgeProcessor(lookup, queue).process(
        "what is quantum chromodynamics?", 0.8, store
    )

    assert result.confidence == 0.3
    assert lookup.topic_calls == ["quantum chromodynamics"]
    assert [(item.kind, item.target) for item in queue.pending()] == [
        (QUEUE_TOPIC, "quantum chromodynamics")
    ]


@pytest.mark.asyncio
async def test_self_reference_is_not_a_topic(store, queue, lookup):
    processor = FactualKnowledgeProcessor(lookup, queue)

    assert await processor.process("what is my name?", 0.6, store) is None
    assert await processor.process("what is 12 times 5", 0.6, store) is None
    assert lookup.topic_calls == []


# ── Conversational ──────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_small_talk(store):
    result = await ConversationalProcessor().process("hello there", 0.9, store)

    assert result.confidence == 0.9
    assert result.answer == "Hello! What can I help you with?"


@pytest.mark.asyncio
async def test_plain_acknowledgment(store):
    result = await ConversationalProcessor().process("bananas are yellow", 0.5, store)

    assert result.confidence == 0.25
    assert result.payload["kind"] == "ack"


@pytest.mark.asyncio
async def test_small_talk_uses_stored_name(store):
    store.upsert(KnowledgeEntry(KIND_PERSONAL, "name", {"value": "Sam"}, source=SOURCE_MANUAL))

    result = await ConversationalProcessor().process("thanks!", 0.9, store)
    assert result.answer == "You're welcome, Sam!"
