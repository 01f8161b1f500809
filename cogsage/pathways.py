"""
Pathway processors.

Each processor turns (message, activation, store) into a candidate
PathwayResult, or None when it has nothing to say. Processors never raise:
internal failures come back as a low-confidence result.
"""

import re
import logging
from typing import Dict, List, Optional, Tuple

from . import config
from .arithmetic import evaluate, analyze_number, format_number
from .classifier import detect_domain
from .knowledge import KnowledgeStore, tokenize
from .models import (
    PathwayResult, KnowledgeEntry,
    ARITHMETIC, VOCABULARY, PERSONAL_MEMORY, TEMPORAL, FACTUAL_KNOWLEDGE, CONVERSATIONAL,
    KIND_ARITHMETIC, KIND_VOCABULARY, KIND_FACT, KIND_CODING, KIND_PERSONAL,
    SOURCE_CALCULATED, SOURCE_LEARNED, SOURCE_MANUAL,
    QUEUE_WORD, QUEUE_TOPIC,
)
from .responses import (
    classify_small_talk, conversational_reply, fallback_reply,
    format_calculation, format_calculation_error, format_definition, format_fact,
    dont_know_word, dont_know_topic,
)

logger = logging.getLogger(__name__)


class PathwayProcessor:
    """
    Strategy base class.
    Subclasses set `name` and implement `_run`.
    """

    name: str = ""

    def __init__(self, min_activation: float = None):
        self.min_activation = config.MIN_ACTIVATION if min_activation is None else min_activation

    async def process(self, message: str, activation: float,
                      store: KnowledgeStore) -> Optional[PathwayResult]:
        if activation < self.min_activation:
            return None
        try:
            return await self._run(message, activation, store)
        except Exception as e:
            logger.warning(f"{self.name} pathway failed on {message[:50]!r}: {e}")
            return PathwayResult(
                self.name,
                config.FAILURE_CONFIDENCE,
                {"answer": fallback_reply(), "error": str(e)},
                [f"{self.name} pathway failed: {e}"],
            )

    async def _run(self, message: str, activation: float,
                   store: KnowledgeStore) -> Optional[PathwayResult]:
        raise NotImplementedError


# ═══════════════════════════════════════════════════════════════════════════════
# § 1  ARITHMETIC
# ═══════════════════════════════════════════════════════════════════════════════

class ArithmeticProcessor(PathwayProcessor):
    """Evaluates expressions and reports the digital root of the result"""

    name = ARITHMETIC

    async def _run(self, message, activation, store):
        calc = evaluate(message)
        if calc is None:
            return None

        reasoning = [f"Matched {calc.rule} expression: {calc.expression}"]
        reasoning.extend(f"Step: {step}" for step in calc.steps)

        if not calc.ok:
            reasoning.append(f"Calculation failed: {calc.error}")
            return PathwayResult(
                ARITHMETIC,
                config.UNKNOWN_CONFIDENCE,
                {
                    "answer": format_calculation_error(calc.expression, calc.error),
                    "expression": calc.expression,
                    "result": None,
                    "error": calc.error,
                },
                reasoning,
            )

        analysis = analyze_number(calc.result)
        reasoning.append(
            f"Digital root of {analysis['number']} is {analysis['digital_root']} "
            f"({analysis['classification']})"
        )

        store.upsert(KnowledgeEntry(
            KIND_ARITHMETIC,
            calc.expression,
            {
                "expression": calc.expression,
                "result": calc.result,
                "description": f"{calc.expression} = {format_number(calc.result)}",
                "digital_root": analysis["digital_root"],
                "tesla_class": analysis["classification"],
            },
            source=SOURCE_CALCULATED,
            confidence=config.CALCULATION_CONFIDENCE,
        ))

        return PathwayResult(
            ARITHMETIC,
            config.CALCULATION_CONFIDENCE,
            {
                "answer": format_calculation(calc.expression, calc.result, analysis),
                "expression": calc.expression,
                "result": calc.result,
                "steps": calc.steps,
                "digital_root": analysis["digital_root"],
                "tesla_class": analysis["classification"],
                "vortex_position": analysis["vortex_position"],
            },
            reasoning,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# § 2  VOCABULARY
# ═══════════════════════════════════════════════════════════════════════════════

_STRONG_WORD_PATTERNS = [
    re.compile(r"\bwhat\s+does\s+(?:the\s+word\s+)?(.+?)\s+mean\b", re.I),
    re.compile(r"\b(?:define|definition\s+of|meaning\s+of)\s+(?:the\s+word\s+)?(?:an?\s+|the\s+)?([^?.!,;]+)", re.I),
]
_WEAK_WORD_PATTERN = re.compile(
    r"^\s*(?:what\s+is|what's|whats)\s+(?:an?\s+|the\s+)?([a-z][a-z'-]*)\s*[?.!]*\s*$", re.I
)
_CLOCK_WORDS = frozenset({'time', 'date', 'day', 'month', 'year', 'today'})


def extract_word(message: str) -> Optional[str]:
    """Target word or short phrase of a definition request"""
    for pattern in _STRONG_WORD_PATTERNS:
        m = pattern.search(message)
        if m:
            return normalize_word(m.group(1))

    m = _WEAK_WORD_PATTERN.match(message)
    if m:
        word = normalize_word(m.group(1))
        if word and word not in _CLOCK_WORDS:
            return word
    return None


def normalize_word(text: str) -> str:
    return re.sub(r"\s+", " ", text.strip(" \t\"'`?!.,;:()").lower())


class VocabularyProcessor(PathwayProcessor):
    """Store first, then dictionary lookup, then the learning queue"""

    name = VOCABULARY

    def __init__(self, lookup, queue, min_activation: float = None):
        super().__init__(min_activation)
        self.lookup = lookup
        self.queue = queue

    async def _run(self, message, activation, store):
        word = extract_word(message)
        if not word or not tokenize(word):
            return None
        if len(word.split()) > config.MAX_VOCABULARY_WORDS:
            return None

        entry = store.get(KIND_VOCABULARY, word)
        if entry is not None:
            return PathwayResult(
                VOCABULARY,
                entry.confidence,
                dict(entry.value, answer=format_definition(word, entry.value)),
                [f"Found {word!r} in vocabulary (source {entry.source})"],
            )

        reasoning = [f"{word!r} not in vocabulary, asking dictionary"]
        record = await self.lookup.lookup_word(word)
        if record is not None:
            value = {"word": word}
            value.update(record)
            store.upsert(KnowledgeEntry(
                KIND_VOCABULARY, word, value,
                source=SOURCE_LEARNED,
                confidence=config.LEARNED_WORD_CONFIDENCE,
            ))
            reasoning.append(f"Learned {word!r} from dictionary")
            return PathwayResult(
                VOCABULARY,
                config.LEARNED_WORD_CONFIDENCE,
                dict(value, answer=format_definition(word, value)),
                reasoning,
            )

        item = self.queue.enqueue(QUEUE_WORD, word, domain=detect_domain(message))
        reasoning.append("Dictionary lookup failed; " + (
            f"queued for learning (priority {item.priority})" if item else "already queued"
        ))
        return PathwayResult(
            VOCABULARY,
            config.UNKNOWN_CONFIDENCE,
            {"answer": dont_know_word(word), "word": word, "queued": item is not None},
            reasoning,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# § 3  PERSONAL MEMORY
# ═══════════════════════════════════════════════════════════════════════════════

_END = r"(?=\s*[.!?,;]|\s+and\s+|\s+but\s+|$)"

# (key, pattern, importance); the name carries the highest weight
PERSONAL_PATTERNS: List[Tuple[str, "re.Pattern", float]] = [
    ("name", re.compile(r"\b(?:my\s+name\s+is|call\s+me)\s+([A-Za-z][\w'-]*)", re.I), 0.9),
    ("occupation", re.compile(rf"\bi\s+(?:work|am\s+employed)\s+((?:as|at)\s+.+?){_END}", re.I), 0.8),
    ("location", re.compile(rf"\bi\s+live\s+in\s+(.+?){_END}", re.I), 0.7),
    ("pets", re.compile(r"\bi\s+have\s+(\d+\s+(?:cats?|dogs?|pets?|birds?|fish|rabbits?|hamsters?))\b", re.I), 0.7),
    ("age", re.compile(r"\bi\s+am\s+(\d{1,3})\s*years?\s*old\b", re.I), 0.6),
]

# words that follow "call me" or "my name is" without being a name
_NOT_A_NAME = frozenset({
    'not', 'back', 'later', 'now', 'maybe', 'just', 'so', 'please',
    'sometime', 'anytime', 'whenever', 'tomorrow', 'tonight', 'soon',
    'here', 'there', 'if', 'unknown', 'nothing', 'none', 'secret', 'private',
})


PERSONAL_QUERIES: List[Tuple[str, "re.Pattern"]] = [
    ("name", re.compile(r"\bwhat'?s\s+my\s+name\b|\bwhat\s+is\s+my\s+name\b|"
                        r"\bdo\s+you\s+(?:remember|know)\s+my\s+name\b|\bwho\s+am\s+i\b", re.I)),
    ("location", re.compile(r"\bwhere\s+do\s+i\s+live\b", re.I)),
    ("occupation", re.compile(r"\bwhat\s+do\s+i\s+do\b|\bwhere\s+do\s+i\s+work\b", re.I)),
    ("age", re.compile(r"\bhow\s+old\s+am\s+i\b", re.I)),
    ("all", re.compile(r"\bwhat\s+do\s+you\s+remember\b|\bwhat\s+do\s+you\s+know\s+about\s+me\b|"
                       r"\bdo\s+you\s+remember\s+me\b|\btell\s+me\s+about\s+(?:me|myself)\b", re.I)),
]

_DESCRIPTIONS = {
    "name": "your name is {}",
    "occupation": "you work {}",
    "location": "you live in {}",
    "pets": "you have {}",
    "age": "you are {} years old",
}


def describe_personal(key: str, value: str) -> str:
    return _DESCRIPTIONS.get(key, key.replace("_", " ") + ": {}").format(value)


class PersonalMemoryProcessor(PathwayProcessor):
    """Stores facts the user states about themselves and answers recall questions"""

    name = PERSONAL_MEMORY

    def __init__(self, conversation=None, min_activation: float = None):
        super().__init__(min_activation)
        self.conversation = conversation

    def extract(self, message: str) -> List[Tuple[str, str, float]]:
        found = []
        for key, pattern, importance in PERSONAL_PATTERNS:
            m = pattern.search(message)
            if not m:
                continue
            value = m.group(1).strip()
            if key == "name":
                if value.lower() in _NOT_A_NAME or not tokenize(value):
                    logger.debug(f"Ignoring {value!r} as a name")
                    continue
                if value.islower():
                    value = value.capitalize()
            found.append((key, value, importance))
        return found

    def match_query(self, message: str) -> Optional[str]:
        for key, pattern in PERSONAL_QUERIES:
            if pattern.search(message):
                return key
        return None

    async def _run(self, message, activation, store):
        reasoning = []
        if self.conversation is not None:
            recent = self.conversation.recent(5, role="user")
            reasoning.append(f"Memory context: {len(recent)} recent user turns")

        stored = []
        for key, value, importance in self.extract(message):
            store.upsert(KnowledgeEntry(
                KIND_PERSONAL, key,
                {"value": value, "importance": importance},
                source=SOURCE_MANUAL,
                confidence=config.STRONG_ACTIVATION,
            ))
            stored.append((key, value))
            reasoning.append(f"Stored personal {key}: {value}")

        query = self.match_query(message)
        if query == "all":
            return self._recall_all(store, reasoning)
        if query is not None:
            return self._recall_one(query, store, reasoning)
        if stored:
            return self._acknowledge(stored, reasoning)
        return None

    def _recall_one(self, key: str, store: KnowledgeStore, reasoning: List[str]) -> PathwayResult:
        entry = store.get(KIND_PERSONAL, key)
        if entry is None:
            reasoning.append(f"No stored {key}")
            what = "your name" if key == "name" else f"your {key}"
            return PathwayResult(
                PERSONAL_MEMORY, 0.5,
                {"answer": f"I don't think you've told me {what} yet.", "key": key, "value": None},
                reasoning,
            )

        value = entry.value.get("value")
        reasoning.append(f"Recalled {key} from memory")
        if key == "name":
            answer = f"Your name is {value}! I remember you telling me that earlier."
            confidence = 0.95
        else:
            described = describe_personal(key, value)
            answer = described[0].upper() + described[1:] + "."
            confidence = 0.9
        return PathwayResult(PERSONAL_MEMORY, confidence,
                             {"answer": answer, "key": key, "value": value}, reasoning)

    def _recall_all(self, store: KnowledgeStore, reasoning: List[str]) -> PathwayResult:
        entries = sorted(store.entries(KIND_PERSONAL),
                         key=lambda e: -e.value.get("importance", 0))
        if not entries:
            reasoning.append("Nothing stored about the user")
            return PathwayResult(
                PERSONAL_MEMORY, 0.5,
                {"answer": "I don't have anything stored about you yet. "
                           "Tell me your name or where you live and I'll remember it.",
                 "facts": {}},
                reasoning,
            )

        facts = {e.key: e.value.get("value") for e in entries}
        described = "; ".join(describe_personal(k, v) for k, v in facts.items())
        reasoning.append(f"Recalled {len(facts)} personal facts")
        return PathwayResult(
            PERSONAL_MEMORY, 0.9,
            {"answer": f"Here's what I remember about you: {described}.", "facts": facts},
            reasoning,
        )

    def _acknowledge(self, stored: List[Tuple[str, str]], reasoning: List[str]) -> PathwayResult:
        facts = dict(stored)
        if "name" in facts:
            answer = f"Nice to meet you, {facts['name']}! I'll remember that."
        else:
            answer = "Got it, I'll remember that " + "; ".join(
                describe_personal(k, v) for k, v in stored
            ) + "."
        return PathwayResult(PERSONAL_MEMORY, 0.85, {"answer": answer, "facts": facts}, reasoning)


# ═══════════════════════════════════════════════════════════════════════════════
# § 4  TEMPORAL
# ═══════════════════════════════════════════════════════════════════════════════

def _clock_time(now) -> str:
    return now.strftime("%I:%M %p").lstrip("0")


def _long_date(now) -> str:
    return f"{now:%A, %B} {now.day}, {now.year}"


TEMPORAL_FORMATS = [
    ("time", re.compile(r"\btime\b", re.I), lambda now: f"It's {_clock_time(now)}."),
    ("date", re.compile(r"\bdate\b", re.I), lambda now: f"Today's date is {_long_date(now)}."),
    ("day", re.compile(r"\bday\b", re.I), lambda now: f"Today is {now:%A}."),
    ("month", re.compile(r"\bmonth\b", re.I), lambda now: f"It's {now:%B} {now.year}."),
    ("year", re.compile(r"\byear\b", re.I), lambda now: f"It's {now.year}."),
]


_CLOCK_NOUN = r"(?:time|date|day|month|year)"
# the clock noun must be what is asked for, not just mentioned
_CLOCK_REQUEST = re.compile(
    rf"\b(?:what|which)(?:'s|\s+is)?\s+(?:the\s+|today'?s\s+)?(?:current\s+)?{_CLOCK_NOUN}\b"
    rf"|\bwhat(?:'s|\s+is)\s+today\b"
    rf"|\b(?:current|today'?s)\s+{_CLOCK_NOUN}\b"
    rf"|\b(?:tell\s+me|know)\s+the\s+(?:current\s+)?{_CLOCK_NOUN}\b"
    rf"|\b{_CLOCK_NOUN}\s+(?:is\s+it|now|today)\b",
    re.I,
)


class TemporalProcessor(PathwayProcessor):
    """Formats the clock's current instant by the noun asked about"""

    name = TEMPORAL

    def __init__(self, clock, min_activation: float = None):
        super().__init__(min_activation)
        self.clock = clock

    async def _run(self, message, activation, store):
        if not _CLOCK_REQUEST.search(message):
            return None
        now = self.clock.now()
        for fmt, pattern, render in TEMPORAL_FORMATS:
            if pattern.search(message):
                answer = render(now)
                break
        else:
            fmt = "datetime"
            answer = f"It's {_clock_time(now)} on {_long_date(now)}."

        return PathwayResult(
            TEMPORAL,
            config.CALCULATION_CONFIDENCE,
            {"answer": answer, "format": fmt, "timestamp": now.isoformat()},
            [f"Read clock, formatted as {fmt}"],
        )


# ═══════════════════════════════════════════════════════════════════════════════
# § 5  FACTUAL KNOWLEDGE
# ═══════════════════════════════════════════════════════════════════════════════

_TOPIC_PREFIX = re.compile(
    r"^\s*(?:(?:can|could)\s+you\s+|please\s+)?"
    r"(?:tell\s+me\s+about|what\s+do\s+you\s+know\s+about|do\s+you\s+know\s+about|"
    r"what\s+is|what's|whats|what\s+are|what\s+was|who\s+is|who\s+was|who\s+were|"
    r"explain|describe|where\s+is|where\s+are|when\s+did|when\s+was|"
    r"how\s+does|how\s+do|why\s+is|why\s+do|why\s+does)\s+",
    re.I,
)
_ARTICLE = re.compile(r"^(?:an?|the)\s+", re.I)
_SELF_REFERENCE = re.compile(r"\b(?:my|me|myself|i|you|your|yourself)\b", re.I)

_NON_TOPIC_WORDS = frozenset({
    'time', 'date', 'day', 'month', 'year', 'today', 'now',
    'plus', 'minus', 'times', 'multiplied', 'divided', 'over', 'power', 'square', 'root', 'sqrt',
    'zero', 'one', 'two', 'three', 'four', 'five', 'six', 'seven', 'eight', 'nine', 'ten',
    'eleven', 'twelve', 'twenty', 'thirty', 'forty', 'fifty', 'hundred', 'thousand',
    'x', 'mean', 'means', 'define', 'definition', 'meaning', 'word',
})


def extract_topic(message: str) -> Optional[str]:
    """Topic phrase of a knowledge question, or None when the message is about something else"""
    text = _TOPIC_PREFIX.sub("", message.strip())
    if _SELF_REFERENCE.search(text):
        return None
    text = _ARTICLE.sub("", text.strip())
    text = re.sub(r"\s+(?:is|are|was|were|does|do|did)\s*$", "", text.strip(" ?!.,;:\"'"))
    topic = normalize_word(text)
    if not topic:
        return None
    if not [t for t in tokenize(topic) if t not in _NON_TOPIC_WORDS and re.search(r"[a-z]", t)]:
        return None
    return topic


class FactualKnowledgeProcessor(PathwayProcessor):
    """Token-overlap search over facts and coding notes, then topic lookup"""

    name = FACTUAL_KNOWLEDGE

    def __init__(self, lookup, queue, min_activation: float = None):
        super().__init__(min_activation)
        self.lookup = lookup
        self.queue = queue

    @staticmethod
    def best_match(store: KnowledgeStore, tokens: List[str]) -> Optional[Tuple[KnowledgeEntry, float]]:
        ranked = store.search(KIND_FACT, tokens, limit=1) + store.search(KIND_CODING, tokens, limit=1)
        if not ranked:
            return None
        ranked.sort(key=lambda pair: (-pair[1], -pair[0].confidence, -pair[0].timestamp))
        return ranked[0]

    async def _run(self, message, activation, store):
        topic = extract_topic(message)
        if topic is None:
            return None

        reasoning = [f"Topic: {topic!r}"]
        match = self.best_match(store, tokenize(topic))
        if match is not None:
            entry, relevance = match
            reasoning.append(f"Best stored match {entry.key!r} (relevance {relevance:.2f})")
            if relevance >= config.FACT_RELEVANCE_THRESHOLD:
                confidence = min(0.9, 0.5 + 0.4 * relevance)
                return PathwayResult(
                    FACTUAL_KNOWLEDGE,
                    confidence,
                    dict(entry.value, answer=format_fact(entry.value), key=entry.key,
                         relevance=relevance, source=entry.source),
                    reasoning,
                )
            reasoning.append("Match below relevance threshold")

        domain = detect_domain(message)
        record = await self.lookup.lookup_topic(topic)
        if record is not None:
            value = dict(record)
            value["domain"] = domain
            store.upsert(KnowledgeEntry(
                KIND_FACT, topic, value,
                source=SOURCE_LEARNED,
                confidence=config.LEARNED_FACT_CONFIDENCE,
            ))
            reasoning.append(f"Learned {topic!r} from topic lookup")
            return PathwayResult(
                FACTUAL_KNOWLEDGE,
                config.LEARNED_FACT_CONFIDENCE,
                dict(value, answer=format_fact(value), key=topic, source=SOURCE_LEARNED),
                reasoning,
            )

        item = self.queue.enqueue(QUEUE_TOPIC, topic, domain=domain)
        reasoning.append("Topic lookup failed; " + (
            f"queued for learning (priority {item.priority}, domain {domain})" if item else "already queued"
        ))
        return PathwayResult(
            FACTUAL_KNOWLEDGE,
            config.UNKNOWN_CONFIDENCE,
            {"answer": dont_know_topic(topic), "topic": topic, "queued": item is not None},
            reasoning,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# § 6  CONVERSATIONAL
# ═══════════════════════════════════════════════════════════════════════════════

class ConversationalProcessor(PathwayProcessor):
    """Small talk and the default acknowledgment"""

    name = CONVERSATIONAL

    async def _run(self, message, activation, store):
        kind = classify_small_talk(message)
        name_entry = store.get(KIND_PERSONAL, "name")
        name = name_entry.value.get("value") if name_entry else None

        reasoning = [f"Small talk: {kind}" if kind else "No small talk pattern, acknowledging"]
        if name:
            reasoning.append(f"Personalized for {name}")
        return PathwayResult(
            CONVERSATIONAL,
            config.STRONG_ACTIVATION if kind else config.ACKNOWLEDGMENT_CONFIDENCE,
            {"answer": conversational_reply(kind, name), "kind": kind or "ack"},
            reasoning,
        )


def build_processors(lookup, queue, clock, conversation=None) -> Dict[str, PathwayProcessor]:
    """One processor per pathway"""
    return {
        ARITHMETIC: ArithmeticProcessor(),
        VOCABULARY: VocabularyProcessor(lookup, queue),
        PERSONAL_MEMORY: PersonalMemoryProcessor(conversation),
        FACTUAL_KNOWLEDGE: FactualKnowledgeProcessor(lookup, queue),
        TEMPORAL: TemporalProcessor(clock),
        CONVERSATIONAL: ConversationalProcessor(),
    }
