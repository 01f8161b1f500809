"""Core data types shared by the pipeline, store and learning queue"""

import re
import time
from typing import Dict, List, Optional

# ── Pathway names ────────────────────────────────────────────────────────────
ARITHMETIC = "arithmetic"
VOCABULARY = "vocabulary"
PERSONAL_MEMORY = "personal_memory"
TEMPORAL = "temporal"
FACTUAL_KNOWLEDGE = "factual_knowledge"
CONVERSATIONAL = "conversational"

# Tie-break order for synthesis, highest priority first
PATHWAY_PRIORITY = (
    ARITHMETIC,
    VOCABULARY,
    PERSONAL_MEMORY,
    FACTUAL_KNOWLEDGE,
    TEMPORAL,
    CONVERSATIONAL,
)

# ── Knowledge entry kinds (each is also a storage namespace) ────────────────
KIND_VOCABULARY = "vocabulary"
KIND_ARITHMETIC = "arithmetic_concept"
KIND_FACT = "fact"
KIND_PERSONAL = "personal_info"
KIND_CODING = "coding_note"

ENTRY_KINDS = (KIND_VOCABULARY, KIND_ARITHMETIC, KIND_FACT, KIND_PERSONAL, KIND_CODING)

# ── Provenance ───────────────────────────────────────────────────────────────
SOURCE_SEED = "seed"
SOURCE_LEARNED = "learned"
SOURCE_CALCULATED = "calculated"
SOURCE_MANUAL = "manual"

SOURCES = (SOURCE_SEED, SOURCE_LEARNED, SOURCE_CALCULATED, SOURCE_MANUAL)

# ── Learning queue item kinds ────────────────────────────────────────────────
QUEUE_WORD = "word"
QUEUE_TOPIC = "topic"


def normalize_key(key: str) -> str:
    """Lowercase, trim and collapse internal whitespace"""
    return re.sub(r"\s+", " ", str(key).strip().lower())


def clamp_confidence(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


class KnowledgeEntry:
    """Single typed knowledge entry with provenance and confidence"""

    def __init__(
        self,
        kind: str,
        key: str,
        value: Dict,
        source: str = SOURCE_SEED,
        confidence: float = 0.9,
        timestamp: float = None,
    ):
        if kind not in ENTRY_KINDS:
            raise ValueError(f"Unknown entry kind: {kind!r}")
        if source not in SOURCES:
            raise ValueError(f"Unknown entry source: {source!r}")
        self.kind = kind
        self.key = normalize_key(key)
        self.value = dict(value or {})
        self.source = source
        self.confidence = clamp_confidence(confidence)
        self.timestamp = timestamp if timestamp is not None else time.time()

    def text(self) -> str:
        """Flatten the payload into searchable text"""
        parts = []
        for item in self.value.values():
            if isinstance(item, (list, tuple)):
                parts.extend(str(x) for x in item)
            elif item is not None:
                parts.append(str(item))
        return " ".join(parts)

    def to_dict(self) -> Dict:
        """Convert to dictionary"""
        return {
            "kind": self.kind,
            "key": self.key,
            "value": self.value,
            "source": self.source,
            "confidence": self.confidence,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "KnowledgeEntry":
        """Create from dictionary"""
        return cls(
            kind=data["kind"],
            key=data["key"],
            value=data.get("value", {}),
            source=data.get("source", SOURCE_SEED),
            confidence=data.get("confidence", 0.5),
            timestamp=data.get("timestamp"),
        )

    def __repr__(self) -> str:
        return (
            f"KnowledgeEntry({self.kind!r}, {self.key!r}, source={self.source!r}, "
            f"confidence={self.confidence:.2f})"
        )


class PathwayResult:
    """Candidate answer produced by one pathway"""

    def __init__(self, pathway: str, confidence: float, payload: Dict = None,
                 reasoning: List[str] = None):
        self.pathway = pathway
        self.confidence = clamp_confidence(confidence)
        self.payload = payload or {}
        self.reasoning = list(reasoning or [])

    @property
    def answer(self) -> str:
        return str(self.payload.get("answer", ""))

    def to_dict(self) -> Dict:
        return {
            "pathway": self.pathway,
            "confidence": self.confidence,
            "payload": self.payload,
            "reasoning": self.reasoning,
        }

    def __repr__(self) -> str:
        return f"PathwayResult({self.pathway!r}, confidence={self.confidence:.2f})"


class LearningQueueItem:
    """Deferred word/topic lookup"""

    def __init__(self, kind: str, target: str, priority: int = 1,
                 enqueued_at: float = None, domain: Optional[str] = None):
        if kind not in (QUEUE_WORD, QUEUE_TOPIC):
            raise ValueError(f"Unknown queue item kind: {kind!r}")
        self.kind = kind
        self.target = normalize_key(target)
        self.priority = max(1, min(5, int(priority)))
        self.enqueued_at = enqueued_at if enqueued_at is not None else time.time()
        self.domain = domain

    def to_dict(self) -> Dict:
        return {
            "kind": self.kind,
            "target": self.target,
            "priority": self.priority,
            "enqueued_at": self.enqueued_at,
            "domain": self.domain,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "LearningQueueItem":
        return cls(
            kind=data["kind"],
            target=data["target"],
            priority=data.get("priority", 1),
            enqueued_at=data.get("enqueued_at"),
            domain=data.get("domain"),
        )

    def __repr__(self) -> str:
        return f"LearningQueueItem({self.kind!r}, {self.target!r}, priority={self.priority})"


class FinalResponse:
    """Synthesized response returned by the pipeline"""

    def __init__(self, content: str, confidence: float, pathway: Optional[str],
                 payload: Dict = None, reasoning: List[str] = None,
                 considered: List[str] = None, discarded: List[str] = None):
        self.content = content
        self.confidence = clamp_confidence(confidence)
        self.pathway = pathway
        self.payload = payload or {}
        self.reasoning = list(reasoning or [])
        self.considered = list(considered or [])
        self.discarded = list(discarded or [])

    def to_dict(self) -> Dict:
        return {
            "content": self.content,
            "confidence": self.confidence,
            "pathway": self.pathway,
            "payload": self.payload,
            "reasoning": self.reasoning,
            "considered": self.considered,
            "discarded": self.discarded,
        }

    def __str__(self) -> str:
        return self.content
