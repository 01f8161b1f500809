"""
Input classifier: maps a raw message to per-pathway activations.

Each rule is (name, pathway, predicate, activation). Every rule is checked;
a matching rule raises its pathway's activation to at least its constant.
"""

import re
import logging
from typing import Callable, Dict, List, Tuple

from . import config
from .models import (
    ARITHMETIC, VOCABULARY, PERSONAL_MEMORY, TEMPORAL, FACTUAL_KNOWLEDGE,
    CONVERSATIONAL, PATHWAY_PRIORITY,
)

logger = logging.getLogger(__name__)

_NUMBER_WORDS = (
    r'zero|one|two|three|four|five|six|seven|eight|nine|ten|eleven|twelve|'
    r'thirteen|fourteen|fifteen|sixteen|seventeen|eighteen|nineteen|twenty|'
    r'thirty|forty|fifty|sixty|seventy|eighty|ninety|hundred|thousand'
)

_SYMBOL_MATH = re.compile(r'\d\s*(?:\*\*|[+\-−*/×÷x^])\s*-?\d|√\s*\d')
_WORD_MATH = re.compile(
    rf'\b(?:\d+|{_NUMBER_WORDS})\s+(?:plus|minus|times|multiplied\s+by|divided\s+by|over|'
    rf'to\s+the\s+power\s+of)\s+(?:-?\d+|{_NUMBER_WORDS})\b'
    rf'|\b(?:square\s+root|sqrt)\b'
)

_STRONG_VOCABULARY = re.compile(
    r"\bdefine\b|\bdefinition\s+of\b|\bmeaning\s+of\b|\bwhat\s+does\s+.+\s+mean\b"
)
_WEAK_VOCABULARY = re.compile(r"\bwhat\s+is\b|\bwhat's\b|\bwhats\b")

_PERSONAL_STATEMENT = re.compile(
    r"\bmy\s+name\s+is\b|\bcall\s+me\b|\bi\s+live\s+in\b|"
    r"\bi\s+(?:work|am\s+employed)\s+(?:as|at)\b|\bi\s+am\s+\d+\s*years?\s*old\b|"
    r"\bi\s+have\s+\d+\s+\w+"
)
_PERSONAL_QUERY = re.compile(
    r"\bwhat'?s\s+my\s+name\b|\bwhat\s+is\s+my\s+name\b|\bwho\s+am\s+i\b|"
    r"\bdo\s+you\s+remember\b|\bdo\s+you\s+know\s+my\b|\bwhat\s+do\s+you\s+know\s+about\s+me\b|"
    r"\btell\s+me\s+about\s+(?:me|myself)\b|\bwhere\s+do\s+i\s+(?:live|work)\b|"
    r"\bwhat\s+do\s+i\s+do\b|\bhow\s+old\s+am\s+i\b"
)

_TEMPORAL_NOUN = re.compile(r"\b(?:time|date|day|month|year|today)\b")
_TEMPORAL_QUESTION = re.compile(
    r"\bwhat\b|\bwhich\b|\bwhen\b|\btell\s+me\b|\bcurrent\b|\bnow\b|\btoday\b|\?"
)

_STRONG_FACTUAL = re.compile(r"\btell\s+me\s+about\b|\bwho\s+(?:is|was|were)\b|\bexplain\b")
_WEAK_FACTUAL = re.compile(r"\b(?:what|who|where|when|why|how|which)\b")

_GREETING = re.compile(
    r"^\s*(?:hi|hello|hey|howdy|greetings|good\s+(?:morning|afternoon|evening))\b|"
    r"\bhow\s+are\s+you\b|\bthank(?:s|\s+you)\b|\b(?:bye|goodbye|see\s+you)\b"
)


def _temporal_question(text: str) -> bool:
    return bool(_TEMPORAL_NOUN.search(text) and _TEMPORAL_QUESTION.search(text))


Predicate = Callable[[str], bool]
ClassificationRule = Tuple[str, str, Predicate, float]

CLASSIFICATION_RULES: List[ClassificationRule] = [
    ("symbol arithmetic", ARITHMETIC, lambda t: bool(_SYMBOL_MATH.search(t)), config.STRONG_ACTIVATION),
    ("word arithmetic", ARITHMETIC, lambda t: bool(_WORD_MATH.search(t)), 0.85),
    ("definition request", VOCABULARY, lambda t: bool(_STRONG_VOCABULARY.search(t)), config.STRONG_ACTIVATION),
    ("what-is question", VOCABULARY, lambda t: bool(_WEAK_VOCABULARY.search(t)), config.MEDIUM_ACTIVATION),
    ("personal statement", PERSONAL_MEMORY, lambda t: bool(_PERSONAL_STATEMENT.search(t)), config.STRONG_ACTIVATION),
    ("personal recall", PERSONAL_MEMORY, lambda t: bool(_PERSONAL_QUERY.search(t)), config.STRONG_ACTIVATION),
    ("temporal question", TEMPORAL, _temporal_question, config.STRONG_ACTIVATION),
    ("temporal noun", TEMPORAL, lambda t: bool(_TEMPORAL_NOUN.search(t)), config.WEAK_ACTIVATION),
    ("topic request", FACTUAL_KNOWLEDGE, lambda t: bool(_STRONG_FACTUAL.search(t)), 0.8),
    ("interrogative", FACTUAL_KNOWLEDGE, lambda t: bool(_WEAK_FACTUAL.search(t)), 0.6),
    ("greeting", CONVERSATIONAL, lambda t: bool(_GREETING.search(t)), config.STRONG_ACTIVATION),
]


class InputClassifier:
    """Feature-based pathway activation"""

    def __init__(self, rules: List[ClassificationRule] = None):
        self.rules = rules if rules is not None else CLASSIFICATION_RULES

    def classify(self, message: str) -> Dict[str, float]:
        """Activation for every pathway; conversational never drops below its baseline"""
        activation = {pathway: 0.0 for pathway in PATHWAY_PRIORITY}
        activation[CONVERSATIONAL] = config.CONVERSATIONAL_BASELINE

        text = (message or "").strip().lower()
        if not text:
            return activation

        for name, pathway, predicate, value in self.rules:
            try:
                matched = predicate(text)
            except Exception as e:
                logger.warning(f"Classification rule {name!r} failed: {e}")
                continue
            if matched and value > activation[pathway]:
                activation[pathway] = value

        logger.debug(f"Activations: {activation}")
        return activation


# ── Domain detection (learning priority) ────────────────────────────────────

_DOMAIN_KEYWORDS = (
    ("coding", ("code", "coding", "program", "programming", "python", "javascript",
                "function", "algorithm", "software", "compiler", "api")),
    ("mathematics", ("math", "mathematics", "calculate", "equation", "number",
                     "theorem", "geometry", "algebra", "calculus")),
    ("science", ("science", "physics", "chemistry", "biology", "atom", "molecule",
                 "energy", "planet", "gravity", "cell", "evolution")),
    ("history", ("history", "war", "empire", "ancient", "century", "revolution")),
    ("geography", ("country", "capital", "city", "continent", "river", "mountain")),
)


def detect_domain(text: str) -> str:
    """Coarse subject domain of a topic or question"""
    lowered = (text or "").lower()
    if re.search(r"\bwhen\s+did\b", lowered):
        return "history"
    if re.search(r"\bwhere\s+is\b", lowered):
        return "geography"

    words = set(re.findall(r"[a-z]+", lowered))
    for domain, keywords in _DOMAIN_KEYWORDS:
        if words.intersection(keywords):
            return domain
    return "general_knowledge"
