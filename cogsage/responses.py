"""Response templates: small talk, pathway answers and fallbacks"""

import re
from typing import Dict, List, Optional

from .arithmetic import format_number

# ═══════════════════════════════════════════════════════════════════════════════
# § 1  SMALL TALK
# ═══════════════════════════════════════════════════════════════════════════════

_GREET_RE = re.compile(
    r'^\s*(hi|hello|hey|howdy|greetings|yo|good\s+(morning|afternoon|evening))\b', re.I
)
_BYE_RE = re.compile(r'^\s*(bye|goodbye|see\s+you|farewell|good\s*night)\b', re.I)
_THANKS_RE = re.compile(r'\b(thanks|thank\s+you|thx|cheers)\b', re.I)
_HOW_ARE_YOU_RE = re.compile(r'\bhow\s+(are\s+you|is\s+it\s+going)\b', re.I)
_ABOUT_RE = re.compile(r'\b(who|what)\s+are\s+you\b|\byour\s+name\b', re.I)
_HELP_RE = re.compile(r'^\s*(help|what\s+can\s+you\s+do)\b', re.I)

SMALL_TALK_RULES = [
    ('thanks', _THANKS_RE),
    ('bye', _BYE_RE),
    ('about', _ABOUT_RE),
    ('help', _HELP_RE),
    ('how_are_you', _HOW_ARE_YOU_RE),
    ('greet', _GREET_RE),
]

_SMALL_TALK_RESPONSES = {
    'greet': "Hello{name}! What can I help you with?",
    'bye': "Goodbye{name}! Come back anytime.",
    'thanks': "You're welcome{name}!",
    'how_are_you': "I'm doing well, thanks for asking{name}! What would you like to talk about?",
    'about': (
        "I'm CogSage, a small assistant that learns as we talk. "
        "I can do arithmetic, define words, remember things about you, "
        "tell the time and look up topics."
    ),
    'help': (
        "Here's what I can help with:\n"
        "  • Math             '12 × 5', 'what is seven times six', 'square root of 81'\n"
        "  • Definitions      'define serendipity', 'what does ephemeral mean'\n"
        "  • About you        'my name is Sam', 'what do you remember about me'\n"
        "  • Date & time      'what time is it', 'what day is today'\n"
        "  • Topics           'tell me about Nikola Tesla'\n"
        "\nJust ask naturally!"
    ),
    'ack': "Got it{name}. Tell me more, or ask me something.",
}


def classify_small_talk(text: str) -> Optional[str]:
    """Return a small-talk kind, or None if the message is not small talk."""
    for kind, pattern in SMALL_TALK_RULES:
        if pattern.search(text or ""):
            return kind
    return None


def conversational_reply(kind: Optional[str], name: Optional[str] = None) -> str:
    template = _SMALL_TALK_RESPONSES.get(kind or 'ack', _SMALL_TALK_RESPONSES['ack'])
    return template.format(name=f", {name}" if name else "")


def fallback_reply() -> str:
    return "I'm not sure how to respond to that yet. Could you rephrase it?"


# ═══════════════════════════════════════════════════════════════════════════════
# § 2  PATHWAY ANSWERS
# ═══════════════════════════════════════════════════════════════════════════════

def format_calculation(expression: str, result: float, analysis: Dict) -> str:
    answer = f"{expression} = {format_number(result)}"
    if analysis["classification"] == "none":
        return answer
    return f"{answer}. Digital root {analysis['digital_root']}: {analysis['description']}."


def format_calculation_error(expression: str, error: str) -> str:
    return f"I can't calculate {expression}: {error}."


def format_definition(word: str, value: Dict) -> str:
    pos = value.get("part_of_speech")
    head = f"{word} ({pos})" if pos and pos != "unknown" else word
    text = f"{head}: {value.get('definition', '')}"
    examples: List[str] = value.get("examples") or []
    if examples:
        text += f' Example: "{examples[0]}"'
    return text


def format_fact(value: Dict) -> str:
    summary = value.get("summary") or value.get("note") or ""
    title = value.get("title")
    if title and title.lower() not in summary.lower()[:len(title) + 20]:
        return f"{title}: {summary}"
    return summary


def dont_know_word(word: str) -> str:
    return (
        f"I don't know the word \"{word}\" yet. "
        "I've added it to my learning queue and will look it up soon."
    )


def dont_know_topic(topic: str) -> str:
    return (
        f"I don't know about \"{topic}\" yet. "
        "I've added it to my learning queue and will look it up soon."
    )


# ═══════════════════════════════════════════════════════════════════════════════
# § 3  STATISTICS
# ═══════════════════════════════════════════════════════════════════════════════

def format_stats(stats: Dict) -> str:
    """Render agent statistics as indented text"""
    store = stats.get("knowledge", {})
    queue = stats.get("learning", {})
    lines = [
        f"Messages handled: {stats.get('messages', 0)}",
        f"Knowledge entries: {store.get('total_entries', 0)} "
        f"(avg confidence {store.get('avg_confidence', 0):.2f})",
    ]
    for kind, count in store.get("by_kind", {}).items():
        lines.append(f"  {kind:<20} {count}")
    lines.append("By source:")
    for source, count in store.get("by_source", {}).items():
        lines.append(f"  {source:<20} {count}")
    lines.append(
        f"Learning queue: {queue.get('pending', 0)} pending, "
        f"{queue.get('resolved', 0)} learned, {queue.get('failed', 0)} failed, "
        f"{queue.get('skipped', 0)} skipped"
    )
    wins = stats.get("pathway_wins", {})
    if wins:
        lines.append("Answers by pathway:")
        for pathway, count in sorted(wins.items(), key=lambda kv: -kv[1]):
            lines.append(f"  {pathway:<20} {count}")
    return "\n".join(lines)
