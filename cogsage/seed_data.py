"""Static seed knowledge loaded into the store at startup"""

import logging
from typing import List

from .models import (
    KnowledgeEntry,
    KIND_VOCABULARY, KIND_ARITHMETIC, KIND_FACT, KIND_CODING,
    SOURCE_SEED,
)

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# § 1  VOCABULARY
# ═══════════════════════════════════════════════════════════════════════════════

# word: (part of speech, definition, examples)
_SEED_VOCABULARY = {
    'hello': ('interjection', "A greeting used when meeting someone or answering the phone.",
              ["Hello, how are you today?"]),
    'learn': ('verb', "To gain knowledge or skill by studying, practising or being taught.",
              ["Children learn to read at school."]),
    'knowledge': ('noun', "Facts, information and skills acquired through experience or education.",
                  ["Her knowledge of history is impressive."]),
    'memory': ('noun', "The faculty by which the mind stores and remembers information.",
               ["He has a good memory for faces."]),
    'number': ('noun', "An arithmetical value used to count, measure or label.",
               ["Seven is my favourite number."]),
    'question': ('noun', "A sentence worded or expressed so as to elicit information.",
                 ["She asked a difficult question."]),
    'answer': ('noun', "A thing said or written in reaction to a question or statement.",
               ["The answer is forty-two."]),
    'happy': ('adjective', "Feeling or showing pleasure or contentment.",
              ["They were happy to see each other."]),
    'curious': ('adjective', "Eager to know or learn something.",
                ["Cats are curious animals."]),
    'language': ('noun', "The method of human communication using words in a structured way.",
                 ["English is a widely spoken language."]),
    'science': ('noun', "The systematic study of the physical and natural world through observation and experiment.",
                ["Science explains how the universe works."]),
    'friend': ('noun', "A person with whom one has a bond of mutual affection.",
               ["She is my best friend."]),
    'time': ('noun', "The indefinite continued progress of existence and events in the past, present and future.",
             ["Time flies when you are having fun."]),
    'calculate': ('verb', "To determine an amount or number mathematically.",
                  ["Calculate the total cost."]),
    'algorithm': ('noun', "A finite sequence of well-defined instructions for solving a problem.",
                  ["Sorting algorithms arrange data in order."]),
    'function': ('noun', "A relation that assigns exactly one output to each input; in code, a named reusable block.",
                 ["The function returns the sum of two numbers."]),
    'variable': ('noun', "A symbol or name that stands for a value which may change.",
                 ["Let x be a variable."]),
    'serendipity': ('noun', "The occurrence of events by chance in a happy or beneficial way.",
                    ["Finding the book was pure serendipity."]),
    'ephemeral': ('adjective', "Lasting for a very short time.",
                  ["Fashions are ephemeral."]),
    'resilient': ('adjective', "Able to recover quickly from difficult conditions.",
                  ["Children are often remarkably resilient."]),
    'empathy': ('noun', "The ability to understand and share the feelings of another.",
                ["She showed great empathy for the victims."]),
    'analyze': ('verb', "To examine methodically and in detail to explain or interpret.",
                ["We need to analyze the results."]),
    'digit': ('noun', "Any of the numerals from 0 to 9.",
              ["The number 345 has three digits."]),
    'sum': ('noun', "The total amount resulting from the addition of two or more numbers.",
            ["The sum of 2 and 3 is 5."]),
    'product': ('noun', "The quantity obtained by multiplying two or more numbers together.",
                ["The product of 4 and 5 is 20."]),
}

# ═══════════════════════════════════════════════════════════════════════════════
# § 2  ARITHMETIC CONCEPTS
# ═══════════════════════════════════════════════════════════════════════════════

# concept: (formula, description)
_SEED_ARITHMETIC = {
    'addition': ('a + b', "Combining two quantities into their total."),
    'subtraction': ('a - b', "Taking one quantity away from another to find the difference."),
    'multiplication': ('a × b', "Repeated addition of a number a given number of times."),
    'division': ('a ÷ b', "Splitting a quantity into equal parts; undefined when b is zero."),
    'square root': ('√a', "The non-negative number whose square equals a; undefined for negative a over the reals."),
    'exponent': ('a^b', "Multiplying a by itself b times."),
    'digital root': ('dr(n) = 1 + (n - 1) mod 9',
                     "The single digit obtained by repeatedly summing the decimal digits of a positive integer."),
    'tesla numbers': ('dr(n) ∈ {3, 6, 9}',
                      "Digital roots 3, 6 and 9, which stay outside the doubling cycle."),
    'vortex cycle': ('1 → 2 → 4 → 8 → 7 → 5 → 1',
                     "Digital roots reached by repeated doubling of 1."),
    'order of operations': ('PEMDAS',
                            "Parentheses, exponents, multiplication and division, then addition and subtraction."),
}

# ═══════════════════════════════════════════════════════════════════════════════
# § 3  FACTS
# ═══════════════════════════════════════════════════════════════════════════════

# key: (domain, summary)
_SEED_FACTS = {
    'pi': ('mathematics',
           "Pi is the ratio of a circle's circumference to its diameter, approximately 3.14159. "
           "It is an irrational number with infinite non-repeating decimal digits."),
    'algebra': ('mathematics',
                "Algebra is the branch of mathematics dealing with symbols and the rules for "
                "manipulating them to solve equations with unknown quantities."),
    'calculus': ('mathematics',
                 "Calculus studies rates of change and accumulation. It was developed independently "
                 "by Isaac Newton and Gottfried Leibniz in the 17th century."),
    'gravity': ('science',
                "Gravity is the fundamental force that attracts objects with mass toward one another. "
                "On Earth it gives weight to objects and makes them fall."),
    'photosynthesis': ('science',
                       "Photosynthesis is the process by which plants use sunlight, water and carbon "
                       "dioxide to produce glucose and oxygen."),
    'speed of light': ('science',
                       "The speed of light in a vacuum is exactly 299,792,458 metres per second."),
    'water': ('science',
              "Water is a molecule made of two hydrogen atoms and one oxygen atom (H2O). "
              "It boils at 100 degrees Celsius at sea level."),
    'dna': ('science',
            "DNA (deoxyribonucleic acid) is the molecule that carries the genetic instructions "
            "of all known living organisms."),
    'solar system': ('science',
                     "The solar system consists of the Sun and the eight planets that orbit it, "
                     "together with their moons, dwarf planets, asteroids and comets."),
    'earth': ('geography',
              "Earth is the third planet from the Sun and the only known planet to support life. "
              "About 71 percent of its surface is covered by water."),
    'capital of france': ('geography', "Paris is the capital and largest city of France."),
    'capital of japan': ('geography', "Tokyo is the capital of Japan."),
    'mount everest': ('geography',
                      "Mount Everest is Earth's highest mountain above sea level, at 8,849 metres, "
                      "on the border of Nepal and China."),
    'pacific ocean': ('geography',
                      "The Pacific Ocean is the largest and deepest of Earth's oceans."),
    'world war ii': ('history',
                     "World War II was a global conflict that lasted from 1939 to 1945."),
    'moon landing': ('history',
                     "Apollo 11 landed the first humans on the Moon on 20 July 1969; "
                     "Neil Armstrong was the first to walk on its surface."),
    'nikola tesla': ('history',
                     "Nikola Tesla was a Serbian-American inventor and engineer known for his "
                     "contributions to alternating current electricity."),
    'internet': ('technology',
                 "The Internet is the global system of interconnected computer networks that "
                 "uses the TCP/IP protocol suite to communicate."),
    'artificial intelligence': ('technology',
                                "Artificial intelligence is the field of computer science concerned with "
                                "building systems that perform tasks normally requiring human intelligence."),
    'python programming language': ('coding',
                                    "Python is a high-level, general-purpose programming language known "
                                    "for readable syntax, created by Guido van Rossum and released in 1991."),
}

# ═══════════════════════════════════════════════════════════════════════════════
# § 4  CODING NOTES
# ═══════════════════════════════════════════════════════════════════════════════

# key: (language, note)
_SEED_CODING = {
    'list comprehension': ('python', "A list comprehension builds a list in one expression: [x * 2 for x in items]."),
    'async await': ('python', "async def defines a coroutine; await suspends it until the awaited task completes."),
    'dictionary': ('python', "A dict maps hashable keys to values; lookups are O(1) on average."),
    'recursion': ('general', "Recursion is when a function calls itself on a smaller instance of the problem."),
    'big o notation': ('general', "Big O notation describes how an algorithm's cost grows with input size."),
    'git commit': ('general', "git commit records staged changes to the repository history with a message."),
}


def get_seed_entries() -> List[KnowledgeEntry]:
    """Build the immutable seed entries for every kind"""
    entries = []

    for word, (pos, definition, examples) in _SEED_VOCABULARY.items():
        entries.append(KnowledgeEntry(
            KIND_VOCABULARY, word,
            {"word": word, "definition": definition, "part_of_speech": pos, "examples": examples},
            source=SOURCE_SEED, confidence=0.95, timestamp=0.0,
        ))

    for concept, (formula, description) in _SEED_ARITHMETIC.items():
        entries.append(KnowledgeEntry(
            KIND_ARITHMETIC, concept,
            {"concept": concept, "formula": formula, "description": description},
            source=SOURCE_SEED, confidence=0.98, timestamp=0.0,
        ))

    for key, (domain, summary) in _SEED_FACTS.items():
        entries.append(KnowledgeEntry(
            KIND_FACT, key,
            {"title": key.title(), "summary": summary, "domain": domain},
            source=SOURCE_SEED, confidence=0.9, timestamp=0.0,
        ))

    for key, (language, note) in _SEED_CODING.items():
        entries.append(KnowledgeEntry(
            KIND_CODING, key,
            {"title": key, "note": note, "language": language},
            source=SOURCE_SEED, confidence=0.9, timestamp=0.0,
        ))

    logger.debug(f"Built {len(entries)} seed entries")
    return entries
