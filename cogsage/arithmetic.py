"""
Arithmetic expression matching, evaluation and digital-root analysis.

Expressions are recognised by an ordered rule table; the first rule whose
pattern matches wins, so more specific shapes are listed first.
"""

import re
import math
import logging
from typing import Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# § 1  NUMBERS AND OPERATORS
# ═══════════════════════════════════════════════════════════════════════════════

_SMALL_NUMBERS = {
    'zero': 0, 'one': 1, 'two': 2, 'three': 3, 'four': 4, 'five': 5,
    'six': 6, 'seven': 7, 'eight': 8, 'nine': 9, 'ten': 10,
    'eleven': 11, 'twelve': 12, 'thirteen': 13, 'fourteen': 14, 'fifteen': 15,
    'sixteen': 16, 'seventeen': 17, 'eighteen': 18, 'nineteen': 19, 'twenty': 20,
    'thirty': 30, 'forty': 40, 'fifty': 50, 'sixty': 60, 'seventy': 70,
    'eighty': 80, 'ninety': 90,
}
_SCALES = {'thousand': 1000, 'million': 1000000}

_OPERATORS = {
    '+': '+', 'plus': '+', 'add': '+', 'added to': '+',
    '-': '-', '−': '-', 'minus': '-', 'subtract': '-',
    '*': '*', 'x': '*', '×': '*', 'times': '*', 'multiplied by': '*',
    '/': '/', '÷': '/', 'divided by': '/', 'over': '/',
    '^': '^', '**': '^',
}
_SYMBOLS = {'+': '+', '-': '−', '*': '×', '/': '÷', '^': '^'}
_PRECEDENCE = {'+': 1, '-': 1, '*': 2, '/': 2, '^': 3}

MAX_EXPONENT = 1000

_NUM = r'-?\d+(?:\.\d+)?'
# 'x' doubles as the multiplication sign, so '3x4' still splits into operands
_NUM_EDGE = r'a-wyzA-WYZ0-9_'
_BOUNDED_NUM = rf'(?<![{_NUM_EDGE}.]){_NUM}(?![{_NUM_EDGE}]|\.\d)'
_SYM_OP = r'\*\*|[+\-−*x×/÷^]'
_NUM_WORD = r'(?:' + '|'.join(sorted(list(_SMALL_NUMBERS) + ['hundred'] + list(_SCALES), key=len, reverse=True)) + r')\b'
_WORD_NUM = rf'{_NUM_WORD}(?:(?:\s+and\s+|[\s-]+){_NUM_WORD})*'
_OPERAND = rf'(?:{_BOUNDED_NUM}|{_WORD_NUM})'
_WORD_OP = r'plus|added\s+to|minus|times|multiplied\s+by|divided\s+by|over'


def words_to_number(text: str) -> Optional[float]:
    """Convert '42', 'forty two' or 'one hundred and five' to a number"""
    text = text.strip().lower()
    try:
        return float(text)
    except ValueError:
        pass

    tokens = [t for t in re.split(r'[\s-]+', text) if t and t != 'and']
    if not tokens:
        return None

    total, current = 0, 0
    for token in tokens:
        if token in _SMALL_NUMBERS:
            current += _SMALL_NUMBERS[token]
        elif token == 'hundred':
            current = (current or 1) * 100
        elif token in _SCALES:
            total += (current or 1) * _SCALES[token]
            current = 0
        else:
            return None
    return float(total + current)


def format_number(value: float) -> str:
    """Format number: drop unnecessary trailing decimals."""
    if isinstance(value, float) and value == int(value) and abs(value) < 1e15:
        return str(int(value))
    if isinstance(value, int):
        return str(value)
    return f"{value:.10g}"


# ═══════════════════════════════════════════════════════════════════════════════
# § 2  DIGITAL ROOT
# ═══════════════════════════════════════════════════════════════════════════════

TESLA_NUMBERS = (3, 6, 9)
VORTEX_CYCLE = (1, 2, 4, 8, 7, 5)


def digital_root(n: int) -> int:
    """Repeatedly sum the decimal digits of |n| until one digit remains"""
    n = abs(int(n))
    while n >= 10:
        n = sum(int(digit) for digit in str(n))
    return n


def classify_digital_root(root: int) -> str:
    if root in TESLA_NUMBERS:
        return "tesla"
    if root in VORTEX_CYCLE:
        return "vortex"
    return "none"


def analyze_number(value: float) -> dict:
    """Digital-root analysis of the absolute, integer-rounded value"""
    number = abs(int(round(value)))
    root = digital_root(number)
    classification = classify_digital_root(root)

    if classification == "tesla":
        description = f"{root} is a Tesla number (3, 6, 9)"
    elif classification == "vortex":
        description = f"{root} is a vortex-cycle number (1, 2, 4, 8, 7, 5)"
    else:
        description = "zero has no digital root in 1-9"

    return {
        "number": number,
        "digital_root": root,
        "classification": classification,
        "vortex_position": VORTEX_CYCLE.index(root) if root in VORTEX_CYCLE else None,
        "description": description,
    }


# ═══════════════════════════════════════════════════════════════════════════════
# § 3  EVALUATION
# ═══════════════════════════════════════════════════════════════════════════════

class Calculation:
    """Outcome of evaluating one recognised expression"""

    def __init__(self, rule: str, expression: str, result: Optional[float],
                 steps: List[str], error: Optional[str] = None):
        self.rule = rule
        self.expression = expression
        self.result = result
        self.steps = steps
        self.error = error

    @property
    def ok(self) -> bool:
        return self.error is None and self.result is not None


class ArithmeticDomainError(ValueError):
    """Operation undefined for its operands (division by zero, negative root)"""


def _apply(a: float, op: str, b: float) -> float:
    if op == '+':
        return a + b
    if op == '-':
        return a - b
    if op == '*':
        return a * b
    if op == '/':
        if b == 0:
            raise ArithmeticDomainError("division by zero is undefined")
        return a / b
    if op == '^':
        if abs(b) > MAX_EXPONENT:
            raise ArithmeticDomainError(f"exponent larger than {MAX_EXPONENT} is not supported")
        if a == 0 and b < 0:
            raise ArithmeticDomainError("zero cannot be raised to a negative power")
        return float(a) ** b
    raise ArithmeticDomainError(f"unknown operator {op!r}")


def _step(a: float, op: str, b: float, result: float) -> str:
    return f"{format_number(a)} {_SYMBOLS[op]} {format_number(b)} = {format_number(result)}"


def _render(operands: List[float], operators: List[str]) -> str:
    parts = [format_number(operands[0])]
    for op, value in zip(operators, operands[1:]):
        parts.extend([_SYMBOLS[op], format_number(value)])
    return " ".join(parts)


def _reduce(values: List[float], pending: List[str], steps: List[str]):
    b, a = values.pop(), values.pop()
    op = pending.pop()
    result = _apply(a, op, b)
    steps.append(_step(a, op, b, result))
    values.append(result)


def compute(rule: str, operands: List[float], operators: List[str]) -> Calculation:
    """
    Evaluate a chain of operands with standard precedence: ×, ÷ and ^ bind
    tighter than + and −, equal precedence groups left to right.
    Domain errors are returned in the Calculation, never raised.
    """
    expression = _render(operands, operators)
    steps = []
    try:
        values, pending = [operands[0]], []
        for op, value in zip(operators, operands[1:]):
            while pending and _PRECEDENCE[pending[-1]] >= _PRECEDENCE[op]:
                _reduce(values, pending, steps)
            pending.append(op)
            values.append(value)
        while pending:
            _reduce(values, pending, steps)
        result = values[0]
    except ArithmeticDomainError as e:
        return Calculation(rule, expression, None, steps, error=str(e))
    except OverflowError:
        return Calculation(rule, expression, None, steps, error="result is too large to represent")

    if isinstance(result, complex) or math.isnan(result) or math.isinf(result):
        return Calculation(rule, expression, None, steps, error="result is not a real number")
    return Calculation(rule, expression, result, steps)


def compute_sqrt(rule: str, value: float) -> Calculation:
    expression = f"√{format_number(value)}"
    if value < 0:
        return Calculation(rule, expression, None, [],
                           error="square root of a negative number is undefined")
    result = math.sqrt(value)
    return Calculation(rule, expression, result, [f"√{format_number(value)} = {format_number(result)}"])


# ═══════════════════════════════════════════════════════════════════════════════
# § 4  EXPRESSION RULES (most specific first)
# ═══════════════════════════════════════════════════════════════════════════════

def _op(token: str) -> str:
    return _OPERATORS[re.sub(r'\s+', ' ', token.strip().lower())]


def _split_chain(text: str, first: "re.Pattern", link: "re.Pattern") -> Optional[Tuple[List[str], List[str]]]:
    """Break a matched chain into its operand and operator tokens"""
    m = first.match(text)
    if not m:
        return None
    operands, operators = [m.group(0)], []
    pos = m.end()
    while pos < len(text):
        lm = link.match(text, pos)
        if not lm or lm.end() == pos:
            return None
        operators.append(lm.group('op'))
        operands.append(lm.group('value'))
        pos = lm.end()
    return operands, operators


def _chained(rule: str, first: "re.Pattern", link: "re.Pattern"):
    def build(m) -> Optional[Calculation]:
        parts = _split_chain(m.group(0).strip(), first, link)
        if parts is None:
            return None
        values = [words_to_number(token) for token in parts[0]]
        if any(value is None for value in values):
            return None
        return compute(rule, values, [_op(token) for token in parts[1]])
    return build


def _sqrt(m) -> Optional[Calculation]:
    value = words_to_number(m.group('value') or m.group('value2'))
    return None if value is None else compute_sqrt("square root", value)


def _power_words(m) -> Optional[Calculation]:
    base, exponent = words_to_number(m.group(1)), words_to_number(m.group(2))
    if base is None or exponent is None:
        return None
    return compute("power", [base, exponent], ['^'])


def _word_form(rule: str):
    def build(m) -> Optional[Calculation]:
        a, b = words_to_number(m.group('a')), words_to_number(m.group('b'))
        if a is None or b is None:
            return None
        return compute(rule, [a, b], [_op(m.group('op'))])
    return build


def _symbols(m) -> Calculation:
    return compute("symbols", [float(m.group(1)), float(m.group(3))], [_op(m.group(2))])


_SYMBOL_OPERAND = re.compile(_BOUNDED_NUM)
_SYMBOL_LINK = re.compile(rf'\s*(?P<op>{_SYM_OP})\s*(?P<value>{_BOUNDED_NUM})')
_WORD_OPERAND = re.compile(_OPERAND, re.I)
_WORD_LINK = re.compile(rf'\s+(?P<op>{_WORD_OP})\s+(?P<value>{_OPERAND})', re.I)

ExpressionRule = Tuple[str, "re.Pattern", Callable]

EXPRESSION_RULES: List[ExpressionRule] = [
    ("chained symbols",
     re.compile(rf'{_BOUNDED_NUM}(?:\s*(?:{_SYM_OP})\s*{_BOUNDED_NUM}){{2,}}', re.I),
     _chained("chained symbols", _SYMBOL_OPERAND, _SYMBOL_LINK)),
    ("square root",
     re.compile(rf'(?:square\s+root|sqrt)\s*(?:of\s+)?\(?\s*(?P<value>{_OPERAND})\s*\)?'
                rf'|√\s*\(?\s*(?P<value2>{_BOUNDED_NUM})', re.I),
     _sqrt),
    ("power",
     re.compile(rf'\b({_OPERAND})\s+(?:to\s+the\s+power\s+of|raised\s+to(?:\s+the\s+power\s+of)?)\s+({_OPERAND})', re.I),
     _power_words),
    ("chained words",
     re.compile(rf'\b{_OPERAND}(?:\s+(?:{_WORD_OP})\s+{_OPERAND}){{2,}}', re.I),
     _chained("chained words", _WORD_OPERAND, _WORD_LINK)),
    ("phrasal words",
     re.compile(rf"^\s*(?:what\s+is|what's|whats|calculate|compute)\s+(?P<a>{_OPERAND})\s+"
                rf"(?P<op>{_WORD_OP})\s+(?P<b>{_OPERAND})\s*[?.!]*\s*$", re.I),
     _word_form("phrasal words")),
    ("words",
     re.compile(rf'\b(?P<a>{_OPERAND})\s+(?P<op>{_WORD_OP})\s+(?P<b>{_OPERAND})\b', re.I),
     _word_form("words")),
    ("symbols",
     re.compile(rf'({_BOUNDED_NUM})\s*({_SYM_OP})\s*({_BOUNDED_NUM})', re.I),
     _symbols),
]


def evaluate(message: str) -> Optional[Calculation]:
    """Try each expression rule in order; None when nothing matches"""
    for name, pattern, build in EXPRESSION_RULES:
        m = pattern.search(message)
        if not m:
            continue
        calculation = build(m)
        if calculation is not None:
            logger.debug(f"Expression rule {name!r} matched {m.group(0)!r}")
            return calculation
    return None
