"""Tests for expression evaluation and digital-root analysis"""

import pytest

from cogsage.arithmetic import (
    analyze_number, classify_digital_root, digital_root, evaluate,
    format_number, words_to_number,
)


class TestDigitalRoot:

    def test_range_and_idempotence(self):
        for n in range(1, 5000):
            root = digital_root(n)
            assert 1 <= root <= 9
            assert digital_root(root) == root

    def test_known_values(self):
        assert digital_root(123) == 6
        assert digital_root(60) == 6
        assert digital_root(9875) == 2
        assert digital_root(-48) == 3

    def test_zero_has_no_class(self):
        assert digital_root(0) == 0
        assert classify_digital_root(0) == "none"

    @pytest.mark.parametrize("root,expected", [
        (3, "tesla"), (6, "tesla"), (9, "tesla"),
        (1, "vortex"), (2, "vortex"), (4, "vortex"),
        (8, "vortex"), (7, "vortex"), (5, "vortex"),
    ])
    def test_every_root_is_tesla_or_vortex(self, root, expected):
        assert classify_digital_root(root) == expected

    def test_analyze_rounds_absolute_value(self):
        analysis = analyze_number(-122.6)
        assert analysis["number"] == 123
        assert analysis["digital_root"] == 6
        assert analysis["classification"] == "tesla"
        assert analysis["vortex_position"] is None

    def test_vortex_position(self):
        assert analyze_number(8)["vortex_position"] == 3
        assert analyze_number(10)["vortex_position"] == 0


class TestEvaluate:

    def test_symbol_multiplication(self):
        calc = evaluate("12 × 5")
        assert calc.ok
        assert calc.result == 60
        assert calc.rule == "symbols"

    @pytest.mark.parametrize("message,expected", [
        ("what is 7 + 8?", 15),
        ("100 - 58", 42),
        ("3 x 4", 12),
        ("9 / 2", 4.5),
        ("2^10", 1024),
        ("2 ** 3", 8),
    ])
    def test_symbol_forms(self, message, expected):
        assert evaluate(message).result == pytest.approx(expected)

    def test_chained_left_to_right(self):
        calc = evaluate("10 - 2 - 3")
        assert calc.rule == "chained symbols"
        assert calc.result == 5
        assert len(calc.steps) == 2

    def test_chained_multiplication_binds_tighter(self):
        assert evaluate("2 + 3 * 4").result == 14
        assert evaluate("2 * 3 + 4").result == 10

    def test_phrasal_word_form(self):
        calc = evaluate("what is twenty five plus seventeen?")
        assert calc.rule == "phrasal words"
        assert calc.result == 42

    def test_word_form_inside_sentence(self):
        calc = evaluate("could you work out seven times six for me")
        assert calc.rule == "words"
        assert calc.result == 42

    def test_word_operator_with_digits(self):
        assert evaluate("81 divided by 9").result == 9

    def test_square_root(self):
        assert evaluate("square root of 81").result == 9
        assert evaluate("sqrt 16").result == 4
        assert evaluate("√49").result == 7

    def test_power_words(self):
        assert evaluate("2 to the power of 8").result == 256

    def test_division_by_zero_is_an_outcome(self):
        calc = evaluate("5 / 0")
        assert not calc.ok
        assert calc.result is None
        assert "division by zero" in calc.error

    def test_negative_square_root_is_an_outcome(self):
        calc = evaluate("square root of -4")
        assert not calc.ok
        assert "negative" in calc.error

    def test_huge_exponent_rejected(self):
        calc = evaluate("2 ^ 5000")
        assert not calc.ok

    def test_parenthesised_negative_square_root(self):
        calc = evaluate("sqrt(-9)")
        assert calc.rule == "square root"
        assert not calc.ok
        assert "negative" in calc.error
        assert evaluate("sqrt(16)").result == 4

    @pytest.mark.parametrize("message", ["1e5 + 2", "what is 1.5.2 + 1", "0x1F + 1"])
    def test_partial_numeric_tokens_are_not_operands(self, message):
        assert evaluate(message) is None

    def test_trailing_period_keeps_the_operand(self):
        assert evaluate("what is 5 + 2.").result == 7

    def test_number_words_joined_by_and(self):
        calc = evaluate("what is one hundred and five plus two")
        assert calc.result == 107

    def test_chained_words(self):
        calc = evaluate("what is six times six times six")
        assert calc.rule == "chained words"
        assert calc.result == 216
        assert evaluate("two plus three times four").result == 14

    def test_long_symbol_chain(self):
        calc = evaluate("1 + 2 + 3 + 4")
        assert calc.result == 10
        assert len(calc.steps) == 3
        assert evaluate("2 * 3 + 4 * 5").result == 26

    def test_no_expression(self):
        assert evaluate("hello there") is None
        assert evaluate("what is serendipity") is None


def test_words_to_number():
    assert words_to_number("forty two") == 42
    assert words_to_number("one hundred and five") == 105
    assert words_to_number("three thousand two hundred") == 3200
    assert words_to_number("12.5") == 12.5
    assert words_to_number("banana") is None


def test_format_number():
    assert format_number(60.0) == "60"
    assert format_number(4.5) == "4.5"
    assert format_number(1 / 3) == "0.3333333333"
