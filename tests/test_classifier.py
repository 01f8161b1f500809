"""Tests for pathway activation and domain detection"""

import pytest

from cogsage.classifier import InputClassifier, detect_domain
from cogsage.models import (
    ARITHMETIC, VOCABULARY, PERSONAL_MEMORY, TEMPORAL, FACTUAL_KNOWLEDGE,
    CONVERSATIONAL, PATHWAY_PRIORITY,
)


@pytest.fixture
def classifier():
    return InputClassifier()


def test_every_pathway_present_and_bounded(classifier):
    for message in ("12 × 5", "define cat", "hello", "what time is it", "???", "my name is Sam"):
        activation = classifier.classify(message)
        assert set(activation) == set(PATHWAY_PRIORITY)
        assert all(0.0 <= value <= 1.0 for value in activation.values())


@pytest.mark.parametrize("message", ["", "   ", None])
def test_empty_input_yields_baseline(classifier, message):
    activation = classifier.classify(message)
    assert activation[CONVERSATIONAL] == 0.5
    assert all(activation[p] == 0.0 for p in PATHWAY_PRIORITY if p != CONVERSATIONAL)


def test_symbol_arithmetic(classifier):
    assert classifier.classify("12 × 5")[ARITHMETIC] == 0.9
    assert classifier.classify("what is 3+4?")[ARITHMETIC] == 0.9


def test_word_arithmetic(classifier):
    activation = classifier.classify("what is seven times six")
    assert activation[ARITHMETIC] == 0.85
    assert activation[VOCABULARY] == 0.7


def test_definition_requests_are_strong(classifier):
    assert classifier.classify("define serendipity")[VOCABULARY] == 0.9
    assert classifier.classify("what does ephemeral mean?")[VOCABULARY] == 0.9
    assert classifier.classify("what is a lemma")[VOCABULARY] == 0.7


def test_personal_statement_and_recall(classifier):
    assert classifier.classify("My name is Sam")[PERSONAL_MEMORY] == 0.9
    assert classifier.classify("I live in Lisbon")[PERSONAL_MEMORY] == 0.9
    assert classifier.classify("what's my name?")[PERSONAL_MEMORY] == 0.9
    assert classifier.classify("what do you remember about me")[PERSONAL_MEMORY] == 0.9


def test_temporal_question_vs_bare_noun(classifier):
    assert classifier.classify("what time is it?")[TEMPORAL] == 0.9
    assert classifier.classify("it was a long day")[TEMPORAL] == 0.5


def test_factual(classifier):
    assert classifier.classify("tell me about Nikola Tesla")[FACTUAL_KNOWLEDGE] == 0.8
    assert classifier.classify("who was Ada Lovelace")[FACTUAL_KNOWLEDGE] == 0.8
    assert classifier.classify("why is the sky blue")[FACTUAL_KNOWLEDGE] == 0.6


def test_greeting_raises_conversational(classifier):
    assert classifier.classify("hello there")[CONVERSATIONAL] == 0.9
    assert classifier.classify("the weather")[CONVERSATIONAL] == 0.5


def test_several_pathways_can_fire(classifier):
    activation = classifier.classify("what is gravity?")
    assert activation[VOCABULARY] > 0
    assert activation[FACTUAL_KNOWLEDGE] > 0
    assert activation[CONVERSATIONAL] > 0


def test_failing_rule_is_skipped():
    rules = [
        ("broken", ARITHMETIC, lambda text: 1 / 0, 0.9),
        ("greeting", CONVERSATIONAL, lambda text: True, 0.9),
    ]
    activation = InputClassifier(rules).classify("anything")
    assert activation[ARITHMETIC] == 0.0
    assert activation[CONVERSATIONAL] == 0.9


@pytest.mark.parametrize("text,domain", [
    ("how do I write a python function", "coding"),
    ("what is the quadratic equation", "mathematics"),
    ("explain photosynthesis in biology", "science"),
    ("when did the roman empire fall", "history"),
    ("where is Lisbon", "geography"),
    ("tell me about bananas", "general_knowledge"),
])
def test_detect_domain(text, domain):
    assert detect_domain(text) == domain
