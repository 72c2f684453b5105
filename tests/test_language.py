"""Tests for the keyword language heuristic."""

import pytest

from assistant.core.language import Language, count_hits, detect_language, tone_instruction


def test_plain_english_prompt():
    assert detect_language("Hello, what should I watch tonight?") == Language.ENGLISH


def test_three_sheng_words_is_swahili():
    text = "bro that movie was noma and safi"
    assert count_hits(text) == 3
    assert detect_language(text) == Language.SWAHILI


@pytest.mark.parametrize("text", ["Habari, recommend a thriller", "asante bro, any comedies?"])
def test_one_or_two_hits_is_mixed(text):
    assert detect_language(text) == Language.MIXED


@pytest.mark.parametrize("value", ["", None, 42, ["habari"]])
def test_empty_or_non_string_defaults_to_english(value):
    assert detect_language(value) == Language.ENGLISH


def test_case_insensitive():
    assert detect_language("HABARI SASA MAMBO") == Language.SWAHILI


def test_substring_matches_count():
    # "broke" contains "bro", "sawasawa" contains "sawa"
    assert count_hits("I'm broke") == 1
    assert detect_language("I'm broke") == Language.MIXED


def test_word_in_both_lists_counts_twice():
    assert count_hits("poa") == 2
    assert detect_language("poa") == Language.MIXED
    assert detect_language("poa sana bro") == Language.SWAHILI


def test_repeated_word_counts_once():
    assert count_hits("bro bro bro") == 1


def test_tone_instructions():
    assert "Swahili or Sheng" in tone_instruction(Language.SWAHILI)
    assert "bilingually" in tone_instruction(Language.MIXED)
    assert tone_instruction(Language.ENGLISH).startswith("Respond in English")
