from __future__ import annotations

import re

from money_tracker.rules import ExtractionRule, first_match, on_first_match, over_all_matches


def _word_rule(name: str, word: str) -> ExtractionRule:
    return ExtractionRule(name, re.compile(word), on_first_match(lambda m: m.group(0).upper()))


def test_first_match_respects_rule_order() -> None:
    rules = [_word_rule("a", "apple"), _word_rule("b", "banana")]

    hit = first_match(rules, "banana and apple")

    assert hit is not None
    assert hit.rule == "a"
    assert hit.value == "APPLE"


def test_first_match_skips_rules_yielding_none() -> None:
    rules = [_word_rule("a", "cherry"), _word_rule("b", "banana")]

    hit = first_match(rules, "banana")

    assert hit == ("b", "BANANA")


def test_first_match_none_when_nothing_applies() -> None:
    assert first_match([_word_rule("a", "kiwi")], "banana") is None


def test_over_all_matches_reduces_every_match() -> None:
    rule = ExtractionRule("count", re.compile(r"\d"), over_all_matches(len))

    assert rule.apply("a1b2c3") == 3
    assert rule.apply("none") is None
