"""Declarative extraction rules: a compiled pattern plus an extractor.

Parsers keep an ordered list of rules per field and take the first rule that
produces a value. Each rule can be exercised on its own, which keeps the
individual heuristics unit-testable.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, NamedTuple

type Extractor = Callable[[re.Pattern[str], str], Any]


@dataclass(frozen=True, slots=True)
class ExtractionRule:
    """A named heuristic.

    ``extract`` receives the compiled ``pattern`` and the full text and returns
    a value, or ``None`` when the rule does not apply. Extractors must not
    raise for unexpected text.
    """

    name: str
    pattern: re.Pattern[str]
    extract: Extractor

    def apply(self, text: str) -> Any:
        return self.extract(self.pattern, text)


class RuleHit(NamedTuple):
    rule: str
    value: Any


def on_first_match(convert: Callable[[re.Match[str]], Any]) -> Extractor:
    """Build an extractor that converts the first match of the pattern."""

    def _extract(pattern: re.Pattern[str], text: str) -> Any:
        m = pattern.search(text)
        return convert(m) if m is not None else None

    return _extract


def over_all_matches(reduce: Callable[[list[str]], Any]) -> Extractor:
    """Build an extractor that reduces every matched substring to one value."""

    def _extract(pattern: re.Pattern[str], text: str) -> Any:
        found = [m.group(0) for m in pattern.finditer(text)]
        return reduce(found) if found else None

    return _extract


def first_match(rules: Iterable[ExtractionRule], text: str) -> RuleHit | None:
    """Return the first rule (in order) that yields a non-``None`` value."""

    for rule in rules:
        value = rule.apply(text)
        if value is not None:
            return RuleHit(rule.name, value)
    return None


__all__ = [
    "Extractor",
    "ExtractionRule",
    "RuleHit",
    "on_first_match",
    "over_all_matches",
    "first_match",
]
