from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Iterable, Optional

from svyasa.core.errors import RejectedField

# Client-side style keyword screen. It is a UX filter, not a security boundary:
# anything writing to the store directly bypasses it.

NICKNAME_MESSAGE = "Your nickname contains inappropriate content. Please choose a different nickname."
CONTENT_MESSAGE = "Your message contains inappropriate content. Please revise and try again."


@dataclass(frozen=True)
class ModerationResult:
    valid: bool
    kind: Optional[RejectedField] = None
    message: Optional[str] = None


def parse_terms(lines: Iterable[str]) -> list[str]:
    terms: list[str] = []
    seen: set[str] = set()
    for raw in lines:
        line = raw.split("#", 1)[0].strip().lower()
        if not line or line in seen:
            continue
        seen.add(line)
        terms.append(line)
    return terms


def load_terms(path: str | Path | None = None) -> list[str]:
    if path is None:
        text = resources.files("svyasa.data").joinpath("banned_terms.txt").read_text(encoding="utf-8")
    else:
        text = Path(path).read_text(encoding="utf-8")
    return parse_terms(text.splitlines())


def _term_pattern(term: str) -> str:
    words = term.split()
    return r"\s+".join(re.escape(w) for w in words)


class TermFilter:
    def __init__(self, terms: Iterable[str]) -> None:
        self.terms = tuple(parse_terms(terms))
        if not self.terms:
            self._regex = None
            return
        # longest first so "kill yourself" wins over any shorter overlap
        ordered = sorted(self.terms, key=len, reverse=True)
        alternation = "|".join(_term_pattern(t) for t in ordered)
        self._regex = re.compile(rf"\b(?:{alternation})\b", re.IGNORECASE)

    def contains_abuse(self, text: str) -> bool:
        if self._regex is None or not text:
            return False
        return self._regex.search(text) is not None

    def matches(self, text: str) -> list[str]:
        if self._regex is None or not text:
            return []
        found: list[str] = []
        for m in self._regex.finditer(text):
            term = " ".join(m.group(0).lower().split())
            if term not in found:
                found.append(term)
        return found


@lru_cache(maxsize=None)
def get_filter(path: str | None = None) -> TermFilter:
    return TermFilter(load_terms(path))


def contains_abuse_content(text: str) -> bool:
    return get_filter().contains_abuse(text)


def validate_submission(nickname: str, content: str, term_filter: TermFilter | None = None) -> ModerationResult:
    """Check nickname, then content. The first failing field decides the result.

    Inputs are expected to be trimmed already and are not modified.
    """
    f = term_filter or get_filter()
    if f.contains_abuse(nickname):
        return ModerationResult(False, "nickname", NICKNAME_MESSAGE)
    if f.contains_abuse(content):
        return ModerationResult(False, "content", CONTENT_MESSAGE)
    return ModerationResult(True)
