"""
Pattern-Based Claim Extractor
=============================

Splits a message into sentences and keeps the ones that carry a
verifiable signal: a year-like number or a historical keyword.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from history_fact_check.domain.entities import Claim
from history_fact_check.ports.claim_extractor import ClaimExtractor

logger = logging.getLogger(__name__)

# Word stems matched at a word start, so "urodz" covers "urodził" and "urodzony".
DEFAULT_CLAIM_KEYWORDS: tuple[str, ...] = (
    # Polish
    "urodz",
    "zmar",
    "prezydent",
    "król",
    "krol",
    "królow",
    "wojn",
    "bitw",
    "odkry",
    "wynal",
    "nagrod",
    # English
    "born",
    "birth",
    "died",
    "death",
    "president",
    "king",
    "queen",
    "ruler",
    "reign",
    "war",
    "battle",
    "discover",
    "invent",
    "award",
    "prize",
)

_SEGMENT_PATTERN = re.compile(r"[^.!?]+")
_NAME_WORD_PATTERN = re.compile(r"[^\W\d_]+(?:[-'][^\W\d_]+)*")


class PatternClaimExtractor(ClaimExtractor):
    """
    Rule-based claim extraction.

    A sentence becomes a claim when its trimmed length exceeds
    ``min_length`` and it contains a 3-4 digit run or one of the
    configured keyword stems (case-insensitive).
    """

    def __init__(
        self,
        keywords: Iterable[str] = DEFAULT_CLAIM_KEYWORDS,
        min_length: int = 20,
    ) -> None:
        """
        Initialize the extractor.

        Args:
            keywords: Keyword stems signalling a factual statement.
            min_length: Sentences must be strictly longer than this.
        """
        self._min_length = min_length
        self._keywords = tuple(k.strip() for k in keywords if k.strip())
        alternatives = [r"\d{3,4}"]
        if self._keywords:
            stems = "|".join(re.escape(k) for k in self._keywords)
            alternatives.append(rf"\b(?:{stems})")
        self._relevance = re.compile("|".join(alternatives), re.IGNORECASE)

    @property
    def keywords(self) -> tuple[str, ...]:
        return self._keywords

    def extract_claims(self, message: str) -> list[Claim]:
        claims: list[Claim] = []
        for segment in _SEGMENT_PATTERN.finditer(message):
            raw = segment.group()
            text = raw.strip()
            if len(text) <= self._min_length:
                continue
            if not self._relevance.search(text):
                continue
            offset = segment.start() + (len(raw) - len(raw.lstrip()))
            claims.append(Claim(text=text, offset=offset))

        logger.debug(f"Extracted {len(claims)} claim(s) from {len(message)} chars")
        return claims


def guess_subject(text: str) -> str | None:
    """
    Guess the subject of a claim from its capitalised words.

    Returns the longest run of adjacent capitalised words. A lone
    capitalised word at the very start of the text is ignored since it
    is usually just the first word of the sentence.
    """
    best: list[str] = []
    run: list[str] = []
    run_start = 0
    last_end: int | None = None

    for match in _NAME_WORD_PATTERN.finditer(text):
        word = match.group()
        adjacent = last_end is not None and text[last_end : match.start()].isspace()
        if word[0].isupper():
            if run and adjacent:
                run.append(word)
            else:
                run = [word]
                run_start = match.start()
            eligible = len(run) >= 2 or run_start > 0
            if eligible and len(run) > len(best):
                best = list(run)
        else:
            run = []
        last_end = match.end()

    return " ".join(best) if best else None
