"""
Model Response Parser
=====================

Turns the model's semi-structured reply into a VerificationOutcome.

Each field is read by its own regular-expression scan over the whole
reply, so a missing or malformed field never blocks the others. The
parser never raises: unrecognized input falls back to defaults
(UNVERIFIABLE, confidence 0.5, empty explanation).
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import TYPE_CHECKING

from history_fact_check.domain.entities import VerificationLabel, VerificationOutcome
from history_fact_check.domain.services.answer_format import (
    CONFIDENCE_KEY,
    EXPLANATION_KEY,
    SOURCE_KEY,
    VERIFICATION_KEY,
)

if TYPE_CHECKING:
    from history_fact_check.domain.entities import ReferenceContext

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE = 0.5
MODEL_SOURCE_LABEL = "Ollama LLM"
REFERENCE_SOURCE_PREFIX = "Wikipedia — "

# Label tokens as the model writes them, English and Polish.
LABEL_TOKENS: dict[str, VerificationLabel] = {
    "TRUE": VerificationLabel.VERIFIED,
    "VERIFIED": VerificationLabel.VERIFIED,
    "CORRECT": VerificationLabel.VERIFIED,
    "PRAWDA": VerificationLabel.VERIFIED,
    "PRAWDZIWE": VerificationLabel.VERIFIED,
    "FALSE": VerificationLabel.FALSE,
    "INCORRECT": VerificationLabel.FALSE,
    "FAŁSZ": VerificationLabel.FALSE,
    "FALSZ": VerificationLabel.FALSE,
    "NIEPRAWDA": VerificationLabel.FALSE,
    "FAŁSZYWE": VerificationLabel.FALSE,
    "PARTIAL": VerificationLabel.PARTIAL,
    "PARTIALLY": VerificationLabel.PARTIAL,
    "CZĘŚCIOWO": VerificationLabel.PARTIAL,
    "CZESCIOWO": VerificationLabel.PARTIAL,
    "CZĘŚCIOWE": VerificationLabel.PARTIAL,
    "UNVERIFIABLE": VerificationLabel.UNVERIFIABLE,
    "NIEWERYFIKOWALNE": VerificationLabel.UNVERIFIABLE,
}

_OPENERS = r"[\[(*_\"'`]*"

_VERIFICATION_PATTERN = re.compile(
    rf"(?i:{VERIFICATION_KEY})[ \t]*:[ \t]*{_OPENERS}[ \t]*([^\W\d_]+)"
)
_CONFIDENCE_PATTERN = re.compile(
    rf"(?i:{CONFIDENCE_KEY})\s*:\s*{_OPENERS}\s*"
    r"(?P<whole>\d+)(?:\s*[.,]\s*(?P<fraction>\d+)|[ \t]+(?P<spaced>\d+))?"
)
# Stops at a SOURCE: line, or at an upper-case SOURCE: later on the same line.
_EXPLANATION_PATTERN = re.compile(
    rf"(?i:{EXPLANATION_KEY})[ \t]*:(?P<text>.*?)"
    rf"(?=^[ \t]*(?i:{SOURCE_KEY})[ \t]*:|[ \t]{SOURCE_KEY}[ \t]*:|\Z)",
    re.DOTALL | re.MULTILINE,
)


class VerificationResponseParser:
    """
    Tolerant parser for replies following the four-line answer schema.

    Handles extra whitespace, mixed casing, bracketed or emphasized
    labels, Polish label tokens, "0. 95" / "0,95" / "0 95" confidence
    spellings and 0-100 percentages.
    """

    def __init__(
        self,
        model_source_label: str = MODEL_SOURCE_LABEL,
        extra_label_tokens: Mapping[str, VerificationLabel] | None = None,
    ) -> None:
        """
        Initialize the parser.

        Args:
            model_source_label: Source label used when no reference context was used.
            extra_label_tokens: Additional label spellings (upper-case keys).
        """
        self._model_source_label = model_source_label
        self._label_tokens = dict(LABEL_TOKENS)
        if extra_label_tokens:
            self._label_tokens.update({k.upper(): v for k, v in extra_label_tokens.items()})

    def parse(
        self,
        claim: str,
        model_output: str | None,
        reference_context: ReferenceContext | None = None,
    ) -> VerificationOutcome:
        """
        Parse a model reply for one claim.

        Args:
            claim: The claim the reply is about.
            model_output: Raw reply text (blocking or fully accumulated stream).
            reference_context: Context used in the prompt, if any.

        Returns:
            The parsed outcome; defaults fill any field that is missing.
        """
        text = model_output or ""
        return VerificationOutcome(
            claim=claim,
            verification=self.parse_label(text),
            confidence=self.parse_confidence(text),
            explanation=self.parse_explanation(text),
            source=self.source_label(reference_context),
        )

    def parse_label(self, text: str) -> VerificationLabel:
        match = _VERIFICATION_PATTERN.search(text)
        if not match:
            return VerificationLabel.UNVERIFIABLE
        return self._label_tokens.get(match.group(1).upper(), VerificationLabel.UNVERIFIABLE)

    def parse_confidence(self, text: str, default: float = DEFAULT_CONFIDENCE) -> float:
        match = _CONFIDENCE_PATTERN.search(text)
        if not match:
            return default

        whole = match.group("whole")
        fraction = match.group("fraction")
        spaced = match.group("spaced")
        if fraction is None and spaced is not None and len(whole) == 1:
            fraction = spaced

        try:
            value = float(f"{whole}.{fraction}" if fraction else whole)
        except ValueError:
            logger.warning(f"Could not parse confidence value: {match.group(0)!r}")
            return default

        if value > 1.0:
            if value > 100.0:
                logger.warning(f"Confidence out of range, keeping default: {value}")
                return default
            value = value / 100.0
        return min(max(value, 0.0), 1.0)

    def parse_explanation(self, text: str) -> str:
        match = _EXPLANATION_PATTERN.search(text)
        if not match:
            return ""
        return match.group("text").strip()

    def source_label(self, reference_context: ReferenceContext | None) -> str:
        if reference_context is not None:
            return f"{REFERENCE_SOURCE_PREFIX}{reference_context.title}"
        return self._model_source_label
