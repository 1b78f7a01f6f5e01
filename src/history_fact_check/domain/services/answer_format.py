"""
Answer Format
=============

Keyword tokens of the four-line answer schema requested from the model.
Shared by the prompt builder and the response parser so the two cannot
drift apart.
"""

from __future__ import annotations

VERIFICATION_KEY = "VERIFICATION"
CONFIDENCE_KEY = "CONFIDENCE"
EXPLANATION_KEY = "EXPLANATION"
SOURCE_KEY = "SOURCE"

SCHEMA_KEYS: tuple[str, ...] = (
    VERIFICATION_KEY,
    CONFIDENCE_KEY,
    EXPLANATION_KEY,
    SOURCE_KEY,
)

ANSWER_SCHEMA = (
    f"{VERIFICATION_KEY}: [TRUE/FALSE/PARTIAL/UNVERIFIABLE]\n"
    f"{CONFIDENCE_KEY}: [0.0-1.0]\n"
    f"{EXPLANATION_KEY}: [Brief explanation in the same language as the claim above]\n"
    f"{SOURCE_KEY}: [Source name if available]"
)
