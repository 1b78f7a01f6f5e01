"""
Verification Prompt Builder
===========================

Renders the prompt that asks the model to judge a single claim.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from history_fact_check.domain.services.answer_format import ANSWER_SCHEMA, SCHEMA_KEYS

if TYPE_CHECKING:
    from history_fact_check.domain.entities import ReferenceContext

PROMPT_HEADER = (
    "You are a fact-checker for historical information. "
    "IMPORTANT: Write the EXPLANATION in the SAME language as the claim "
    "(e.g., if claim is in Polish, explain in Polish). "
    f"Keep {', '.join(SCHEMA_KEYS[:-1])} and {SCHEMA_KEYS[-1]} keywords in English."
)


class FactCheckPromptBuilder:
    """
    Deterministic prompt renderer.

    Sections appear in a fixed order: header, caller context, reference
    context, quotes, claim, answer schema. Optional sections are left out
    entirely when their input is empty.
    """

    def build(
        self,
        claim: str,
        caller_context: str | None = None,
        reference_context: ReferenceContext | None = None,
        quotes: Sequence[str] | None = None,
    ) -> str:
        """
        Build the verification prompt.

        Args:
            claim: Claim text to verify.
            caller_context: Optional free-text context supplied by the caller.
            reference_context: Resolved encyclopedia summary, if any.
            quotes: Quotations attributed to the subject, if any.

        Returns:
            The prompt text.
        """
        sections = [PROMPT_HEADER]

        if caller_context:
            sections.append(f"Character context: {caller_context}")

        if reference_context is not None:
            lines = [
                "Reference information from Wikipedia:",
                f"- Title: {reference_context.title}",
            ]
            if reference_context.extract:
                lines.append(f"- Summary: {reference_context.extract}")
            sections.append("\n".join(lines))

        if quotes:
            lines = ["Relevant quotes from Wikiquote:"]
            lines.extend(f"- {quote}" for quote in quotes)
            sections.append("\n".join(lines))

        sections.append(f"Claim to verify: {claim}")
        sections.append(f"Provide your answer in the following format:\n{ANSWER_SCHEMA}")

        return "\n\n".join(sections)
