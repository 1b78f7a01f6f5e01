"""
Tests for the Verification Prompt Builder
=========================================
"""

from history_fact_check.domain.entities import ReferenceContext
from history_fact_check.domain.services.answer_format import ANSWER_SCHEMA
from history_fact_check.domain.services.prompt_builder import (
    PROMPT_HEADER,
    FactCheckPromptBuilder,
)


class TestFactCheckPromptBuilder:
    """Tests for prompt rendering."""

    def test_minimal_prompt(self) -> None:
        """Without optional inputs only header, claim and schema appear."""
        prompt = FactCheckPromptBuilder().build("Kopernik urodził się w 1473 roku")

        assert prompt == "\n\n".join(
            [
                PROMPT_HEADER,
                "Claim to verify: Kopernik urodził się w 1473 roku",
                f"Provide your answer in the following format:\n{ANSWER_SCHEMA}",
            ]
        )
        assert "Character context" not in prompt
        assert "Wikipedia" not in prompt.replace(PROMPT_HEADER, "")
        assert "Wikiquote" not in prompt

    def test_full_prompt_section_order(self, copernicus_context: ReferenceContext) -> None:
        prompt = FactCheckPromptBuilder().build(
            "Kopernik urodził się w 1473 roku",
            caller_context="Astronom z Torunia",
            reference_context=copernicus_context,
            quotes=["Matematyka pisze się dla matematyków."],
        )

        positions = [
            prompt.index(PROMPT_HEADER),
            prompt.index("Character context: Astronom z Torunia"),
            prompt.index("Reference information from Wikipedia:"),
            prompt.index("- Title: Mikołaj Kopernik"),
            prompt.index(f"- Summary: {copernicus_context.extract}"),
            prompt.index("Relevant quotes from Wikiquote:\n- Matematyka pisze się dla matematyków."),
            prompt.index("Claim to verify: Kopernik urodził się w 1473 roku"),
            prompt.index("Provide your answer in the following format:"),
        ]
        assert positions == sorted(positions)

    def test_schema_lines(self) -> None:
        prompt = FactCheckPromptBuilder().build("claim")

        assert prompt.endswith(
            "VERIFICATION: [TRUE/FALSE/PARTIAL/UNVERIFIABLE]\n"
            "CONFIDENCE: [0.0-1.0]\n"
            "EXPLANATION: [Brief explanation in the same language as the claim above]\n"
            "SOURCE: [Source name if available]"
        )

    def test_header_requests_claim_language(self) -> None:
        assert "SAME language as the claim" in PROMPT_HEADER
        assert "Keep VERIFICATION, CONFIDENCE, EXPLANATION and SOURCE keywords in English" in (
            PROMPT_HEADER
        )

    def test_context_without_extract_omits_summary(self) -> None:
        context = ReferenceContext(title="Jan III Sobieski")

        prompt = FactCheckPromptBuilder().build("claim", reference_context=context)

        assert "- Title: Jan III Sobieski" in prompt
        assert "- Summary:" not in prompt

    def test_empty_optional_inputs_are_omitted(self) -> None:
        prompt = FactCheckPromptBuilder().build("claim", caller_context="", quotes=[])

        assert "Character context" not in prompt
        assert "Relevant quotes" not in prompt

    def test_build_is_deterministic(self, copernicus_context: ReferenceContext) -> None:
        builder = FactCheckPromptBuilder()
        args = ("claim", "ctx", copernicus_context, ["q1", "q2"])

        assert builder.build(*args) == builder.build(*args)
