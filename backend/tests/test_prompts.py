"""
Tests for prompts.py
"""
from types import SimpleNamespace

from assessment_runner.services.prompts import build_assessment_prompt, serialize_links

from tests.fixtures.assessment_fixtures import ACME_TRIGGER


def _trigger(**overrides):
    return SimpleNamespace(**{**ACME_TRIGGER, **overrides})


INVESTOR_TEXT = "## Home (https://acme.vc)\nWe back seed-stage B2B founders."
COMPANY_TEXT = "## Home (https://widget.co)\nWidgets for everyone."


class TestBuildAssessmentPrompt:

    def test_contains_trigger_fields_verbatim(self):
        prompt = build_assessment_prompt(_trigger(), INVESTOR_TEXT, COMPANY_TEXT)

        assert "- PE/VC Firm Name: Acme Capital" in prompt
        assert "- Website: https://acme.vc" in prompt
        assert "- Website: https://widget.co" in prompt
        assert "- Company Name: Widget Co" in prompt
        assert "- Assessment Context: Series A diligence" in prompt
        assert '- Supplemental Links: ["https://acme.vc/portfolio"]' in prompt

    def test_crawled_text_under_its_heading(self):
        prompt = build_assessment_prompt(_trigger(), INVESTOR_TEXT, COMPANY_TEXT)

        assert f"## Investor Pages\n{INVESTOR_TEXT}\n" in prompt
        assert f"## Company Pages\n{COMPANY_TEXT}\n" in prompt
        assert "## Home (https://acme.vc)" in prompt
        assert "## Home (https://widget.co)" in prompt

    def test_section_order(self):
        prompt = build_assessment_prompt(_trigger(), INVESTOR_TEXT, COMPANY_TEXT)

        positions = [
            prompt.index("Investor Profile Input:"),
            prompt.index("Target Company Input:"),
            prompt.index("Extracted Content:"),
            prompt.index("## Investor Pages"),
            prompt.index("## Company Pages"),
        ]
        assert positions == sorted(positions)

    def test_long_crawl_text_is_not_truncated(self):
        big = "x" * 200_000
        prompt = build_assessment_prompt(_trigger(), big, COMPANY_TEXT)
        assert big in prompt

    def test_braces_in_content_are_kept(self):
        prompt = build_assessment_prompt(
            _trigger(context="Check {fund} terms"), "{not a field}", COMPANY_TEXT
        )
        assert "Check {fund} terms" in prompt
        assert "{not a field}" in prompt


class TestSerializeLinks:

    def test_compact_json(self):
        assert serialize_links(["a", "b"]) == '["a","b"]'
        assert serialize_links({"deck": "https://x.io/deck.pdf"}) == '{"deck":"https://x.io/deck.pdf"}'

    def test_missing_links_serialize_as_null(self):
        assert serialize_links(None) == "null"
