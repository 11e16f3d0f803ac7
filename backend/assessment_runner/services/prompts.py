from __future__ import annotations

import json
from typing import Any

ASSESSMENT_PROMPT_TEMPLATE = """
Investor Profile Input:
- PE/VC Firm Name: {investor_name}
- Website: {investor_site}
- Supplemental Links: {supplemental_links}

Target Company Input:
- Company Name: {company_name}
- Website: {company_url}
- Assessment Context: {context}

Extracted Content:
## Investor Pages
{investor_text}

## Company Pages
{company_text}
"""


def serialize_links(links: Any) -> str:
    """Compact JSON, matching what the trigger producer stores."""
    return json.dumps(links, separators=(",", ":"), ensure_ascii=False)


def build_assessment_prompt(trigger: Any, investor_text: str, company_text: str) -> str:
    """
    Fill the assessment template from a trigger row and both crawl blobs.

    Crawled text goes in untouched; the assistant's context window is the
    only limit.
    """
    return ASSESSMENT_PROMPT_TEMPLATE.format(
        investor_name=trigger.investor_name,
        investor_site=trigger.investor_site,
        supplemental_links=serialize_links(trigger.supplemental_links),
        company_name=trigger.company_name,
        company_url=trigger.company_url,
        context=trigger.context,
        investor_text=investor_text,
        company_text=company_text,
    )
