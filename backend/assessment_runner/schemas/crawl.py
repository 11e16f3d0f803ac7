# backend/assessment_runner/schemas/crawl.py
from typing import List

from pydantic import BaseModel, ConfigDict, field_validator


class CrawledPage(BaseModel):
    """One page as returned by the crawl service. Never persisted."""

    model_config = ConfigDict(extra="ignore")

    title: str | None = None
    url: str | None = None
    text: str | None = None

    @field_validator("title", "url", "text", mode="before")
    @classmethod
    def _coerce_scalar(cls, v):
        # The crawler occasionally emits numbers (e.g. numeric titles)
        if v is None or isinstance(v, str):
            return v
        if isinstance(v, (int, float)):
            return str(v)
        return v

    def as_markdown(self) -> str:
        return f"## {self.title or ''} ({self.url or ''})\n{self.text or ''}"


class CrawlResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    pages: List[CrawledPage]
