"""
Shared fakes and sample data for assessment runner tests.

Contains a sample trigger, crawl payloads in both shapes the crawl service
has shipped, and in-memory stand-ins for the crawler and the OpenAI client.
"""
from types import SimpleNamespace
from typing import Any, Dict, List, Optional


# ---------------------------------------------------------------------------
# Sample trigger
# ---------------------------------------------------------------------------

ACME_TRIGGER: Dict[str, Any] = {
    "investor_name": "Acme Capital",
    "investor_site": "https://acme.vc",
    "company_name": "Widget Co",
    "company_url": "https://widget.co",
    "context": "Series A diligence",
    "supplemental_links": ["https://acme.vc/portfolio"],
}


# ---------------------------------------------------------------------------
# Crawl payloads
# ---------------------------------------------------------------------------

PAGES = [
    {"title": "Home", "url": "https://acme.vc", "text": "We back seed-stage B2B founders."},
    {"title": "Team", "url": "https://acme.vc/team", "text": "Three partners."},
]

TOP_LEVEL_RESPONSE = {"pages": PAGES}
NESTED_RESPONSE = [{"pages": PAGES, "stats": {"crawled": 2}}]

EXPECTED_FLATTENED = (
    "## Home (https://acme.vc)\nWe back seed-stage B2B founders."
    "\n\n"
    "## Team (https://acme.vc/team)\nThree partners."
)

MALFORMED_RESPONSES = [
    {},
    [],
    {"results": PAGES},
    [{"results": PAGES}],
    {"pages": "not-a-list"},
    {"pages": ["just a string"]},
    "plain text body",
]


# ---------------------------------------------------------------------------
# Crawler fake
# ---------------------------------------------------------------------------

class FakeCrawler:
    """Records crawled URLs and returns canned text per URL."""

    def __init__(self, texts: Optional[Dict[str, str]] = None):
        self.texts = texts or {}
        self.calls: List[str] = []

    async def crawl(self, url: str) -> str:
        self.calls.append(url)
        return self.texts.get(url, f"## Home ({url})\ncontent of {url}")


# ---------------------------------------------------------------------------
# Assistant fakes
# ---------------------------------------------------------------------------

class FakeAssistant:
    """Stands in for AssistantClient at the cycle level."""

    def __init__(self, reply: str = "Assessment: strong fit.", error: Optional[Exception] = None):
        self.reply = reply
        self.error = error
        self.prompts: List[str] = []

    def run(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


def make_message(role: str, text: str, msg_id: str = "msg") -> SimpleNamespace:
    return SimpleNamespace(
        id=msg_id,
        role=role,
        content=[SimpleNamespace(type="text", text=SimpleNamespace(value=text))],
    )


class FakeRuns:
    def __init__(self, statuses: List[str], last_error: Any = None):
        self._statuses = list(statuses)
        self.last_error = last_error
        self.created: List[Dict[str, Any]] = []
        self.retrieve_calls = 0
        self.cancelled: List[str] = []

    def create(self, thread_id: str, assistant_id: str) -> SimpleNamespace:
        self.created.append({"thread_id": thread_id, "assistant_id": assistant_id})
        return SimpleNamespace(id="run_1", status="queued", last_error=None)

    def retrieve(self, run_id: str, thread_id: str) -> SimpleNamespace:
        self.retrieve_calls += 1
        # Last status repeats forever
        status = self._statuses.pop(0) if len(self._statuses) > 1 else self._statuses[0]
        return SimpleNamespace(id=run_id, status=status, last_error=self.last_error)

    def cancel(self, run_id: str, thread_id: str) -> SimpleNamespace:
        self.cancelled.append(run_id)
        return SimpleNamespace(id=run_id, status="cancelling")


class FakeMessages:
    def __init__(self, reply_messages: Optional[List[SimpleNamespace]] = None):
        self.reply_messages = reply_messages or []
        self.posted: List[Dict[str, Any]] = []

    def create(self, thread_id: str, role: str, content: str) -> SimpleNamespace:
        self.posted.append({"thread_id": thread_id, "role": role, "content": content})
        return make_message(role, content, msg_id=f"msg_user_{len(self.posted)}")

    def list(self, thread_id: str, order: str = "desc") -> SimpleNamespace:
        user_messages = [make_message(p["role"], p["content"]) for p in reversed(self.posted)]
        data = list(self.reply_messages) + user_messages
        return SimpleNamespace(data=data)


class FakeThreads:
    def __init__(self, runs: FakeRuns, messages: FakeMessages):
        self.runs = runs
        self.messages = messages
        self.created = 0

    def create(self) -> SimpleNamespace:
        self.created += 1
        return SimpleNamespace(id="thread_1")


def make_openai_client(
    statuses: List[str],
    reply_messages: Optional[List[SimpleNamespace]] = None,
    last_error: Any = None,
) -> SimpleNamespace:
    """Build a fake exposing `client.beta.threads.{create,messages,runs}`."""
    threads = FakeThreads(FakeRuns(statuses, last_error=last_error), FakeMessages(reply_messages))
    return SimpleNamespace(beta=SimpleNamespace(threads=threads))
