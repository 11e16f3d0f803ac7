# backend/assessment_runner/services/assistant.py
from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional

from tenacity import Retrying, retry_if_result, stop_after_delay, wait_fixed

from ..core.config import get_settings
from .llm import get_llm_client

logger = logging.getLogger(__name__)

# Run states that may still move on their own
PENDING_RUN_STATUSES = frozenset({"queued", "in_progress", "cancelling"})
COMPLETED = "completed"


class AssistantRunError(Exception):
    """Assistant run ended in a non-completed state, timed out, or produced no reply."""

    def __init__(
        self,
        message: str,
        status: Optional[str] = None,
        thread_id: Optional[str] = None,
        run_id: Optional[str] = None,
    ):
        super().__init__(message)
        self.status = status
        self.thread_id = thread_id
        self.run_id = run_id


def _first_text_block(message: Any) -> Optional[str]:
    for block in getattr(message, "content", None) or []:
        if getattr(block, "type", None) == "text":
            return block.text.value
    return None


class AssistantClient:
    """
    Drives one prompt through the OpenAI Assistants API:

        thread -> user message -> run -> poll -> newest assistant message

    Polling is done with tenacity on a fixed interval and is bounded by
    `timeout`; a run that never settles is cancelled and reported as an error.
    """

    def __init__(
        self,
        client: Any,
        assistant_id: str,
        poll_interval: float = 2.0,
        timeout: float = 600.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._client = client
        self.assistant_id = assistant_id
        self.poll_interval = poll_interval
        self.timeout = timeout
        self._sleep = sleep

    @classmethod
    def from_settings(cls) -> "AssistantClient":
        settings = get_settings()
        return cls(
            client=get_llm_client(),
            assistant_id=settings.ASSISTANT_ID,
            poll_interval=settings.RUN_POLL_INTERVAL_SECONDS,
            timeout=settings.RUN_TIMEOUT_SECONDS,
        )

    def _wait_for_run(self, thread_id: str, run_id: str) -> Any:
        retrying = Retrying(
            retry=retry_if_result(lambda r: r.status in PENDING_RUN_STATUSES),
            wait=wait_fixed(self.poll_interval),
            stop=stop_after_delay(self.timeout),
            sleep=self._sleep,
            # Out of time: hand back the last (still pending) run instead of RetryError
            retry_error_callback=lambda state: state.outcome.result(),
        )
        return retrying(
            self._client.beta.threads.runs.retrieve,
            run_id=run_id,
            thread_id=thread_id,
        )

    def _cancel_quietly(self, thread_id: str, run_id: str) -> None:
        try:
            self._client.beta.threads.runs.cancel(run_id=run_id, thread_id=thread_id)
        except Exception:
            logger.warning(
                "Failed to cancel timed-out assistant run",
                exc_info=True,
                extra={"thread_id": thread_id, "run_id": run_id, "step": "assistant"},
            )

    def _latest_reply(self, thread_id: str) -> Optional[str]:
        messages = self._client.beta.threads.messages.list(
            thread_id=thread_id,
            order="desc",
        )
        for message in messages.data:
            if getattr(message, "role", None) != "assistant":
                continue
            text = _first_text_block(message)
            if text is not None:
                return text
        return None

    def run(self, prompt: str) -> str:
        threads = self._client.beta.threads

        thread = threads.create()
        threads.messages.create(thread.id, role="user", content=prompt)
        run = threads.runs.create(thread_id=thread.id, assistant_id=self.assistant_id)

        log_extra = {"thread_id": thread.id, "run_id": run.id, "step": "assistant"}
        logger.info("Assistant run started", extra=log_extra)

        run = self._wait_for_run(thread.id, run.id)

        if run.status in PENDING_RUN_STATUSES:
            self._cancel_quietly(thread.id, run.id)
            raise AssistantRunError(
                f"Assistant run did not finish within {self.timeout:g}s (last status: {run.status})",
                status=run.status,
                thread_id=thread.id,
                run_id=run.id,
            )

        if run.status != COMPLETED:
            last_error = getattr(run, "last_error", None)
            detail = getattr(last_error, "message", None) if last_error else None
            raise AssistantRunError(
                f"Assistant run ended with status '{run.status}'"
                + (f": {detail}" if detail else ""),
                status=run.status,
                thread_id=thread.id,
                run_id=run.id,
            )

        reply = self._latest_reply(thread.id)
        if reply is None:
            raise AssistantRunError(
                "Assistant run completed without a text reply",
                status=run.status,
                thread_id=thread.id,
                run_id=run.id,
            )

        logger.info("Assistant run completed", extra=log_extra)
        return reply
