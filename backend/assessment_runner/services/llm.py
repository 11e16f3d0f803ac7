from __future__ import annotations

from functools import lru_cache
from contextlib import contextmanager
from threading import BoundedSemaphore

from openai import OpenAI

from ..core.config import get_settings

_llm_semaphore: BoundedSemaphore | None = None


def _get_semaphore() -> BoundedSemaphore:
    """
    Lazy-initialised global semaphore for limiting concurrent assistant runs.
    """
    global _llm_semaphore
    if _llm_semaphore is None:
        settings = get_settings()
        _llm_semaphore = BoundedSemaphore(settings.LLM_MAX_CONCURRENCY)
    return _llm_semaphore


@contextmanager
def limit_llm_concurrency():
    """
    Bound concurrent assistant runs within one worker process.

    The semaphore is per process, so it only limits anything when tasks share
    a process (`celery worker --pool threads` or gevent). Under the default
    prefork pool each child runs one task at a time and the effective cap is
    the worker's `--concurrency`.

    Usage:

        with limit_llm_concurrency():
            assistant.run(prompt)
    """
    sem = _get_semaphore()
    sem.acquire()
    try:
        yield
    finally:
        sem.release()


@lru_cache(maxsize=1)
def get_llm_client() -> OpenAI:
    """
    Process-wide OpenAI client. The Assistants API is OpenAI-only, so there is
    no OpenRouter routing here.
    """
    settings = get_settings()

    if settings.OPENAI_API_KEY:
        return OpenAI(api_key=settings.OPENAI_API_KEY.strip())

    raise RuntimeError("No LLM API key configured. Set OPENAI_API_KEY.")
