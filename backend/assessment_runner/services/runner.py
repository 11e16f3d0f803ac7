from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict, dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.celery_app import celery_app
from ..core.config import Settings, get_settings
from ..core.db import SessionLocal
from ..models.assessment_trigger import CompanyAssessmentTrigger, TriggerStatus
from .assistant import AssistantClient
from .crawler import CrawlClient
from .llm import limit_llm_concurrency
from .persistence import write_assessment
from .prompts import build_assessment_prompt
from .triggers import claim_next_trigger, release_trigger

logger = logging.getLogger(__name__)


@dataclass
class CycleResult:
    status: str  # "idle" | "completed" | "failed" | "error"
    trigger_id: Optional[int] = None
    assessment_id: Optional[int] = None
    requeued: Optional[bool] = None
    error: Optional[str] = None


def _run_async(factory: Callable[[], Awaitable[Any]]) -> Any:
    # Dedicated event loop; Celery workers are synchronous
    try:
        return asyncio.run(factory())
    except RuntimeError:
        loop = asyncio.new_event_loop()
        try:
            asyncio.set_event_loop(loop)
            return loop.run_until_complete(factory())
        finally:
            loop.close()


async def _crawl_sites(crawler: Any, trigger: CompanyAssessmentTrigger) -> Tuple[str, str]:
    investor_text, company_text = await asyncio.gather(
        crawler.crawl(trigger.investor_site),
        crawler.crawl(trigger.company_url),
    )
    return investor_text, company_text


def _process_trigger(
    db: Session,
    trigger: CompanyAssessmentTrigger,
    crawler: Any,
    assistant: Any,
    settings: Settings,
) -> int:
    log_extra = {"trigger_id": trigger.id}

    investor_text, company_text = _run_async(lambda: _crawl_sites(crawler, trigger))
    logger.info("Sites crawled", extra={**log_extra, "step": "crawl"})

    prompt = build_assessment_prompt(trigger, investor_text, company_text)

    with limit_llm_concurrency():
        report_text = assistant.run(prompt)
    logger.info("Assistant reply received", extra={**log_extra, "step": "assistant"})

    report = write_assessment(
        db,
        trigger,
        report_text,
        confidence_score=settings.AUDIT_CONFIDENCE_SCORE,
    )
    return report.id


def run_assessment_cycle(
    session_factory: Callable[[], Session],
    crawler: Any,
    assistant: Any,
    settings: Settings | None = None,
) -> CycleResult:
    """
    One poll: claim a trigger, crawl both sites, ask the assistant, persist.

    Collaborators are passed in so callers (the Celery task, tests) decide
    which database, crawler and assistant are used. Never raises.
    """
    settings = settings or get_settings()
    db = session_factory()
    try:
        try:
            trigger = claim_next_trigger(
                db, stale_after_seconds=settings.CLAIM_STALE_AFTER_SECONDS
            )
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception("Trigger query failed", extra={"step": "claim"})
            return CycleResult(status="error", error=str(e)[:500])

        if trigger is None:
            return CycleResult(status="idle")

        trigger_id, claimed_at = trigger.id, trigger.claimed_at
        logger.info(
            "Processing trigger",
            extra={"trigger_id": trigger_id, "step": "start"},
        )

        try:
            assessment_id = _process_trigger(db, trigger, crawler, assistant, settings)
        except Exception as e:
            db.rollback()
            logger.exception(
                "Assessment failed",
                extra={"trigger_id": trigger_id, "step": "failed"},
            )
            try:
                new_status = release_trigger(
                    db, trigger_id, claimed_at, e, max_attempts=settings.MAX_ATTEMPTS
                )
            except SQLAlchemyError:
                db.rollback()
                logger.exception(
                    "Failed to release trigger; it stays claimed until stale",
                    extra={"trigger_id": trigger_id, "step": "release"},
                )
                new_status = None
            return CycleResult(
                status="failed",
                trigger_id=trigger_id,
                requeued=new_status == TriggerStatus.QUEUED,
                error=str(e)[:500],
            )

        logger.info(
            "Assessment completed: %s",
            trigger.company_name,
            extra={"trigger_id": trigger_id, "step": "completed"},
        )
        return CycleResult(
            status="completed",
            trigger_id=trigger_id,
            assessment_id=assessment_id,
        )
    finally:
        db.close()


@celery_app.task(name="assessment_runner.services.runner.poll_assessment_triggers")
def poll_assessment_triggers() -> Dict[str, Any]:
    try:
        crawler = CrawlClient.from_settings()
        assistant = AssistantClient.from_settings()
    except Exception as e:
        logger.exception("Could not build cycle collaborators", extra={"step": "setup"})
        return asdict(CycleResult(status="error", error=str(e)[:500]))

    result = run_assessment_cycle(SessionLocal, crawler=crawler, assistant=assistant)
    return asdict(result)
