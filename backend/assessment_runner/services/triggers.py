from __future__ import annotations

from datetime import datetime, timedelta
import logging

from sqlalchemy import and_, case, func, or_
from sqlalchemy.orm import Session

from ..models.assessment_trigger import CompanyAssessmentTrigger, TriggerStatus

logger = logging.getLogger(__name__)

MAX_ERROR_LEN = 500


def _claimable(stale_before: datetime):
    return or_(
        CompanyAssessmentTrigger.status == TriggerStatus.QUEUED.value,
        and_(
            CompanyAssessmentTrigger.status == TriggerStatus.PROCESSING.value,
            CompanyAssessmentTrigger.claimed_at < stale_before,
        ),
    )


def claim_next_trigger(
    db: Session,
    stale_after_seconds: int,
) -> CompanyAssessmentTrigger | None:
    """
    Claim at most one trigger for this cycle.

    The `queued -> processing` transition is a guarded UPDATE, so when two
    overlapping cycles pick the same candidate only one of them updates a row;
    the loser gets None and does no external work.

    `processing` rows whose claim is older than `stale_after_seconds` are
    claimable again (their worker died mid-cycle).
    """
    now = datetime.utcnow()
    claimable = _claimable(now - timedelta(seconds=stale_after_seconds))

    candidate_id = (
        db.query(CompanyAssessmentTrigger.id)
        .filter(claimable)
        .order_by(CompanyAssessmentTrigger.id)
        .limit(1)
        .scalar()
    )
    if candidate_id is None:
        return None

    updated = (
        db.query(CompanyAssessmentTrigger)
        .filter(CompanyAssessmentTrigger.id == candidate_id, claimable)
        .update(
            {
                CompanyAssessmentTrigger.status: TriggerStatus.PROCESSING.value,
                CompanyAssessmentTrigger.claimed_at: now,
            },
            synchronize_session=False,
        )
    )
    if updated != 1:
        db.rollback()
        logger.info(
            "Trigger claimed by another worker",
            extra={"trigger_id": candidate_id, "step": "claim"},
        )
        return None

    db.commit()

    # Hand back a detached, fully loaded row and end the read transaction, so
    # no connection sits idle in transaction through the crawl and assistant wait.
    trigger = db.get(CompanyAssessmentTrigger, candidate_id)
    db.expunge(trigger)
    db.commit()
    return trigger


def owns_claim(trigger_id: int, claimed_at: datetime):
    """Row filter matching a trigger only while this worker's claim is current."""
    return and_(
        CompanyAssessmentTrigger.id == trigger_id,
        CompanyAssessmentTrigger.status == TriggerStatus.PROCESSING.value,
        CompanyAssessmentTrigger.claimed_at == claimed_at,
    )


def release_trigger(
    db: Session,
    trigger_id: int,
    claimed_at: datetime,
    error: BaseException | str,
    max_attempts: int,
) -> TriggerStatus | None:
    """
    Hand a claimed trigger back after a failed cycle.

    Goes back to `queued` for the next poll, or to `failed` once
    `max_attempts` cycles have failed on it. The UPDATE only matches while
    our claim is still current; if the claim went stale and another worker
    took (or finished) the trigger, nothing changes and None is returned.
    """
    next_attempts = func.coalesce(CompanyAssessmentTrigger.attempts, 0) + 1
    updated = (
        db.query(CompanyAssessmentTrigger)
        .filter(owns_claim(trigger_id, claimed_at))
        .update(
            {
                CompanyAssessmentTrigger.attempts: next_attempts,
                CompanyAssessmentTrigger.last_error: str(error)[:MAX_ERROR_LEN],
                CompanyAssessmentTrigger.claimed_at: None,
                CompanyAssessmentTrigger.status: case(
                    (next_attempts >= max_attempts, TriggerStatus.FAILED.value),
                    else_=TriggerStatus.QUEUED.value,
                ),
            },
            synchronize_session=False,
        )
    )
    if updated != 1:
        db.rollback()
        logger.warning(
            "Trigger no longer owned by this worker; leaving it untouched",
            extra={"trigger_id": trigger_id, "step": "release"},
        )
        return None

    db.commit()
    status = (
        db.query(CompanyAssessmentTrigger.status)
        .filter(CompanyAssessmentTrigger.id == trigger_id)
        .scalar()
    )
    db.commit()
    return TriggerStatus(status)
