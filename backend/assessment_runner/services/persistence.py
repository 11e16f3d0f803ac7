from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import Session

from ..models.assessment_trigger import CompanyAssessmentTrigger, TriggerStatus
from ..models.audit_log import AuditLog
from ..models.company_assessment import CompanyAssessment
from .triggers import owns_claim

AUDIT_ACTION_COMPLETE = "Assessment Complete"
AUDIT_DETAILS_COMPLETE = "Assessment stored successfully"


class ClaimLostError(RuntimeError):
    """The trigger stopped being ours (stale claim taken over) before we finished."""

    def __init__(self, trigger_id: int):
        super().__init__(f"Trigger {trigger_id} is no longer claimed by this worker")
        self.trigger_id = trigger_id


def write_assessment(
    db: Session,
    trigger: CompanyAssessmentTrigger,
    report_text: str,
    confidence_score: int,
) -> CompanyAssessment:
    """
    Store the report, its audit entry and the trigger's completion in one
    transaction.

    Rows are flushed in that order so the statements hit the database as
    report -> audit -> status. The status UPDATE only matches while our
    claim (`trigger.claimed_at`) is current; otherwise ClaimLostError is
    raised before anything is committed. On any error the caller rolls back
    and no report is left behind.
    """
    report = CompanyAssessment(
        trigger_id=trigger.id,
        investor_name=trigger.investor_name,
        investor_site=trigger.investor_site,
        company_name=trigger.company_name,
        company_url=trigger.company_url,
        context=trigger.context,
        report_json=report_text,
    )
    db.add(report)
    db.flush()

    db.add(
        AuditLog(
            action=AUDIT_ACTION_COMPLETE,
            source_url=trigger.company_url,
            confidence_score=confidence_score,
            details=AUDIT_DETAILS_COMPLETE,
        )
    )
    db.flush()

    updated = (
        db.query(CompanyAssessmentTrigger)
        .filter(owns_claim(trigger.id, trigger.claimed_at))
        .update(
            {
                CompanyAssessmentTrigger.status: TriggerStatus.COMPLETE.value,
                CompanyAssessmentTrigger.completed_at: datetime.utcnow(),
                CompanyAssessmentTrigger.claimed_at: None,
                CompanyAssessmentTrigger.last_error: None,
            },
            synchronize_session=False,
        )
    )
    if updated != 1:
        raise ClaimLostError(trigger.id)

    db.commit()
    return report
