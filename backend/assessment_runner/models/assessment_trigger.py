from sqlalchemy import Column, Integer, String, Text, JSON, DateTime
from datetime import datetime
import enum
from ..core.db import Base

class TriggerStatus(str, enum.Enum):
    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETE = "complete"
    FAILED = "failed"

class CompanyAssessmentTrigger(Base):
    __tablename__ = "CompanyAssessmentTrigger"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # Stored as the lowercase value; external producers insert "queued" directly
    status = Column(String, nullable=False, default=TriggerStatus.QUEUED.value, index=True)
    investor_name = Column(String, nullable=True)
    investor_site = Column(String, nullable=True)
    company_name = Column(String, nullable=True)
    company_url = Column(String, nullable=True)
    context = Column(Text, nullable=True)
    supplemental_links = Column(JSON, nullable=True)

    attempts = Column(Integer, nullable=False, default=0)
    claimed_at = Column(DateTime, nullable=True)
    last_error = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    completed_at = Column(DateTime, nullable=True)
