from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from datetime import datetime
from ..core.db import Base

class CompanyAssessment(Base):
    __tablename__ = "CompanyAssessments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # One report per trigger; a duplicate insert fails the whole write transaction
    trigger_id = Column(Integer, ForeignKey("CompanyAssessmentTrigger.id"), nullable=True, unique=True)
    investor_name = Column(String, nullable=True)
    investor_site = Column(String, nullable=True)
    company_name = Column(String, nullable=True)
    company_url = Column(String, nullable=True)
    context = Column(Text, nullable=True)
    report_json = Column(Text, nullable=False)   # raw assistant text, not parsed
    created_at = Column(DateTime, default=datetime.utcnow)
