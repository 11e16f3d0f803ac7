from sqlalchemy import Column, Integer, String, Text, DateTime
from datetime import datetime
from ..core.db import Base

class AuditLog(Base):
    __tablename__ = "AuditLogs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    action = Column(String, nullable=False)
    source_url = Column(String, nullable=True)
    confidence_score = Column(Integer, nullable=True)
    details = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
