import os

# Settings are read at import time by core.db / core.celery_app
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ.setdefault("OPENAI_API_KEY", "sk-test")
os.environ.setdefault("ASSISTANT_ID", "asst_test")
os.environ.setdefault("CRAWL4AI_ENDPOINT", "http://crawler.test/crawl")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from assessment_runner.core.db import Base
from assessment_runner.models.assessment_trigger import CompanyAssessmentTrigger
from assessment_runner.models.audit_log import AuditLog  # noqa: F401
from assessment_runner.models.company_assessment import CompanyAssessment  # noqa: F401

from tests.fixtures.assessment_fixtures import ACME_TRIGGER


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def make_trigger(session_factory):
    """Insert a trigger row (Acme/Widget defaults) and return its id."""

    def _make(**overrides):
        fields = {**ACME_TRIGGER, "status": "queued", **overrides}
        db = session_factory()
        try:
            trigger = CompanyAssessmentTrigger(**fields)
            db.add(trigger)
            db.commit()
            return trigger.id
        finally:
            db.close()

    return _make
