from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # core
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    # database & redis
    # Plain strings so sqlite:// and postgresql+psycopg2:// URLs are both accepted
    DATABASE_URL: str
    REDIS_URL: str

    # assistant
    OPENAI_API_KEY: str
    ASSISTANT_ID: str
    RUN_POLL_INTERVAL_SECONDS: float = 2.0
    RUN_TIMEOUT_SECONDS: float = 600.0
    # Cap on concurrent assistant runs inside one worker process. Only binds
    # under a threads/gevent pool; prefork children run one task each, so there
    # the pool's --concurrency is the real limit.
    LLM_MAX_CONCURRENCY: int = 4

    # crawl service
    CRAWL4AI_ENDPOINT: str
    CRAWL_MAX_PAGES: int = 20
    CRAWL_DEPTH: int = 2
    CRAWL_TIMEOUT_SECONDS: float = 120.0

    # trigger polling
    POLL_INTERVAL_SECONDS: float = 15.0
    # A "processing" claim older than this is considered abandoned by a dead worker
    CLAIM_STALE_AFTER_SECONDS: int = 1800
    MAX_ATTEMPTS: int = 3

    # audit
    AUDIT_CONFIDENCE_SCORE: int = 90

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache
def get_settings() -> Settings:
    return Settings()
