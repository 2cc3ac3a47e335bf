from __future__ import annotations

import os
from functools import lru_cache
from dotenv import load_dotenv, find_dotenv

_env_path = find_dotenv(".env") or ".env"
load_dotenv(_env_path, override=False)

DEFAULT_LLM_API_URL = "https://api.openai.com/v1/chat/completions"


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


class Settings:
    """Central configuration (env driven)."""

    def __init__(self) -> None:
        # Supabase
        raw_url = os.getenv("SUPABASE_URL", "")
        self.supabase_url: str = raw_url.rstrip("/")
        self.supabase_key: str = (
            os.getenv("SUPABASE_SERVICE_ROLE_KEY")
            or os.getenv("SUPABASE_KEY")
            or os.getenv("SUPABASE_ANON_KEY", "")
        )
        # Database (migrations only)
        self.database_url: str = os.getenv("DATABASE_URL", "")
        # Auth
        self.jwt_secret: str = os.getenv("JWT_SECRET", "")
        self.jwt_algorithm: str = os.getenv("JWT_ALGORITHM", "HS256")
        # Text generation providers; each integration is enabled by its credential
        self.llm_backend: str = os.getenv("LLM_BACKEND", "openai").strip().lower()
        self.challenge_api_key: str = os.getenv("OPENAI_API_KEY", "")
        self.review_api_key: str = os.getenv("REVIEW_API_KEY", "")
        self.llm_api_url: str = os.getenv("LLM_API_URL", DEFAULT_LLM_API_URL)
        self.challenge_model: str = os.getenv("CHALLENGE_MODEL", "gpt-4o-mini")
        self.review_model: str = os.getenv("REVIEW_MODEL", "gpt-4o-mini")
        self.llm_timeout_s: float = _env_float("LLM_TIMEOUT_S", 30.0)
        # Bedrock
        self.aws_region: str = os.getenv("AWS_REGION", "us-east-1")
        self.aws_access_key_id: str | None = os.getenv("AWS_ACCESS_KEY_ID") or None
        self.aws_secret_access_key: str | None = os.getenv("AWS_SECRET_ACCESS_KEY") or None
        self.bedrock_model_id: str = os.getenv(
            "BEDROCK_MODEL_ID", "anthropic.claude-3-haiku-20240307-v1:0"
        )
        # Review queue
        self.review_max_attempts: int = max(1, _env_int("REVIEW_MAX_ATTEMPTS", 3))
        self.review_retry_base_delay_s: float = _env_float("REVIEW_RETRY_BASE_DELAY_S", 2.0)
        self.review_queue_size: int = max(1, _env_int("REVIEW_QUEUE_SIZE", 64))
        # Client polling contract
        self.review_poll_initial_delay_s: int = _env_int("REVIEW_POLL_INITIAL_DELAY_S", 3)
        self.review_poll_interval_s: int = _env_int("REVIEW_POLL_INTERVAL_S", 8)
        self.review_poll_max_attempts: int = _env_int("REVIEW_POLL_MAX_ATTEMPTS", 8)
        # App meta
        self.app_name: str = "Mentor Backend"
        self.debug: bool = os.getenv("DEBUG", "False").lower() == "true"
        self.allow_origins: str = os.getenv(
            "ALLOW_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000"
        )

    @property
    def bedrock_enabled(self) -> bool:
        return self.llm_backend == "bedrock"

    def get_database_url(self) -> str:
        return self.database_url


@lru_cache()
def get_settings() -> Settings:
    return Settings()
