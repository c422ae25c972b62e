import os
from pathlib import Path

from loguru import logger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from retire_strong.catalog.loader import DEFAULT_CATALOG_PATH


def get_audit_database_url() -> str:
    """Get the audit database URL, using an absolute path for the SQLite fallback.

    SQLite is only meant for local development. Production deployments should
    point AUDIT_DATABASE_URL at PostgreSQL so the trail survives restarts.
    """
    db_url = os.getenv("AUDIT_DATABASE_URL", "")
    if db_url:
        return db_url

    db_path = Path(__file__).parent.parent.parent / "retire_strong_audit.db"
    db_url = f"sqlite:///{db_path.resolve()}"
    logger.warning(f"Using SQLite audit database (LOCAL DEV ONLY): {db_url}")
    return db_url


class Settings(BaseSettings):
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: str | None = Field(default=None, validation_alias="LOG_FILE")
    log_json: bool = Field(default=False, validation_alias="LOG_JSON", description="Write the log file as JSON lines")
    catalog_path: Path = Field(default=DEFAULT_CATALOG_PATH, validation_alias="CATALOG_PATH")
    openai_api_key: str = Field(default="", validation_alias="OPENAI_API_KEY")
    coach_model: str = Field(
        default="gpt-4o-mini",
        validation_alias="COACH_MODEL",
        description="Chat model used by the coaching orchestrator",
    )
    retrieval_backend: str = Field(
        default="none",
        validation_alias="RETRIEVAL_BACKEND",
        description="Reference-content backend: none, http or memory",
    )
    retrieval_url: str = Field(default="", validation_alias="RETRIEVAL_URL")
    retrieval_timeout_seconds: float = Field(default=10.0, validation_alias="RETRIEVAL_TIMEOUT_SECONDS")
    rag_corpus_path: Path | None = Field(
        default=None,
        validation_alias="RAG_CORPUS_PATH",
        description="YAML corpus loaded by the in-memory retrieval backend",
    )
    rag_top_k: int = Field(default=3, validation_alias="RAG_TOP_K")
    rag_min_similarity: float = Field(default=0.6, validation_alias="RAG_MIN_SIMILARITY")
    audit_database_url: str = Field(
        default_factory=get_audit_database_url,
        validation_alias="AUDIT_DATABASE_URL",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate that log level is one of the standard logging levels."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            logger.warning(f"Invalid LOG_LEVEL '{value}'. Valid levels are: {', '.join(sorted(valid_levels))}. Defaulting to INFO.")
            return "INFO"
        return upper_value

    @field_validator("retrieval_backend")
    @classmethod
    def validate_retrieval_backend(cls, value: str) -> str:
        """Validate the retrieval backend name, falling back to the no-op client."""
        normalized = value.strip().lower()
        if normalized not in {"none", "http", "memory"}:
            logger.warning(f"Unknown RETRIEVAL_BACKEND '{value}'. Coaching replies will run without grounding.")
            return "none"
        return normalized

    @field_validator("rag_top_k")
    @classmethod
    def validate_top_k(cls, value: int) -> int:
        """Keep the number of grounding passages within a prompt-friendly range."""
        if value < 1 or value > 10:
            logger.warning(f"RAG_TOP_K={value} is outside 1-10. Defaulting to 3.")
            return 3
        return value

    @field_validator("rag_min_similarity")
    @classmethod
    def validate_min_similarity(cls, value: float) -> float:
        """Similarity floor must be a cosine score in [0, 1]."""
        if not 0.0 <= value <= 1.0:
            logger.warning(f"RAG_MIN_SIMILARITY={value} is outside [0, 1]. Defaulting to 0.6.")
            return 0.6
        return value

    @field_validator("openai_api_key")
    @classmethod
    def validate_openai_key(cls, value: str) -> str:
        """Warn when the model key is missing.

        Plan building and safety validation work without it; only chat and plan
        explanation need a hosted model.
        """
        if not value:
            logger.warning(
                "⚠️ OPENAI_API_KEY is not set. Coach chat and plan explanations will fail. "
                "Set it in .env file or environment variables."
            )
        return value


settings = Settings()
