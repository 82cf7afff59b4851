"""
Core Configuration Module
환경변수 및 워커 설정 중앙 관리
"""

from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """워커 서비스 설정 (Pydantic Settings v2)"""

    # ==================== Application ====================
    app_title: str = "Muse Generative AI Worker"
    app_version: str = "1.0.0"
    app_env: str = Field(default="dev", env="APP_ENV")
    debug: bool = Field(default=False, env="DEBUG")
    log_level: str = Field(default="INFO", env="LOG_LEVEL")
    log_json_format: bool = Field(default=False, env="LOG_JSON_FORMAT")

    # ==================== Server ====================
    backend_port: int = Field(default=8000, env="BACKEND_PORT")
    backend_url: Optional[str] = Field(default=None, env="BACKEND_URL")

    @property
    def public_base_url(self) -> str:
        """에셋 URL 생성에 사용하는 백엔드 기본 URL"""
        return (self.backend_url or f"http://localhost:{self.backend_port}").rstrip("/")

    # ==================== Database (PostgreSQL) ====================
    postgres_user: str = Field(default="muse_user", env="POSTGRES_USER")
    postgres_password: str = Field(default="muse_password", env="POSTGRES_PASSWORD")
    postgres_db: str = Field(default="muse_db", env="POSTGRES_DB")
    postgres_host: str = Field(default="postgres", env="POSTGRES_HOST")
    postgres_port: int = Field(default=5432, env="POSTGRES_PORT")
    database_url_override: Optional[str] = Field(default=None, env="DATABASE_URL_OVERRIDE")

    @property
    def database_url(self) -> str:
        """SQLAlchemy Database URL (Async)"""
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    # ==================== Worker ====================
    worker_enabled: bool = Field(default=True, env="WORKER_ENABLED")
    worker_poll_interval: float = Field(
        default=5.0,
        env="WORKER_POLL_INTERVAL",
        description="Seconds between queue polls",
    )
    worker_concurrency: int = Field(
        default=3,
        env="WORKER_CONCURRENCY",
        description="Maximum concurrent tasks per worker instance",
    )
    worker_shutdown_timeout: float = Field(
        default=30.0,
        env="WORKER_SHUTDOWN_TIMEOUT",
        description="Seconds to wait for in-flight tasks on shutdown",
    )
    replicate_rate_limit: float = Field(
        default=50,
        env="REPLICATE_RATE_LIMIT",
        description="Replicate requests per second (shared by all processors)",
    )

    # ==================== Task Queue ====================
    task_default_max_retries: int = Field(default=3, env="TASK_DEFAULT_MAX_RETRIES")
    task_stale_claim_minutes: int = Field(
        default=5,
        env="TASK_STALE_CLAIM_MINUTES",
        description="Claims older than this are released by the maintenance loop",
    )
    task_archive_days: int = Field(
        default=7,
        env="TASK_ARCHIVE_DAYS",
        description="Completed/failed tasks older than this are deleted",
    )
    task_maintenance_interval: float = Field(
        default=60.0, env="TASK_MAINTENANCE_INTERVAL"
    )

    # ==================== AI Providers ====================
    # Replicate (image generation / upscale / background removal)
    replicate_api_token: Optional[str] = Field(default=None, env="REPLICATE_API_TOKEN")
    replicate_api_url: str = Field(
        default="https://api.replicate.com/v1", env="REPLICATE_API_URL"
    )
    replicate_wait_seconds: int = Field(default=60, env="REPLICATE_WAIT_SECONDS")
    replicate_poll_interval: float = Field(default=1.0, env="REPLICATE_POLL_INTERVAL")

    # Title generation
    ai_title_provider: str = Field(default="openai", env="AI_TITLE_PROVIDER")
    openai_api_key: Optional[str] = Field(default=None, env="OPENAI_API_KEY")
    openai_api_url: str = Field(
        default="https://api.openai.com/v1", env="OPENAI_API_URL"
    )
    title_model: str = Field(default="gpt-4o-mini", env="TITLE_MODEL")

    # ==================== Storage ====================
    storage_provider: str = Field(default="local", env="STORAGE_PROVIDER")
    storage_base_path: str = Field(default="data/storage", env="STORAGE_BASE_PATH")
    max_asset_size: int = Field(default=256 * 1024 * 1024, env="MAX_ASSET_SIZE")

    # Cloudflare R2 (if STORAGE_PROVIDER=r2)
    r2_account_id: Optional[str] = Field(default=None, env="R2_ACCOUNT_ID")
    r2_access_key_id: Optional[str] = Field(default=None, env="R2_ACCESS_KEY_ID")
    r2_secret_access_key: Optional[str] = Field(default=None, env="R2_SECRET_ACCESS_KEY")
    r2_bucket_name: Optional[str] = Field(default=None, env="R2_BUCKET_NAME")

    # ==================== HTTP Client ====================
    http_timeout: float = Field(default=60.0, env="HTTP_TIMEOUT")
    http_read_timeout: float = Field(default=300.0, env="HTTP_READ_TIMEOUT")

    # ==================== Pydantic Config ====================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==================== Validators ====================
    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        """APP_ENV 값 검증"""
        allowed_envs = ["dev", "prod", "testing"]
        if v not in allowed_envs:
            raise ValueError(f"APP_ENV must be one of {allowed_envs}")
        return v

    @field_validator("replicate_rate_limit")
    @classmethod
    def validate_rate_limit(cls, v: float) -> float:
        """요청 속도는 양수여야 함"""
        if v <= 0:
            raise ValueError("REPLICATE_RATE_LIMIT must be positive")
        return v

    @field_validator("worker_concurrency")
    @classmethod
    def validate_concurrency(cls, v: int) -> int:
        if v < 1:
            raise ValueError("WORKER_CONCURRENCY must be at least 1")
        return v


# 싱글톤 인스턴스
settings = Settings()
