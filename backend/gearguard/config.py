"""Application configuration."""
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings."""

    # App
    APP_NAME: str = "GearGuard_Maintenance"
    ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Database
    DATABASE_URL: str = "sqlite:///./gearguard.db"
    DATABASE_POOL_SIZE: int = 20
    DATABASE_MAX_OVERFLOW: int = 10

    # Redis
    REDIS_URL: str = "redis://localhost:6379/0"

    # Celery
    CELERY_BROKER_URL: str = "redis://localhost:6379/1"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/2"

    # Equipment locks: "local" serializes transitions inside one process,
    # "redis" across every API worker sharing REDIS_URL.
    EQUIPMENT_LOCK_BACKEND: str = "local"
    # Lease after which a crashed holder's redis lock expires.
    EQUIPMENT_LOCK_TIMEOUT_SECONDS: float = 30.0
    # How long a transition waits for a busy equipment before giving up.
    EQUIPMENT_LOCK_WAIT_SECONDS: float = 10.0

    # Scrap-state reconciliation sweep (celery beat)
    RECONCILE_INTERVAL_SECONDS: float = 15 * 60

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def cors_origins(self) -> list[str]:
        """Get CORS origins as list."""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
