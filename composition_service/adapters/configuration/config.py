# composition_service/adapters/configuration/config.py

"""
Application Settings Configuration
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Union
from logging import getLevelName

from dotenv import load_dotenv
from pydantic import SecretStr, Field, field_validator, ConfigDict
from pydantic_settings import BaseSettings

# .env na raiz do projeto
env_path = Path(__file__).parent.parent.parent.parent / ".env"
load_dotenv(env_path)

logger = logging.getLogger(__name__)

DEFAULT_JWT_SECRET = "your-default-secret-key-for-development-change-in-production"


class Settings(BaseSettings):
    """
    Application Settings for environment configuration, database, auth,
    session store, external calculator and logging.

    Built once at process start (see ``get_settings``) and handed to the
    components that need it.
    """
    model_config = ConfigDict(
        env_file=str(env_path),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # General Project Info
    PROJECT_NAME: str = Field(default="Composition Service", description="Name of the project")
    VERSION: str = Field(default="1.0.0", description="Application version")
    ENVIRONMENT: str = Field(default="development", description="Environment: development, production, testing")
    DEBUG: bool = Field(default=False, description="Enable debug mode (detailed error logs)")

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)")

    # Database
    DB_DRIVER: str = Field(default="asyncpg", description="Database driver (asyncpg)")
    POSTGRES_USER: str = Field(default="postgres")
    POSTGRES_PASSWORD: str = Field(default="postgres")
    POSTGRES_DB: str = Field(default="compositions")
    POSTGRES_HOST: str = Field(default="localhost")
    POSTGRES_PORT: int = Field(default=5432)
    DATABASE_URL: Optional[str] = Field(default=None, description="Database connection URL")

    # Auth Settings
    JWT_SECRET: SecretStr = Field(default=SecretStr(DEFAULT_JWT_SECRET), description="Shared HMAC secret")
    JWT_ALGORITHM: str = Field(default="HS256", description="JWT algorithm")
    JWT_ISSUER: str = Field(default="composition-service", description="Issuer claim of every token")
    JWT_ACCESS_EXPIRE_HOURS: float = Field(default=24, description="Access token lifetime (hours)")
    JWT_REFRESH_EXPIRE_HOURS: float = Field(default=168, description="Refresh token lifetime (hours)")

    # Session store (Redis)
    REDIS_ENABLED: bool = Field(default=True, description="Disable to run with stateless tokens only")
    REDIS_HOST: str = Field(default="localhost")
    REDIS_PORT: int = Field(default=6379)
    REDIS_PASSWORD: Optional[SecretStr] = Field(default=None)
    REDIS_DB: int = Field(default=0)
    REDIS_CONNECT_TIMEOUT_SECONDS: float = Field(default=5.0)

    # External calculator
    CALCULATOR_URL: str = Field(
        default="http://localhost:8000/api/calculate-belonging/",
        description="Endpoint notified when a composition is completed",
    )
    CALCULATOR_API_KEY: SecretStr = Field(
        default=SecretStr("calculator-shared-secret"),
        description="Static secret the calculator sends back on the callback",
    )
    CALCULATOR_TIMEOUT_SECONDS: float = Field(default=10.0)
    CALCULATOR_MAX_RETRIES: int = Field(default=0, ge=0, description="Extra attempts after the first one")
    CALCULATOR_RETRY_DELAY_SECONDS: float = Field(default=1.0, ge=0)

    # Domain
    AFFINITY_REFERENCE_TONE: float = Field(default=2.82, description="Reference tone used by the affinity score")

    # Security (CORS)
    CORS_ORIGINS: List[str] = Field(default=["http://localhost:3000", "http://127.0.0.1:3000"],
                                    description="Allowed CORS origins")

    def model_post_init(self, __context) -> None:
        """Assemble DATABASE_URL from its parts when it is not given directly."""
        if not self.DATABASE_URL:
            self.DATABASE_URL = (
                f"postgresql+{self.DB_DRIVER}://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
                f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
            )

    @property
    def jwt_secret_value(self) -> str:
        return self.JWT_SECRET.get_secret_value()

    @property
    def uses_default_jwt_secret(self) -> bool:
        return self.jwt_secret_value == DEFAULT_JWT_SECRET

    @field_validator("DEBUG", "REDIS_ENABLED", mode="before")
    def parse_boolean(cls, v: Union[str, bool]) -> bool:
        """Convert string boolean values to proper boolean."""
        if isinstance(v, bool):
            return v
        if isinstance(v, str):
            return v.lower() in ("true", "1", "yes", "y", "on")
        return bool(v)

    @field_validator("CORS_ORIGINS", mode="before")
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        """
        Assemble CORS origins if provided as comma-separated string.
        """
        if isinstance(v, str) and not v.startswith("["):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        if isinstance(v, list):
            return v
        raise ValueError(f"Invalid CORS_ORIGINS format: {v!r}")

    @field_validator("LOG_LEVEL", mode="before")
    def validate_log_level(cls, v: str) -> str:
        """
        Validate that the log level is a valid level name.
        """
        lvl = v.upper()
        if getLevelName(lvl) == "Level %s" % lvl:
            raise ValueError(f"Invalid LOG_LEVEL: {v}")
        return lvl

    @field_validator("JWT_ACCESS_EXPIRE_HOURS", "JWT_REFRESH_EXPIRE_HOURS", mode="after")
    def validate_positive_lifetime(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"Token lifetime must be positive, got: {v}")
        return v


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings, building them on first use."""
    return Settings()
