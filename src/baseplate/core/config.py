import logging
import os
from pathlib import Path
from typing import Literal, Union

from dotenv import load_dotenv
from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

log_format = logging.Formatter("%(asctime)s : %(levelname)s - %(message)s")

# root logger
root_logger = logging.getLogger()
root_logger.setLevel(logging.INFO)

# standard stream handler
stream_handler = logging.StreamHandler()
stream_handler.setFormatter(log_format)
root_logger.addHandler(stream_handler)

logger = logging.getLogger(__name__)

# Load .env file from docker/server directory
env_path = Path("./docker/server/.env")
if env_path.exists():
    load_dotenv(dotenv_path=env_path)
    logger.info(f"Loaded environment from {env_path}")
else:
    logger.info(f"No .env file at {env_path}, using process environment")


class Settings(BaseSettings):
    API_V1_STR: str = "/api/v1"

    # Supabase Configuration
    SUPABASE_URL: str = Field(
        default_factory=lambda: os.getenv("SUPABASE_URL", ""),
        description="Supabase project URL"
    )
    SUPABASE_KEY: str = Field(
        default_factory=lambda: os.getenv("SUPABASE_KEY", ""),
        description="Supabase anon/public key"
    )
    SUPABASE_SERVICE_KEY: str = Field(
        default_factory=lambda: os.getenv("SUPABASE_SERVICE_KEY", ""),
        description="Supabase service role key, used for app_metadata updates"
    )
    SUPABASE_JWT_SECRET: str = Field(
        default_factory=lambda: os.getenv("SUPABASE_JWT_SECRET", ""),
        description="Secret used to verify Supabase access tokens"
    )
    SUPABASE_JWT_AUDIENCE: str = "authenticated"
    SUPABASE_JWT_ALGORITHMS: list[str] = ["HS256"]

    # Database Configuration
    DATABASE_URL: str = Field(
        default_factory=lambda: os.getenv("DATABASE_URL", ""),
        description="PostgreSQL database URL"
    )

    # Authorization
    # "deny" turns store failures during permission checks into 403,
    # "unavailable" into 503.
    STORE_ERROR_POLICY: Literal["deny", "unavailable"] = "deny"
    SYSTEM_ROLE_MAX_ID: int = 3
    CUSTOM_ROLE_ID_START: int = 100
    CUSTOMER_CONTEXT_HEADER: str = "X-Customer-Id"

    # Server Configuration
    SERVER_HOST: AnyHttpUrl = "https://localhost"
    SERVER_PORT: int = 8001
    BACKEND_CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, list[str]]) -> list[str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",")]
        elif isinstance(v, list):
            return v
        elif isinstance(v, str):
            return [v]
        raise ValueError(v)

    PROJECT_NAME: str = "baseplate-api"

    model_config = SettingsConfigDict(extra="ignore")


settings = Settings()

# Validate required settings
if not settings.SUPABASE_JWT_SECRET:
    raise ValueError("SUPABASE_JWT_SECRET environment variable is required")
if not settings.DATABASE_URL:
    raise ValueError("DATABASE_URL environment variable is required")
