from pydantic_settings import BaseSettings
from typing import Optional
import os


class Settings(BaseSettings):
    # Environment configuration
    environment: str = os.getenv("ENVIRONMENT", "development")
    app_version: str = os.getenv("APP_VERSION", "1.0.0")

    # Supabase configuration
    supabase_url: str = os.getenv("SUPABASE_URL", "")
    supabase_key: str = os.getenv("SUPABASE_KEY", "")

    # Database configuration (for SQLAlchemy - connects to Supabase PostgreSQL)
    database_url: Optional[str] = os.getenv("DATABASE_URL", "")
    database_echo: bool = os.getenv("DATABASE_ECHO", "false").lower() == "true"
    auto_create_tables: bool = os.getenv("AUTO_CREATE_TABLES", "false").lower() == "true"

    # Frontend URL (for CORS)
    frontend_url: str = os.getenv("FRONTEND_URL", "http://localhost:3000")

    # JWT configuration (Supabase signs access tokens with this secret)
    jwt_secret_key: str = os.getenv("SUPABASE_JWT_SECRET", "")
    jwt_algorithm: str = "HS256"
    jwt_audience: str = os.getenv("SUPABASE_JWT_AUDIENCE", "authenticated")

    # Upstream completion API
    openai_api_key: str = os.getenv("OPENAI_API_KEY", "")
    openai_base_url: Optional[str] = os.getenv("OPENAI_BASE_URL") or None
    openai_timeout: float = float(os.getenv("OPENAI_TIMEOUT", "60"))

    # Chat defaults
    default_provider: str = "openai"
    default_model: str = os.getenv("DEFAULT_MODEL", "gpt-3.5-turbo")
    default_temperature: float = 0.7
    default_max_tokens: int = 1000

    class Config:
        env_file = ".env"


settings = Settings()
