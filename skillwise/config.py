# skillwise/config.py
from pydantic_settings import BaseSettings
from typing import List, Optional
from pydantic import Field

class Settings(BaseSettings):
    SECRET_KEY: str = Field("change-me-in-production")
    ALGORITHM: str = Field("HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(30)
    REFRESH_TOKEN_EXPIRE_DAYS: int = Field(7)
    BCRYPT_ROUNDS: int = Field(12)

    DATABASE_URL: Optional[str] = None
    SQLALCHEMY_DATABASE_URL: Optional[str] = None
    SQL_ECHO: bool = Field(False)

    # AI provider (Cohere chat API)
    COHERE_API_KEY: Optional[str] = None
    COHERE_API_URL: str = Field("https://api.cohere.ai/v1/chat")
    COHERE_MODEL: str = Field("command-r-plus-08-2024")
    AI_MAX_TOKENS: Optional[int] = None
    AI_TIMEOUT_SECONDS: float = Field(60.0)

    LOG_LEVEL: str = Field("INFO")

    # Comma-separated origins. Empty → CORS middleware is not installed.
    CORS_ORIGINS: Optional[str] = None

    model_config = {
        "env_file": ".env",
        "extra": "allow",
    }

    @property
    def effective_database_url(self) -> str:
        url = self.SQLALCHEMY_DATABASE_URL or self.DATABASE_URL or "sqlite+aiosqlite:///./skillwise.db"
        # Ensure asyncpg is used
        if url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql+asyncpg://", 1)
        elif url.startswith("postgresql://") and "+asyncpg" not in url:
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url

    @property
    def allowed_origins(self) -> List[str]:
        if not self.CORS_ORIGINS:
            return []
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

settings = Settings()
