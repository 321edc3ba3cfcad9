from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "postgresql+asyncpg://sasktask:sasktask_dev@db:5432/sasktask"

    # Redis
    REDIS_URL: str = "redis://redis:6379/0"

    # HTTP
    ALLOWED_ORIGINS: str = "*"

    # AI Provider (OpenAI-compatible chat completions)
    AI_API_KEY: str = "mock_ai_key"
    AI_BASE_URL: str = "https://ai.gateway.lovable.dev/v1"
    AI_MODEL: str = "google/gemini-2.5-flash"
    AI_TEMPERATURE: float = 0.3
    AI_TIMEOUT_SECONDS: float = 30.0

    # Task matching
    MATCH_MAX_DISTANCE_KM: float = 50.0

    # App
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
