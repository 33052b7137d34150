from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    REDIS_URL: str = "redis://localhost:6379/0"

    QUOTE_CACHE_TTL: int = 600  # 10 minutes
    QUOTE_CACHE_PREFIX: str = "quotes"

    SECRET_KEY: str = "default_secret_change_in_production"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 24 hours
    REQUIRE_AUTH: bool = False

    RATE_LIMIT: int = 100
    RATE_LIMIT_WINDOW: int = 900  # 15 minutes

    PROVIDER_TIMEOUT: float = 5.0
    PROVIDER_SIMULATED_DELAY: float = 0.0

    ALLOWED_ORIGIN: str = "*"

    API_TITLE: str = "Auto Quote API"
    API_DESCRIPTION: str = "Aggregates vehicle protection product quotes from multiple providers"
    API_VERSION: str = "1.0.0"

    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
