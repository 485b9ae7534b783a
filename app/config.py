from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: str
    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_DAYS: int = 7
    APP_NAME: str = "UniShare Reports API"
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"
    LOG_LEVEL: str = "INFO"

    # Store settings
    DB_QUERY_TIMEOUT_SECONDS: float = 10.0

    # Automated review settings
    ENABLE_AUTO_REVIEW: bool = True
    AUTO_REVIEW_ESCALATION_THRESHOLD: int = 3  # live reports of one type per resource

    # Background worker settings
    WORKER_QUEUE_MAXSIZE: int = 1000

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


settings = Settings()
