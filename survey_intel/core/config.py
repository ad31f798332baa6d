from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore'
    )

    APP_NAME: str = "SurveyIntel"
    APP_ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    SECRET_KEY: str = "change_me_please"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # SQLite connection string (read from .env)
    DATABASE_URL: str = "sqlite:///./survey_intel.db"

    BACKEND_CORS_ORIGINS: str = "http://localhost:5173"

    # Generative backend (Ollama-compatible /api/generate)
    AI_ENABLED: bool = True
    OLLAMA_BASE_URL: str = "http://localhost:11434"
    OLLAMA_MODEL: str = "llama3"
    AI_TIMEOUT_SECONDS: float = 60.0
    AI_MIN_RESPONSES_FOR_INSIGHTS: int = 3

settings = Settings()
