from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    """
    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', extra='ignore')

    # --- Core App Settings ---
    APP_NAME: str = "Persona Quiz"
    FLASK_ENV: str = "production"
    DEBUG: bool = False
    PORT: int = 4000

    # --- Infrastructure ---
    MONGO_URI: str
    MONGO_DB_NAME: str = "persona_quiz"  # used when MONGO_URI names no database
    MONGO_SERVER_SELECTION_TIMEOUT_MS: int = 2000

    # --- HTTP ---
    CORS_ORIGINS: str = "*"

    # --- Logging ---
    LOG_LEVEL: str = "INFO"

# Load settings
settings = Settings()

# Production readiness checks
if settings.FLASK_ENV == "production" and settings.DEBUG:
    raise ValueError("CRITICAL: DEBUG mode must be disabled in production.")
