from pydantic_settings import BaseSettings, SettingsConfigDict
class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="LOYALTY_", env_file=".env", extra="ignore")
    DATABASE_URL: str = "sqlite:///./loyalty.db"

    SECRET_KEY: str = "change-me"
    ACCESS_TOKEN_MIN: int = 60 * 24

    # LINE Login channel used by the LIFF app
    LINE_CHANNEL_ID: str = ""
    LINE_API_BASE_URL: str = "https://api.line.me"
    LINE_TIMEOUT_SEC: float = 10.0

    STAFF_PIN: str = "1234"
    CLINIC_TIMEZONE: str = "Asia/Tokyo"

    STAMP_GOAL: int = 10
    MANUAL_STAMP_MAX: int = 999
    MEMO_MAX_LENGTH: int = 200
    SURVEY_RESHOW_HOURS: int = 24

    APP_VERSION: str = "1.0.0"
    BUILD_DATE: str = ""
    GIT_COMMIT: str = ""
    ENVIRONMENT: str = "production"
    LOG_LEVEL: str = "INFO"
settings = Settings()
