from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    HOST: str = "0.0.0.0"
    PORT: int = 4000

    STORAGE_DIR: str = "uploads"          # folder on disk
    STORAGE_BASE_URL: str = "/uploads"    # URL prefix to serve files from
    MAX_UPLOAD_BYTES: int = 100 * 1024 * 1024
    STATIC_DIR: str = "public"            # mounted at / only when present

    CORS_ORIGINS: list[str] = ["*"]
    DEBOUNCE_MS: int = 300

    LOG_LEVEL: str = "INFO"
    LOG_FILE: str | None = None
    LOG_FORMAT: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


settings = Settings()
