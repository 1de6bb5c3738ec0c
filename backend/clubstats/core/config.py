from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # --- DB ---
    DATABASE_URL: str = "sqlite:///./clubstats.sqlite"

    # --- Logging ---
    LOG_LEVEL: str = "INFO"

    # --- JWT (tokens are issued by the external auth service) ---
    JWT_SECRET: str = "change-me-in-env"
    JWT_ALG: str = "HS256"
    ADMIN_ROLES: list[str] = ["admin", "club_admin"]

    # --- Rankings ---
    TOP_HIGHLIGHTS_LIMIT: int = 5

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
