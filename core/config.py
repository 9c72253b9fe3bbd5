from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    allowed_origins: str = Field(default="http://localhost:3000")
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    # Database Configuration
    database_url: str = Field(default="sqlite:///./governance.db")
    database_pool_size: int = Field(default=5)
    database_max_overflow: int = Field(default=10)

    # Analytics Settings
    analytics_default_period_days: int = Field(default=90)

    @property
    def allowed_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.allowed_origins.split(",")]

    def validate(self) -> None:
        errors = []
        if not self.database_url:
            errors.append("DATABASE_URL is required")
        if self.analytics_default_period_days < 1:
            errors.append("ANALYTICS_DEFAULT_PERIOD_DAYS must be at least 1")
        if errors:
            raise ValueError(f"Configuration errors: {', '.join(errors)}")


settings = Settings()
