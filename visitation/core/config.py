from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
import json


class Settings(BaseSettings):
    # Application Settings
    app_name: str = Field(default="Visitation Scheduling API", alias="APP_NAME")
    app_version: str = Field(default="1.0.0", alias="APP_VERSION")
    ENVIRONMENT: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")

    # Server Configuration
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8000, alias="PORT")
    reload: bool = Field(default=False, alias="RELOAD")

    # Database Configuration
    DB_HOST: str = Field(default="localhost", alias="DB_HOST")
    DB_PORT: int = Field(default=5432, alias="DB_PORT")
    DB_NAME: str = Field(default="visitation", alias="DB_NAME")
    DB_USER: str = Field(default="visitation", alias="DB_USER")
    DB_PASSWORD: str = Field(default="visitation", alias="DB_PASSWORD")
    database_url: str = Field(default="sqlite:///./visitation.db", alias="DATABASE_URL")

    # CORS Configuration
    API_CORS_ORIGINS: Optional[str] = Field(default=None, alias="API_CORS_ORIGINS")
    cors_origins: List[str] = Field(default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"])

    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="%(asctime)s - %(name)s - %(levelname)s - %(message)s", alias="LOG_FORMAT")

    # Visit Scheduling Rules
    visit_window_policy: str = Field(default="midweek", alias="VISIT_WINDOW_POLICY")
    daily_visit_limit: int = Field(default=2, ge=1, alias="DAILY_VISIT_LIMIT")
    conflict_window_minutes: int = Field(default=60, ge=0, alias="CONFLICT_WINDOW_MINUTES")
    max_notes_length: int = Field(default=500, ge=1, alias="MAX_NOTES_LENGTH")
    allow_past_appointments: bool = Field(default=False, alias="ALLOW_PAST_APPOINTMENTS")

    # Pagination
    default_page_size: int = Field(default=10, alias="DEFAULT_PAGE_SIZE")
    max_page_size: int = Field(default=100, alias="MAX_PAGE_SIZE")

    # Development Settings
    seed_database: bool = Field(default=False, alias="SEED_DATABASE")

    @field_validator('cors_origins', mode='before')
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            if v.strip() == "*":
                return ["*"]
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [origin.strip() for origin in v.split(',')]
        return v

    @field_validator('visit_window_policy')
    @classmethod
    def normalize_window_policy(cls, v: str) -> str:
        normalized = v.strip().lower()
        if normalized not in {"midweek", "extended"}:
            raise ValueError("VISIT_WINDOW_POLICY must be 'midweek' or 'extended'")
        return normalized

    @property
    def DATABASE_URL(self) -> str:
        if "://" in self.database_url:
            return self.database_url
        return (
            f"postgresql+psycopg2://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def database_echo(self) -> bool:
        return self.debug and self.is_development

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        populate_by_name = True


# Global settings instance
settings = Settings()
