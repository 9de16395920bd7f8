import enum
from typing import Any, Optional

from pydantic import Field, PostgresDsn, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class VehicleSearchMatch(str, enum.Enum):
    contains = "contains"
    prefix = "prefix"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        case_sensitive=True, env_file="../.env", extra="allow"
    )

    POSTGRES_SERVER: Optional[str] = None
    POSTGRES_USER: Optional[str] = None
    POSTGRES_PASSWORD: Optional[str] = None
    POSTGRES_DB: Optional[str] = None
    SQLALCHEMY_DATABASE_URI: Optional[str] = Field(default=None, validate_default=True)
    SQL_ECHO: bool = False

    # vehicle search: "contains" matches anywhere, "prefix" anchors at the start
    VEHICLE_SEARCH_CASE_SENSITIVE: bool = False
    VEHICLE_SEARCH_MATCH: VehicleSearchMatch = VehicleSearchMatch.contains

    # downsampling job
    DOWNSAMPLE_OLDER_THAN_DAYS: int = 30
    DOWNSAMPLE_GRANULARITY: str = "day"

    LOG_DIR: str = "~/logs"

    # Seq log
    SEQ_SERVER_URL: Optional[str] = None
    SEQ_SERVER_API_KEY: Optional[str] = None

    @field_validator("SQLALCHEMY_DATABASE_URI", mode="before")
    def assemble_db_connection(cls, v: str | None, info: ValidationInfo) -> Any:
        if isinstance(v, str):
            return v
        if not info.data.get("POSTGRES_SERVER"):
            return "sqlite:///./investment_tracker.db"
        return str(
            PostgresDsn.build(
                scheme="postgresql+psycopg",
                username=info.data.get("POSTGRES_USER"),
                password=info.data.get("POSTGRES_PASSWORD"),
                host=info.data.get("POSTGRES_SERVER"),
                path=f"{info.data.get('POSTGRES_DB') or ''}",
            )
        )


settings = Settings()
