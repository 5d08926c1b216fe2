"""
Application settings loaded from environment variables (and an optional .env file).
"""

from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import AnyUrl, BeforeValidator, HttpUrl, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


def parse_comma_list(v: Any) -> list[str] | str:
    if isinstance(v, str) and not v.startswith("["):
        return [i.strip() for i in v.split(",") if i.strip()]
    if isinstance(v, list | str):
        return v
    raise ValueError(v)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    PROJECT_NAME: str = "sqlregistry"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    SENTRY_DSN: HttpUrl | None = None

    BACKEND_CORS_ORIGINS: Annotated[
        list[AnyUrl] | str, BeforeValidator(parse_comma_list)
    ] = []

    @computed_field  # type: ignore[prop-decorator]
    @property
    def all_cors_origins(self) -> list[str]:
        return [str(origin).rstrip("/") for origin in self.BACKEND_CORS_ORIGINS]

    # Statement files live in <SQL_DIR>/<db_type>/*<SQL_FILE_SUFFIX>
    SQL_DIR: Path = Path("data")
    SQL_FILE_SUFFIX: str = ".sql"
    SQL_DATABASE_TYPES: Annotated[
        list[str] | str, BeforeValidator(parse_comma_list)
    ] = ["postgres", "mysql", "sqlite"]
    # Schema filled in when ListDatabaseTables / GetTableColumns omit it
    SQL_DEFAULT_SCHEMA: str = "public"

    # Optional database used by the execute endpoint, e.g. sqlite:///app.db
    DATABASE_URL: str | None = None


settings = Settings()  # type: ignore
