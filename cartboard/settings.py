# cartboard/settings.py
from __future__ import annotations
from typing import List, Literal, Optional
from pydantic import Field, AliasChoices, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import json
import os

LOCAL_FRONTENDS = ("http://localhost:3000", "http://127.0.0.1:3000")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _env(*names: str) -> AliasChoices:
    return AliasChoices(*names)


def _parse_cors(v: Optional[str | List[str]]) -> List[str]:
    """CORS_ORIGINS as a JSON list or a comma list; unset means local frontends."""
    if isinstance(v, list):
        return v
    raw = (v or "").strip()
    if not raw:
        return list(LOCAL_FRONTENDS)
    if raw.startswith("["):
        try:
            origins = json.loads(raw)
        except json.JSONDecodeError:
            origins = None
        if isinstance(origins, list) and all(isinstance(x, str) for x in origins):
            return origins
    return [p.strip() for p in raw.split(",") if p.strip()]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    # --- HTTP ---
    api_host: str = Field(default="127.0.0.1", validation_alias=_env("API_HOST"))
    api_port: int = Field(default=8000, validation_alias=_env("API_PORT"))
    cors_origins_raw: Optional[str | List[str]] = Field(
        default=None, validation_alias=_env("CORS_ORIGINS")
    )
    log_level: str = Field(default="INFO", validation_alias=_env("LOG_LEVEL"))

    # --- Order storage ---
    # "memory" keeps orders and templates in-process (local dev, tests)
    store_backend: Literal["firestore", "memory"] = Field(
        default="firestore", validation_alias=_env("STORE_BACKEND")
    )
    firebase_project_id: str = Field(
        default="cartboard", validation_alias=_env("FIREBASE_PROJECT_ID")
    )
    google_application_credentials: Optional[str] = Field(
        default=None, validation_alias=_env("GOOGLE_APPLICATION_CREDENTIALS")
    )
    orders_collection: str = Field(
        default="orders", validation_alias=_env("ORDERS_COLLECTION")
    )
    templates_collection: str = Field(
        default="productTemplates",
        validation_alias=_env("TEMPLATES_COLLECTION", "CATALOG_COLLECTION"),
    )

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")
        return level

    @property
    def cors_origins(self) -> List[str]:
        return _parse_cors(self.cors_origins_raw)


settings = Settings()

# firebase_admin reads the key path from the process environment
if settings.google_application_credentials:
    os.environ.setdefault("GOOGLE_APPLICATION_CREDENTIALS", settings.google_application_credentials)
