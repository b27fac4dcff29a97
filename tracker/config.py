from __future__ import annotations
import os
from typing import Any

import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    telegram_apikey: str = ""

    api_url: str = "http://localhost:5000"
    request_timeout: float | None = None   # None = transport default
    enrich_holdings: bool = True

    token_dir: str = "tokens"
    app_config_path: str = "config/config.yaml"

    @property
    def api_base_url(self) -> str:
        return self.api_url.rstrip("/")


def load_app_config(path: str = "config/config.yaml") -> dict[str, Any]:
    if not os.path.exists(path):
        return {}
    with open(path) as f:
        return yaml.safe_load(f) or {}


settings = Settings()
app_config = load_app_config(settings.app_config_path)
