"""Server settings from the environment."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Mapping

from dotenv import find_dotenv, load_dotenv


class ConfigError(Exception):
    """Required server configuration is missing. Fatal at startup."""


def sqlite_path(database_url: str) -> str:
    """Accept 'sqlite://file.db', 'sqlite:///abs/file.db' or a plain path."""
    if database_url.startswith("sqlite://"):
        database_url = database_url[len("sqlite://"):]
    return database_url.split("?", 1)[0]


class Settings:
    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        if environ is None:
            # .env in the working directory fills in unset variables
            load_dotenv(find_dotenv(usecwd=True))
        env = os.environ if environ is None else environ
        self.database_url = env.get("DATABASE_URL", "sqlite://sagittarius.db")
        self.db_path = sqlite_path(self.database_url)
        self.api_secret = env.get("API_SECRET", "")
        self.host = env.get("HOST", "0.0.0.0")
        self.port = int(env.get("PORT", "3000"))
        self.cors_allow_origin = env.get("CORS_ALLOW_ORIGIN", "*")

    def validate(self) -> None:
        if not self.api_secret:
            raise ConfigError("API_SECRET must be set")


@lru_cache
def get_settings() -> Settings:
    return Settings()
