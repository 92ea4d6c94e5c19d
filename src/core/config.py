"""
Configuration loaded from the environment.

A `.env` file in the working directory is read first (python-dotenv), real environment variables win.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _flag(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Config:
    database_url: str
    sql_echo: bool
    log_level: str


CONFIG = Config(
    database_url=os.getenv("TANKS_DATABASE_URL", "sqlite:///./tanktactics.db"),
    sql_echo=_flag(os.getenv("TANKS_SQL_ECHO", "false")),
    log_level=os.getenv("TANKS_LOG_LEVEL", "INFO").upper(),
)
