"""
config.py
Settings read from the environment (a local .env file is honoured).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_DB_FILE = Path(__file__).with_name("khs.db")


@dataclass(frozen=True)
class Settings:
    github_owner: str = ""
    github_repo: str = "khs-data"
    github_branch: str = "main"
    data_file: str = "database.json"
    github_api: str = "https://api.github.com"
    local_db: Path = DEFAULT_DB_FILE
    admin_username: str = "admin"
    admin_password: str | None = None
    admin_name: str = "অ্যাডমিন"
    org_name: str = "কলম হিন্দু ধর্মসভা"
    cache_seconds: float = 60.0
    debounce_seconds: float = 1.0
    autosync_seconds: float = 30.0
    http_timeout: float = 15.0
    pdf_font: str | None = None
    log_level: str = "INFO"

    @property
    def contents_url(self) -> str:
        return (
            f"{self.github_api.rstrip('/')}/repos/{self.github_owner}/"
            f"{self.github_repo}/contents/{self.data_file}"
        )


def _float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def load_settings() -> Settings:
    load_dotenv()
    return Settings(
        github_owner=os.getenv("KHS_GITHUB_OWNER", ""),
        github_repo=os.getenv("KHS_GITHUB_REPO") or "khs-data",
        github_branch=os.getenv("KHS_GITHUB_BRANCH") or "main",
        data_file=os.getenv("KHS_DATA_FILE") or "database.json",
        github_api=os.getenv("KHS_GITHUB_API") or "https://api.github.com",
        local_db=Path(os.getenv("KHS_LOCAL_DB") or DEFAULT_DB_FILE),
        admin_username=os.getenv("KHS_ADMIN_USERNAME") or "admin",
        admin_password=os.getenv("KHS_ADMIN_PASSWORD") or None,
        admin_name=os.getenv("KHS_ADMIN_NAME") or "অ্যাডমিন",
        org_name=os.getenv("KHS_ORG_NAME") or "কলম হিন্দু ধর্মসভা",
        cache_seconds=_float("KHS_CACHE_SECONDS", 60.0),
        debounce_seconds=_float("KHS_DEBOUNCE_SECONDS", 1.0),
        autosync_seconds=_float("KHS_AUTOSYNC_SECONDS", 30.0),
        http_timeout=_float("KHS_HTTP_TIMEOUT", 15.0),
        pdf_font=os.getenv("KHS_PDF_FONT") or None,
        log_level=(os.getenv("KHS_LOG_LEVEL") or "INFO").upper(),
    )
