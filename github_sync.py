"""
github_sync.py
Stores the whole database as one JSON file in a GitHub repository
(contents API), with a short read cache and debounced auto-sync.

Nothing here raises to the UI: fetch() always yields a complete Database and
save_database() reports the outcome in its result.
"""

from __future__ import annotations

import base64
import binascii
import logging
import time
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable

import requests

import auth
from config import Settings
from db import TOKEN_KEY, LocalStore
from models import Database, User, default_database
from sync import PendingWrite
from utils import now_iso

logger = logging.getLogger(__name__)

# fetch outcomes
FETCHED = "fetched"
CACHED = "cached"
CREATED = "created"  # the file did not exist yet, a default one was written
FALLBACK = "fallback"  # the file could not be read, defaults returned
NOT_CONFIGURED = "not_configured"

# save outcomes
SAVED = "saved"
CONFLICT = "conflict"  # remote revision changed since the sha was read
FAILED = "failed"


@dataclass
class FetchResult:
    status: str
    database: Database
    error: str = ""

    @property
    def from_remote(self) -> bool:
        return self.status in (FETCHED, CACHED, CREATED)


@dataclass
class SaveResult:
    status: str
    database: Database | None = None
    error: str = ""

    def __bool__(self) -> bool:
        return self.status == SAVED


class GitHubSync:
    def __init__(
        self,
        settings: Settings,
        local_store: LocalStore,
        session: requests.Session | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.settings = settings
        self.local_store = local_store
        self.session = session or requests.Session()
        self.clock = clock

        self._token = ""
        self._cache: Database | None = None
        self._last_fetch = 0.0
        self._seed_users: list[User] | None = None
        self._pending: PendingWrite | None = None

    # ---------- credential ----------

    def initialize(self, token: str) -> None:
        self._token = token.strip()
        self._cache = None
        self.local_store.save(TOKEN_KEY, self._token)

    def is_initialized(self) -> bool:
        if not self._token:
            saved = self.local_store.load(TOKEN_KEY, "")
            if saved:
                self._token = saved
        return bool(self._token)

    def get_token(self) -> str:
        return self._token or self.local_store.load(TOKEN_KEY, "") or ""

    def clear_token(self) -> None:
        self.stop_auto_sync()
        self._token = ""
        self._cache = None
        self.local_store.delete(TOKEN_KEY)

    # ---------- defaults ----------

    def default_users(self) -> list[User]:
        if self._seed_users is None:
            self._seed_users = [auth.seed_admin(self.settings)]
        return list(self._seed_users)

    def default_database(self) -> Database:
        admin, = self.default_users()
        return default_database(admin, now_iso())

    # ---------- cache ----------

    def invalidate_cache(self) -> None:
        self._cache = None

    def _remember(self, database: Database) -> None:
        self._cache = database
        self._last_fetch = self.clock()

    def _cache_fresh(self) -> bool:
        return self._cache is not None and self.clock() - self._last_fetch < self.settings.cache_seconds

    # ---------- HTTP ----------

    def _headers(self) -> dict:
        return {
            "Authorization": f"token {self._token}",
            "Accept": "application/vnd.github.v3+json",
        }

    def _get_file(self) -> requests.Response:
        return self.session.get(
            self.settings.contents_url,
            params={"ref": self.settings.github_branch},
            headers=self._headers(),
            timeout=self.settings.http_timeout,
        )

    def _decode(self, payload: dict) -> Database:
        raw = base64.b64decode(payload["content"]).decode("utf-8")
        return Database.from_json(raw, self.default_users())

    # ---------- operations ----------

    def fetch(self, force: bool = False) -> FetchResult:
        if not force and self._cache_fresh():
            return FetchResult(CACHED, self._cache.copy())

        if not self.is_initialized():
            return FetchResult(NOT_CONFIGURED, self.default_database())

        try:
            response = self._get_file()
            if response.status_code == 404:
                logger.info("Data file %s not found, creating it", self.settings.data_file)
                database = self.default_database()
                saved = self.save_database(database)
                if not saved:
                    return FetchResult(FALLBACK, database, error=saved.error)
                database = saved.database
                self._remember(database)
                return FetchResult(CREATED, database.copy())

            response.raise_for_status()
            database = self._decode(response.json())
        except (requests.RequestException, KeyError, TypeError, ValueError, binascii.Error) as e:
            logger.error("Error fetching database: %s", e)
            return FetchResult(FALLBACK, self.default_database(), error=str(e))

        self._remember(database)
        return FetchResult(FETCHED, database.copy())

    def fetch_database(self) -> Database:
        return self.fetch().database

    def _current_sha(self) -> str | None:
        response = self._get_file()
        if response.ok:
            return response.json().get("sha")
        return None

    def save_database(self, database: Database) -> SaveResult:
        if not self.is_initialized():
            return SaveResult(NOT_CONFIGURED, error="GitHub token not set")

        stamped = replace(database.copy(), last_updated=now_iso())
        try:
            sha = self._current_sha()
            body = {
                "message": f"Update database - {datetime.now():%Y-%m-%d %H:%M:%S}",
                "content": base64.b64encode(stamped.to_json().encode("utf-8")).decode("ascii"),
                "branch": self.settings.github_branch,
            }
            if sha:
                body["sha"] = sha

            response = self.session.put(
                self.settings.contents_url,
                json=body,
                headers=self._headers(),
                timeout=self.settings.http_timeout,
            )
            if response.status_code == 409:
                logger.warning("Save rejected, %s changed on GitHub since it was read", self.settings.data_file)
                self.invalidate_cache()
                return SaveResult(CONFLICT, error=response.text)
            response.raise_for_status()
        except (requests.RequestException, ValueError) as e:
            logger.error("Error saving database: %s", e)
            return SaveResult(FAILED, error=str(e))

        self._remember(stamped)
        logger.info("Database saved to %s/%s", self.settings.github_repo, self.settings.data_file)
        return SaveResult(SAVED, stamped.copy())

    # ---------- auto sync ----------

    def start_auto_sync(
        self,
        snapshot: Callable[[], Database],
        on_result: Callable | None = None,
        on_start: Callable | None = None,
    ) -> PendingWrite:
        self.stop_auto_sync()
        self._pending = PendingWrite(
            write=self.save_database,
            snapshot=snapshot,
            debounce=self.settings.debounce_seconds,
            interval=self.settings.autosync_seconds,
            clock=self.clock,
            on_result=on_result,
            on_start=on_start,
        )
        logger.info(
            "Auto sync armed (debounce=%ss, interval=%ss)",
            self.settings.debounce_seconds,
            self.settings.autosync_seconds,
        )
        return self._pending

    def stop_auto_sync(self) -> None:
        self._pending = None

    @property
    def auto_sync(self) -> PendingWrite | None:
        return self._pending

    def mark_pending_changes(self) -> None:
        if self._pending is not None:
            self._pending.mark_dirty()

    @property
    def has_pending_changes(self) -> bool:
        return bool(self._pending and self._pending.has_pending)

    def flush_pending(self) -> SaveResult | None:
        if self._pending is None:
            return None
        return self._pending.flush()

    def poll_pending(self) -> SaveResult | None:
        """Write pending changes if a trigger has fired; None when nothing was written."""
        if self._pending is None:
            return None
        return self._pending.poll()
