"""
state.py
Application state: the entity lists, the logged-in user and how changes
reach local storage (always, immediately) and GitHub (when connected, debounced).
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import replace
from typing import Callable

import auth
from config import Settings
from db import DATA_KEY, USER_KEY, LocalStore
from github_sync import FALLBACK, NOT_CONFIGURED, GitHubSync, SaveResult
from models import COLLECTIONS, STATUS_DUE, Contribution, Database, User
from utils import generate_id, now_iso

logger = logging.getLogger(__name__)

SOURCE_LOCAL = "local"

SYNC_IDLE = "idle"
SYNC_SYNCING = "syncing"
SYNC_SUCCESS = "success"
SYNC_ERROR = "error"
STATUS_HOLD_SECONDS = 2.0


class AppState:
    def __init__(
        self,
        local_store: LocalStore,
        settings: Settings,
        remote: GitHubSync | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.local_store = local_store
        self.settings = settings
        self.remote = remote
        self.clock = clock

        self.db = Database()
        self.user: auth.SessionUser | None = None
        self.loaded = False
        self.source = SOURCE_LOCAL
        self._sync_status = SYNC_IDLE
        self._sync_status_at = 0.0
        self._lock = threading.RLock()
        self._seed_admin: User | None = None

    # ---------- loading ----------

    @property
    def remote_enabled(self) -> bool:
        return self.remote is not None and self.remote.is_initialized()

    def _default_database(self) -> Database:
        if self.remote is not None:
            return self.remote.default_database()
        if self._seed_admin is None:
            self._seed_admin = auth.seed_admin(self.settings)
        return Database(users=[self._seed_admin], last_updated=now_iso())

    def _load_local(self) -> Database:
        raw = self.local_store.load(DATA_KEY, None)
        if raw is None:
            return self._default_database()
        try:
            return Database.from_dict(raw, self._default_database().users)
        except (TypeError, ValueError) as e:
            logger.error("Local data is unreadable, starting empty: %s", e)
            return self._default_database()

    def load(self) -> str:
        """Populate the lists from GitHub when connected, else from local storage."""
        with self._lock:
            self.loaded = False
            if self.remote_enabled:
                result = self.remote.fetch()
                self.source = result.status
                arm_sync = True
                if result.status == FALLBACK:
                    # GitHub unreachable: keep working on the last local copy
                    logger.warning("Using local data, GitHub fetch failed: %s", result.error)
                    arm_sync = self.local_store.load(DATA_KEY, None) is not None
                    self.db = self._load_local()
                else:
                    self.db = result.database
                    # the local copy always mirrors what is in memory
                    self.local_store.save(DATA_KEY, self.db.to_dict())
                if arm_sync:
                    self.remote.start_auto_sync(
                        self.snapshot,
                        on_result=self._on_sync_result,
                        on_start=self._on_sync_start,
                    )
                else:
                    # defaults must not be pushed over a file we could not read
                    self.remote.stop_auto_sync()
                    logger.warning("No local copy either, background sync stays off until GitHub is reachable")
            else:
                self.db = self._load_local()
                self.source = SOURCE_LOCAL
            self.user = auth.SessionUser.from_dict(self.local_store.load(USER_KEY, None))
            self.loaded = True
            self._apply_admin_password()
            logger.info("Loaded data from %s (%d members)", self.source, len(self.db.members))
            return self.source

    def reload(self) -> bool:
        """
        Push anything still pending, then read the data again from its source.
        Returns False (and keeps the current data) when pending changes could not be pushed.
        """
        if self.remote_enabled:
            if self.remote.has_pending_changes and not self.sync_now():
                logger.warning("Reload skipped, pending changes were not saved to GitHub")
                return False
            self.remote.invalidate_cache()
        self.load()
        return True

    def _apply_admin_password(self) -> None:
        # The seeded admin has no password until KHS_ADMIN_PASSWORD is set.
        if not self.settings.admin_password:
            return
        admin = next((u for u in self.db.users if u.id == auth.SEED_ADMIN_ID), None)
        if admin is None or admin.password:
            return
        logger.info("Setting the password of %r from KHS_ADMIN_PASSWORD", admin.username)
        self.change_password(admin.username, self.settings.admin_password)

    def snapshot(self) -> Database:
        with self._lock:
            return self.db.copy()

    # ---------- change propagation ----------

    def _changed(self) -> None:
        if not self.loaded:
            return
        self.local_store.save(DATA_KEY, self.db.to_dict())
        if self.remote_enabled:
            self.remote.mark_pending_changes()

    def poll_sync(self) -> SaveResult | None:
        """Write pending changes to GitHub once a debounce or interval trigger has fired."""
        if not self.remote_enabled:
            return None
        return self.remote.poll_pending()

    def sync_now(self) -> SaveResult:
        """Push the current data to GitHub immediately, skipping the debounce."""
        if not self.remote_enabled:
            return SaveResult(NOT_CONFIGURED, error="GitHub is not connected")
        result = self.remote.flush_pending()
        if result is None:
            # auto sync not armed (before load, or GitHub was unreadable at load)
            self._on_sync_start()
            result = self.remote.save_database(self.snapshot())
            self._on_sync_result(result)
        return result

    def _on_sync_start(self) -> None:
        self._set_sync_status(SYNC_SYNCING)

    def _on_sync_result(self, result) -> None:
        if result:
            with self._lock:
                self.db.last_updated = result.database.last_updated
        self._set_sync_status(SYNC_SUCCESS if result else SYNC_ERROR)

    def _set_sync_status(self, status: str) -> None:
        self._sync_status = status
        self._sync_status_at = self.clock()

    @property
    def sync_status(self) -> str:
        if self._sync_status in (SYNC_SUCCESS, SYNC_ERROR):
            if self.clock() - self._sync_status_at >= STATUS_HOLD_SECONDS:
                return SYNC_IDLE
        return self._sync_status

    @property
    def has_pending_changes(self) -> bool:
        return self.remote_enabled and self.remote.has_pending_changes

    # ---------- records ----------

    def records(self, collection: str) -> list:
        if collection not in COLLECTIONS:
            raise KeyError(f"unknown collection {collection!r}")
        return getattr(self.db, collection)

    def get(self, collection: str, record_id: str):
        return next((r for r in self.records(collection) if r.id == record_id), None)

    def new_record(self, collection: str, **values):
        """Build a record with a fresh id and creation timestamp."""
        return COLLECTIONS[collection](id=generate_id(), created_at=now_iso(), **values)

    def add(self, collection: str, record) -> None:
        with self._lock:
            self.records(collection).append(record)
            self._changed()

    def create(self, collection: str, **values):
        record = self.new_record(collection, **values)
        self.add(collection, record)
        return record

    def update(self, collection: str, record_id: str, **changes):
        """Replace the record with matching id; returns the new record or None."""
        with self._lock:
            items = self.records(collection)
            for i, rec in enumerate(items):
                if rec.id == record_id:
                    items[i] = replace(rec, **changes)
                    self._changed()
                    return items[i]
        return None

    def delete(self, collection: str, record_id: str) -> bool:
        with self._lock:
            items = self.records(collection)
            kept = [r for r in items if r.id != record_id]
            if len(kept) == len(items):
                return False
            items[:] = kept
            self._changed()
            return True

    def bulk_assign_contributions(self, puja_id: str, amount: float, member_ids: list[str]) -> list[Contribution]:
        """Create one unpaid contribution per selected member, with a single save."""
        created = [
            self.new_record(
                "contributions",
                member_id=mid,
                puja_id=puja_id,
                amount=float(amount),
                paid_amount=0.0,
                status=STATUS_DUE,
            )
            for mid in member_ids
        ]
        if created:
            with self._lock:
                self.db.contributions.extend(created)
                self._changed()
        return created

    # ---------- users & session ----------

    @property
    def users(self) -> list[User]:
        return self.db.users

    def _set_users(self, users: list[User]) -> None:
        with self._lock:
            self.db.users = users
            self._changed()

    def login(self, username: str, password: str) -> auth.AuthResult:
        result = auth.authenticate(auth.users_lookup(self.db.users), username, password)
        if result:
            self.set_user(result.user)
        return result

    def login_as_viewer(self) -> auth.SessionUser:
        viewer = auth.viewer_session()
        self.set_user(viewer)
        return viewer

    def set_user(self, user: auth.SessionUser | None) -> None:
        self.user = user
        self.local_store.save(USER_KEY, user.to_dict() if user else None)

    def logout(self) -> None:
        self.set_user(None)

    def add_user(self, username: str, password: str, role: str, name: str) -> bool:
        users = auth.create_user(self.db.users, username, password, role, name)
        if users is None:
            return False
        self._set_users(users)
        return True

    def change_password(self, username: str, new_password: str) -> None:
        self._set_users(auth.change_password(self.db.users, username, new_password))

    # ---------- GitHub connection ----------

    def enable_remote(self, token: str) -> str:
        if self.remote is None:
            raise RuntimeError("no GitHub client configured")
        self.remote.initialize(token)
        return self.load()

    def disable_remote(self) -> None:
        if self.remote is not None:
            self.remote.clear_token()
        self.source = SOURCE_LOCAL
