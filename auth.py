"""
auth.py
Authentication utilities (bcrypt hashing, verify, login, user management).

Users live in the data file; lookups go through a callable so the same code
works against local and GitHub-backed data.
"""

from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass, replace
from typing import Callable

import bcrypt

from config import Settings
from models import ROLE_ADMIN, ROLE_VIEWER, ROLES, User
from utils import generate_id, now_iso

logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = 12

SEED_ADMIN_ID = "1"

INVALID_CREDENTIALS = "invalid_credentials"
EMPTY_INPUT = "empty_input"


def _to_bcrypt_secret(password: str) -> bytes:
    """
    bcrypt only uses the first 72 BYTES of the password.
    We truncate to 72 bytes to avoid ValueError and to make behavior explicit.
    """
    pw = password.encode("utf-8")
    if len(pw) > 72:
        pw = pw[:72]
    return pw


def hash_password(password: str) -> str:
    secret = _to_bcrypt_secret(password)
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(secret, salt).decode("utf-8")


def _is_bcrypt_hash(stored: str) -> bool:
    return stored.startswith(("$2a$", "$2b$", "$2y$"))


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against the stored value.
    Data files written by older versions hold plaintext passwords.
    An empty stored value never matches.
    """
    if not password_hash:
        return False
    if _is_bcrypt_hash(password_hash):
        try:
            return bcrypt.checkpw(_to_bcrypt_secret(password), password_hash.encode("utf-8"))
        except ValueError:
            return False
    return hmac.compare_digest(password.encode("utf-8"), password_hash.encode("utf-8"))


@dataclass(frozen=True)
class SessionUser:
    username: str
    role: str
    name: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def to_dict(self) -> dict:
        return {"username": self.username, "role": self.role, "name": self.name}

    @classmethod
    def from_dict(cls, raw) -> "SessionUser | None":
        if not isinstance(raw, dict) or not raw.get("username"):
            return None
        role = raw.get("role") if raw.get("role") in ROLES else ROLE_VIEWER
        return cls(username=str(raw["username"]), role=role, name=str(raw.get("name") or ""))


@dataclass(frozen=True)
class AuthResult:
    ok: bool
    user: SessionUser | None = None
    reason: str = ""

    def __bool__(self) -> bool:
        return self.ok


def authenticate(lookup: Callable[[str], User | None], username: str, password: str) -> AuthResult:
    username = username.strip()
    if not username or not password:
        return AuthResult(False, reason=EMPTY_INPUT)
    user = lookup(username)
    if user is None or not verify_password(password, user.password):
        logger.info("Failed login for %r", username)
        return AuthResult(False, reason=INVALID_CREDENTIALS)
    return AuthResult(True, SessionUser(user.username, user.role, user.name))


def viewer_session() -> SessionUser:
    """Read-only access without logging in."""
    return SessionUser(username="viewer", role=ROLE_VIEWER)


def users_lookup(users: list[User]) -> Callable[[str], User | None]:
    def lookup(username: str) -> User | None:
        return next((u for u in users if u.username == username), None)

    return lookup


def seed_admin(settings: Settings) -> User:
    """
    The single admin user every new data file starts with.
    Without KHS_ADMIN_PASSWORD the password is left empty, so nobody can log in
    as admin until the variable is set and the data is loaded again.
    """
    password = settings.admin_password
    if not password:
        logger.warning(
            "KHS_ADMIN_PASSWORD is not set; the seeded admin %r cannot log in until it is",
            settings.admin_username,
        )
    return User(
        id=SEED_ADMIN_ID,
        username=settings.admin_username,
        password=hash_password(password) if password else "",
        role=ROLE_ADMIN,
        name=settings.admin_name,
        created_at=now_iso(),
    )


def create_user(users: list[User], username: str, password: str, role: str, name: str) -> list[User] | None:
    """Returns the new user list, or None when the username is taken."""
    username = username.strip()
    if any(u.username == username for u in users):
        return None
    if role not in ROLES:
        raise ValueError(f"unknown role {role!r}")
    new_user = User(
        id=generate_id(),
        username=username,
        password=hash_password(password),
        role=role,
        name=name.strip(),
        created_at=now_iso(),
    )
    return [*users, new_user]


def change_password(users: list[User], username: str, new_password: str) -> list[User]:
    new_hash = hash_password(new_password)
    return [replace(u, password=new_hash) if u.username == username else u for u in users]
