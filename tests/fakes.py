"""In-memory stand-ins for the GitHub contents API, the clock and settings."""

import base64
import hashlib
import json
import tempfile
from pathlib import Path

import requests

from config import Settings
from db import LocalStore


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeResponse:
    def __init__(self, status_code, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text or json.dumps(payload or {})

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("no JSON body")
        return self._payload

    def raise_for_status(self):
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} error", response=self)


class FakeGitHub:
    """Session-like object serving one repository's files."""

    def __init__(self):
        self.files = {}  # url -> (decoded text, sha)
        self.get_calls = 0
        self.put_calls = 0
        self.put_bodies = []
        self.fail_with = None  # exception raised by the next request
        self.get_status = None  # forced status for GETs (e.g. 401)
        self.conflict_next_put = False

    def seed(self, url, text):
        self.files[url] = (text, hashlib.sha1(text.encode("utf-8")).hexdigest())

    def text(self, url):
        return self.files[url][0]

    def document(self, url):
        return json.loads(self.text(url))

    def _maybe_fail(self):
        if self.fail_with is not None:
            exc, self.fail_with = self.fail_with, None
            raise exc

    def get(self, url, params=None, headers=None, timeout=None):
        self.get_calls += 1
        self._maybe_fail()
        if self.get_status is not None:
            return FakeResponse(self.get_status, {"message": "forced"})
        if url not in self.files:
            return FakeResponse(404, {"message": "Not Found"})
        text, sha = self.files[url]
        encoded = base64.b64encode(text.encode("utf-8")).decode("ascii")
        # GitHub wraps the base64 body at 60 characters
        wrapped = "\n".join(encoded[i:i + 60] for i in range(0, len(encoded), 60))
        return FakeResponse(200, {"content": wrapped, "sha": sha, "encoding": "base64"})

    def put(self, url, json=None, headers=None, timeout=None):
        self.put_calls += 1
        self._maybe_fail()
        self.put_bodies.append(json)
        current = self.files.get(url)
        if self.conflict_next_put or (current and json.get("sha") != current[1]):
            self.conflict_next_put = False
            return FakeResponse(409, {"message": "sha mismatch"})
        text = base64.b64decode(json["content"]).decode("utf-8")
        self.seed(url, text)
        return FakeResponse(201 if current is None else 200, {"content": {"sha": self.files[url][1]}})


def make_settings(**overrides):
    values = dict(
        github_owner="example-org",
        github_repo="khs-data",
        admin_username="admin",
        admin_password="admin-secret",
        cache_seconds=60.0,
        debounce_seconds=1.0,
        autosync_seconds=30.0,
    )
    values.update(overrides)
    return Settings(**values)


def temp_store():
    """LocalStore on a throwaway SQLite file; returns (store, tempdir)."""
    tmp = tempfile.TemporaryDirectory()
    return LocalStore(Path(tmp.name) / "test.db"), tmp
