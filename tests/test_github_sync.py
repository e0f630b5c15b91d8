import json
from unittest import TestCase

import requests

import auth
from db import TOKEN_KEY
from github_sync import (
    CACHED,
    CONFLICT,
    CREATED,
    FAILED,
    FALLBACK,
    FETCHED,
    NOT_CONFIGURED,
    SAVED,
    GitHubSync,
)
from models import Expense, Member, Puja

from tests.fakes import FakeClock, FakeGitHub, make_settings, temp_store


class GitHubSyncTestCase(TestCase):
    def setUp(self):
        self.settings = make_settings()
        self.store, self._tmp = temp_store()
        self.github = FakeGitHub()
        self.clock = FakeClock()
        self.client = self.make_client()
        self.client.initialize("ghp_test")
        self.url = self.settings.contents_url

    def tearDown(self):
        self._tmp.cleanup()

    def make_client(self):
        return GitHubSync(self.settings, self.store, session=self.github, clock=self.clock)


class FetchTest(GitHubSyncTestCase):
    def test_missing_file_is_created_with_defaults(self):
        result = self.client.fetch()
        self.assertEqual(result.status, CREATED)
        db = result.database
        self.assertEqual(len(db.users), 1)
        self.assertEqual(db.users[0].username, "admin")
        self.assertEqual(db.users[0].role, "admin")
        for name in ("members", "pujas", "contributions", "income", "expenses", "notices"):
            self.assertEqual(getattr(db, name), [])
        self.assertEqual(self.github.put_calls, 1)
        self.assertIn(self.url, self.github.files)

    def test_created_file_is_read_back_unchanged(self):
        created = self.client.fetch().database
        puts = self.github.put_calls
        again = self.client.fetch(force=True)
        self.assertEqual(again.status, FETCHED)
        self.assertEqual(again.database, created)
        self.assertEqual(self.github.put_calls, puts)

    def test_seeded_admin_can_log_in(self):
        db = self.client.fetch().database
        result = auth.authenticate(auth.users_lookup(db.users), "admin", "admin-secret")
        self.assertTrue(result.ok)

    def test_cache_is_used_within_window(self):
        self.client.fetch()
        gets = self.github.get_calls
        self.clock.advance(59)
        self.assertEqual(self.client.fetch().status, CACHED)
        self.assertEqual(self.github.get_calls, gets)
        self.clock.advance(2)
        self.assertEqual(self.client.fetch().status, FETCHED)
        self.assertEqual(self.github.get_calls, gets + 1)

    def test_missing_fields_are_repaired(self):
        self.github.seed(self.url, json.dumps({"members": [{"id": "m1", "name": "A"}]}))
        result = self.client.fetch()
        self.assertEqual(result.status, FETCHED)
        self.assertEqual([m.id for m in result.database.members], ["m1"])
        self.assertEqual(result.database.expenses, [])
        self.assertEqual(len(result.database.users), 1)

    def test_network_error_falls_back_to_defaults(self):
        self.github.fail_with = requests.ConnectionError("offline")
        result = self.client.fetch()
        self.assertEqual(result.status, FALLBACK)
        self.assertIn("offline", result.error)
        self.assertEqual(result.database.members, [])
        self.assertEqual(len(result.database.users), 1)

    def test_auth_error_falls_back(self):
        self.github.get_status = 401
        self.assertEqual(self.client.fetch().status, FALLBACK)

    def test_undecodable_file_falls_back(self):
        self.github.seed(self.url, "this is not json")
        self.assertEqual(self.client.fetch().status, FALLBACK)

    def test_without_token(self):
        self.client.clear_token()
        result = self.client.fetch()
        self.assertEqual(result.status, NOT_CONFIGURED)
        self.assertEqual(self.github.get_calls, 0)
        self.assertEqual(len(result.database.users), 1)

    def test_returned_database_is_a_copy_of_the_cache(self):
        db = self.client.fetch().database
        db.members.append(Member(id="m1", name="A"))
        self.assertEqual(self.client.fetch().database.members, [])


class SaveTest(GitHubSyncTestCase):
    def test_round_trip(self):
        db = self.client.fetch().database
        db.members.append(Member(id="m1", name="Example Name", designation="সদস্য", phone="017",
                                 created_at="2024-01-01T00:00:00.000Z"))
        db.pujas.append(Puja(id="p1", name="Durga", budget=1000.0, date="2024-10-10"))
        db.expenses.append(Expense(id="e1", description="Lights", amount=250.5, date="2024-10-05",
                                   puja_id="p1", receipt_no="R-7"))
        self.assertTrue(self.client.save_database(db))

        fetched = self.client.fetch(force=True).database
        for name in ("members", "pujas", "contributions", "income", "expenses", "notices", "users"):
            self.assertEqual(getattr(fetched, name), getattr(db, name))

    def test_update_sends_current_sha(self):
        self.client.fetch()
        sha = self.github.files[self.url][1]
        result = self.client.save_database(self.client.fetch().database)
        self.assertEqual(result.status, SAVED)
        body = self.github.put_bodies[-1]
        self.assertEqual(body["sha"], sha)
        self.assertEqual(body["branch"], "main")
        self.assertTrue(body["message"].startswith("Update database"))

    def test_first_write_has_no_sha(self):
        self.client.fetch()
        self.assertNotIn("sha", self.github.put_bodies[0])

    def test_stamps_a_copy(self):
        db = self.client.fetch().database
        db.last_updated = "old"
        result = self.client.save_database(db)
        self.assertEqual(db.last_updated, "old")
        self.assertNotEqual(result.database.last_updated, "old")
        self.assertEqual(self.github.document(self.url)["lastUpdated"], result.database.last_updated)

    def test_success_refreshes_cache(self):
        db = self.client.fetch().database
        self.clock.advance(50)
        db.members.append(Member(id="m1", name="A"))
        self.client.save_database(db)
        self.clock.advance(30)
        gets = self.github.get_calls
        result = self.client.fetch()
        self.assertEqual(result.status, CACHED)
        self.assertEqual([m.id for m in result.database.members], ["m1"])
        self.assertEqual(self.github.get_calls, gets)

    def test_conflict_is_reported(self):
        db = self.client.fetch().database
        self.github.conflict_next_put = True
        result = self.client.save_database(db)
        self.assertFalse(result)
        self.assertEqual(result.status, CONFLICT)
        # cache dropped so the next fetch sees the remote state
        self.client.fetch()
        self.assertEqual(self.github.get_calls, 4)

    def test_network_failure_returns_false(self):
        db = self.client.fetch().database
        self.github.fail_with = requests.ConnectionError("offline")
        result = self.client.save_database(db)
        self.assertFalse(result)
        self.assertEqual(result.status, FAILED)

    def test_without_token(self):
        self.client.clear_token()
        result = self.client.save_database(self.client.default_database())
        self.assertEqual(result.status, NOT_CONFIGURED)
        self.assertEqual(self.github.put_calls, 0)


class TokenTest(GitHubSyncTestCase):
    def test_token_survives_restart(self):
        other = self.make_client()
        self.assertTrue(other.is_initialized())
        self.assertEqual(other.get_token(), "ghp_test")

    def test_clear_token(self):
        self.client.clear_token()
        self.assertFalse(self.client.is_initialized())
        self.assertEqual(self.store.load(TOKEN_KEY, ""), "")
        self.assertFalse(self.make_client().is_initialized())


class AutoSyncTest(GitHubSyncTestCase):
    def test_pending_changes_are_written_once(self):
        self.client.fetch()
        snapshots = []

        def snapshot():
            db = self.client.default_database()
            snapshots.append(db)
            return db

        self.client.start_auto_sync(snapshot)
        puts = self.github.put_calls
        self.client.mark_pending_changes()
        self.assertTrue(self.client.has_pending_changes)
        self.assertIsNone(self.client.poll_pending())
        self.clock.advance(1)
        self.assertTrue(self.client.poll_pending())
        self.assertIsNone(self.client.poll_pending())
        self.assertEqual(self.github.put_calls, puts + 1)
        self.assertEqual(len(snapshots), 1)
        self.assertFalse(self.client.has_pending_changes)

    def test_flush_without_auto_sync(self):
        self.assertIsNone(self.client.flush_pending())

    def test_stopped_auto_sync_writes_nothing(self):
        self.client.start_auto_sync(self.client.default_database)
        self.client.mark_pending_changes()
        self.client.stop_auto_sync()
        self.clock.advance(60)
        self.assertIsNone(self.client.poll_pending())
        self.assertFalse(self.client.has_pending_changes)
        self.assertEqual(self.github.put_calls, 0)
