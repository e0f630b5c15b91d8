from unittest import TestCase

from db import DATA_KEY, TOKEN_KEY

from tests.fakes import temp_store


class LocalStoreTest(TestCase):
    def setUp(self):
        self.store, self._tmp = temp_store()

    def tearDown(self):
        self._tmp.cleanup()

    def test_save_then_load(self):
        self.assertTrue(self.store.save(DATA_KEY, {"members": [{"id": "a"}]}))
        self.assertEqual(self.store.load(DATA_KEY), {"members": [{"id": "a"}]})

    def test_overwrites_existing_key(self):
        self.store.save(TOKEN_KEY, "one")
        self.store.save(TOKEN_KEY, "two")
        self.assertEqual(self.store.load(TOKEN_KEY), "two")

    def test_missing_key_returns_default(self):
        self.assertEqual(self.store.load("nothing", {"x": 1}), {"x": 1})

    def test_unserialisable_value_is_not_raised(self):
        self.assertFalse(self.store.save(DATA_KEY, {"bad": object()}))
        self.assertIsNone(self.store.load(DATA_KEY))

    def test_corrupt_value_returns_default(self):
        self.store.save(DATA_KEY, [])
        with self.store.get_conn() as conn:
            conn.execute("UPDATE kv_store SET value = ? WHERE key = ?", ("{not json", DATA_KEY))
        self.assertEqual(self.store.load(DATA_KEY, "fallback"), "fallback")

    def test_delete(self):
        self.store.save(TOKEN_KEY, "abc")
        self.store.delete(TOKEN_KEY)
        self.assertEqual(self.store.load(TOKEN_KEY, ""), "")
