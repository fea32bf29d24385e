import json
import unittest
from unittest import mock

from helpers import client_user, memory_store

from skilllink.auth.credentials import ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, USER_KEY, CredentialStore
from skilllink.db import crud


class KeyValueStoreTests(unittest.TestCase):
    def setUp(self):
        self.store = memory_store()

    def test_missing_key_is_none(self):
        self.assertIsNone(self.store.get("nothing"))

    def test_set_overwrites(self):
        self.store.set("k", "one")
        self.store.set("k", "two")
        self.assertEqual(self.store.get("k"), "two")
        self.assertEqual(self.store.keys(), ["k"])

    def test_remove_many_and_missing(self):
        self.store.set_many({"a": "1", "b": "2", "c": "3"})
        self.store.remove("a", "c", "zzz")
        self.assertEqual(self.store.keys(), ["b"])

    def test_prefix_listing_escapes_wildcards(self):
        self.store.set_many({"msg_1": "x", "msgX1": "y", "other": "z"})
        self.assertEqual(self.store.keys("msg_"), ["msg_1"])

    def test_set_many_is_all_or_nothing(self):
        self.store.set("a", "old")
        original = crud.upsert_entry

        def flaky(session, key, value):
            if key == "b":
                raise RuntimeError("disk full")
            return original(session, key, value)

        with mock.patch("skilllink.db.store.upsert_entry", side_effect=flaky):
            with self.assertRaises(RuntimeError):
                self.store.set_many({"a": "new", "b": "new"})

        self.assertEqual(self.store.get("a"), "old")
        self.assertIsNone(self.store.get("b"))


class CredentialStoreTests(unittest.TestCase):
    def setUp(self):
        self.store = memory_store()
        self.credentials = CredentialStore(self.store)

    def test_save_and_clear_together(self):
        self.credentials.save_session("acc", "ref", client_user())
        self.assertEqual(self.store.keys(), sorted([ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, USER_KEY]))
        self.assertEqual(self.credentials.stored_user().id, "c1")

        self.credentials.clear()
        self.assertEqual(self.store.keys(), [])

    def test_user_mirror_is_camel_case(self):
        self.credentials.store_user(client_user())
        stored = json.loads(self.store.get(USER_KEY))
        self.assertEqual(stored["role"], "client")
        self.assertIn("jobsPosted", stored)

    def test_unreadable_mirror_is_none(self):
        self.store.set(USER_KEY, "{broken")
        self.assertIsNone(self.credentials.stored_user())
        self.store.set(USER_KEY, json.dumps({"id": "x", "role": "admin"}))
        self.assertIsNone(self.credentials.stored_user())

    def test_legacy_type_key(self):
        self.store.set(USER_KEY, json.dumps({"id": "w7", "name": "Old", "email": "o@example.com", "type": "worker"}))
        user = self.credentials.stored_user()
        self.assertEqual(user.role, "worker")

    def test_opaque_access_token_is_not_valid(self):
        self.credentials.save_session("opaque-token", "ref", client_user())
        self.assertFalse(self.credentials.has_valid_access_token())


if __name__ == "__main__":
    unittest.main()
