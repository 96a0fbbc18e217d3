import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from keyring.errors import KeyringError

from cos_versions.profiles import ConnectionProfile, KeychainStore, ProfileStorage


class FakeKeychain:
    def __init__(self):
        self.secrets = {}
        self.set_calls = []
        self.delete_calls = []

    def get_secret(self, profile_name: str) -> str:
        return self.secrets.get(profile_name, "")

    def set_secret(self, profile_name: str, secret_key: str) -> None:
        self.set_calls.append((profile_name, secret_key))
        self.secrets[profile_name] = secret_key

    def delete_secret(self, profile_name: str) -> None:
        self.delete_calls.append(profile_name)
        self.secrets.pop(profile_name, None)


class ProfileStorageTests(unittest.TestCase):
    def test_load_migrates_plaintext_secrets(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "connections.json"
            payload = [
                {
                    "name": "alpha",
                    "endpoint_url": "https://cos.one",
                    "access_key": "a",
                    "secret_key": "secret",
                }
            ]
            path.write_text(json.dumps(payload), encoding="utf-8")
            fake_keychain = FakeKeychain()
            storage = ProfileStorage(path, keychain=fake_keychain)

            profiles = storage.load()

            self.assertEqual("secret", profiles[0].secret_key)
            self.assertEqual([("alpha", "secret")], fake_keychain.set_calls)
            sanitized = json.loads(path.read_text(encoding="utf-8"))
            self.assertNotIn("secret_key", sanitized[0])

    def test_load_uses_keychain_when_secret_missing(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "connections.json"
            payload = [{"name": "alpha", "endpoint_url": "https://cos.one", "access_key": "a"}]
            path.write_text(json.dumps(payload), encoding="utf-8")
            fake_keychain = FakeKeychain()
            fake_keychain.secrets["alpha"] = "stored-secret"
            storage = ProfileStorage(path, keychain=fake_keychain)

            profiles = storage.load()

            self.assertEqual("stored-secret", profiles[0].secret_key)
            self.assertEqual([], fake_keychain.set_calls)

    def test_load_skips_malformed_entries(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "connections.json"
            payload = [
                {"name": "broken"},
                "not-a-profile",
                {"name": "alpha", "endpoint_url": "https://cos.one", "access_key": "a"},
            ]
            path.write_text(json.dumps(payload), encoding="utf-8")
            storage = ProfileStorage(path, keychain=FakeKeychain())

            profiles = storage.load()

            self.assertEqual(["alpha"], [profile.name for profile in profiles])

    def test_load_ignores_unreadable_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "connections.json"
            path.write_text("{not json", encoding="utf-8")
            storage = ProfileStorage(path, keychain=FakeKeychain())

            self.assertEqual([], storage.load())

    def test_save_deletes_removed_keychain_entries(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "connections.json"
            payload = [
                {"name": "alpha", "endpoint_url": "https://cos.one", "access_key": "a"},
                {"name": "beta", "endpoint_url": "https://cos.two", "access_key": "b"},
            ]
            path.write_text(json.dumps(payload), encoding="utf-8")
            fake_keychain = FakeKeychain()
            storage = ProfileStorage(path, keychain=fake_keychain)

            profiles = [
                ConnectionProfile(name="alpha", endpoint_url="https://cos.one", access_key="a", secret_key="secret"),
            ]
            storage.save(profiles)

            self.assertEqual(["beta"], fake_keychain.delete_calls)
            self.assertEqual([("alpha", "secret")], fake_keychain.set_calls)
            saved = json.loads(path.read_text(encoding="utf-8"))
            self.assertEqual(
                [{"name": "alpha", "endpoint_url": "https://cos.one", "access_key": "a"}],
                saved,
            )


class KeychainStoreTests(unittest.TestCase):
    def test_get_secret_returns_empty_on_keyring_failure(self):
        with mock.patch("cos_versions.profiles.keyring.get_password", side_effect=KeyringError("locked")):
            self.assertEqual("", KeychainStore().get_secret("alpha"))

    def test_set_secret_with_empty_value_deletes(self):
        with mock.patch("cos_versions.profiles.keyring.delete_password") as delete_password:
            KeychainStore(service_name="svc").set_secret("alpha", "")

        delete_password.assert_called_once_with("svc", "alpha")

    def test_set_secret_stores_under_service_name(self):
        with mock.patch("cos_versions.profiles.keyring.set_password") as set_password:
            KeychainStore().set_secret("alpha", "secret")

        set_password.assert_called_once_with("cos-versions", "alpha", "secret")


if __name__ == "__main__":
    unittest.main()
