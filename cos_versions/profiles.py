from __future__ import annotations
"""Saved connections to object storage endpoints."""
from dataclasses import dataclass
import json
import logging
from pathlib import Path

import keyring
from keyring.errors import KeyringError

KEYCHAIN_SERVICE = "cos-versions"

LOGGER = logging.getLogger(__name__)


@dataclass
class ConnectionProfile:
    """Endpoint and credentials for one object storage account."""

    name: str
    endpoint_url: str
    access_key: str
    secret_key: str = ""

    def connection_params(self) -> dict[str, str]:
        return {
            "endpoint_url": self.endpoint_url,
            "access_key": self.access_key,
            "secret_key": self.secret_key,
        }


class KeychainStore:
    """Keeps secret keys in the OS keychain."""

    def __init__(self, service_name: str = KEYCHAIN_SERVICE):
        self._service_name = service_name

    def get_secret(self, profile_name: str) -> str:
        if not profile_name:
            return ""
        try:
            return keyring.get_password(self._service_name, profile_name) or ""
        except KeyringError as exc:
            LOGGER.warning("Unable to read secret for profile %s: %s", profile_name, exc)
            return ""

    def set_secret(self, profile_name: str, secret_key: str) -> None:
        if not profile_name:
            return
        if not secret_key:
            self.delete_secret(profile_name)
            return
        try:
            keyring.set_password(self._service_name, profile_name, secret_key)
        except KeyringError as exc:
            LOGGER.warning("Unable to store secret for profile %s: %s", profile_name, exc)

    def delete_secret(self, profile_name: str) -> None:
        if not profile_name:
            return
        try:
            keyring.delete_password(self._service_name, profile_name)
        except KeyringError:
            # Nothing stored under that name.
            return


class ProfileStorage:
    """JSON file of profiles; secrets live in the keychain."""

    def __init__(self, storage_path: str | Path | None = None, keychain: KeychainStore | None = None):
        if storage_path is None:
            storage_path = Path.home() / ".cos_versions_connections.json"
        self._path = Path(storage_path)
        self._keychain = keychain or KeychainStore()

    def load(self) -> list[ConnectionProfile]:
        data = self._read_entries()
        profiles: list[ConnectionProfile] = []
        sanitized: list[dict[str, str]] = []
        saw_plaintext = False
        for entry in data:
            try:
                name = entry["name"]
                endpoint_url = entry["endpoint_url"]
                access_key = entry["access_key"]
            except (KeyError, TypeError):
                LOGGER.warning("Skipping malformed profile entry in %s", self._path)
                continue
            secret_key = entry.get("secret_key", "")
            if secret_key:
                saw_plaintext = True
                self._keychain.set_secret(name, secret_key)
            else:
                secret_key = self._keychain.get_secret(name)
            profiles.append(
                ConnectionProfile(
                    name=name,
                    endpoint_url=endpoint_url,
                    access_key=access_key,
                    secret_key=secret_key,
                )
            )
            sanitized.append(self._serialize(name, endpoint_url, access_key))
        if saw_plaintext:
            self._write_data(sanitized)
        return profiles

    def save(self, profiles: list[ConnectionProfile]) -> None:
        data = []
        for profile in profiles:
            self._keychain.set_secret(profile.name, profile.secret_key)
            data.append(self._serialize(profile.name, profile.endpoint_url, profile.access_key))
        existing_names = {
            entry["name"]
            for entry in self._read_entries()
            if isinstance(entry, dict) and isinstance(entry.get("name"), str) and entry["name"]
        }
        current_names = {profile.name for profile in profiles}
        for name in existing_names - current_names:
            self._keychain.delete_secret(name)
        self._write_data(data)

    def _read_entries(self) -> list:
        if not self._path.exists():
            return []
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            LOGGER.warning("Ignoring unreadable profile file %s: %s", self._path, exc)
            return []
        return data if isinstance(data, list) else []

    @staticmethod
    def _serialize(name: str, endpoint_url: str, access_key: str) -> dict[str, str]:
        return {"name": name, "endpoint_url": endpoint_url, "access_key": access_key}

    def _write_data(self, data: list[dict[str, str]]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(data, indent=2), encoding="utf-8")
