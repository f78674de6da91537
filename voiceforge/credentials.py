"""OS keychain storage for the ElevenLabs API key.

Responsibilities:
- Keep the provider key out of config files and shell history.
- Treat a missing or failing keychain backend as "no stored key".
- Never echo the key itself in messages.

Key types:
- `CredentialStore`: the operations the CLI and server rely on.
- `KeyringCredentialStore`: implementation on top of `keyring`.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import ModuleType

import keyring
from keyring.errors import KeyringError

from .parsing import normalize_optional_string

_SERVICE = "voiceforge"
_ACCOUNT = "elevenlabs_api_key"


class CredentialStore:
    """Abstract API-key store."""

    def is_available(self) -> bool:
        """Report whether the store can read and write keys."""

        raise NotImplementedError

    def get_api_key(self) -> str | None:
        """Return the stored key, or `None`."""

        raise NotImplementedError

    def set_api_key(self, api_key: str) -> None:
        """Store `api_key`, replacing any previous value."""

        raise NotImplementedError

    def clear_api_key(self) -> bool:
        """Remove the stored key; return `False` when nothing was stored."""

        raise NotImplementedError


@dataclass(slots=True)
class KeyringCredentialStore(CredentialStore):
    """API-key store using the platform keychain through `keyring`."""

    service_name: str = _SERVICE
    account_name: str = _ACCOUNT

    def _load_keyring_module(self) -> ModuleType:
        """Return the keyring module; tests substitute an in-memory double."""

        return keyring

    def is_available(self) -> bool:
        """Return `True` unless the active backend is keyring's fail backend."""

        backend = self._load_keyring_module().get_keyring()
        return getattr(backend, "priority", 0) > 0

    def get_api_key(self) -> str | None:
        """Read the key; backend errors and blank values read as missing."""

        if not self.is_available():
            return None
        try:
            stored = self._load_keyring_module().get_password(
                self.service_name, self.account_name
            )
        except KeyringError:
            return None
        return normalize_optional_string(stored)

    def set_api_key(self, api_key: str) -> None:
        """Write a trimmed key to the keychain.

        Raises:
            RuntimeError: No usable keyring backend is configured.
            ValueError: The key is blank.
        """

        if not self.is_available():
            raise RuntimeError(
                "Secure credential storage is unavailable because no keyring backend "
                "is configured."
            )
        cleaned = normalize_optional_string(api_key)
        if cleaned is None:
            raise ValueError("API key must be a non-empty string.")
        self._load_keyring_module().set_password(self.service_name, self.account_name, cleaned)

    def clear_api_key(self) -> bool:
        """Delete the stored key when there is one."""

        if self.get_api_key() is None:
            return False
        self._load_keyring_module().delete_password(self.service_name, self.account_name)
        return True


def create_credential_store() -> CredentialStore:
    """Return the keyring-backed store used by default."""

    return KeyringCredentialStore()
