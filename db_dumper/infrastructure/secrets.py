"""
Secret store backends.

A reference is `<kind>:<payload>`; the kind prefix selects the backend so
the rest of the application never needs to know where a password lives.
"""

import logging
import os
import uuid
from typing import Dict, Optional

import keyring
import keyring.errors
from keyring.backend import KeyringBackend
from keyring.backends import fail

from ..application.domain import SecretStore
from ..application.exceptions import ConfigurationError, SecretStoreError
from ..application.output_paths import APP_NAME


def split_ref(ref: Optional[str]):
    """Returns (kind, payload), or (None, None) for malformed refs."""
    if not ref or ":" not in ref:
        return None, None
    kind, payload = ref.split(":", 1)
    return kind, payload


class KeyringSecretStore(SecretStore):
    """
    Keeps secrets in the operating system credential store through
    `keyring`. The reference payload is the account name under the
    application's service name.
    """

    kind = "keyring"

    def __init__(
        self,
        service_name: str = APP_NAME,
        backend: Optional[KeyringBackend] = None,
    ):
        """Initializes the store; `backend` defaults to keyring's choice."""
        self.logger = logging.getLogger(self.__class__.__name__)
        self.service_name = service_name
        self.backend = backend

    def _keyring(self) -> KeyringBackend:
        return self.backend or keyring.get_keyring()

    @property
    def available(self) -> bool:
        return not isinstance(self._keyring(), fail.Keyring)

    def _account(self, ref: Optional[str]) -> Optional[str]:
        kind, account = split_ref(ref)
        return account if kind == self.kind and account else None

    def save(self, secret: str, existing_ref: Optional[str] = None) -> str:
        """
        Store `secret`, reusing the account of a previous keyring ref.

        Raises:
            SecretStoreError: If the credential store refuses the write.
        """
        account = self._account(existing_ref) or str(uuid.uuid4())
        try:
            self._keyring().set_password(self.service_name, account, secret)
        except keyring.errors.KeyringError as e:
            raise SecretStoreError(f"Could not store password: {e}") from e
        return f"{self.kind}:{account}"

    def resolve(self, ref: str) -> Optional[str]:
        account = self._account(ref)
        if account is None or not self.available:
            return None
        try:
            return self._keyring().get_password(self.service_name, account)
        except keyring.errors.KeyringError as e:
            raise SecretStoreError(f"Could not read password: {e}") from e

    def delete(self, ref: str):
        account = self._account(ref)
        if account is None or not self.available:
            return
        try:
            self._keyring().delete_password(self.service_name, account)
        except keyring.errors.PasswordDeleteError:
            self.logger.debug(f"No stored password for {account}")


class PlaintextSecretStore(SecretStore):
    """Keeps the secret inside the reference itself."""

    kind = "plaintext"

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    def save(self, secret: str, existing_ref: Optional[str] = None) -> str:
        self.logger.warning(
            "Storing password in plaintext in the configuration file."
        )
        return f"{self.kind}:{secret}"

    def resolve(self, ref: str) -> Optional[str]:
        kind, payload = split_ref(ref)
        return payload if kind == self.kind else None

    def delete(self, ref: str):
        pass


class EnvironmentSecretStore(SecretStore):
    """Reads secrets from environment variables named by the reference."""

    kind = "env"

    def save(self, secret: str, existing_ref: Optional[str] = None) -> str:
        raise ConfigurationError(
            "Environment references are read-only; export the variable instead."
        )

    def resolve(self, ref: str) -> Optional[str]:
        kind, variable = split_ref(ref)
        if kind != self.kind or not variable:
            return None
        return os.environ.get(variable)

    def delete(self, ref: str):
        pass


class SecretRouter(SecretStore):
    """
    Dispatches to a backend by the reference's kind prefix.

    New secrets go to `primary`; when it is unavailable they go to
    `fallback` instead.
    """

    def __init__(
        self,
        primary: SecretStore,
        *others: SecretStore,
        fallback: Optional[SecretStore] = None,
    ):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.primary = primary
        self.fallback = fallback
        stores = (primary, *others) + ((fallback,) if fallback else ())
        self.backends: Dict[str, SecretStore] = {
            backend.kind: backend for backend in stores
        }

    def _backend_for(self, ref: Optional[str]) -> Optional[SecretStore]:
        kind, _ = split_ref(ref)
        return self.backends.get(kind) if kind else None

    def save(self, secret: str, existing_ref: Optional[str] = None) -> str:
        if self.primary.available or self.fallback is None:
            return self.primary.save(secret, existing_ref)
        self.logger.warning(
            f"No usable {self.primary.kind} backend, "
            f"falling back to {self.fallback.kind}."
        )
        return self.fallback.save(secret, existing_ref)

    def resolve(self, ref: str) -> Optional[str]:
        backend = self._backend_for(ref)
        return backend.resolve(ref) if backend else None

    def delete(self, ref: str):
        backend = self._backend_for(ref)
        if backend:
            backend.delete(ref)
