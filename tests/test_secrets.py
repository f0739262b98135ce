"""Tests for the secret store backends."""

import pytest
from keyring.backends import fail

from db_dumper.application.exceptions import ConfigurationError
from db_dumper.application.output_paths import APP_NAME
from db_dumper.infrastructure.secrets import (
    EnvironmentSecretStore,
    KeyringSecretStore,
    PlaintextSecretStore,
    SecretRouter,
)


def test_plaintext_round_trip():
    store = PlaintextSecretStore()
    ref = store.save("pa:ss")
    assert ref == "plaintext:pa:ss"
    assert store.resolve(ref) == "pa:ss"


def test_environment_refs_read_variables(monkeypatch):
    monkeypatch.setenv("PROD_DB_PASSWORD", "from-env")
    store = EnvironmentSecretStore()
    assert store.resolve("env:PROD_DB_PASSWORD") == "from-env"
    assert store.resolve("env:UNSET_DB_PASSWORD_VAR") is None
    with pytest.raises(ConfigurationError):
        store.save("x")


def test_keyring_save_resolve_delete(memory_keyring):
    store = KeyringSecretStore()

    ref = store.save("s3cret")
    kind, account = ref.split(":", 1)

    assert kind == "keyring"
    assert memory_keyring.passwords == {(APP_NAME, account): "s3cret"}
    assert store.resolve(ref) == "s3cret"

    store.delete(ref)
    assert memory_keyring.passwords == {}
    assert store.resolve(ref) is None
    store.delete(ref)


def test_keyring_reuses_account_of_existing_ref(memory_keyring):
    store = KeyringSecretStore()
    ref = store.save("old")

    assert store.save("new", existing_ref=ref) == ref
    assert store.resolve(ref) == "new"
    assert store.save("other", existing_ref="plaintext:old") != ref
    assert len(memory_keyring.passwords) == 2


def test_keyring_ignores_foreign_refs():
    store = KeyringSecretStore()
    assert store.resolve("plaintext:abc") is None
    assert store.resolve("keyring:") is None


def test_router_saves_to_keyring_when_usable(memory_keyring):
    router = SecretRouter(
        KeyringSecretStore(),
        EnvironmentSecretStore(),
        fallback=PlaintextSecretStore(),
    )

    ref = router.save("s")

    assert ref.startswith("keyring:")
    assert router.resolve(ref) == "s"
    assert router.resolve("plaintext:legacy") == "legacy"


def test_router_falls_back_without_keyring_backend(caplog):
    router = SecretRouter(
        KeyringSecretStore(backend=fail.Keyring()),
        EnvironmentSecretStore(),
        fallback=PlaintextSecretStore(),
    )

    ref = router.save("s")

    assert ref == "plaintext:s"
    assert "falling back to plaintext" in caplog.text
    assert router.resolve("keyring:abc") is None


def test_router_dispatches_by_prefix(monkeypatch):
    monkeypatch.setenv("DB_PW", "env-secret")
    router = SecretRouter(PlaintextSecretStore(), EnvironmentSecretStore())

    assert router.save("s") == "plaintext:s"
    assert router.resolve("plaintext:s") == "s"
    assert router.resolve("env:DB_PW") == "env-secret"
    assert router.resolve("keychain:abc") is None
    assert router.resolve("") is None
    router.delete("keychain:abc")
