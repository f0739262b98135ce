"""Shared fixtures for the db_dumper tests."""

import sys
import textwrap

import keyring
import keyring.errors
import pytest
from keyring.backend import KeyringBackend

from db_dumper.infrastructure.config_models import new_target

_FAKE_MYSQLDUMP = textwrap.dedent(
    """\
    import json
    import os
    import sys
    import time

    log = os.environ.get("FAKE_MYSQLDUMP_LOG")
    if log:
        with open(log, "w") as fh:
            json.dump(
                {"argv": sys.argv[1:], "password": os.environ.get("MYSQL_PWD")},
                fh,
            )

    time.sleep(float(os.environ.get("FAKE_MYSQLDUMP_SLEEP", "0")))
    lines = int(os.environ.get("FAKE_MYSQLDUMP_LINES", "10"))
    sys.stdout.write("INSERT INTO t VALUES (1);\\n" * lines)
    sys.stdout.flush()
    sys.stderr.write(os.environ.get("FAKE_MYSQLDUMP_STDERR", ""))
    sys.exit(int(os.environ.get("FAKE_MYSQLDUMP_EXIT", "0")))
    """
)


@pytest.fixture
def fake_mysqldump(tmp_path):
    """An executable standing in for mysqldump, steered by FAKE_* env vars."""
    script = tmp_path / "bin" / "mysqldump"
    script.parent.mkdir()
    script.write_text(f"#!{sys.executable}\n{_FAKE_MYSQLDUMP}")
    script.chmod(0o755)
    return script


@pytest.fixture
def sample_target():
    return new_target(
        environment="local",
        name="sample-db",
        host="localhost",
        username="root",
        password_ref="plaintext:secret",
        selected_flags=["single-transaction", "quick"],
    )


class MemoryKeyring(KeyringBackend):
    """A keyring backend holding passwords in a dict."""

    priority = 1

    def __init__(self):
        super().__init__()
        self.passwords = {}

    def get_password(self, service, username):
        return self.passwords.get((service, username))

    def set_password(self, service, username, password):
        self.passwords[(service, username)] = password

    def delete_password(self, service, username):
        if self.passwords.pop((service, username), None) is None:
            raise keyring.errors.PasswordDeleteError(username)


@pytest.fixture(autouse=True)
def memory_keyring():
    """Keeps every test away from the real system keyring."""
    previous = keyring.get_keyring()
    backend = MemoryKeyring()
    keyring.set_keyring(backend)
    yield backend
    keyring.set_keyring(previous)
