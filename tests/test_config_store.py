"""Tests for the JSON configuration store."""

import json

import pytest

from db_dumper.application.exceptions import ConfigParseError
from db_dumper.infrastructure.config_models import (
    SCHEMA_VERSION,
    ConfigDefaults,
    ConfigurationFile,
    new_target,
)
from db_dumper.infrastructure.config_store import (
    JsonConfigStore,
    delete,
    find_by_id_or_alias,
    upsert,
)


def _target(name, **fields):
    return new_target(
        environment="test",
        name=name,
        host="localhost",
        username="root",
        password_ref="password-ref",
        **fields,
    )


def test_missing_file_loads_empty_config(tmp_path):
    store = JsonConfigStore(tmp_path / "config.json")
    config = store.load()
    assert config.version == SCHEMA_VERSION
    assert config.databases == []
    assert not (tmp_path / "config.json").exists()


def test_persists_databases_and_honors_schema_version(tmp_path):
    store = JsonConfigStore(tmp_path / "config.json")
    config = store.load()
    entry = _target("sample-db")

    upsert(config, entry)
    store.save(config)

    saved = store.load()
    assert len(saved.databases) == 1
    assert saved.databases[0].id == entry.id
    assert saved.databases[0].environment == "test"

    delete(saved, entry.id)
    store.save(saved)
    assert store.load().databases == []


def test_round_trip_restamps_old_version(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "databases": [{
            "id": "abc",
            "dbType": "mysql",
            "environment": "local",
            "name": "sample-db",
            "host": "localhost",
            "username": "root",
            "passwordRef": "plaintext:x",
            "selectedFlags": ["quick"],
            "createdAt": "2024-01-01T00:00:00.000Z",
            "updatedAt": "2024-01-01T00:00:00.000Z",
        }],
    }))
    store = JsonConfigStore(path)

    first = store.load()
    store.save(first)
    second = store.load()

    assert first.version == second.version == SCHEMA_VERSION
    assert second.databases == first.databases
    assert json.loads(path.read_text())["version"] == SCHEMA_VERSION


def test_saved_file_uses_camel_case_keys(tmp_path):
    path = tmp_path / "config.json"
    store = JsonConfigStore(path)
    config = ConfigurationFile(
        defaults=ConfigDefaults(last_selected_id="abc", dump_root_override="/srv")
    )
    upsert(config, _target("sample-db", gzip_default=True))
    store.save(config)

    raw = json.loads(path.read_text())
    entry = raw["databases"][0]
    assert entry["passwordRef"] == "password-ref"
    assert entry["gzipDefault"] is True
    assert "alias" not in entry
    assert raw["defaults"] == {"lastSelectedId": "abc", "dumpRootOverride": "/srv"}


def test_save_backs_up_previous_file_and_leaves_no_temp(tmp_path):
    path = tmp_path / "config.json"
    store = JsonConfigStore(path)
    config = store.load()
    store.save(config)
    assert not (tmp_path / "backups").exists()

    upsert(config, _target("sample-db"))
    store.save(config)

    backups = list((tmp_path / "backups").glob("config.bak.*.json"))
    assert len(backups) == 1
    assert json.loads(backups[0].read_text())["databases"] == []
    assert not (tmp_path / "config.json.tmp").exists()


def test_custom_backup_dir(tmp_path):
    store = JsonConfigStore(tmp_path / "config.json", backup_dir=tmp_path / "old")
    store.save(ConfigurationFile())
    store.save(ConfigurationFile())
    assert len(list((tmp_path / "old").iterdir())) == 1


def test_invalid_json_raises_parse_error(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    with pytest.raises(ConfigParseError):
        JsonConfigStore(path).load()


def test_invalid_structure_raises_parse_error(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"version": 1, "databases": [{"id": "x"}]}))
    with pytest.raises(ConfigParseError):
        JsonConfigStore(path).load()


def test_undecodable_file_raises_parse_error(tmp_path):
    path = tmp_path / "config.json"
    path.write_bytes(b'{"version": 1, "databases": [], "x": "\xff"}')
    with pytest.raises(ConfigParseError):
        JsonConfigStore(path).load()


def test_unknown_keys_survive_round_trip(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "version": 1,
        "databases": [],
        "theme": "dark",
        "defaults": {"lastSelectedId": "a", "window": {"width": 800}},
    }))
    store = JsonConfigStore(path)

    store.save(store.load())

    saved = json.loads(path.read_text())
    assert saved["theme"] == "dark"
    assert saved["defaults"] == {"lastSelectedId": "a", "window": {"width": 800}}


def test_put_and_remove_persist(tmp_path):
    store = JsonConfigStore(tmp_path / "config.json")
    entry = _target("a", alias="shop")

    stored = store.put(entry)

    assert stored.id == entry.id
    assert store.find("shop").id == entry.id
    store.remove(entry.id)
    assert store.find(entry.id) is None


def test_upsert_replaces_in_place_and_refreshes_updated_at():
    config = ConfigurationFile()
    first, second, third = _target("a"), _target("b"), _target("c")
    for entry in (first, second, third):
        upsert(config, entry)

    edited = second.model_copy(
        update={"host": "db.internal", "updated_at": "2000-01-01T00:00:00.000Z"}
    )
    upsert(config, edited)

    assert [t.name for t in config.databases] == ["a", "b", "c"]
    assert config.databases[1].host == "db.internal"
    assert config.databases[1].id == second.id
    assert config.databases[1].updated_at != "2000-01-01T00:00:00.000Z"


def test_delete_after_upsert_restores_membership():
    config = ConfigurationFile()
    upsert(config, _target("a"))
    before = [t.id for t in config.databases]

    entry = _target("b")
    delete(upsert(config, entry), entry.id)

    assert [t.id for t in config.databases] == before


def test_delete_unknown_id_is_a_no_op():
    config = ConfigurationFile()
    upsert(config, _target("a"))
    delete(config, "missing")
    assert len(config.databases) == 1


def test_find_by_id_or_alias():
    config = ConfigurationFile()
    plain = _target("a")
    aliased = _target("b", alias="shop")
    upsert(config, plain)
    upsert(config, aliased)

    assert find_by_id_or_alias(config, plain.id).name == "a"
    assert find_by_id_or_alias(config, "shop").id == aliased.id
    assert find_by_id_or_alias(config, "nothing") is None
