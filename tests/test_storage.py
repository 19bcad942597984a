import datetime
import json
import os
import stat

import pytest

from keyguard import config
from keyguard.audit import SecurityEventLog
from keyguard.fingerprint import DeviceFingerprint
from keyguard.storage import ApiKeyStore, KeyAge, KeyStore
from keyguard.vault import CredentialVault


class FakeNow:
    def __init__(self):
        self.value = datetime.datetime(2025, 1, 1, tzinfo=datetime.timezone.utc)

    def __call__(self):
        return self.value


@pytest.fixture
def store(tmp_path):
    return KeyStore(str(tmp_path / "storage.json"))


@pytest.fixture
def now():
    return FakeNow()


@pytest.fixture
def api_keys(store, vault, now):
    return ApiKeyStore(store, vault, now=now)


def test_key_store_round_trip(store):
    assert store.get("missing") is None
    store.set("a", "1")
    store.set("b", "2")
    assert store.get("a") == "1"
    assert store.keys() == ["a", "b"]
    assert store.remove("a")
    assert not store.remove("a")
    assert store.keys() == ["b"]


@pytest.mark.skipif(os.name == "nt", reason="POSIX permissions")
def test_key_store_file_is_owner_only(store):
    store.set("a", "1")
    mode = stat.S_IMODE(os.stat(store.filepath).st_mode)
    assert mode == 0o600


def test_malformed_store_reads_as_empty(store):
    with open(store.filepath, "w") as f:
        f.write("{not json")
    assert store.get("a") is None
    store.set("a", "1")
    assert store.get("a") == "1"


def test_non_object_store_reads_as_empty(store):
    with open(store.filepath, "w") as f:
        json.dump(["a"], f)
    assert store.keys() == []


def test_api_key_is_stored_encrypted(api_keys, store):
    api_keys.save_api_key("openai", "sk-proj-secret")
    raw = store.get("openai_api_key")
    assert raw and "sk-proj-secret" not in raw
    assert api_keys.load_api_key("openai") == "sk-proj-secret"
    assert api_keys.load_api_keys() == {"openai": "sk-proj-secret"}


def test_missing_key_is_none(api_keys):
    assert api_keys.load_api_key("claude") is None


def test_undecryptable_key_degrades_to_none(api_keys, store):
    other_device = CredentialVault(DeviceFingerprint("Other/1.0", "de-DE", 800, 600))
    store.set("claude_api_key", other_device.encrypt("sk-ant-elsewhere"))
    assert api_keys.load_api_key("claude") is None

    store.set("google_api_key", "garbage")
    assert api_keys.load_api_key("google") is None


def test_delete_and_clear(api_keys, store):
    api_keys.save_api_key("openai", "sk-1")
    api_keys.save_api_key("google", "g-1")
    assert api_keys.delete_api_key("openai")
    assert not api_keys.delete_api_key("openai")
    assert store.get("openai_api_key_created") is None

    api_keys.clear_api_keys()
    assert store.keys() == []


def test_unknown_provider(api_keys):
    with pytest.raises(ValueError):
        api_keys.save_api_key("mistral", "x")


def test_key_age(api_keys, now):
    api_keys.save_api_key("openai", "sk-1")
    name = api_keys.entry_name("openai")
    assert api_keys.check_api_key_age(name) == KeyAge(False, 0)

    now.value += datetime.timedelta(days=config.API_KEY_ROTATION_DAYS)
    assert api_keys.check_api_key_age(name) == KeyAge(False, config.API_KEY_ROTATION_DAYS)

    now.value += datetime.timedelta(days=1)
    assert api_keys.check_api_key_age(name) == KeyAge(True, config.API_KEY_ROTATION_DAYS + 1)


def test_key_age_missing_or_malformed(api_keys, store):
    assert api_keys.check_api_key_age("openai_api_key") == KeyAge(False, 0)
    store.set("openai_api_key_created", "yesterday")
    assert api_keys.check_api_key_age("openai_api_key") == KeyAge(False, 0)


def test_security_events_are_bounded(store):
    log = SecurityEventLog(store, user_agent="test-agent")
    for i in range(config.SECURITY_EVENTS_MAX + 5):
        log.log_security_event("login_failed", {"n": i}, "warning")

    events = log.get_security_events()
    assert len(events) == config.SECURITY_EVENTS_MAX
    assert events[0]["details"] == {"n": 5}
    assert events[-1]["event"] == "login_failed"
    assert events[-1]["severity"] == "warning"
    assert events[-1]["user_agent"] == "test-agent"

    log.clear_security_events()
    assert log.get_security_events() == []


def test_security_event_rejects_unknown_severity(store):
    with pytest.raises(ValueError):
        SecurityEventLog(store).log_security_event("x", severity="critical")


def test_security_events_without_store():
    log = SecurityEventLog()
    entry = log.log_security_event("session_timeout")
    assert entry["event"] == "session_timeout"
    assert log.get_security_events() == []
