import sqlite3

from flow_app.program.storage import COMPLETED_SESSIONS_KEY, PROFILE_KEY, Storage


def test_save_and_load_roundtrip(tmp_path):
    storage = Storage(tmp_path / "test.db")
    assert storage.save("answer", {"value": 42})
    assert storage.load("answer") == {"value": 42}
    assert storage.load("missing", "fallback") == "fallback"


def test_completed_sessions_keep_set_semantics(tmp_path):
    storage = Storage(tmp_path / "test.db")
    keys = {"week1-Tue/Thu-Tue Oct 20 2026", "week1-Mon/Wed/Fri-Mon Oct 19 2026"}
    assert storage.save(COMPLETED_SESSIONS_KEY, keys)
    loaded = storage.load(COMPLETED_SESSIONS_KEY, set())
    assert isinstance(loaded, set)
    assert loaded == keys
    with sqlite3.connect(tmp_path / "test.db") as conn:
        raw = conn.execute("SELECT value FROM kv_store WHERE key = ?", (COMPLETED_SESSIONS_KEY,)).fetchone()[0]
    assert raw.startswith("[")


def test_corrupt_value_falls_back_to_default(tmp_path):
    storage = Storage(tmp_path / "test.db")
    with sqlite3.connect(tmp_path / "test.db") as conn:
        conn.execute("INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)", ("broken", "{nope", "now"))
    assert storage.load("broken", []) == []


def test_ledger_with_non_string_entries_falls_back_to_default(tmp_path):
    storage = Storage(tmp_path / "test.db")
    with sqlite3.connect(tmp_path / "test.db") as conn:
        conn.execute(
            "INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)",
            (COMPLETED_SESSIONS_KEY, '[["a"], {"b": 1}]', "now"),
        )
    assert storage.load(COMPLETED_SESSIONS_KEY, set()) == set()


def test_unserialisable_value_reports_failure(tmp_path):
    storage = Storage(tmp_path / "test.db")
    assert storage.save("bad", object()) is False


def test_read_failure_returns_default(tmp_path):
    storage = Storage(tmp_path / "test.db")
    with sqlite3.connect(tmp_path / "test.db") as conn:
        conn.execute("DROP TABLE kv_store")
    assert storage.load("anything", "default") == "default"
    assert storage.save("anything", 1) is False


def test_profile_shape_validation(tmp_path):
    storage = Storage(tmp_path / "test.db")
    default = {"preferences": {}, "currentWeek": 1}
    storage.save(PROFILE_KEY, {"currentWeek": 5})
    assert storage.load_profile(default) is default
    storage.save(PROFILE_KEY, {"currentWeek": 5, "preferences": {"theme": "dark"}})
    assert storage.load_profile(default)["currentWeek"] == 5


def test_clear_and_backup(tmp_path):
    storage = Storage(tmp_path / "test.db")
    storage.save("a", 1)
    backup = storage.backup_database()
    assert backup.exists()
    assert storage.clear()
    assert storage.load("a") is None
    assert Storage(backup).load("a") == 1
