"""Tests for the sqlite key/value store."""

from server.kv_db import SqliteStore
from stellarmind.store.sessions import SessionManager
from stellarmind.models.session import SessionData


class TestSqliteStore:
    """Test get/put/delete against a temporary database."""

    def test_put_get_delete(self, tmp_path):
        store = SqliteStore(tmp_path / "kv.db")
        store.init_db()

        assert store.get("missing") is None
        store.put("k", b"one")
        store.put("k", "二".encode("utf-8"))
        assert store.get("k").decode("utf-8") == "二"

        store.delete("k")
        store.delete("k")
        assert store.get("k") is None

    def test_creates_parent_directory(self, tmp_path):
        store = SqliteStore(tmp_path / "nested" / "dir" / "kv.db")
        store.init_db()
        assert store.db_path.exists()

    def test_backs_session_manager(self, tmp_path):
        store = SqliteStore(tmp_path / "kv.db")
        store.init_db()
        SessionManager(store).save_session(SessionData(id="s", title="persisted"))

        reopened = SqliteStore(tmp_path / "kv.db")
        assert SessionManager(reopened).get_session("s").title == "persisted"
