"""Tests for session persistence, search and import/export."""

import json
from datetime import datetime, timezone

import pytest

from stellarmind.models.graph import GraphEdge, GraphNode, Position
from stellarmind.models.session import SessionData, SessionMetadata
from stellarmind.store import codec
from stellarmind.store.graph_store import GraphStore
from stellarmind.store.kv import FileStore, MemoryStore
from stellarmind.store.sessions import (
    SESSIONS_KEY,
    SessionImportError,
    SessionManager,
    SessionNotFoundError,
    export_session_json,
    parse_session_json,
)


def make_session(session_id="session_1", title="意识探索", tags=(), nodes=None, **kwargs):
    return SessionData(
        id=session_id,
        title=title,
        tags=list(tags),
        nodes=nodes or [GraphNode(id="question-root", question="什么是意识？")],
        **kwargs,
    )


@pytest.fixture
def manager():
    return SessionManager(MemoryStore())


class TestCodec:
    """Test the tagged JSON codec."""

    def test_datetime_round_trip(self):
        when = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
        text = codec.dumps({"at": when, "items": [when]})

        assert json.loads(text)["at"] == {"__type": "Date", "value": "2024-05-01T12:30:00Z"}
        assert codec.loads(text) == {"at": when, "items": [when]}

    def test_naive_datetime_treated_as_utc(self):
        restored = codec.loads(codec.dumps(datetime(2024, 1, 1)))
        assert restored == datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_other_values_untouched(self):
        data = {"n": 1, "s": "文字", "none": None, "nested": {"__type": "Other", "value": "x"}}
        assert codec.loads(codec.dumps(data)) == data


class TestSessionCrud:
    """Test save/get/list/delete."""

    def test_save_and_get(self, manager):
        session = make_session()
        manager.save_session(session)

        assert manager.get_session("session_1") == session
        assert manager.list_sessions() == [session]

    def test_save_replaces_and_refreshes_updated_at(self, manager):
        original = manager.save_session(make_session(updated_at=datetime(2020, 1, 1, tzinfo=timezone.utc)))
        saved = manager.save_session(original.model_copy(update={"title": "renamed"}))

        assert len(manager.list_sessions()) == 1
        assert manager.get_session("session_1").title == "renamed"
        assert saved.updated_at > original.updated_at

    def test_stored_blob_uses_date_tags(self, manager):
        manager.save_session(make_session())
        stored = json.loads(manager.persistence.get(SESSIONS_KEY))
        assert stored[0]["created_at"]["__type"] == "Date"

    def test_delete(self, manager):
        manager.save_session(make_session())
        manager.set_current_session("session_1")
        manager.delete_session("session_1")

        assert manager.get_session("session_1") is None
        assert manager.get_current_session_id() is None

    def test_require_missing(self, manager):
        with pytest.raises(SessionNotFoundError):
            manager.require_session("nope")

    def test_corrupt_storage_reads_as_empty(self, manager):
        manager.persistence.put(SESSIONS_KEY, b"{oops")
        assert manager.list_sessions() == []

    def test_unreadable_entry_does_not_drop_the_rest(self, manager):
        manager.save_session(make_session("s1"))
        stored = codec.loads(manager.persistence.get(SESSIONS_KEY))
        stored.append({"id": "s2"})
        manager.persistence.put(SESSIONS_KEY, codec.dumps(stored).encode("utf-8"))

        assert [s.id for s in manager.list_sessions()] == ["s1"]
        manager.save_session(make_session("s3"))
        assert [s.id for s in manager.list_sessions()] == ["s1", "s3"]

    def test_file_store_persistence(self, tmp_path):
        SessionManager(FileStore(tmp_path)).save_session(make_session())
        assert SessionManager(FileStore(tmp_path)).get_session("session_1").title == "意识探索"

    def test_create_session_sets_current(self, manager):
        session = manager.create_session("new", tags=["ai"])
        assert manager.get_current_session_id() == session.id
        assert manager.get_session(session.id).tags == ["ai"]


class TestSessionOperations:
    """Test duplication, metadata and snapshots."""

    def test_duplicate(self, manager):
        manager.save_session(make_session(metadata=SessionMetadata(view_count=7, bookmarked=True)))
        copy = manager.duplicate_session("session_1")

        assert copy.id != "session_1"
        assert copy.title == "意识探索 (copy)"
        assert copy.metadata == SessionMetadata()
        assert copy.nodes == manager.get_session("session_1").nodes
        assert len(manager.list_sessions()) == 2

    def test_duplicate_missing(self, manager):
        with pytest.raises(SessionNotFoundError):
            manager.duplicate_session("nope")

    def test_update_metadata_protects_graph(self, manager):
        manager.save_session(make_session())
        updated = manager.update_metadata(
            "session_1", title="t2", tags=["x"], id="hijack", nodes=[]
        )

        assert updated.id == "session_1"
        assert updated.title == "t2"
        assert updated.tags == ["x"]
        assert len(updated.nodes) == 1

    def test_save_from_store(self, manager):
        store = GraphStore()
        root = store.create_new_session("什么是意识？")
        store.add_node(GraphNode(id="question-a", question="a", level=1, parent_id=root.id))
        store.add_edge(GraphEdge(id=f"edge-{root.id}-question-a", source=root.id, target="question-a"))

        saved = manager.save_from_store(store)

        assert saved.id == store.state.current_session_id
        assert saved.title == "什么是意识？"
        assert len(saved.nodes) == 2
        assert len(saved.edges) == 1
        assert manager.get_current_session_id() == saved.id

        store.update_node("question-a", answer="later")
        again = manager.save_from_store(store, title="renamed")
        assert again.id == saved.id
        assert again.title == "renamed"
        assert len(manager.list_sessions()) == 1


class TestSearch:
    """Test search, tag filtering and stats."""

    @pytest.fixture
    def populated(self, manager):
        manager.save_session(make_session("s1", "Consciousness", tags=["mind", "ai"]))
        manager.save_session(
            make_session(
                "s2",
                "Physics",
                tags=["science"],
                nodes=[GraphNode(id="q", question="What is entropy?", answer="")],
                description="thermodynamics notes",
                metadata=SessionMetadata(bookmarked=True),
            )
        )
        manager.save_session(
            make_session("s3", "Other", nodes=[GraphNode(id="a", answer="Neurons fire")])
        )
        return manager

    def test_search_title_description_tags_and_nodes(self, populated):
        def ids(query):
            return {s.id for s in populated.search_sessions(query)}

        assert ids("conscious") == {"s1"}
        assert ids("THERMO") == {"s2"}
        assert ids("science") == {"s2"}
        assert ids("entropy") == {"s2"}
        assert ids("neurons") == {"s3"}

    def test_filter_by_tags_matches_any(self, populated):
        result = populated.filter_by_tags(["ai", "science"])
        assert {s.id for s in result} == {"s1", "s2"}

    def test_all_tags_sorted_unique(self, populated):
        assert populated.all_tags() == ["ai", "mind", "science"]

    def test_filtered_sessions_newest_first(self, populated):
        populated.update_metadata("s1", description="touched")
        assert [s.id for s in populated.filtered_sessions()][0] == "s1"
        assert [s.id for s in populated.filtered_sessions("entropy", ["science"])] == ["s2"]
        assert populated.filtered_sessions("entropy", ["mind"]) == []

    def test_stats(self, populated):
        stats = populated.stats()
        assert stats.total_sessions == 3
        assert stats.total_nodes == 3
        assert stats.total_questions == 2
        assert stats.bookmarked_sessions == 1
        assert stats.available_tags == ["ai", "mind", "science"]


class TestImportExport:
    """Test bulk and single-session import/export."""

    def test_export_import_into_fresh_store(self, manager):
        manager.save_session(make_session("s1"))
        manager.save_session(make_session("s2"))
        exported = manager.export_sessions()

        target = SessionManager(MemoryStore())
        assert target.import_sessions(exported) == 2
        assert target.get_session("s1") == manager.get_session("s1")

    def test_export_selected(self, manager):
        manager.save_session(make_session("s1"))
        manager.save_session(make_session("s2"))
        payload = json.loads(manager.export_sessions(["s2"]))

        assert payload["version"] == "1.0"
        assert [s["id"] for s in payload["sessions"]] == ["s2"]

    def test_import_skips_existing(self, manager):
        manager.save_session(make_session("s1", title="mine"))
        other = SessionManager(MemoryStore())
        other.save_session(make_session("s1", title="theirs"))
        other.save_session(make_session("s2"))

        assert manager.import_sessions(other.export_sessions()) == 1
        assert manager.get_session("s1").title == "mine"

    @pytest.mark.parametrize("data", ["not json", "{}", '{"sessions": 3}', '{"sessions": [{"id": 1}]}'])
    def test_import_rejects_bad_data(self, manager, data):
        with pytest.raises(SessionImportError):
            manager.import_sessions(data)

    def test_single_session_json_round_trip(self):
        session = make_session(
            nodes=[
                GraphNode(
                    id="question-root",
                    question="什么是意识？",
                    position=Position(x=10, y=20),
                    created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
                )
            ]
        )
        text = export_session_json(session)

        assert isinstance(json.loads(text)["session"]["created_at"], str)
        assert parse_session_json(text) == session

    def test_single_session_without_metadata(self):
        text = export_session_json(make_session(), include_metadata=False)
        assert "metadata" not in json.loads(text)["session"]

    def test_parse_rejects_garbage(self):
        with pytest.raises(SessionImportError):
            parse_session_json("[]")
