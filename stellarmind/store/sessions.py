"""Session persistence: save, search, duplicate, import and export explorations.

All sessions live in one tagged-JSON blob under ``SESSIONS_KEY`` of the
injected key/value store. A corrupt blob is treated as "no sessions".
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable

from pydantic import ValidationError

from stellarmind.models.session import ExploreConfig, SessionData, SessionMetadata, SessionStats
from stellarmind.store import codec
from stellarmind.store.graph_store import GraphStore
from stellarmind.store.kv import KeyValueStore
from stellarmind.utils.identifiers import generate_session_id, utc_now

logger = logging.getLogger(__name__)

SESSIONS_KEY = "stellarmind_sessions"
CURRENT_SESSION_KEY = "stellarmind_current_session"
EXPORT_VERSION = "1.0"


class SessionNotFoundError(Exception):
    """Raised when a session id does not exist."""


class SessionImportError(Exception):
    """Raised when imported data is not a valid session export."""


class SessionManager:
    """CRUD and query operations over the stored session collection."""

    def __init__(self, persistence: KeyValueStore) -> None:
        self.persistence = persistence

    # --- storage ---

    def list_sessions(self) -> list[SessionData]:
        raw = self.persistence.get(SESSIONS_KEY)
        if raw is None:
            return []
        try:
            items = codec.loads(raw)
        except (ValueError, TypeError):
            logger.exception("Failed to read stored sessions; treating as empty")
            return []
        if not isinstance(items, list):
            logger.error("Stored sessions are not a list; treating as empty")
            return []

        sessions = []
        for item in items:
            try:
                sessions.append(SessionData.model_validate(item))
            except ValidationError:
                logger.warning("Skipping unreadable stored session: %r", item)
        return sessions

    def _write(self, sessions: list[SessionData]) -> None:
        blob = codec.dumps([session.model_dump() for session in sessions])
        self.persistence.put(SESSIONS_KEY, blob.encode("utf-8"))

    def save_session(self, session: SessionData) -> SessionData:
        """Insert or replace a session; replacing refreshes ``updated_at``."""
        sessions = self.list_sessions()
        for index, existing in enumerate(sessions):
            if existing.id == session.id:
                session = session.model_copy(update={"updated_at": utc_now()})
                sessions[index] = session
                break
        else:
            sessions.append(session)
        self._write(sessions)
        return session

    def get_session(self, session_id: str) -> SessionData | None:
        return next((s for s in self.list_sessions() if s.id == session_id), None)

    def require_session(self, session_id: str) -> SessionData:
        session = self.get_session(session_id)
        if session is None:
            raise SessionNotFoundError(f"Session not found: {session_id}")
        return session

    def delete_session(self, session_id: str) -> None:
        self._write([s for s in self.list_sessions() if s.id != session_id])
        if self.get_current_session_id() == session_id:
            self.set_current_session(None)

    # --- lifecycle ---

    def create_session(
        self,
        title: str,
        config: ExploreConfig | None = None,
        description: str | None = None,
        tags: Iterable[str] = (),
        user_id: str | None = None,
    ) -> SessionData:
        session = SessionData(
            id=generate_session_id(),
            title=title,
            description=description,
            config=config or ExploreConfig(),
            tags=list(tags),
            user_id=user_id,
        )
        self.save_session(session)
        self.set_current_session(session.id)
        return session

    def save_from_store(self, store: GraphStore, title: str | None = None) -> SessionData:
        """Snapshot the store's graph into its current session, creating it if needed."""
        state = store.state
        existing = self.get_session(state.current_session_id) if state.current_session_id else None
        if existing is None:
            root = next((node for node in state.nodes if node.level == 0), None)
            existing = SessionData(
                id=state.current_session_id or generate_session_id(),
                title=title or (root.content if root else "Untitled exploration"),
            )
        session = existing.model_copy(
            update={
                "nodes": list(state.nodes),
                "edges": list(state.edges),
                "config": state.config,
                "updated_at": utc_now(),
            }
        )
        if title:
            session = session.model_copy(update={"title": title})
        saved = self.save_session(session)
        self.set_current_session(saved.id)
        return saved

    def duplicate_session(self, session_id: str) -> SessionData:
        original = self.require_session(session_id)
        now = utc_now()
        copy = original.model_copy(
            update={
                "id": generate_session_id(),
                "title": f"{original.title} (copy)",
                "created_at": now,
                "updated_at": now,
                "metadata": SessionMetadata(),
            },
            deep=True,
        )
        return self.save_session(copy)

    def update_metadata(self, session_id: str, **updates) -> SessionData:
        """Update descriptive fields; id, nodes and edges are not touchable here."""
        for protected in ("id", "nodes", "edges"):
            updates.pop(protected, None)
        session = self.require_session(session_id)
        merged = SessionData.model_validate(
            {**session.model_dump(), **updates, "updated_at": utc_now()}
        )
        return self.save_session(merged)

    # --- current session ---

    def set_current_session(self, session_id: str | None) -> None:
        if session_id:
            self.persistence.put(CURRENT_SESSION_KEY, session_id.encode("utf-8"))
        else:
            self.persistence.delete(CURRENT_SESSION_KEY)

    def get_current_session_id(self) -> str | None:
        raw = self.persistence.get(CURRENT_SESSION_KEY)
        return raw.decode("utf-8") if raw else None

    # --- search ---

    def search_sessions(
        self, query: str, sessions: list[SessionData] | None = None
    ) -> list[SessionData]:
        """Case-insensitive match on title, description, tags and node text."""
        term = query.lower()
        candidates = self.list_sessions() if sessions is None else sessions

        def matches(session: SessionData) -> bool:
            return (
                term in session.title.lower()
                or term in (session.description or "").lower()
                or any(term in tag.lower() for tag in session.tags)
                or any(
                    term in node.question.lower() or term in node.answer.lower()
                    for node in session.nodes
                )
            )

        return [s for s in candidates if matches(s)]

    def filter_by_tags(
        self, tags: Iterable[str], sessions: list[SessionData] | None = None
    ) -> list[SessionData]:
        wanted = set(tags)
        candidates = self.list_sessions() if sessions is None else sessions
        return [s for s in candidates if wanted.intersection(s.tags)]

    def all_tags(self) -> list[str]:
        return sorted({tag for session in self.list_sessions() for tag in session.tags})

    def filtered_sessions(self, query: str = "", tags: Iterable[str] = ()) -> list[SessionData]:
        """Search and tag filter combined, newest update first."""
        result = self.list_sessions()
        if query.strip():
            result = self.search_sessions(query, result)
        tags = list(tags)
        if tags:
            result = self.filter_by_tags(tags, result)
        return sorted(result, key=lambda s: s.updated_at, reverse=True)

    def stats(self) -> SessionStats:
        sessions = self.list_sessions()
        return SessionStats(
            total_sessions=len(sessions),
            total_nodes=sum(len(s.nodes) for s in sessions),
            total_questions=sum(1 for s in sessions for node in s.nodes if node.question),
            bookmarked_sessions=sum(1 for s in sessions if s.metadata.bookmarked),
            available_tags=self.all_tags(),
        )

    # --- import / export ---

    def export_sessions(self, session_ids: Iterable[str] | None = None) -> str:
        sessions = self.list_sessions()
        if session_ids is not None:
            wanted = set(session_ids)
            sessions = [s for s in sessions if s.id in wanted]
        return codec.dumps(
            {
                "version": EXPORT_VERSION,
                "exportDate": utc_now(),
                "sessions": [s.model_dump() for s in sessions],
            }
        )

    def import_sessions(self, data: str | bytes) -> int:
        """Merge exported sessions, skipping ids that already exist.

        Returns the number of sessions added.
        """
        try:
            payload = codec.loads(data)
            items = payload["sessions"]
            if not isinstance(items, list):
                raise TypeError("sessions must be a list")
            imported = [SessionData.model_validate(item) for item in items]
        except (ValueError, KeyError, TypeError, ValidationError) as e:
            logger.warning("Rejected session import: %s", e)
            raise SessionImportError("Invalid session import data") from e

        existing = self.list_sessions()
        known = {s.id for s in existing}
        new_sessions = [s for s in imported if s.id not in known]
        self._write(existing + new_sessions)
        return len(new_sessions)


def export_session_json(session: SessionData, include_metadata: bool = True) -> str:
    """Export one session as plain JSON with ISO8601 timestamps."""
    exclude = None if include_metadata else {"metadata"}
    return json.dumps(
        {
            "version": EXPORT_VERSION,
            "exportDate": utc_now().isoformat(),
            "session": session.model_dump(mode="json", exclude=exclude),
        },
        ensure_ascii=False,
        indent=2,
    )


def parse_session_json(text: str | bytes) -> SessionData:
    """Inverse of :func:`export_session_json`."""
    try:
        return SessionData.model_validate(json.loads(text)["session"])
    except (ValueError, KeyError, TypeError, ValidationError) as e:
        raise SessionImportError("Invalid session export") from e
