"""In-memory graph store: the single source of truth for the mind-map view.

State lives in an immutable :class:`GraphState` snapshot. Every action builds
a new snapshot and notifies subscribers with ``(new_state, old_state)``, so a
reader never sees a half-applied mutation. Only the exploration config is
persisted (when a persistence is injected); nodes and edges are saved
explicitly through the session manager.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from typing import Any, Literal

from pydantic import ValidationError

from stellarmind.models.graph import GraphEdge, GraphNode
from stellarmind.models.session import ExploreConfig, SessionData
from stellarmind.store.kv import KeyValueStore
from stellarmind.utils.identifiers import generate_node_id, generate_session_id, utc_now

logger = logging.getLogger(__name__)

ViewMode = Literal["mindmap", "chat"]

PERSIST_KEY = "mindmap-storage"


@dataclass(frozen=True)
class GraphState:
    """One immutable snapshot of the store."""

    current_session_id: str | None = None
    view_mode: ViewMode = "mindmap"
    is_generating: bool = False
    nodes: tuple[GraphNode, ...] = ()
    edges: tuple[GraphEdge, ...] = ()
    selected_node_ids: tuple[str, ...] = ()
    config: ExploreConfig = field(default_factory=ExploreConfig)
    error: str | None = None  # last user-facing error message

    def get_node(self, node_id: str) -> GraphNode | None:
        return next((node for node in self.nodes if node.id == node_id), None)

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def max_depth_reached(self) -> int:
        return max((node.level for node in self.nodes), default=0)


Listener = Callable[[GraphState, GraphState], None]


class GraphStore:
    """Holds the current :class:`GraphState` and applies actions to it."""

    def __init__(self, persistence: KeyValueStore | None = None) -> None:
        self._persistence = persistence
        self._listeners: list[Listener] = []
        self._state = GraphState(config=self._load_config())

    @property
    def state(self) -> GraphState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set(self, action: str, **changes: Any) -> None:
        previous = self._state
        self._state = replace(previous, **changes)
        logger.debug("graph store action: %s", action)
        for listener in list(self._listeners):
            listener(self._state, previous)

    # --- basic state ---

    def set_view_mode(self, mode: ViewMode) -> None:
        self._set("set_view_mode", view_mode=mode)

    def set_is_generating(self, generating: bool) -> None:
        self._set("set_is_generating", is_generating=generating)

    def set_error(self, message: str | None) -> None:
        self._set("set_error", error=message)

    def set_selected_nodes(self, node_ids: Iterable[str]) -> None:
        self._set("set_selected_nodes", selected_node_ids=tuple(node_ids))

    # --- nodes ---

    def add_node(self, node: GraphNode) -> None:
        self._set("add_node", nodes=self._state.nodes + (node,))

    def update_node(self, node_id: str, **changes: Any) -> None:
        """Apply ``changes`` to one node and refresh its ``updated_at``."""
        changes["updated_at"] = utc_now()
        nodes = tuple(
            node.model_copy(update=changes) if node.id == node_id else node
            for node in self._state.nodes
        )
        self._set("update_node", nodes=nodes)

    def remove_node(self, node_id: str) -> None:
        """Remove a node together with its edges and any selection of it."""
        state = self._state
        self._set(
            "remove_node",
            nodes=tuple(node for node in state.nodes if node.id != node_id),
            edges=tuple(
                edge for edge in state.edges
                if edge.source != node_id and edge.target != node_id
            ),
            selected_node_ids=tuple(i for i in state.selected_node_ids if i != node_id),
        )

    def toggle_node_collapse(self, node_id: str) -> None:
        node = self._state.get_node(node_id)
        if node is None:
            return
        self.update_node(node_id, is_collapsed=not node.is_collapsed)

    # --- edges ---

    def add_edge(self, edge: GraphEdge) -> None:
        self._set("add_edge", edges=self._state.edges + (edge,))

    def remove_edge(self, edge_id: str) -> None:
        self._set("remove_edge", edges=tuple(e for e in self._state.edges if e.id != edge_id))

    # --- sessions ---

    def create_new_session(self, initial_question: str) -> GraphNode:
        """Reset the graph to a single placeholder root that is still generating."""
        root = GraphNode(
            id=generate_node_id("question"),
            question=initial_question,
            answer="",
            level=0,
            is_generating=True,
        )
        self._set(
            "create_new_session",
            current_session_id=generate_session_id(),
            nodes=(root,),
            edges=(),
            selected_node_ids=(),
            is_generating=True,
            error=None,
        )
        return root

    def clear_session(self) -> None:
        self._set(
            "clear_session",
            current_session_id=None,
            nodes=(),
            edges=(),
            selected_node_ids=(),
            is_generating=False,
            error=None,
        )

    def load_session(self, session: SessionData) -> None:
        """Replace the graph with a saved session's nodes, edges and config."""
        self._set(
            "load_session",
            current_session_id=session.id,
            nodes=tuple(session.nodes),
            edges=tuple(session.edges),
            selected_node_ids=(),
            is_generating=False,
            config=session.config,
            error=None,
        )

    # --- config ---

    def update_config(self, **changes: Any) -> ExploreConfig:
        config = ExploreConfig.model_validate({**self._state.config.model_dump(), **changes})
        self._set("update_config", config=config)
        self._save_config(config)
        return config

    def _load_config(self) -> ExploreConfig:
        if self._persistence is None:
            return ExploreConfig()
        raw = self._persistence.get(PERSIST_KEY)
        if raw is None:
            return ExploreConfig()
        try:
            return ExploreConfig.model_validate(json.loads(raw)["config"])
        except (ValueError, KeyError, TypeError, ValidationError):
            logger.warning("Ignoring unreadable persisted config under %r", PERSIST_KEY)
            return ExploreConfig()

    def _save_config(self, config: ExploreConfig) -> None:
        if self._persistence is None:
            return
        payload = {"config": config.model_dump(mode="json")}
        self._persistence.put(PERSIST_KEY, json.dumps(payload).encode("utf-8"))
