"""Applies exploration stream events to a graph store."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from stellarmind.client.sse import SSEDecoder
from stellarmind.models.exploration import (
    DoneEvent,
    EdgeEvent,
    ErrorEvent,
    ExplorationEdge,
    ExplorationNode,
    NodeEvent,
    NodeType,
    StreamEvent,
    stream_event_adapter,
)
from stellarmind.models.graph import GraphEdge, GraphNode
from stellarmind.store.graph_store import GraphStore
from stellarmind.utils.identifiers import generate_edge_id

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8000"
EXPLORE_PATH = "/api/explore"


def to_graph_node(node: ExplorationNode) -> GraphNode:
    """Materialise a streamed node; its content goes to ``question`` or ``answer``."""
    is_question = node.node_type == NodeType.question
    return GraphNode(
        id=node.id,
        question=node.content if is_question else "",
        answer="" if is_question else node.content,
        level=node.level,
        parent_id=node.parent_id,
    )


def to_graph_edge(edge: ExplorationEdge) -> GraphEdge:
    return GraphEdge(
        id=generate_edge_id(edge.source, edge.target),
        source=edge.source,
        target=edge.target,
        type="smoothstep",
        animated=True,
    )


class ExplorationConsumer:
    """Dispatches decoded stream events onto a :class:`GraphStore`.

    Events must be handled in the order they arrived on the wire.
    """

    def __init__(self, store: GraphStore) -> None:
        self.store = store
        self.completed = False

    def handle(self, event: StreamEvent | dict[str, Any]) -> None:
        if isinstance(event, dict):
            try:
                event = stream_event_adapter.validate_python(event)
            except ValidationError:
                logger.warning("Ignoring malformed stream event: %r", event)
                return

        if isinstance(event, NodeEvent):
            self.store.add_node(to_graph_node(event.data))
        elif isinstance(event, EdgeEvent):
            self.store.add_edge(to_graph_edge(event.data))
        elif isinstance(event, ErrorEvent):
            logger.error("Exploration error: %s", event.data.message)
            self.store.set_is_generating(False)
            self.store.set_error(event.data.message)
        elif isinstance(event, DoneEvent):
            self.completed = True
            self.store.set_is_generating(False)


async def explore(
    store: GraphStore,
    question: str,
    model_id: str | None = None,
    reading_level: str | None = None,
    client: httpx.AsyncClient | None = None,
    base_url: str = DEFAULT_BASE_URL,
) -> bool:
    """Run one exploration against the service and stream it into ``store``.

    Returns False without doing anything when the store is already generating,
    or when the request failed (the message is left in ``store.state.error``).
    """
    if store.state.is_generating:
        logger.warning("Exploration already in progress; ignoring %r", question)
        return False

    store.clear_session()
    store.set_is_generating(True)

    payload: dict[str, Any] = {"question": question}
    if model_id:
        payload["modelId"] = model_id
    if reading_level:
        payload["readingLevel"] = reading_level

    consumer = ExplorationConsumer(store)
    decoder = SSEDecoder()
    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(base_url=base_url, timeout=None)
    try:
        async with client.stream("POST", EXPLORE_PATH, json=payload) as response:
            response.raise_for_status()
            async for chunk in response.aiter_bytes():
                for event in decoder.feed(chunk):
                    consumer.handle(event)
        for event in decoder.flush():
            consumer.handle(event)
    except httpx.HTTPError as e:
        logger.exception("Exploration request failed")
        store.set_error(f"Exploration failed: {e}")
        return False
    finally:
        store.set_is_generating(False)
        if owns_client:
            await client.aclose()
    return True
