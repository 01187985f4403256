"""Client side of the exploration stream."""

from stellarmind.client.consumer import ExplorationConsumer, explore, to_graph_edge, to_graph_node
from stellarmind.client.sse import SSEDecoder, encode_event

__all__ = [
    "SSEDecoder",
    "encode_event",
    "ExplorationConsumer",
    "explore",
    "to_graph_node",
    "to_graph_edge",
]
