"""Core data models for StellarMind."""

from stellarmind.models.api_key import (
    API_PROVIDERS,
    APIKeyConfig,
    APIKeyCreate,
    APIKeyUpdate,
    APIProvider,
    ValidationResult,
)
from stellarmind.models.exploration import (
    MAX_DEPTH,
    DoneEvent,
    EdgeEvent,
    ErrorEvent,
    ExplorationEdge,
    ExplorationNode,
    ExploreRequest,
    NodeEvent,
    NodeType,
    StreamEvent,
)
from stellarmind.models.graph import GraphEdge, GraphNode, Position
from stellarmind.models.session import (
    AIModelConfig,
    ExploreConfig,
    SessionData,
    SessionMetadata,
    SessionStats,
)
from stellarmind.models.user import LLMModel, StoredUser, User

__all__ = [
    # Exploration wire models
    "MAX_DEPTH",
    "NodeType",
    "ExplorationNode",
    "ExplorationEdge",
    "NodeEvent",
    "EdgeEvent",
    "ErrorEvent",
    "DoneEvent",
    "StreamEvent",
    "ExploreRequest",
    # Client graph
    "Position",
    "GraphNode",
    "GraphEdge",
    # Sessions
    "AIModelConfig",
    "ExploreConfig",
    "SessionData",
    "SessionMetadata",
    "SessionStats",
    # API keys
    "API_PROVIDERS",
    "APIProvider",
    "APIKeyConfig",
    "APIKeyCreate",
    "APIKeyUpdate",
    "ValidationResult",
    # Users
    "User",
    "StoredUser",
    "LLMModel",
]
