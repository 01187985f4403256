"""Stores: graph state, sessions, API keys and their persistence."""

from stellarmind.store.api_keys import (
    APIKeyImportError,
    APIKeyManager,
    APIKeyNotFoundError,
    validate_api_key,
)
from stellarmind.store.graph_store import GraphState, GraphStore
from stellarmind.store.kv import FileStore, KeyValueStore, MemoryStore
from stellarmind.store.sessions import (
    SessionImportError,
    SessionManager,
    SessionNotFoundError,
    export_session_json,
    parse_session_json,
)

__all__ = [
    "KeyValueStore",
    "MemoryStore",
    "FileStore",
    "GraphState",
    "GraphStore",
    "SessionManager",
    "SessionNotFoundError",
    "SessionImportError",
    "export_session_json",
    "parse_session_json",
    "APIKeyManager",
    "APIKeyNotFoundError",
    "APIKeyImportError",
    "validate_api_key",
]
