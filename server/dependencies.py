"""Shared service objects for the routes.

Routes receive these through ``Depends`` so tests can swap them with
``app.dependency_overrides``.
"""

from collections.abc import Callable
from functools import lru_cache

from fastapi import Depends

from server import settings
from server.auth_db import UserStore
from server.kv_db import SqliteStore
from stellarmind.engine import Explorer, LLMClient, create_llm_client, resolve_model
from stellarmind.store import APIKeyManager, KeyValueStore, SessionManager


@lru_cache
def get_kv_store() -> SqliteStore:
    store = SqliteStore(settings.DB_PATH)
    store.init_db()
    return store


def get_session_manager(kv: KeyValueStore = Depends(get_kv_store)) -> SessionManager:
    return SessionManager(kv)


def get_api_key_manager(kv: KeyValueStore = Depends(get_kv_store)) -> APIKeyManager:
    return APIKeyManager(kv)


def get_user_store(kv: KeyValueStore = Depends(get_kv_store)) -> UserStore:
    return UserStore(kv)


# clients keyed by (provider, api key, base url); each owns a connection pool
_llm_clients: dict[tuple[str, str | None, str | None], LLMClient | None] = {}


def get_llm_client(provider: str) -> LLMClient | None:
    """Shared client for a provider's configured credential, built on first use."""
    if provider == "anthropic":
        key = (provider, settings.ANTHROPIC_API_KEY, None)
    else:
        key = (provider, settings.OPENAI_API_KEY, settings.OPENAI_API_BASE)
    if key not in _llm_clients:
        _llm_clients[key] = create_llm_client(
            provider,
            openai_api_key=settings.OPENAI_API_KEY,
            openai_base_url=settings.OPENAI_API_BASE,
            anthropic_api_key=settings.ANTHROPIC_API_KEY,
        )
    return _llm_clients[key]


async def close_llm_clients() -> None:
    clients = [c for c in _llm_clients.values() if c is not None]
    _llm_clients.clear()
    for client in clients:
        await client.aclose()


def build_explorer(model_id: str) -> Explorer:
    """Explorer for a model id; mock mode when its provider has no credential."""
    provider, _ = resolve_model(model_id)
    return Explorer(get_llm_client(provider), max_fanout=settings.EXPLORE_MAX_FANOUT)


def get_explorer_factory() -> Callable[[str], Explorer]:
    return build_explorer
