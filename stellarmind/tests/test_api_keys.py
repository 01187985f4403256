"""Tests for API key management and validation."""

import asyncio

import httpx
import pytest

from stellarmind.models.api_key import APIKeyCreate, APIKeyUpdate, APIProvider
from stellarmind.store import codec
from stellarmind.store.api_keys import (
    API_KEYS_KEY,
    APIKeyImportError,
    APIKeyManager,
    APIKeyNotFoundError,
    validate_api_key,
)
from stellarmind.store.kv import MemoryStore


@pytest.fixture
def manager():
    return APIKeyManager(MemoryStore())


def add(manager, provider="openai", key="sk-test", **kwargs):
    return manager.add_key(APIKeyCreate(provider=provider, api_key=key, **kwargs))


def defaults(manager):
    return [c.id for c in manager.list_keys() if c.is_default]


class TestAPIKeyManager:
    """The at-most-one-default invariant holds across every mutation."""

    def test_first_key_becomes_default(self, manager):
        first = add(manager)
        second = add(manager, "claude", "sk-ant-x")

        assert first.is_default
        assert not second.is_default
        assert defaults(manager) == [first.id]

    def test_defaults_from_provider_table(self, manager):
        config = add(manager, "deepseek")
        assert config.name == "DeepSeek API"
        assert config.base_url == "https://api.deepseek.com/v1"
        assert config.is_valid is None

    def test_custom_base_url_kept(self, manager):
        config = add(manager, "custom", base_url="http://localhost:11434/v1", name="local")
        assert config.base_url == "http://localhost:11434/v1"
        assert config.name == "local"

    def test_set_default(self, manager):
        first = add(manager)
        second = add(manager, "claude")
        manager.set_default(second.id)

        assert defaults(manager) == [second.id]
        assert manager.get_default().id == second.id
        assert not manager.get_key(first.id).is_default

    def test_delete_default_promotes_first_remaining(self, manager):
        first = add(manager)
        second = add(manager, "gemini")
        third = add(manager, "zhipu")
        manager.delete_key(first.id)

        assert defaults(manager) == [second.id]
        assert [c.id for c in manager.list_keys()] == [second.id, third.id]

    def test_delete_missing_raises(self, manager):
        with pytest.raises(APIKeyNotFoundError):
            manager.delete_key("api_missing")

    def test_update_preserves_id_and_leaves_last_used(self, manager):
        config = add(manager)
        updated = manager.update_key(config.id, APIKeyUpdate(name="renamed", is_valid=True))

        assert updated.id == config.id
        assert updated.name == "renamed"
        assert updated.is_valid is True
        assert updated.last_used is None
        assert updated.api_key == "sk-test"

    def test_unreadable_entry_does_not_drop_the_rest(self, manager):
        first = add(manager)
        stored = codec.loads(manager.persistence.get(API_KEYS_KEY))
        stored.append({"id": "api_bad"})
        manager.persistence.put(API_KEYS_KEY, codec.dumps(stored).encode("utf-8"))

        second = add(manager, "claude", "sk-ant-x")

        assert [c.id for c in manager.list_keys()] == [first.id, second.id]
        assert not second.is_default
        assert defaults(manager) == [first.id]

    def test_corrupt_storage_reads_as_empty(self, manager):
        manager.persistence.put(API_KEYS_KEY, b"{oops")
        assert manager.list_keys() == []

    def test_update_missing_raises(self, manager):
        with pytest.raises(APIKeyNotFoundError):
            manager.update_key("api_missing", APIKeyUpdate(name="x"))

    def test_get_default_falls_back_to_first(self, manager):
        assert manager.get_default() is None
        first = add(manager)
        add(manager, "claude")
        manager.import_configs(
            manager.export_configs().replace('"is_default": true', '"is_default": false')
        )
        assert manager.get_default().id == first.id

    def test_queries(self, manager):
        add(manager, "openai")
        add(manager, "claude")
        assert len(manager.get_keys_by_provider(APIProvider.claude)) == 1
        assert manager.has_valid_api_key()

        manager.clear_all()
        assert manager.list_keys() == []
        assert not manager.has_valid_api_key()

    def test_update_last_used(self, manager):
        config = add(manager)
        manager.update_last_used(config.id)
        assert manager.get_key(config.id).last_used is not None

    def test_import_keeps_single_default(self, manager):
        add(manager)
        second = add(manager, "claude")
        exported = manager.export_configs().replace('"is_default": false', '"is_default": true')

        imported = APIKeyManager(MemoryStore()).import_configs(exported)
        assert [c.is_default for c in imported] == [True, False]
        assert imported[1].id == second.id

    def test_import_rejects_bad_data(self, manager):
        with pytest.raises(APIKeyImportError):
            manager.import_configs('{"not": "a list"}')
        with pytest.raises(APIKeyImportError):
            manager.import_configs('[{"id": "x"}]')


def run_validation(handler, provider="openai", key="sk-test", base_url=None):
    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await validate_api_key(provider, key, base_url, client=client)

    return asyncio.run(run())


class TestValidateAPIKey:
    """Test provider probing with a mocked transport."""

    def test_valid_key(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"data": []})

        result = run_validation(handler)

        assert result.is_valid
        assert str(seen[0].url) == "https://api.openai.com/v1/models"
        assert seen[0].headers["authorization"] == "Bearer sk-test"

    def test_claude_headers(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200)

        run_validation(handler, provider="claude", key="sk-ant-1")

        assert str(seen[0].url) == "https://api.anthropic.com/v1/messages"
        assert seen[0].headers["x-api-key"] == "sk-ant-1"
        assert seen[0].headers["anthropic-version"] == "2023-06-01"

    @pytest.mark.parametrize(
        "status,message",
        [
            (401, "Invalid API key"),
            (403, "API key lacks permission"),
            (429, "Rate limited; try again later"),
            (503, "Provider service unavailable"),
            (404, "Validation failed with status 404"),
        ],
    )
    def test_error_statuses(self, status, message):
        result = run_validation(lambda request: httpx.Response(status))
        assert not result.is_valid
        assert result.message == message
        assert result.details["status"] == status

    def test_timeout(self):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        result = run_validation(handler)
        assert not result.is_valid
        assert result.message == "Validation timed out"

    def test_network_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        result = run_validation(handler)
        assert not result.is_valid
        assert result.message.startswith("Network error")

    def test_custom_base_url(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200)

        run_validation(handler, provider="custom", base_url="http://localhost:8080/v1/")
        assert str(seen[0].url) == "http://localhost:8080/v1/models"

    def test_custom_without_base_url(self):
        result = run_validation(lambda request: httpx.Response(200), provider="custom")
        assert not result.is_valid
