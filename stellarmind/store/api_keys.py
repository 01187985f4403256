"""API key management and validation.

Keys are stored as one tagged-JSON list under ``API_KEYS_KEY``. At most one
config carries ``is_default``; every mutation below keeps that true.
"""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from stellarmind.models.api_key import (
    API_PROVIDERS,
    APIKeyConfig,
    APIKeyCreate,
    APIKeyUpdate,
    APIProvider,
    ValidationResult,
)
from stellarmind.store import codec
from stellarmind.store.kv import KeyValueStore
from stellarmind.utils.identifiers import generate_api_key_id, utc_now

logger = logging.getLogger(__name__)

API_KEYS_KEY = "stellarmind_api_keys"
VALIDATION_TIMEOUT = 10.0
ANTHROPIC_VERSION = "2023-06-01"


class APIKeyNotFoundError(Exception):
    """Raised when an API key config id does not exist."""


class APIKeyImportError(Exception):
    """Raised when imported API key data is malformed."""


class APIKeyManager:
    def __init__(self, persistence: KeyValueStore) -> None:
        self.persistence = persistence

    def list_keys(self) -> list[APIKeyConfig]:
        raw = self.persistence.get(API_KEYS_KEY)
        if raw is None:
            return []
        try:
            items = codec.loads(raw)
        except (ValueError, TypeError):
            logger.exception("Failed to read stored API keys; treating as empty")
            return []
        if not isinstance(items, list):
            logger.error("Stored API keys are not a list; treating as empty")
            return []

        configs = []
        for item in items:
            try:
                configs.append(APIKeyConfig.model_validate(item))
            except ValidationError:
                # log the id only, never the key
                config_id = item.get("id") if isinstance(item, dict) else None
                logger.warning("Skipping unreadable stored API key config: %r", config_id)
        return configs

    def _write(self, configs: list[APIKeyConfig]) -> None:
        blob = codec.dumps([config.model_dump(mode="python") for config in configs])
        self.persistence.put(API_KEYS_KEY, blob.encode("utf-8"))

    def get_key(self, config_id: str) -> APIKeyConfig | None:
        return next((c for c in self.list_keys() if c.id == config_id), None)

    def get_keys_by_provider(self, provider: APIProvider | str) -> list[APIKeyConfig]:
        provider = APIProvider(provider)
        return [c for c in self.list_keys() if c.provider == provider]

    def get_default(self) -> APIKeyConfig | None:
        """The default config, else the first one, else None."""
        configs = self.list_keys()
        return next((c for c in configs if c.is_default), configs[0] if configs else None)

    def has_valid_api_key(self) -> bool:
        return any(c.is_valid is not False for c in self.list_keys())

    def add_key(self, data: APIKeyCreate) -> APIKeyConfig:
        """Store a new config; the first one stored becomes the default."""
        configs = self.list_keys()
        info = API_PROVIDERS[data.provider]
        config = APIKeyConfig(
            id=generate_api_key_id(),
            provider=data.provider,
            name=data.name or f"{info.name} API",
            api_key=data.api_key,
            base_url=data.base_url or info.base_url or None,
            is_default=not configs,
        )
        configs.append(config)
        self._write(configs)
        logger.info("Added %s API key %s", config.provider.value, config.id)
        return config

    def update_key(self, config_id: str, data: APIKeyUpdate) -> APIKeyConfig:
        configs = self.list_keys()
        for index, existing in enumerate(configs):
            if existing.id == config_id:
                changes = data.model_dump(exclude_unset=True)
                updated = APIKeyConfig.model_validate(
                    {**existing.model_dump(), **changes, "id": existing.id}
                )
                configs[index] = updated
                self._write(configs)
                return updated
        raise APIKeyNotFoundError(f"API key config not found: {config_id}")

    def delete_key(self, config_id: str) -> None:
        """Delete a config; deleting the default promotes the first remaining one."""
        configs = self.list_keys()
        target = next((c for c in configs if c.id == config_id), None)
        if target is None:
            raise APIKeyNotFoundError(f"API key config not found: {config_id}")
        remaining = [c for c in configs if c.id != config_id]
        if target.is_default and remaining:
            remaining[0] = remaining[0].model_copy(update={"is_default": True})
        self._write(remaining)

    def set_default(self, config_id: str) -> APIKeyConfig:
        configs = self.list_keys()
        if not any(c.id == config_id for c in configs):
            raise APIKeyNotFoundError(f"API key config not found: {config_id}")
        configs = [c.model_copy(update={"is_default": c.id == config_id}) for c in configs]
        self._write(configs)
        return next(c for c in configs if c.id == config_id)

    def update_last_used(self, config_id: str) -> None:
        configs = self.list_keys()
        self._write(
            [c.model_copy(update={"last_used": utc_now()}) if c.id == config_id else c for c in configs]
        )

    def clear_all(self) -> None:
        self.persistence.delete(API_KEYS_KEY)

    # --- import / export ---

    def export_configs(self) -> str:
        return codec.dumps([c.model_dump(mode="python") for c in self.list_keys()], indent=2)

    def import_configs(self, data: str | bytes) -> list[APIKeyConfig]:
        """Replace all configs with imported ones."""
        try:
            items = codec.loads(data)
            if not isinstance(items, list):
                raise TypeError("expected a list of API key configs")
            configs = [APIKeyConfig.model_validate(item) for item in items]
        except (ValueError, TypeError, ValidationError) as e:
            raise APIKeyImportError("Invalid API key config data") from e

        # keep at most one default
        seen_default = False
        for index, config in enumerate(configs):
            if config.is_default:
                if seen_default:
                    configs[index] = config.model_copy(update={"is_default": False})
                seen_default = True
        self._write(configs)
        return configs


def _auth_headers(provider: APIProvider, api_key: str) -> dict[str, str]:
    if provider == APIProvider.claude:
        return {"x-api-key": api_key, "anthropic-version": ANTHROPIC_VERSION}
    return {"Authorization": f"Bearer {api_key}"}


async def validate_api_key(
    provider: APIProvider | str,
    api_key: str,
    base_url: str | None = None,
    client: httpx.AsyncClient | None = None,
) -> ValidationResult:
    """Probe the provider's test endpoint with the key.

    ``client`` may be injected (tests pass one built on ``httpx.MockTransport``).
    """
    provider = APIProvider(provider)
    info = API_PROVIDERS[provider]
    root = (base_url or info.base_url).rstrip("/")
    if not root:
        return ValidationResult(is_valid=False, message="A base URL is required for this provider")
    url = f"{root}{info.test_endpoint}"

    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=VALIDATION_TIMEOUT)
    try:
        response = await client.get(url, headers=_auth_headers(provider, api_key))
    except httpx.TimeoutException:
        return ValidationResult(is_valid=False, message="Validation timed out")
    except httpx.HTTPError as e:
        logger.warning("API key validation request failed: %s", e)
        return ValidationResult(is_valid=False, message=f"Network error: {e}")
    finally:
        if owns_client:
            await client.aclose()

    status = response.status_code
    details = {"status": status, "provider": provider.value}
    if response.is_success:
        return ValidationResult(is_valid=True, message="API key is valid", details=details)
    if status == 401:
        message = "Invalid API key"
    elif status == 403:
        message = "API key lacks permission"
    elif status == 429:
        message = "Rate limited; try again later"
    elif status >= 500:
        message = "Provider service unavailable"
    else:
        message = f"Validation failed with status {status}"
    return ValidationResult(is_valid=False, message=message, details=details)
