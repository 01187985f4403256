"""API route listing the models available to the current user."""

import logging
import os
import re

from fastapi import APIRouter

from server.model_presets import (
    FALLBACK_PROVIDER,
    MODEL_PRESETS,
    PROVIDER_ENV_KEYS,
    PROVIDER_TYPE_MAPPING,
)
from stellarmind.models.user import LLMModel

logger = logging.getLogger(__name__)

router = APIRouter()


def model_id(provider: str, name: str) -> str:
    """e.g. ``("OpenAI", "GPT-4o") -> "openai-gpt-4o"``."""
    provider_slug = re.sub(r"\s+", "-", provider.lower())
    name_slug = re.sub(r"[^a-z0-9]", "-", name.lower())
    return f"{provider_slug}-{name_slug}"


def active_providers(requested: list[str] | None = None) -> list[str]:
    """Providers from the caller's configured API keys, else from env credentials."""
    providers: list[str] = []
    for alias in requested or []:
        mapped = PROVIDER_TYPE_MAPPING.get(alias.strip().lower())
        if mapped and mapped not in providers:
            providers.append(mapped)
    if providers:
        return providers

    providers = [provider for provider, env_key in PROVIDER_ENV_KEYS if os.getenv(env_key)]
    if not providers:
        logger.warning("No API keys found in environment; showing %s models", FALLBACK_PROVIDER)
        providers.append(FALLBACK_PROVIDER)
    return providers


@router.get("/models/available")
def list_available_models(providers: str | None = None) -> list[LLMModel]:
    """List catalogue models for ``providers`` (comma-separated aliases)."""
    requested = providers.split(",") if providers else None
    models = []
    for provider in active_providers(requested):
        for preset in MODEL_PRESETS.get(provider, []):
            models.append(
                LLMModel(
                    id=model_id(provider, preset["name"]),
                    name=preset["name"],
                    description=preset["description"],
                    provider=provider,
                )
            )
    return models
