"""API routes for stored provider API keys."""

from fastapi import APIRouter, Depends, HTTPException

from server.dependencies import get_api_key_manager
from stellarmind.models.api_key import APIKeyConfig, APIKeyCreate, APIKeyUpdate, ValidationResult
from stellarmind.store import APIKeyManager, APIKeyNotFoundError, validate_api_key

router = APIRouter()


def _require(manager: APIKeyManager, config_id: str) -> APIKeyConfig:
    config = manager.get_key(config_id)
    if config is None:
        raise HTTPException(status_code=404, detail=f"API key config not found: {config_id}")
    return config


@router.get("/api-keys")
def list_api_keys(manager: APIKeyManager = Depends(get_api_key_manager)) -> list[APIKeyConfig]:
    return manager.list_keys()


@router.post("/api-keys")
def create_api_key(
    request: APIKeyCreate, manager: APIKeyManager = Depends(get_api_key_manager)
) -> APIKeyConfig:
    """Store a new key; the first key stored becomes the default."""
    return manager.add_key(request)


@router.get("/api-keys/default")
def get_default_api_key(manager: APIKeyManager = Depends(get_api_key_manager)) -> APIKeyConfig:
    config = manager.get_default()
    if config is None:
        raise HTTPException(status_code=404, detail="No API key configured")
    return config


@router.patch("/api-keys/{config_id}")
def update_api_key(
    config_id: str,
    request: APIKeyUpdate,
    manager: APIKeyManager = Depends(get_api_key_manager),
) -> APIKeyConfig:
    try:
        return manager.update_key(config_id, request)
    except APIKeyNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/api-keys/{config_id}")
def delete_api_key(config_id: str, manager: APIKeyManager = Depends(get_api_key_manager)) -> dict:
    try:
        manager.delete_key(config_id)
    except APIKeyNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"deleted": config_id}


@router.post("/api-keys/{config_id}/set-default")
def set_default_api_key(
    config_id: str, manager: APIKeyManager = Depends(get_api_key_manager)
) -> APIKeyConfig:
    try:
        return manager.set_default(config_id)
    except APIKeyNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/api-keys/{config_id}/validate")
async def validate_stored_api_key(
    config_id: str, manager: APIKeyManager = Depends(get_api_key_manager)
) -> ValidationResult:
    """Probe the provider with a stored key and record the outcome."""
    config = _require(manager, config_id)
    result = await validate_api_key(config.provider, config.api_key, config.base_url)
    manager.update_key(config_id, APIKeyUpdate(is_valid=result.is_valid))
    return result
