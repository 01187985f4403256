"""API key configuration models and the provider table."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from stellarmind.utils.identifiers import utc_now


class APIProvider(str, Enum):
    openai = "openai"
    claude = "claude"
    gemini = "gemini"
    zhipu = "zhipu"
    deepseek = "deepseek"
    custom = "custom"


class ProviderInfo(BaseModel):
    name: str
    base_url: str
    placeholder: str
    test_endpoint: str


API_PROVIDERS: dict[APIProvider, ProviderInfo] = {
    APIProvider.openai: ProviderInfo(
        name="OpenAI",
        base_url="https://api.openai.com/v1",
        placeholder="sk-...",
        test_endpoint="/models",
    ),
    APIProvider.claude: ProviderInfo(
        name="Claude (Anthropic)",
        base_url="https://api.anthropic.com/v1",
        placeholder="sk-ant-...",
        test_endpoint="/messages",
    ),
    APIProvider.gemini: ProviderInfo(
        name="Google Gemini",
        base_url="https://generativelanguage.googleapis.com/v1",
        placeholder="AI...",
        test_endpoint="/models",
    ),
    APIProvider.zhipu: ProviderInfo(
        name="智谱清言",
        base_url="https://open.bigmodel.cn/api/paas/v4",
        placeholder="...",
        test_endpoint="/chat/completions",
    ),
    APIProvider.deepseek: ProviderInfo(
        name="DeepSeek",
        base_url="https://api.deepseek.com/v1",
        placeholder="sk-...",
        test_endpoint="/models",
    ),
    APIProvider.custom: ProviderInfo(
        name="Custom",
        base_url="",
        placeholder="custom API key",
        test_endpoint="/models",
    ),
}


class APIKeyConfig(BaseModel):
    """A stored provider credential. At most one config is the default."""

    id: str
    provider: APIProvider
    name: str
    api_key: str
    base_url: str | None = None
    is_default: bool = False
    is_valid: bool | None = None  # None until validated
    created_at: datetime = Field(default_factory=utc_now)
    last_used: datetime | None = None


class APIKeyCreate(BaseModel):
    """Request model for adding an API key config."""

    provider: APIProvider
    api_key: str
    base_url: str | None = None
    name: str | None = None


class APIKeyUpdate(BaseModel):
    """Request model for updating an API key config."""

    provider: APIProvider | None = None
    name: str | None = None
    api_key: str | None = None
    base_url: str | None = None
    is_valid: bool | None = None


class ValidationResult(BaseModel):
    is_valid: bool
    message: str
    details: dict[str, Any] | None = None
