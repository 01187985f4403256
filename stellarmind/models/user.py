"""User and model-catalogue models."""

from typing import Literal

from pydantic import BaseModel

Subscription = Literal["free", "pro", "enterprise"]


class User(BaseModel):
    id: str
    email: str
    name: str
    avatar: str | None = None
    created_at: str
    updated_at: str
    subscription: Subscription = "free"


class StoredUser(User):
    """User record as persisted, including the password hash."""

    password_hash: str | None = None  # None: account cannot log in with a password


class LLMModel(BaseModel):
    """An entry of the available-models catalogue."""

    id: str
    name: str
    description: str
    provider: str
