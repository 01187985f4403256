"""Demo authentication: login, registration and token verification.

Tokens are HS256 JWTs carrying ``{userId, email}`` and expire after
``JWT_EXPIRE_DAYS`` days.
"""

import logging
import re
from datetime import timedelta

import jwt
from fastapi import APIRouter, Depends, Header, HTTPException
from pydantic import BaseModel

from server import settings
from server.auth_db import UserExistsError, UserStore
from server.dependencies import get_user_store
from stellarmind.models.user import StoredUser
from stellarmind.utils.identifiers import utc_now

logger = logging.getLogger(__name__)

router = APIRouter()

JWT_ALGORITHM = "HS256"
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


# --- Request / Response Models ---


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None


class RegisterRequest(BaseModel):
    email: str | None = None
    password: str | None = None
    name: str | None = None


class PublicUser(BaseModel):
    id: str
    email: str
    name: str
    avatar: str | None = None
    subscription: str = "free"


class AuthResponse(BaseModel):
    user: PublicUser
    token: str


# --- Helper Functions ---


def create_token(user: StoredUser) -> str:
    payload = {
        "userId": user.id,
        "email": user.email,
        "exp": utc_now() + timedelta(days=settings.JWT_EXPIRE_DAYS),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_token(token: str) -> dict:
    """Decode and verify a token, raising 401 when it is invalid or expired."""
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.InvalidTokenError as e:
        logger.info("Rejected token: %s", e)
        raise HTTPException(status_code=401, detail="Invalid or expired token") from e


def _public(user: StoredUser) -> PublicUser:
    return PublicUser(
        id=user.id,
        email=user.email,
        name=user.name,
        avatar=user.avatar,
        subscription=user.subscription,
    )


# --- API Endpoints ---


@router.post("/auth/login")
def login(request: LoginRequest, users: UserStore = Depends(get_user_store)) -> AuthResponse:
    if not request.email or not request.password:
        raise HTTPException(status_code=400, detail="Email and password are required")

    user = users.get_by_email(request.email)
    if user is None:
        raise HTTPException(status_code=401, detail="User does not exist")
    if users.authenticate(request.email, request.password) is None:
        raise HTTPException(status_code=401, detail="Incorrect password")

    return AuthResponse(user=_public(user), token=create_token(user))


@router.post("/auth/register")
def register(request: RegisterRequest, users: UserStore = Depends(get_user_store)) -> AuthResponse:
    if not request.email or not request.password or not request.name:
        raise HTTPException(status_code=400, detail="Email, password and name are required")
    if not EMAIL_PATTERN.match(request.email):
        raise HTTPException(status_code=400, detail="Invalid email format")

    try:
        user = users.create_user(request.email, request.password, request.name)
    except UserExistsError:
        raise HTTPException(status_code=409, detail="Email is already registered")

    return AuthResponse(user=_public(user), token=create_token(user))


@router.get("/auth/verify")
def verify(
    authorization: str | None = Header(default=None),
    users: UserStore = Depends(get_user_store),
) -> PublicUser:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing bearer token")

    claims = decode_token(authorization.split(" ", 1)[1])
    user = users.get_by_id(claims.get("userId", ""))
    if user is None:
        raise HTTPException(status_code=401, detail="User does not exist")
    return _public(user)
