"""User records for the demo authentication routes.

Users are kept as one JSON list in the key/value store. The demo account is
always available and never persisted.
"""

import hashlib
import hmac
import json
import logging
import secrets

from pydantic import ValidationError

from stellarmind.models.user import StoredUser
from stellarmind.store.kv import KeyValueStore
from stellarmind.utils.identifiers import generate_user_id, utc_timestamp

logger = logging.getLogger(__name__)

USERS_KEY = "stellarmind_users"
PBKDF2_ITERATIONS = 120_000

DEMO_EMAIL = "demo@stellarmind.ai"
DEMO_PASSWORD = "demo123"


class UserExistsError(Exception):
    """Raised when registering an email that is already taken."""


def hash_password(password: str, salt: str | None = None) -> str:
    """Hash as ``pbkdf2_sha256$<iterations>$<salt>$<hex digest>``."""
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), PBKDF2_ITERATIONS)
    return f"pbkdf2_sha256${PBKDF2_ITERATIONS}${salt}${digest.hex()}"


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    try:
        algorithm, iterations, salt, expected = password_hash.split("$")
        rounds = int(iterations)
    except ValueError:
        return False
    if algorithm != "pbkdf2_sha256" or rounds < 1:
        return False
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), rounds)
    return hmac.compare_digest(digest.hex(), expected)


DEMO_USER = StoredUser(
    id="demo_user_001",
    email=DEMO_EMAIL,
    name="演示用户",
    created_at="2024-01-01T00:00:00.000Z",
    updated_at="2024-01-01T00:00:00.000Z",
    subscription="pro",
    password_hash=hash_password(DEMO_PASSWORD),
)


class UserStore:
    def __init__(self, persistence: KeyValueStore) -> None:
        self.persistence = persistence

    def _load(self) -> list[StoredUser]:
        raw = self.persistence.get(USERS_KEY)
        if raw is None:
            return []
        try:
            items = json.loads(raw)
        except (ValueError, TypeError):
            logger.exception("Failed to read stored users; treating as empty")
            return []
        if not isinstance(items, list):
            logger.error("Stored users are not a list; treating as empty")
            return []

        users = []
        for item in items:
            try:
                users.append(StoredUser.model_validate(item))
            except ValidationError:
                user_id = item.get("id") if isinstance(item, dict) else None
                logger.warning("Skipping unreadable stored user: %r", user_id)
        return users

    def list_users(self) -> list[StoredUser]:
        return [DEMO_USER, *self._load()]

    def get_by_email(self, email: str) -> StoredUser | None:
        email = email.lower()
        return next((u for u in self.list_users() if u.email.lower() == email), None)

    def get_by_id(self, user_id: str) -> StoredUser | None:
        return next((u for u in self.list_users() if u.id == user_id), None)

    def create_user(self, email: str, password: str, name: str) -> StoredUser:
        if self.get_by_email(email) is not None:
            raise UserExistsError(email)
        now = utc_timestamp()
        user = StoredUser(
            id=generate_user_id(),
            email=email.lower(),
            name=name.strip(),
            created_at=now,
            updated_at=now,
            subscription="free",
            password_hash=hash_password(password),
        )
        users = self._load()
        users.append(user)
        self.persistence.put(
            USERS_KEY, json.dumps([u.model_dump() for u in users], ensure_ascii=False).encode("utf-8")
        )
        logger.info("Registered user %s", user.id)
        return user

    def authenticate(self, email: str, password: str) -> StoredUser | None:
        user = self.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            return None
        return user
