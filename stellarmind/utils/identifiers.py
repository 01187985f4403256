"""ID generation and timestamp utilities."""

import uuid
from datetime import datetime, timezone


def generate_node_id(node_type: str) -> str:
    """Generate a node ID prefixed with its node type, e.g. ``question-<uuid4>``."""
    return f"{node_type}-{uuid.uuid4()}"


def generate_edge_id(source: str, target: str) -> str:
    """Derive the client-side edge ID from its endpoints."""
    return f"edge-{source}-{target}"


def generate_session_id() -> str:
    """Generate a unique session ID."""
    return f"session_{uuid.uuid4().hex}"


def generate_api_key_id() -> str:
    """Generate a unique API key config ID."""
    return f"api_{uuid.uuid4().hex}"


def generate_user_id() -> str:
    """Generate a unique user ID."""
    return f"user_{uuid.uuid4().hex}"


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def utc_timestamp() -> str:
    """Generate an ISO8601 UTC timestamp."""
    return utc_now().isoformat()
