"""Utility functions for StellarMind."""

from stellarmind.utils.identifiers import (
    generate_node_id,
    generate_edge_id,
    generate_session_id,
    generate_api_key_id,
    generate_user_id,
    utc_now,
    utc_timestamp,
)

__all__ = [
    "generate_node_id",
    "generate_edge_id",
    "generate_session_id",
    "generate_api_key_id",
    "generate_user_id",
    "utc_now",
    "utc_timestamp",
]
