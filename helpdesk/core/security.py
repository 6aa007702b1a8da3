"""
Security Utilities

API key generation and hashing. Raw keys are shown once at creation;
only their SHA-256 hash and a short display prefix are stored.
"""

import hashlib
import secrets

from helpdesk.config import get_settings

# Characters of the raw key kept for display and log correlation
KEY_PREFIX_LENGTH = 8


def hash_api_key(api_key: str) -> str:
    """
    Hash an API key for storage.

    Uses SHA-256 since API keys are already high-entropy random strings
    and don't need bcrypt's intentional slowness.

    Args:
        api_key: The raw API key

    Returns:
        SHA-256 hex digest of the API key
    """
    return hashlib.sha256(api_key.encode()).hexdigest()


def generate_api_key() -> str:
    """
    Generate a new API key.

    Returns:
        A URL-safe random string prefixed with the configured key prefix
    """
    return f"{get_settings().api_key_prefix}{secrets.token_urlsafe(32)}"


def display_prefix(api_key: str) -> str:
    """Short, non-secret prefix of a raw key for listings and logs."""
    return api_key[:KEY_PREFIX_LENGTH]
