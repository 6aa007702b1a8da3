"""
Cursor Codec

Opaque pagination tokens. A position is a small mapping of ordering-key
values (e.g. ``{"id": 42}`` or ``{"created_at": "...", "id": 42}``) that is
serialized to canonical JSON and wrapped in unpadded URL-safe base64.

The token carries no ordering semantics; callers decide how positions map
to query predicates. Decoding fails closed.
"""

import base64
import binascii
import json
import logging
from collections.abc import Mapping
from typing import Any

logger = logging.getLogger(__name__)

# Scalar types allowed inside a cursor position
_SCALARS = (str, int, float)


def encode_cursor(position: Mapping[str, Any]) -> str:
    """
    Encode a position into an opaque, URL-safe token.

    Args:
        position: Mapping of ordering-key name to scalar value

    Returns:
        Unpadded URL-safe base64 string
    """
    payload = json.dumps(dict(position), separators=(",", ":"), sort_keys=True)
    return base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii").rstrip("=")


def decode_cursor(token: str | None) -> dict[str, Any] | None:
    """
    Decode a token produced by encode_cursor.

    Never raises: malformed base64, non-JSON payloads, non-object payloads
    and non-scalar values all yield None.

    Args:
        token: Opaque cursor string from a client

    Returns:
        Decoded position, or None if the token is invalid
    """
    if not token or not isinstance(token, str):
        return None

    try:
        padded = token + "=" * (-len(token) % 4)
        raw = base64.urlsafe_b64decode(padded.encode("ascii"))
        position = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError):
        logger.debug("Rejected undecodable cursor")
        return None

    if not isinstance(position, dict) or not position:
        return None

    for value in position.values():
        if isinstance(value, bool) or not isinstance(value, _SCALARS):
            return None

    return position
