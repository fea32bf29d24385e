"""JWT-shaped access token helpers.

Only the payload is inspected; signatures are the server's business. Anything
that cannot be decoded into a claims object with a numeric ``exp`` is treated
as expired.
"""
from __future__ import annotations

import base64
import json
import math
import time
from typing import Any, Optional


def _b64url_decode(segment: str) -> bytes:
    padded = segment + "=" * (-len(segment) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def decode_claims(token: str) -> dict[str, Any]:
    """Return the payload of a ``header.payload.signature`` token.

    Raises ValueError when the token is not shaped like a JWT or the payload
    is not a JSON object.
    """
    parts = token.split(".")
    if len(parts) != 3 or not parts[1]:
        raise ValueError("token is not a three-part JWT")
    claims = json.loads(_b64url_decode(parts[1]))
    if not isinstance(claims, dict):
        raise ValueError("token payload is not an object")
    return claims


def token_expiry(token: str) -> Optional[float]:
    """Return the ``exp`` claim in epoch seconds, or None if unavailable."""
    if not isinstance(token, str) or not token:
        return None
    try:
        exp = decode_claims(token)["exp"]
        if isinstance(exp, bool):
            return None
        exp = float(exp)
        return exp if not math.isnan(exp) else None
    except (ValueError, KeyError, TypeError, OverflowError, RecursionError):
        # binascii.Error, UnicodeDecodeError and JSONDecodeError are ValueErrors;
        # huge integer exp overflows float(), deeply nested payloads exhaust json.loads
        return None


def is_token_expired(token: str, now: Optional[float] = None) -> bool:
    exp = token_expiry(token)
    if exp is None:
        return True
    current = time.time() if now is None else now
    return exp <= current


def mint_token(claims: dict[str, Any], signature: str = "unsigned") -> str:
    """Build an unsigned JWT-shaped token (demo backend and tests)."""
    header = _b64url_encode(json.dumps({"alg": "none", "typ": "JWT"}).encode("utf-8"))
    payload = _b64url_encode(json.dumps(claims, separators=(",", ":")).encode("utf-8"))
    return f"{header}.{payload}.{signature}"
