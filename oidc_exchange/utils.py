"""Miscellaneous helpers for the OIDC token exchange."""

from __future__ import annotations

import base64
import json
from typing import Any, Dict

# Claims that identify a federated credential match and are safe to log.
ASSERTION_CLAIMS = ("iss", "sub", "aud", "exp")


def decode_jwt_without_verification(token: str) -> Dict[str, Any]:
    """Decode the payload of a JWT without validating the signature."""

    try:
        _, payload, _ = token.split(".")
    except ValueError as exc:
        raise ValueError("Token is not a valid JWT") from exc

    padded_payload = payload + "=" * (-len(payload) % 4)
    try:
        decoded_bytes = base64.urlsafe_b64decode(padded_payload.encode("ascii"))
        claims = json.loads(decoded_bytes.decode("utf-8"))
    except (ValueError, UnicodeError) as exc:
        raise ValueError("Token payload is not valid JSON") from exc
    if not isinstance(claims, dict):
        raise ValueError("Token payload is not a JSON object")
    return claims


def assertion_summary(token: str) -> Dict[str, Any]:
    """Return the issuer, subject, audience and expiry of an OIDC assertion.

    Azure AD matches these against the federated identity credential, so they
    are the first thing to compare when an exchange is rejected.
    """

    claims = decode_jwt_without_verification(token)
    return {name: claims[name] for name in ASSERTION_CLAIMS if name in claims}
