"""Data types exchanged with the Azure AD token endpoint."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

DEFAULT_SCOPE = "https://management.azure.com/.default"
DEFAULT_AUTHORITY_HOST = "https://login.microsoftonline.com"


@dataclass
class ExchangeRequest:
    """Inputs for a single OIDC to Azure AD token exchange."""

    oidc_token: str = field(repr=False)
    tenant_id: str
    client_id: str
    scope: str = ""
    authority_host: str = ""


@dataclass(frozen=True)
class TokenResponse:
    """Successful response from the token endpoint."""

    token_type: str
    expires_in: int
    access_token: str = field(repr=False)
    refresh_token: Optional[str] = field(default=None, repr=False)

    @classmethod
    def from_payload(cls, payload: Any) -> "TokenResponse":
        """Build a response from decoded JSON, raising ``ValueError`` on shape mismatch."""

        if not isinstance(payload, dict):
            raise ValueError(f"expected a JSON object, got {type(payload).__name__}")

        token_type = payload.get("token_type")
        if not isinstance(token_type, str):
            raise ValueError("field 'token_type' must be a string")

        # ``bool`` is a subclass of ``int`` and is never a valid lifetime.
        expires_in = payload.get("expires_in")
        if isinstance(expires_in, bool) or not isinstance(expires_in, int):
            raise ValueError("field 'expires_in' must be an integer")

        access_token = payload.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise ValueError("field 'access_token' must be a non-empty string")

        refresh_token = payload.get("refresh_token")
        if refresh_token is not None and not isinstance(refresh_token, str):
            raise ValueError("field 'refresh_token' must be a string")

        return cls(
            token_type=token_type,
            expires_in=expires_in,
            access_token=access_token,
            refresh_token=refresh_token or None,
        )


def _optional_str(payload: Dict[str, Any], key: str) -> Optional[str]:
    value = payload.get(key)
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


@dataclass(frozen=True)
class ProviderError:
    """Structured error body returned by Azure AD for rejected requests."""

    error: Optional[str] = None
    error_description: Optional[str] = None
    error_codes: List[int] = field(default_factory=list)
    timestamp: Optional[str] = None
    trace_id: Optional[str] = None
    correlation_id: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Any) -> Optional["ProviderError"]:
        """Return the parsed error, or ``None`` when the body is not a JSON object."""

        if not isinstance(payload, dict):
            return None

        raw_codes = payload.get("error_codes")
        codes: List[int] = []
        if isinstance(raw_codes, list):
            codes = [
                code
                for code in raw_codes
                if isinstance(code, int) and not isinstance(code, bool)
            ]

        return cls(
            error=_optional_str(payload, "error"),
            error_description=_optional_str(payload, "error_description"),
            error_codes=codes,
            timestamp=_optional_str(payload, "timestamp"),
            trace_id=_optional_str(payload, "trace_id"),
            correlation_id=_optional_str(payload, "correlation_id"),
        )
