"""Input checks performed before any request reaches the identity provider."""

from __future__ import annotations

from .errors import MalformedIdentifierError, MissingFieldError
from .models import ExchangeRequest

# Tenant names accepted by multi-tenant Azure AD applications in place of a GUID.
TENANT_ALIASES = frozenset({"common", "organizations", "consumers"})

_GUID_LENGTH = 36
_GUID_HYPHEN_POSITIONS = (8, 13, 18, 23)


def is_guid_shape(value: str) -> bool:
    """Return ``True`` when ``value`` looks like ``xxxxxxxx-xxxx-xxxx-xxxx-xxxxxxxxxxxx``.

    Only the length and the hyphen positions are checked; the remaining
    characters are not required to be hexadecimal.
    """

    return len(value) == _GUID_LENGTH and all(
        value[position] == "-" for position in _GUID_HYPHEN_POSITIONS
    )


def validate_request(request: ExchangeRequest, allow_tenant_aliases: bool = False) -> None:
    """Raise a ``ValidationError`` subclass when ``request`` cannot be exchanged."""

    for name in ("oidc_token", "tenant_id", "client_id"):
        value = getattr(request, name)
        if not value or not value.strip():
            raise MissingFieldError(name)

    tenant_ok = is_guid_shape(request.tenant_id) or (
        allow_tenant_aliases and request.tenant_id.lower() in TENANT_ALIASES
    )
    if not tenant_ok:
        raise MalformedIdentifierError("tenant_id")

    if not is_guid_shape(request.client_id):
        raise MalformedIdentifierError("client_id")
