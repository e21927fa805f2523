"""Token exchange against the Azure AD v2.0 token endpoint."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Dict, Optional

import httpx

from .errors import DecodeError, ProviderRejectedError, TransportError
from .models import DEFAULT_AUTHORITY_HOST, DEFAULT_SCOPE, ProviderError, TokenResponse

logger = logging.getLogger(__name__)

CLIENT_ASSERTION_TYPE = "urn:ietf:params:oauth:client-assertion-type:jwt-bearer"
GRANT_TYPE = "client_credentials"
DEFAULT_TIMEOUT_SECONDS = 30.0
MAX_ERROR_BODY_BYTES = 4096
MAX_DESCRIPTION_CHARS = 200
_ELLIPSIS = "..."
_REDACTED = "[REDACTED]"


def resolve_scope(scope: Optional[str]) -> str:
    """Return the requested scope, or the management API default when blank."""

    if scope and scope.strip():
        return scope.strip()
    return DEFAULT_SCOPE


def resolve_authority_host(authority_host: Optional[str]) -> str:
    """Return a normalised authority base URL without a trailing slash."""

    host = (authority_host or "").strip()
    if not host:
        return DEFAULT_AUTHORITY_HOST
    # Cloud constants such as ``login.microsoftonline.us`` carry no scheme.
    if "://" not in host:
        host = f"https://{host}"
    return host.rstrip("/")


def token_endpoint(authority_host: str, tenant_id: str) -> str:
    return f"{authority_host}/{tenant_id}/oauth2/v2.0/token"


def build_form(client_id: str, scope: str, oidc_token: str) -> Dict[str, str]:
    """Form fields for the client-credentials grant with a federated assertion."""

    return {
        "client_id": client_id,
        "scope": scope,
        "client_assertion_type": CLIENT_ASSERTION_TYPE,
        "client_assertion": oidc_token,
        "grant_type": GRANT_TYPE,
    }


def truncate_description(description: str, limit: int = MAX_DESCRIPTION_CHARS) -> str:
    """Shorten ``description`` to at most ``limit`` characters, ellipsis included."""

    if len(description) <= limit:
        return description
    return description[: limit - len(_ELLIPSIS)] + _ELLIPSIS


def _scrub(text: str, secret: str) -> str:
    if secret and secret in text:
        return text.replace(secret, _REDACTED)
    return text


def _scrub_optional(text: Optional[str], secret: str) -> Optional[str]:
    return None if text is None else _scrub(text, secret)


def _status_text(response: httpx.Response) -> str:
    return f"{response.status_code} {response.reason_phrase}".strip()


def _is_encoded(response: httpx.Response) -> bool:
    encoding = response.headers.get("Content-Encoding", "").strip().lower()
    return encoding not in ("", "identity")


async def _read_limited(response: httpx.Response, limit: int) -> bytes:
    # Raw bytes, so the limit applies before any decompression.
    body = bytearray()
    async for chunk in response.aiter_raw():
        body.extend(chunk)
        if len(body) >= limit:
            break
    return bytes(body[:limit])


def _decode_token_response(body: bytes) -> TokenResponse:
    # ``json.JSONDecodeError`` and ``UnicodeDecodeError`` are both ``ValueError``;
    # deeply nested arrays or objects raise ``RecursionError``.
    try:
        payload = json.loads(body)
    except (ValueError, RecursionError) as exc:
        raise DecodeError(f"failed to decode response: {exc}") from exc
    try:
        return TokenResponse.from_payload(payload)
    except ValueError as exc:
        raise DecodeError(f"failed to decode response: {exc}") from exc


def _rejection(response: httpx.Response, body: bytes, oidc_token: str) -> ProviderRejectedError:
    status_text = _status_text(response)
    provider_error: Optional[ProviderError] = None
    try:
        provider_error = ProviderError.from_payload(json.loads(body))
    except (ValueError, RecursionError):
        logger.debug("Error body from token endpoint is not JSON (status %s)", status_text)

    if provider_error is None or not provider_error.error:
        return ProviderRejectedError(response.status_code, status_text)

    code = _scrub(provider_error.error, oidc_token)
    description = truncate_description(
        _scrub(provider_error.error_description or "", oidc_token)
    )
    trace_id = _scrub_optional(provider_error.trace_id, oidc_token)
    correlation_id = _scrub_optional(provider_error.correlation_id, oidc_token)
    logger.warning(
        "Token endpoint rejected the request: %s (status %s, trace_id: %s)",
        code,
        response.status_code,
        trace_id,
    )
    return ProviderRejectedError(
        response.status_code,
        status_text,
        code=code,
        description=description,
        error_codes=provider_error.error_codes,
        trace_id=trace_id,
        correlation_id=correlation_id,
    )


async def _send(
    client: httpx.AsyncClient,
    endpoint: str,
    form: Dict[str, str],
    timeout: float,
    oidc_token: str,
) -> TokenResponse:
    async with client.stream(
        "POST",
        endpoint,
        data=form,
        headers={
            "Content-Type": "application/x-www-form-urlencoded",
            "Accept": "application/json",
            "Accept-Encoding": "identity",
        },
        timeout=timeout,
    ) as response:
        if response.status_code != httpx.codes.OK:
            # Only a bounded prefix of an error body is ever buffered, and a
            # compressed one is never inflated.
            body = b""
            if not _is_encoded(response):
                body = await _read_limited(response, MAX_ERROR_BODY_BYTES)
            raise _rejection(response, body, oidc_token)
        body = await response.aread()
    return _decode_token_response(body)


async def _post(
    http_client: Optional[httpx.AsyncClient],
    endpoint: str,
    form: Dict[str, str],
    timeout: float,
    oidc_token: str,
) -> TokenResponse:
    if http_client is not None:
        return await _send(http_client, endpoint, form, timeout, oidc_token)
    async with httpx.AsyncClient() as client:
        return await _send(client, endpoint, form, timeout, oidc_token)


async def exchange_token(
    oidc_token: str,
    tenant_id: str,
    client_id: str,
    scope: Optional[str] = None,
    authority_host: Optional[str] = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    http_client: Optional[httpx.AsyncClient] = None,
) -> TokenResponse:
    """Exchange ``oidc_token`` for an Azure AD access token.

    The OIDC token is presented as the client assertion of a
    client-credentials grant. A single attempt is made; the whole
    request/response cycle is bounded by ``timeout`` seconds and the
    coroutine can be cancelled by the caller at any point.

    ``http_client`` is used as-is and left open when given, otherwise a
    client is created for this call only.

    Raises:
        TransportError: the endpoint could not be reached or timed out.
        ProviderRejectedError: the endpoint answered with a non-200 status.
        DecodeError: a 200 response body is not a token response.
    """

    effective_scope = resolve_scope(scope)
    endpoint = token_endpoint(resolve_authority_host(authority_host), tenant_id)
    form = build_form(client_id, effective_scope, oidc_token)

    logger.debug("token endpoint: %s", endpoint)
    logger.debug("client_id: %s", client_id)
    logger.debug("scope: %s", effective_scope)

    try:
        return await asyncio.wait_for(
            _post(http_client, endpoint, form, timeout, oidc_token), timeout
        )
    except asyncio.TimeoutError as exc:
        raise TransportError(f"token request timed out after {timeout:g} seconds") from exc
    except httpx.TimeoutException as exc:
        raise TransportError(f"token request timed out after {timeout:g} seconds") from exc
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        detail = str(exc) or type(exc).__name__
        raise TransportError(f"failed to exchange token: {detail}") from exc
