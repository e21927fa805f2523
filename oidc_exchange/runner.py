"""Validate, exchange and publish an Azure AD access token."""

from __future__ import annotations

import logging
from typing import Callable, Optional

import httpx

from .config import Settings
from .errors import ConfigurationError
from .models import ExchangeRequest, TokenResponse
from .sink import ACCESS_TOKEN_KEY, append_env_file
from .token_service import exchange_token
from .utils import assertion_summary
from .validation import validate_request

logger = logging.getLogger(__name__)

Sink = Callable[[str, str], None]


def build_request(settings: Settings) -> ExchangeRequest:
    return ExchangeRequest(
        oidc_token=settings.oidc_token,
        tenant_id=settings.tenant_id,
        client_id=settings.client_id,
        scope=settings.scope,
        authority_host=settings.effective_authority_host,
    )


def _file_sink(path: str) -> Sink:
    def write(key: str, value: str) -> None:
        append_env_file(path, key, value)

    return write


def _log_assertion(token: str) -> None:
    if not logger.isEnabledFor(logging.DEBUG):
        return
    try:
        logger.debug("OIDC assertion claims: %s", assertion_summary(token))
    except ValueError as exc:
        logger.debug("OIDC assertion is not a decodable JWT: %s", exc)


async def run(
    settings: Settings,
    sink: Optional[Sink] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> TokenResponse:
    """Exchange the configured OIDC token and hand the access token to ``sink``.

    ``sink`` receives ``(key, value)`` once, and only after a successful
    exchange. Without one the token is appended to ``settings.output_file``.
    """

    request = build_request(settings)
    validate_request(request, allow_tenant_aliases=settings.allow_tenant_aliases)

    if sink is None:
        if not settings.output_file:
            raise ConfigurationError("HARNESS_OUTPUT_SECRET_FILE must be set")
        sink = _file_sink(settings.output_file)

    _log_assertion(request.oidc_token)
    logger.info("exchanging OIDC token for Azure AD access token")
    token = await exchange_token(
        request.oidc_token,
        request.tenant_id,
        request.client_id,
        scope=request.scope,
        authority_host=request.authority_host,
        timeout=settings.timeout_seconds,
        http_client=http_client,
    )

    sink(ACCESS_TOKEN_KEY, token.access_token)

    logger.info("Azure access token retrieved successfully")
    logger.debug("token will expire in %d seconds", token.expires_in)
    return token
