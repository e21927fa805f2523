"""Configuration handling for the OIDC token exchange."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Optional

from azure.identity import AzureAuthorityHosts

from .errors import ConfigurationError
from .token_service import DEFAULT_TIMEOUT_SECONDS

CLOUD_AUTHORITIES = {
    "azurepubliccloud": AzureAuthorityHosts.AZURE_PUBLIC_CLOUD,
    "azureusgovernment": AzureAuthorityHosts.AZURE_GOVERNMENT,
    "azurechinacloud": AzureAuthorityHosts.AZURE_CHINA,
}


def resolve_cloud_authority(cloud: str) -> str:
    """Return the authority base URL for a friendly Azure cloud name."""

    authority = CLOUD_AUTHORITIES.get(cloud.strip().lower())
    if not authority:
        supported = ", ".join(sorted(CLOUD_AUTHORITIES))
        raise ConfigurationError(
            f"Unsupported PLUGIN_AZURE_CLOUD '{cloud}'. Supported values: {supported}."
        )
    return f"https://{authority}"


@dataclass
class Settings:
    """Runtime settings loaded from the environment."""

    oidc_token: str = field(default="", repr=False)
    tenant_id: str = ""
    client_id: str = ""
    scope: str = ""
    authority_host: str = ""
    cloud: Optional[str] = None
    allow_tenant_aliases: bool = False
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    log_level: str = "info"
    output_file: Optional[str] = None

    @property
    def effective_authority_host(self) -> str:
        """Explicit authority host, else the host for ``cloud``, else empty.

        An empty result lets the token service apply its public-cloud default.
        """

        if self.authority_host.strip():
            return self.authority_host.strip()
        if not self.cloud:
            return ""
        return resolve_cloud_authority(self.cloud)


def _parse_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    lowered = value.strip().lower()
    if lowered in {"1", "true", "yes", "on"}:
        return True
    if lowered in {"0", "false", "no", "off"}:
        return False
    return default


def _parse_float(value: str | None, default: float) -> float:
    if value is None:
        return default
    try:
        parsed = float(value)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _optional_env(name: str) -> str | None:
    value = os.getenv(name)
    return value if value else None


def _load_oidc_token(path: str) -> str:
    try:
        with open(path, "r", encoding="utf-8") as handle:
            return handle.read().strip()
    except OSError as exc:
        raise ConfigurationError(
            "PLUGIN_OIDC_TOKEN_FILE is not accessible at the configured path"
        ) from exc


@lru_cache
def get_settings() -> Settings:
    """Load settings from environment variables (cached).

    Required values are not enforced here; empty identifiers are reported by
    request validation so that every missing input yields the same error.
    """

    oidc_token = os.getenv("PLUGIN_OIDC_TOKEN_ID", "")
    token_file = _optional_env("PLUGIN_OIDC_TOKEN_FILE")
    if not oidc_token and token_file:
        oidc_token = _load_oidc_token(token_file)

    cloud = _optional_env("PLUGIN_AZURE_CLOUD")
    if cloud:
        # Unknown cloud names fail at load time rather than mid-exchange.
        resolve_cloud_authority(cloud)

    return Settings(
        oidc_token=oidc_token,
        tenant_id=os.getenv("PLUGIN_TENANT_ID", ""),
        client_id=os.getenv("PLUGIN_CLIENT_ID", ""),
        scope=os.getenv("PLUGIN_SCOPE", ""),
        authority_host=os.getenv("PLUGIN_AZURE_AUTHORITY_HOST", ""),
        cloud=cloud,
        allow_tenant_aliases=_parse_bool(os.getenv("PLUGIN_ALLOW_TENANT_ALIASES"), False),
        timeout_seconds=_parse_float(
            os.getenv("PLUGIN_TIMEOUT_SECONDS"), DEFAULT_TIMEOUT_SECONDS
        ),
        log_level=_optional_env("PLUGIN_LOG_LEVEL") or "info",
        output_file=_optional_env("HARNESS_OUTPUT_SECRET_FILE"),
    )
