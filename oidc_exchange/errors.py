"""Exception types raised while exchanging an OIDC token for an Azure AD token."""

from __future__ import annotations

from typing import List, Optional


class OIDCExchangeError(Exception):
    """Base class for every failure surfaced by this package."""


class ConfigurationError(OIDCExchangeError):
    """Raised when the process configuration cannot be used."""


class ValidationError(OIDCExchangeError):
    """Raised when an exchange request fails input validation."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


class MissingFieldError(ValidationError):
    """A required input is empty."""

    def __init__(self, field: str) -> None:
        super().__init__(field, f"{field} is not provided")


class MalformedIdentifierError(ValidationError):
    """A tenant or client identifier does not have the GUID shape."""

    def __init__(self, field: str) -> None:
        super().__init__(
            field,
            f"{field} must be a valid GUID format (xxxxxxxx-xxxx-xxxx-xxxx-xxxxxxxxxxxx)",
        )


class ExchangeError(OIDCExchangeError):
    """Raised when the token endpoint call does not yield an access token."""


class TransportError(ExchangeError):
    """The identity provider could not be reached or did not answer in time."""


class DecodeError(ExchangeError):
    """A successful response body could not be read as a token response."""


class ProviderRejectedError(ExchangeError):
    """The identity provider answered with a non-200 status."""

    def __init__(
        self,
        status_code: int,
        status_text: str,
        code: Optional[str] = None,
        description: str = "",
        error_codes: Optional[List[int]] = None,
        trace_id: Optional[str] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        self.status_code = status_code
        self.status_text = status_text
        self.code = code
        self.description = description
        self.error_codes = list(error_codes or [])
        self.trace_id = trace_id
        self.correlation_id = correlation_id
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if not self.code:
            return f"token exchange failed: {self.status_text}"
        message = f"token exchange failed: {self.code} - {self.description}"
        if self.trace_id:
            message += f" (trace_id: {self.trace_id})"
        return message


class SinkError(OIDCExchangeError):
    """The access token could not be handed to the output destination."""
