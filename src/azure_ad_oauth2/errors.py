"""
Error taxonomy for Azure AD OAuth 2.0 authentication.

Every failure reaches the caller as the ``error`` of an authentication
outcome. Missing claims are not errors; they degrade to empty profile fields.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

__all__ = [
    "AuthorizationError",
    "ConfigurationError",
    "DecodeErrorKind",
    "InternalOAuthError",
    "OAuth2Error",
    "ProfileDecodeError",
    "TokenError",
]


class OAuth2Error(Exception):
    """Base class for all errors raised or reported by this package."""


class ConfigurationError(OAuth2Error):
    """Raised when required strategy configuration is missing."""


class AuthorizationError(OAuth2Error):
    """Error returned by the authorization endpoint on the callback redirect.

    Attributes:
        code: OAuth error code (``error`` query parameter)
        uri: Optional ``error_uri`` pointing at provider documentation
        status: HTTP status the hosting framework should report
    """

    def __init__(
        self,
        message: Optional[str],
        code: Optional[str] = None,
        uri: Optional[str] = None,
        status: int = 500,
    ) -> None:
        super().__init__(message or code or "authorization failed")
        self.code = code or "server_error"
        self.uri = uri
        self.status = status


class TokenError(OAuth2Error):
    """Error body returned by the token endpoint.

    Attributes:
        code: OAuth error code (``error`` member of the body)
        uri: Optional ``error_uri`` member of the body
        status: HTTP status of the token response
    """

    def __init__(
        self,
        message: Optional[str],
        code: Optional[str] = None,
        uri: Optional[str] = None,
        status: int = 500,
    ) -> None:
        super().__init__(message or code or "token request failed")
        self.code = code or "invalid_request"
        self.uri = uri
        self.status = status


class InternalOAuthError(OAuth2Error):
    """Transport failure or unparseable response while talking to the provider."""

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        body: Optional[str] = None,
        status: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.cause = cause
        self.body = body
        self.status = status

    def __str__(self) -> str:
        message = super().__str__()
        if self.cause is not None:
            return f"{message} ({self.cause})"
        return message


class DecodeErrorKind(str, Enum):
    """Stage of access-token decoding that failed."""

    MALFORMED_TOKEN = "malformed_token"
    INVALID_BASE64 = "invalid_base64"
    INVALID_UTF8 = "invalid_utf8"
    INVALID_JSON = "invalid_json"


class ProfileDecodeError(OAuth2Error):
    """The access token could not be turned into a user profile.

    A single error type covers every decode stage; ``kind`` tells them apart
    for callers that care.
    """

    def __init__(
        self,
        message: str,
        kind: DecodeErrorKind,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.cause = cause
