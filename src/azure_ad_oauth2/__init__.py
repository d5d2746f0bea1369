"""
Azure Active Directory OAuth 2.0 authentication strategy.

Delegates identity verification to Azure AD and produces a normalized
user profile from the access token it returns.

Architecture:
- AzureStrategy: Azure endpoint URLs, request parameters, profile hook
- OAuth2Client: Generic authorization-code handshake the strategy configures
- decode_claims / normalize_profile: Access-token claims → Profile
- AzureAuthRoutes: Starlette login and callback endpoints
"""

from __future__ import annotations

import logging

from .config import AzureStrategyConfig, derive_authorization_url, derive_token_url
from .errors import (
    AuthorizationError,
    ConfigurationError,
    DecodeErrorKind,
    InternalOAuthError,
    OAuth2Error,
    ProfileDecodeError,
    TokenError,
)
from .middleware import AzureAuthRoutes
from .models import AuthAction, AuthOutcome, DecodeResult, Profile, ProfileName, TokenClaims
from .oauth2 import OAuth2Client, StrategyHooks
from .profile import build_profile, decode_claims, normalize_profile
from .strategy import AzureStrategy

__all__ = [
    "AuthAction",
    "AuthOutcome",
    "AuthorizationError",
    "AzureAuthRoutes",
    "AzureStrategy",
    "AzureStrategyConfig",
    "ConfigurationError",
    "DecodeErrorKind",
    "DecodeResult",
    "InternalOAuthError",
    "OAuth2Client",
    "OAuth2Error",
    "Profile",
    "ProfileDecodeError",
    "ProfileName",
    "StrategyHooks",
    "TokenClaims",
    "TokenError",
    "build_profile",
    "decode_claims",
    "derive_authorization_url",
    "derive_token_url",
    "normalize_profile",
]

logging.getLogger(__name__).addHandler(logging.NullHandler())
