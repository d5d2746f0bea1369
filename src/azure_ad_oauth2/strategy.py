#!/usr/bin/env python3
# MIT License
#
# Copyright (c) 2025 Azure AD OAuth2 Contributors
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

"""
Azure Active Directory authentication strategy.

Authenticates requests by delegating to Azure AD over OAuth 2.0. The
strategy supplies the Azure-specific pieces to a generic OAuth2Client:
endpoint URLs, extra request parameters, profile normalization and
error parsing.

Applications supply a ``verify`` callback taking ``access_token``,
``refresh_token``, ``profile`` and ``done``. It calls ``done(err, user)``,
with ``user`` set to False when the credentials are not valid.

Examples:
    >>> config = AzureStrategyConfig(
    ...     tenant_id="12c983bf-46f6-414f-93ab-5d7ad211db43",
    ...     client_id="123-456-789",
    ...     client_secret="shhh-its-a-secret",
    ...     callback_url="https://www.example.net/auth/azure/callback",
    ... )
    >>> def verify(access_token, refresh_token, profile, done):
    ...     done(None, {"id": profile.id})
    >>> strategy = AzureStrategy(config, verify)
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

import httpx

from .config import AzureStrategyConfig
from .errors import OAuth2Error
from .models import PROVIDER_NAME, AuthOutcome
from .oauth2 import OAuth2Client, ProfileCallback, VerifyCallback
from .profile import normalize_profile

logger = logging.getLogger(__name__)

# Optional hints forwarded to the authorization endpoint:
# - domain_hint: registered domain of the tenant; federated tenants are
#   redirected straight to their federation server
# - login_hint: pre-fills the username field on the sign-in page
# - prompt: login, consent or admin_consent (not validated)
# - resource: App ID URI of the secured web API
AUTHORIZATION_OPTION_KEYS = ("domain_hint", "login_hint", "prompt", "resource")
TOKEN_OPTION_KEYS = ("resource",)


class AzureStrategy:
    """Azure AD OAuth 2.0 strategy.

    Implements the StrategyHooks capability set consumed by OAuth2Client.

    Attributes:
        name: Always ``"azure"``
        config: Strategy configuration (read-only after construction)
        client: Generic OAuth2 client performing the handshake
    """

    name = PROVIDER_NAME

    def __init__(
        self,
        config: AzureStrategyConfig,
        verify: VerifyCallback,
        *,
        skip_user_profile: bool = False,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.config = config
        self._authorization_url = config.resolved_authorization_url()
        self._token_url = config.resolved_token_url()
        self._scope_separator = config.resolved_scope_separator()

        self.client = OAuth2Client(
            self,
            authorization_url=self._authorization_url,
            token_url=self._token_url,
            client_id=config.client_id,
            client_secret=config.client_secret,
            callback_url=config.callback_url,
            verify=verify,
            scope=config.scope,
            scope_separator=self._scope_separator,
            skip_user_profile=skip_user_profile,
            http_client=http_client,
        )

        logger.info(
            f"AzureStrategy initialized: tenant={config.tenant_id}, "
            f"authorization_url={self._authorization_url}, token_url={self._token_url}"
        )

    @property
    def authorization_url(self) -> str:
        return self._authorization_url

    @property
    def token_url(self) -> str:
        return self._token_url

    @property
    def scope_separator(self) -> str:
        return self._scope_separator

    async def authenticate(self, request: Any, options: Optional[Mapping[str, Any]] = None) -> AuthOutcome:
        """Authenticate a request by delegating to Azure AD."""
        return await self.client.authenticate(request, options)

    def authorization_params(self, options: Optional[Mapping[str, Any]]) -> dict[str, str]:
        """Extra parameters for the authorization request.

        Each of domain_hint, login_hint, prompt and resource is included only
        when present in ``options``.
        """
        options = options or {}
        return {key: options[key] for key in AUTHORIZATION_OPTION_KEYS if options.get(key)}

    def token_params(self, options: Optional[Mapping[str, Any]]) -> dict[str, str]:
        """Extra parameters for the token request (only ``resource``)."""
        options = options or {}
        return {key: options[key] for key in TOKEN_OPTION_KEYS if options.get(key)}

    def user_profile(self, access_token: str, done: ProfileCallback) -> None:
        """Build a normalized profile from the claims inside the access token.

        Calls ``done(None, profile)`` on success and ``done(error, None)``
        when the token cannot be decoded. Decode failures are terminal for
        this authentication attempt.
        """
        error, profile = normalize_profile(access_token)
        done(error, profile)

    def parse_error_response(self, body: str, status: int) -> Optional[OAuth2Error]:
        """Parse an error response from the Azure token endpoint."""
        return self.client.parse_error_response(body, status)
