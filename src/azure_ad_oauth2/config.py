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
Configuration for the Azure AD OAuth 2.0 strategy
Endpoint URLs are derived from the tenant id unless given explicitly
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Optional

from dotenv import load_dotenv

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

AUTHORIZATION_URL_TEMPLATE = "https://login.windows.net/{tenant}/oauth2/authorize?api-version=1.0"
TOKEN_URL_TEMPLATE = "https://login.windows.net/{tenant}/oauth2/token?api-version=1.0"
DEFAULT_SCOPE_SEPARATOR = ","


def derive_authorization_url(tenant_id: Optional[str]) -> str:
    """Authorization endpoint for a tenant. The id is substituted verbatim."""
    return AUTHORIZATION_URL_TEMPLATE.replace("{tenant}", str(tenant_id))


def derive_token_url(tenant_id: Optional[str]) -> str:
    """Token endpoint for a tenant. The id is substituted verbatim."""
    return TOKEN_URL_TEMPLATE.replace("{tenant}", str(tenant_id))


@dataclass(frozen=True)
class AzureStrategyConfig:
    """Immutable configuration for AzureStrategy"""

    client_id: str
    client_secret: str
    callback_url: Optional[str] = None
    tenant_id: Optional[str] = None

    # Explicit endpoints override the tenant-derived ones
    authorization_url: Optional[str] = None
    token_url: Optional[str] = None

    scope_separator: Optional[str] = None
    scope: Optional[str] = None

    def resolved_authorization_url(self) -> str:
        return self.authorization_url or derive_authorization_url(self.tenant_id)

    def resolved_token_url(self) -> str:
        return self.token_url or derive_token_url(self.tenant_id)

    def resolved_scope_separator(self) -> str:
        return self.scope_separator or DEFAULT_SCOPE_SEPARATOR

    @classmethod
    def from_env(cls, load_env_file: bool = False) -> "AzureStrategyConfig":
        """Build configuration from AZURE_* environment variables.

        Args:
            load_env_file: Load a ``.env`` file into the environment first

        Raises:
            ConfigurationError: If AZURE_CLIENT_ID or AZURE_CLIENT_SECRET is missing
        """
        if load_env_file:
            load_dotenv()

        client_id = os.getenv("AZURE_CLIENT_ID")
        client_secret = os.getenv("AZURE_CLIENT_SECRET")
        if not client_id:
            raise ConfigurationError("AZURE_CLIENT_ID must be set for AzureStrategy")
        if not client_secret:
            raise ConfigurationError("AZURE_CLIENT_SECRET must be set for AzureStrategy")

        tenant_id = os.getenv("AZURE_TENANT_ID")
        if not tenant_id and not os.getenv("AZURE_AUTHORIZATION_URL"):
            logger.warning("AZURE_TENANT_ID is not set; derived endpoint URLs will be invalid")

        return cls(
            client_id=client_id,
            client_secret=client_secret,
            callback_url=os.getenv("AZURE_CALLBACK_URL"),
            tenant_id=tenant_id,
            authorization_url=os.getenv("AZURE_AUTHORIZATION_URL"),
            token_url=os.getenv("AZURE_TOKEN_URL"),
            scope_separator=os.getenv("AZURE_SCOPE_SEPARATOR"),
            scope=os.getenv("AZURE_SCOPE"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary (client secret omitted)"""
        return {
            "tenant_id": self.tenant_id,
            "client_id": self.client_id,
            "callback_url": self.callback_url,
            "authorization_url": self.resolved_authorization_url(),
            "token_url": self.resolved_token_url(),
            "scope_separator": self.resolved_scope_separator(),
            "scope": self.scope,
        }
