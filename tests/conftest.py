"""
Shared fixtures for the Azure AD strategy tests.
"""

from types import SimpleNamespace

import jwt
import pytest

from azure_ad_oauth2 import AzureStrategyConfig

SIGNING_SECRET = "test-signing-secret-that-is-long-enough-for-hs256"

CLAIMS = {
    "oid": "5a9c2bdf-2d7b-4bd5-9f62-7c3c1f0e8a11",
    "tid": "12c983bf-46f6-414f-93ab-5d7ad211db43",
    "unique_name": "jane.doe@contoso.onmicrosoft.com",
    "given_name": "Jane",
    "family_name": "Doe",
    "email": "jane.doe@contoso.com",
}


def _make_token(claims=None):
    return jwt.encode(CLAIMS if claims is None else claims, SIGNING_SECRET, algorithm="HS256")


@pytest.fixture
def token_factory():
    """Mint HS256 JWTs; only the payload matters to the strategy."""
    return _make_token


@pytest.fixture
def request_factory():
    """Minimal inbound request exposing query_params."""

    def make(**query):
        return SimpleNamespace(query_params=query)

    return make


@pytest.fixture
def claims():
    return dict(CLAIMS)


@pytest.fixture
def access_token():
    return _make_token()


@pytest.fixture
def config():
    return AzureStrategyConfig(
        tenant_id="contoso-tenant",
        client_id="123-456-789",
        client_secret="shhh-its-a-secret",
        callback_url="https://www.example.net/auth/azure/callback",
    )
