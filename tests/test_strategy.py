"""
Tests for the Azure strategy configurator and its hooks.
"""

from unittest.mock import AsyncMock, Mock

import pytest

from azure_ad_oauth2 import (
    AuthOutcome,
    AzureStrategy,
    AzureStrategyConfig,
    DecodeErrorKind,
    ProfileDecodeError,
    TokenError,
)


def _verify(access_token, refresh_token, profile, done):
    done(None, {"id": profile.id})


class TestEndpointDerivation:
    """Test endpoint URLs and scope separator"""

    def test_urls_derived_from_tenant(self):
        """Test tenant id is substituted into both templates"""
        strategy = AzureStrategy(AzureStrategyConfig(tenant_id="T", client_id="c", client_secret="s"), _verify)

        assert strategy.authorization_url == "https://login.windows.net/T/oauth2/authorize?api-version=1.0"
        assert strategy.token_url == "https://login.windows.net/T/oauth2/token?api-version=1.0"

    def test_explicit_urls_win(self):
        """Test explicit endpoints override the tenant templates"""
        config = AzureStrategyConfig(
            tenant_id="T",
            client_id="c",
            client_secret="s",
            authorization_url="https://idp.example.com/authorize",
            token_url="https://idp.example.com/token",
        )
        strategy = AzureStrategy(config, _verify)

        assert strategy.authorization_url == "https://idp.example.com/authorize"
        assert strategy.token_url == "https://idp.example.com/token"
        assert strategy.client.token_url == "https://idp.example.com/token"

    def test_tenant_not_escaped(self):
        """Test the tenant id goes into the URL verbatim"""
        strategy = AzureStrategy(
            AzureStrategyConfig(tenant_id="contoso.onmicrosoft.com", client_id="c", client_secret="s"), _verify
        )

        assert strategy.authorization_url.startswith("https://login.windows.net/contoso.onmicrosoft.com/")

    def test_missing_tenant_yields_unvalidated_url(self):
        """Test an absent tenant is not validated at construction"""
        strategy = AzureStrategy(AzureStrategyConfig(client_id="c", client_secret="s"), _verify)

        assert strategy.token_url == "https://login.windows.net/None/oauth2/token?api-version=1.0"

    def test_default_scope_separator(self, config):
        """Test comma is the default scope separator"""
        strategy = AzureStrategy(config, _verify)

        assert strategy.scope_separator == ","
        assert strategy.client.scope_separator == ","

    def test_explicit_scope_separator(self):
        """Test an explicit separator is honored"""
        config = AzureStrategyConfig(tenant_id="T", client_id="c", client_secret="s", scope_separator=" ")

        assert AzureStrategy(config, _verify).scope_separator == " "

    def test_name(self, config):
        """Test the strategy identifies itself as azure"""
        assert AzureStrategy(config, _verify).name == "azure"


class TestAuthorizationParams:
    """Test extra authorization request parameters"""

    def test_empty_options(self, config):
        assert AzureStrategy(config, _verify).authorization_params({}) == {}

    def test_only_present_keys(self, config):
        """Test absent options are omitted"""
        params = AzureStrategy(config, _verify).authorization_params({"domain_hint": "x", "prompt": "login"})

        assert params == {"domain_hint": "x", "prompt": "login"}

    def test_all_keys(self, config):
        options = {
            "domain_hint": "contoso.com",
            "login_hint": "jane@contoso.com",
            "prompt": "admin_consent",
            "resource": "https://graph.windows.net",
        }

        assert AzureStrategy(config, _verify).authorization_params(options) == options

    def test_ignores_unknown_and_empty(self, config):
        """Test unrelated and empty options do not leak through"""
        params = AzureStrategy(config, _verify).authorization_params(
            {"state": "abc", "scope": "openid", "login_hint": "", "prompt": "not-a-real-prompt"}
        )

        assert params == {"prompt": "not-a-real-prompt"}

    def test_none_options(self, config):
        """Test a missing options mapping yields no params"""
        assert AzureStrategy(config, _verify).authorization_params(None) == {}


class TestTokenParams:
    """Test extra token request parameters"""

    def test_resource(self, config):
        assert AzureStrategy(config, _verify).token_params({"resource": "r"}) == {"resource": "r"}

    def test_empty(self, config):
        assert AzureStrategy(config, _verify).token_params({}) == {}

    def test_none_options(self, config):
        assert AzureStrategy(config, _verify).token_params(None) == {}

    def test_only_resource(self, config):
        """Test authorization hints are not sent to the token endpoint"""
        params = AzureStrategy(config, _verify).token_params({"resource": "r", "domain_hint": "x"})

        assert params == {"resource": "r"}


class TestUserProfile:
    """Test the profile hook's callback contract"""

    def test_success(self, config, access_token, claims):
        """Test done receives (None, profile)"""
        done = Mock()
        AzureStrategy(config, _verify).user_profile(access_token, done)

        err, profile = done.call_args.args
        assert err is None
        assert profile.id == claims["oid"]
        assert profile.display_name == "Jane Doe"

    @pytest.mark.parametrize(
        "token,kind",
        [
            ("single-segment", DecodeErrorKind.MALFORMED_TOKEN),
            ("a.%%%%.c", DecodeErrorKind.INVALID_BASE64),
            ("a.bm90IGpzb24.c", DecodeErrorKind.INVALID_JSON),
        ],
    )
    def test_failure(self, config, token, kind):
        """Test done receives (error, None) on decode failure"""
        done = Mock()
        AzureStrategy(config, _verify).user_profile(token, done)

        done.assert_called_once()
        err, profile = done.call_args.args
        assert isinstance(err, ProfileDecodeError)
        assert err.kind == kind
        assert profile is None


class TestDelegation:
    """Test authenticate and parse_error_response delegate to the client"""

    @pytest.mark.asyncio
    async def test_authenticate_delegates(self, config, request_factory):
        """Test the same arguments reach the OAuth2 client"""
        strategy = AzureStrategy(config, _verify)
        expected = AuthOutcome.redirect("https://example.com")
        strategy.client.authenticate = AsyncMock(return_value=expected)
        request = request_factory()

        result = await strategy.authenticate(request, {"prompt": "login"})

        assert result is expected
        strategy.client.authenticate.assert_awaited_once_with(request, {"prompt": "login"})

    def test_parse_error_response(self, config):
        """Test generic JSON error bodies become TokenError"""
        body = '{"error": "invalid_grant", "error_description": "AADSTS70008: code expired"}'
        error = AzureStrategy(config, _verify).parse_error_response(body, 400)

        assert isinstance(error, TokenError)
        assert error.code == "invalid_grant"
        assert error.status == 400
        assert "AADSTS70008" in str(error)

    def test_parse_error_response_unrecognized(self, config):
        """Test non-JSON bodies are left to the client's fallback"""
        assert AzureStrategy(config, _verify).parse_error_response("<html>oops</html>", 500) is None
