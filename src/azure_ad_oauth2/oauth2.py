"""
Generic OAuth 2.0 authorization-code client.

Performs the redirect/callback handshake and the code exchange, and calls
back into a provider strategy through a small hook set:

- authorization_params: extra query parameters for the authorization redirect
- token_params: extra form fields for the token request
- user_profile: turn an access token into a provider profile
- parse_error_response: interpret a failed token response

Providers compose this client rather than subclass it.
"""

from __future__ import annotations

import inspect
import json
import logging
from typing import Any, Callable, Mapping, Optional, Protocol
from urllib.parse import urlencode

import httpx

from .errors import AuthorizationError, InternalOAuthError, OAuth2Error, TokenError
from .models import AuthOutcome

logger = logging.getLogger(__name__)

ProfileCallback = Callable[[Optional[OAuth2Error], Any], None]
VerifyDone = Callable[..., None]
VerifyCallback = Callable[[str, Optional[str], Any, VerifyDone], Any]


class StrategyHooks(Protocol):
    """Capabilities a provider strategy supplies to OAuth2Client."""

    name: str

    def authorization_params(self, options: Mapping[str, Any]) -> dict[str, str]: ...

    def token_params(self, options: Mapping[str, Any]) -> dict[str, str]: ...

    def user_profile(self, access_token: str, done: ProfileCallback) -> None: ...

    def parse_error_response(self, body: str, status: int) -> Optional[OAuth2Error]: ...


def _append_query(url: str, params: Mapping[str, Any]) -> str:
    query = urlencode({k: v for k, v in params.items() if v is not None})
    if not query:
        return url
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{query}"


class OAuth2Client:
    """Authorization-code flow driven by a provider's hooks.

    Attributes:
        hooks: Provider strategy implementing StrategyHooks
        authorization_url: Authorization endpoint (may already carry a query string)
        token_url: Token endpoint
        scope_separator: Joins list-valued scopes
    """

    def __init__(
        self,
        hooks: StrategyHooks,
        *,
        authorization_url: str,
        token_url: str,
        client_id: str,
        client_secret: str,
        verify: VerifyCallback,
        callback_url: Optional[str] = None,
        scope: Any = None,
        scope_separator: str = " ",
        skip_user_profile: bool = False,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        if verify is None:
            raise TypeError("OAuth2Client requires a verify callback")

        self.hooks = hooks
        self.authorization_url = authorization_url
        self.token_url = token_url
        self.client_id = client_id
        self._client_secret = client_secret
        self.callback_url = callback_url
        self.scope = scope
        self.scope_separator = scope_separator
        self.skip_user_profile = skip_user_profile
        self._verify = verify
        self._http_client = http_client

    async def authenticate(self, request: Any, options: Optional[Mapping[str, Any]] = None) -> AuthOutcome:
        """Run one step of the authorization-code handshake.

        Flow:
        1. Provider returned an error on the callback → FAIL or ERROR
        2. Callback carries a code → exchange, load profile, verify
        3. Otherwise → REDIRECT to the authorization endpoint

        Args:
            request: Inbound request exposing ``query_params``
            options: Per-call options (hints, resource, state, scope, callback_url)

        Returns:
            AuthOutcome describing what the hosting framework should do
        """
        options = dict(options or {})
        query = getattr(request, "query_params", None) or {}

        if query.get("error"):
            if query.get("error") == "access_denied":
                return AuthOutcome.fail({"message": query.get("error_description")})
            return AuthOutcome.errored(
                AuthorizationError(query.get("error_description"), query.get("error"), query.get("error_uri"))
            )

        callback_url = options.get("callback_url") or self.callback_url

        code = query.get("code")
        if code:
            return await self._complete(code, callback_url, options)

        params = dict(self.hooks.authorization_params(options))
        params["response_type"] = "code"
        if callback_url:
            params["redirect_uri"] = callback_url
        scope = options.get("scope", self.scope)
        if scope:
            if not isinstance(scope, str):
                scope = self.scope_separator.join(scope)
            params["scope"] = scope
        if options.get("state"):
            params["state"] = options["state"]
        params["client_id"] = self.client_id

        location = _append_query(self.authorization_url, params)
        logger.debug(f"Redirecting to authorization endpoint for provider={self.hooks.name}")
        return AuthOutcome.redirect(location)

    async def _complete(self, code: str, callback_url: Optional[str], options: Mapping[str, Any]) -> AuthOutcome:
        params = dict(self.hooks.token_params(options))
        params["grant_type"] = "authorization_code"
        if callback_url:
            params["redirect_uri"] = callback_url

        try:
            access_token, refresh_token, token_response = await self.get_oauth_access_token(code, params)
        except OAuth2Error as e:
            logger.warning(f"Failed to obtain access token: {e}")
            return AuthOutcome.errored(e)

        profile: Any = None
        if not self.skip_user_profile:
            profile_error, profile = self._load_user_profile(access_token)
            if profile_error is not None:
                return AuthOutcome.errored(profile_error)

        return await self._run_verify(access_token, refresh_token, profile)

    def _load_user_profile(self, access_token: str) -> tuple[Optional[OAuth2Error], Any]:
        result: dict[str, Any] = {}

        def done(err: Optional[OAuth2Error], profile: Any) -> None:
            result["err"] = err
            result["profile"] = profile

        self.hooks.user_profile(access_token, done)
        if "err" not in result:
            return InternalOAuthError("user_profile hook did not report a result"), None
        return result["err"], result["profile"]

    async def _run_verify(self, access_token: str, refresh_token: Optional[str], profile: Any) -> AuthOutcome:
        outcome: dict[str, Any] = {}

        def done(err: Optional[Exception], user: Any = None, info: Any = None) -> None:
            outcome["err"] = err
            outcome["user"] = user
            outcome["info"] = info

        try:
            returned = self._verify(access_token, refresh_token, profile, done)
            if inspect.isawaitable(returned):
                await returned
        except OAuth2Error as e:
            return AuthOutcome.errored(e)
        except Exception as e:
            logger.error(f"Verify callback raised: {e}", exc_info=True)
            return AuthOutcome.errored(InternalOAuthError("verify callback raised", e))

        if not outcome:
            return AuthOutcome.errored(InternalOAuthError("verify callback did not call done"))
        err = outcome["err"]
        if err is not None:
            if isinstance(err, OAuth2Error):
                return AuthOutcome.errored(err)
            return AuthOutcome.errored(InternalOAuthError("verify callback reported an error", err))
        if not outcome["user"]:
            return AuthOutcome.fail(outcome["info"])
        return AuthOutcome.succeed(outcome["user"], outcome["info"])

    async def get_oauth_access_token(
        self, code: str, params: Mapping[str, Any]
    ) -> tuple[str, Optional[str], dict[str, Any]]:
        """Exchange an authorization code at the token endpoint.

        Args:
            code: Authorization code from the callback
            params: Extra form fields (grant_type, redirect_uri, provider params)

        Returns:
            (access_token, refresh_token, full token response)

        Raises:
            TokenError: If the provider returned a parseable error body
            InternalOAuthError: On transport failure or an unusable response
        """
        form = dict(params)
        form["code"] = code
        form["client_id"] = self.client_id
        form["client_secret"] = self._client_secret

        try:
            if self._http_client is not None:
                response = await self._http_client.post(self.token_url, data=form)
            else:
                async with httpx.AsyncClient(timeout=10.0) as client:
                    response = await client.post(self.token_url, data=form)
        except httpx.HTTPError as e:
            raise InternalOAuthError("Failed to obtain access token", e) from e

        body = response.text
        if response.status_code >= 400:
            parsed = self.hooks.parse_error_response(body, response.status_code)
            if parsed is not None:
                raise parsed
            raise InternalOAuthError("Failed to obtain access token", body=body, status=response.status_code)

        try:
            token_response = json.loads(body)
        except json.JSONDecodeError as e:
            raise InternalOAuthError("Token response is not valid JSON", e, body=body) from e

        access_token = token_response.get("access_token") if isinstance(token_response, dict) else None
        if not access_token:
            raise InternalOAuthError("Token response did not include an access_token", body=body)

        return access_token, token_response.get("refresh_token"), token_response

    def parse_error_response(self, body: str, status: int) -> Optional[OAuth2Error]:
        """Generic token-endpoint error parser.

        Returns:
            TokenError for a JSON body with an ``error`` member, None otherwise
        """
        try:
            payload = json.loads(body)
        except (json.JSONDecodeError, TypeError):
            return None
        if not isinstance(payload, dict) or not payload.get("error"):
            return None
        return TokenError(
            payload.get("error_description"),
            payload.get("error"),
            payload.get("error_uri"),
            status,
        )
