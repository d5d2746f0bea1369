"""
Starlette integration for the Azure AD strategy.

Maps authentication outcomes onto Starlette responses:
- REDIRECT → 302 to the authorization endpoint
- SUCCESS → user handed to the application, 302 to the success page
- FAIL → 302 to the failure page, or 401
- ERROR → 401 (details are logged, never returned)

The user reaches the application in one of two ways:
- an ``on_success(request, user, info)`` handler that builds the response
- the session, under ``session_key``, when SessionMiddleware is installed

Options for the token exchange (``resource``) must come from
``default_options``: the callback query belongs to the provider, so
per-call options given to the login route do not survive the round trip.
"""

from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Mapping, Optional, Union

from starlette.responses import RedirectResponse, Response
from starlette.routing import Route

from .models import AuthAction, AuthOutcome

if TYPE_CHECKING:
    from starlette.requests import Request

    from .strategy import AzureStrategy

logger = logging.getLogger(__name__)

QUERY_OPTION_KEYS = ("domain_hint", "login_hint", "prompt", "resource", "state")
DEFAULT_SESSION_KEY = "azure_user"

SuccessHandler = Callable[["Request", Any, Any], Union[Response, Awaitable[Response]]]


class AzureAuthRoutes:
    """Login and callback endpoints backed by an AzureStrategy.

    Attributes:
        strategy: Configured AzureStrategy
        success_redirect: Where to send the browser after a successful login
        failure_redirect: Where to send it after a failed login (401 if unset)
        default_options: Options applied to every authenticate call
        on_success: Optional handler returning the response for a successful login
        session_key: Session entry holding the user when sessions are enabled
    """

    def __init__(
        self,
        strategy: AzureStrategy,
        *,
        success_redirect: str = "/",
        failure_redirect: Optional[str] = None,
        default_options: Optional[Mapping[str, Any]] = None,
        on_success: Optional[SuccessHandler] = None,
        session_key: str = DEFAULT_SESSION_KEY,
    ) -> None:
        self.strategy = strategy
        self.success_redirect = success_redirect
        self.failure_redirect = failure_redirect
        self.default_options = dict(default_options or {})
        self.on_success = on_success
        self.session_key = session_key

    def routes(self, login_path: str = "/auth/azure", callback_path: str = "/auth/azure/callback") -> list[Route]:
        return [
            Route(login_path, self.login, methods=["GET"]),
            Route(callback_path, self.callback, methods=["GET"]),
        ]

    def _options(self, request: Request) -> dict[str, Any]:
        options = dict(self.default_options)
        for key in QUERY_OPTION_KEYS:
            value = request.query_params.get(key)
            if value:
                options[key] = value
        return options

    async def login(self, request: Request) -> Response:
        outcome = await self.strategy.authenticate(request, self._options(request))
        return await self._respond(request, outcome)

    async def callback(self, request: Request) -> Response:
        outcome = await self.strategy.authenticate(request, self.default_options)
        return await self._respond(request, outcome)

    def current_user(self, request: Request) -> Any:
        """User stored by a previous successful login, or None."""
        if "session" not in request.scope:
            return None
        return request.session.get(self.session_key)

    async def _respond(self, request: Request, outcome: AuthOutcome) -> Response:
        if outcome.action == AuthAction.REDIRECT:
            return RedirectResponse(outcome.location, status_code=302)

        if outcome.action == AuthAction.SUCCESS:
            logger.info(f"Authenticated request: provider={self.strategy.name}, path={request.url.path}")
            if "session" in request.scope:
                request.session[self.session_key] = outcome.user
            if self.on_success is not None:
                response = self.on_success(request, outcome.user, outcome.info)
                if inspect.isawaitable(response):
                    response = await response
                return response
            if "session" not in request.scope:
                logger.warning("No on_success handler and no SessionMiddleware; the user is not kept")
            return RedirectResponse(self.success_redirect, status_code=302)

        if outcome.action == AuthAction.FAIL:
            logger.warning(
                f"Authentication failed: path={request.url.path}, "
                f"client={request.client.host if request.client else 'unknown'}"
            )
            if self.failure_redirect:
                return RedirectResponse(self.failure_redirect, status_code=302)
            return Response(status_code=401, content=b"Unauthorized", media_type="text/plain")

        logger.error(f"Authentication error: {type(outcome.error).__name__}: {outcome.error}")
        return Response(status_code=401, content=b"Unauthorized", media_type="text/plain")
