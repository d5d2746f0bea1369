"""
Example usage of the Azure AD OAuth2 strategy
Serves /auth/azure and /auth/azure/callback with Starlette + uvicorn

Set AZURE_TENANT_ID, AZURE_CLIENT_ID, AZURE_CLIENT_SECRET and
AZURE_CALLBACK_URL (or put them in .env), then run this file.
"""

import logging
import os
import secrets
import sys

import uvicorn
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.sessions import SessionMiddleware
from starlette.responses import PlainTextResponse
from starlette.routing import Route

from azure_ad_oauth2 import AzureAuthRoutes, AzureStrategy, AzureStrategyConfig

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)


def verify(access_token, refresh_token, profile, done):
    # Look up or create the application user here
    logger.info(f"Signed in: {profile.username} ({profile.org_id})")
    done(None, profile.to_dict())


def create_app() -> Starlette:
    config = AzureStrategyConfig.from_env(load_env_file=True)
    strategy = AzureStrategy(config, verify)
    auth = AzureAuthRoutes(strategy, success_redirect="/", failure_redirect="/login-failed")

    async def home(request):
        user = auth.current_user(request)
        return PlainTextResponse(f"Signed in as {user['username']}" if user else "Hello")

    # The session cookie carries the user from the callback to later requests
    session_secret = os.getenv("SESSION_SECRET_KEY") or secrets.token_hex(32)
    return Starlette(
        routes=[Route("/", home), *auth.routes()],
        middleware=[Middleware(SessionMiddleware, secret_key=session_secret)],
    )


if __name__ == "__main__":
    uvicorn.run(create_app(), host="127.0.0.1", port=3000, log_level="warning")
