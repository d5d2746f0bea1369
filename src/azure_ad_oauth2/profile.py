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
Profile normalization for Azure AD access tokens.

The access token is a JWT: header, payload and signature joined by dots.
The payload is read without signature verification; the token was just
received from the token endpoint over TLS.
"""

from __future__ import annotations

import binascii
import json
import logging
import re
from typing import Any

from jwt.utils import base64url_decode

from .errors import DecodeErrorKind, ProfileDecodeError
from .models import DecodeResult, Profile, ProfileName, TokenClaims

logger = logging.getLogger(__name__)

_BASE64_RE = re.compile(r"^[A-Za-z0-9+/\-_]*={0,2}$")


def _b64decode(segment: str) -> bytes:
    """Decode standard or URL-safe base64 with optional padding."""
    if not _BASE64_RE.match(segment):
        raise binascii.Error("Non-base64 characters in token segment")
    normalized = segment.rstrip("=").replace("+", "-").replace("/", "_")
    if len(normalized) % 4 == 1:
        raise binascii.Error("Invalid base64 segment length")
    return base64url_decode(normalized)


def decode_claims(access_token: str) -> DecodeResult:
    """Decode the claim set embedded in an access token.

    Args:
        access_token: Raw access token from the token endpoint

    Returns:
        DecodeResult carrying the claims, or a ProfileDecodeError whose
        ``kind`` names the stage that failed
    """
    segments = access_token.split(".") if isinstance(access_token, str) else []
    if len(segments) < 2:
        return DecodeResult.failure(
            ProfileDecodeError(
                "Access token does not contain a claims segment",
                DecodeErrorKind.MALFORMED_TOKEN,
            )
        )

    try:
        token_binary = _b64decode(segments[1])
    except (binascii.Error, ValueError) as e:
        return DecodeResult.failure(
            ProfileDecodeError("Claims segment is not valid base64", DecodeErrorKind.INVALID_BASE64, e)
        )

    try:
        token_utf8 = token_binary.decode("utf-8")
    except UnicodeDecodeError as e:
        return DecodeResult.failure(
            ProfileDecodeError("Claims segment is not valid UTF-8", DecodeErrorKind.INVALID_UTF8, e)
        )

    try:
        token_json = json.loads(token_utf8)
    except json.JSONDecodeError as e:
        return DecodeResult.failure(
            ProfileDecodeError("Claims segment is not valid JSON", DecodeErrorKind.INVALID_JSON, e)
        )

    if not isinstance(token_json, dict):
        return DecodeResult.failure(
            ProfileDecodeError("Claims segment is not a JSON object", DecodeErrorKind.INVALID_JSON)
        )

    return DecodeResult.success(TokenClaims.from_json(token_json), token_utf8, token_json)


def build_profile(claims: TokenClaims, utf8: str, raw: dict[str, Any]) -> Profile:
    """Map decoded claims to the normalized profile shape."""
    return Profile(
        id=claims.oid,
        org_id=claims.tid,
        username=claims.unique_name,
        display_name=f"{claims.given_name} {claims.family_name}",
        name=ProfileName(given_name=claims.given_name, family_name=claims.family_name),
        emails=[claims.email],
        utf8=utf8,
        json=raw,
    )


def normalize_profile(access_token: str) -> tuple[ProfileDecodeError | None, Profile | None]:
    """Decode and normalize in one step, logging decode failures.

    Returns:
        ``(None, profile)`` on success, ``(error, None)`` on failure
    """
    result = decode_claims(access_token)
    if not result.ok:
        logger.warning(f"Unable to parse oauth2 token for user profile: {result.error.kind.value}")
        return result.error, None

    return None, build_profile(result.claims, result.utf8, result.raw)
