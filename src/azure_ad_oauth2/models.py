"""
Data models for the Azure AD strategy.

Separated from the strategy module so the profile normalizer and the
OAuth2 delegate can share them without circular imports.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from .errors import OAuth2Error, ProfileDecodeError

PROVIDER_NAME = "azure"


@dataclass(frozen=True)
class TokenClaims:
    """Identity claims read from the access token payload.

    Every claim is optional; absent claims stay ``None``.
    """

    oid: Optional[str] = None
    tid: Optional[str] = None
    unique_name: Optional[str] = None
    given_name: Optional[str] = None
    family_name: Optional[str] = None
    email: Optional[str] = None

    @classmethod
    def from_json(cls, payload: dict[str, Any]) -> TokenClaims:
        return cls(
            oid=payload.get("oid"),
            tid=payload.get("tid"),
            unique_name=payload.get("unique_name"),
            given_name=payload.get("given_name"),
            family_name=payload.get("family_name"),
            email=payload.get("email"),
        )


@dataclass(frozen=True)
class ProfileName:
    given_name: Optional[str] = None
    family_name: Optional[str] = None


@dataclass(frozen=True)
class Profile:
    """Normalized user profile produced from an Azure AD access token.

    Attributes:
        provider: Always ``"azure"``
        id: Directory object id (``oid`` claim)
        org_id: Directory tenant id (``tid`` claim)
        username: User principal name (``unique_name`` claim)
        display_name: Given name and family name joined by a space
        name: Given and family name
        emails: Single-element list holding the ``email`` claim
        utf8: Decoded payload text, kept for diagnostics
        json: Parsed claim set, kept for diagnostics
    """

    id: Optional[str]
    org_id: Optional[str]
    username: Optional[str]
    display_name: str
    name: ProfileName
    emails: list[Optional[str]]
    utf8: str
    json: dict[str, Any] = field(default_factory=dict)
    provider: str = PROVIDER_NAME

    def to_dict(self) -> dict[str, Any]:
        """Render the profile in its canonical camelCase shape."""
        return {
            "provider": self.provider,
            "id": self.id,
            "orgId": self.org_id,
            "username": self.username,
            "displayName": self.display_name,
            "name": {
                "givenName": self.name.given_name,
                "familyName": self.name.family_name,
            },
            "emails": list(self.emails),
            "utf8": self.utf8,
            "json": self.json,
        }


@dataclass(frozen=True)
class DecodeResult:
    """Outcome of decoding an access token: either claims or an error."""

    claims: Optional[TokenClaims] = None
    utf8: Optional[str] = None
    raw: Optional[dict[str, Any]] = None
    error: Optional[ProfileDecodeError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, claims: TokenClaims, utf8: str, raw: dict[str, Any]) -> DecodeResult:
        return cls(claims=claims, utf8=utf8, raw=raw)

    @classmethod
    def failure(cls, error: ProfileDecodeError) -> DecodeResult:
        return cls(error=error)


class AuthAction(str, Enum):
    """What the hosting framework should do with an authentication attempt."""

    REDIRECT = "redirect"
    SUCCESS = "success"
    FAIL = "fail"
    ERROR = "error"


@dataclass(frozen=True)
class AuthOutcome:
    """Result of one ``authenticate`` call.

    Only the fields relevant to ``action`` are set:
    - REDIRECT: ``location``
    - SUCCESS: ``user`` and optional ``info``
    - FAIL: ``challenge`` and ``status``
    - ERROR: ``error``
    """

    action: AuthAction
    location: Optional[str] = None
    user: Any = None
    info: Any = None
    challenge: Any = None
    status: int = 401
    error: Optional[OAuth2Error] = None

    @classmethod
    def redirect(cls, location: str) -> AuthOutcome:
        return cls(action=AuthAction.REDIRECT, location=location, status=302)

    @classmethod
    def succeed(cls, user: Any, info: Any = None) -> AuthOutcome:
        return cls(action=AuthAction.SUCCESS, user=user, info=info, status=200)

    @classmethod
    def fail(cls, challenge: Any = None, status: int = 401) -> AuthOutcome:
        return cls(action=AuthAction.FAIL, challenge=challenge, status=status)

    @classmethod
    def errored(cls, error: OAuth2Error) -> AuthOutcome:
        return cls(action=AuthAction.ERROR, error=error, status=getattr(error, "status", None) or 500)
