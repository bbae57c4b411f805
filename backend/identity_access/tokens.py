"""
Firebase ID token verification for the identity_access bounded context.

Why: The sign-in page is served by a separate Firebase Auth client. It stores
the user's ID token in the session cookie, so this service has to verify it
on its own: signature against Google's published JWKS, issuer, audience and
expiry. Keeping this outside the web adapter makes it unit-testable.

Security: Only RS256 is accepted regardless of what the JWKS advertises.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict
import time

import requests
from jose import jwt
from jose.exceptions import JOSEError

FIREBASE_JWKS_URL = "https://www.googleapis.com/service_accounts/v1/jwk/securetoken@system.gserviceaccount.com"
FIREBASE_ISSUER_PREFIX = "https://securetoken.google.com/"


class IDTokenVerificationError(Exception):
    """Raised when the ID token fails verification."""

    def __init__(self, code: str):
        super().__init__(code)
        self.code = code


@dataclass
class _CacheEntry:
    jwks: Dict[str, object]
    expires_at: float


class JWKSCache:
    """Small in-memory cache for the signing keys (rotated by Google every few hours)."""

    def __init__(self, url: str = FIREBASE_JWKS_URL, ttl_seconds: int = 3600):
        self.url = url
        self.ttl_seconds = ttl_seconds
        self._entry: _CacheEntry | None = None

    def get(self) -> Dict[str, object]:
        now = time.time()
        if self._entry and self._entry.expires_at > now:
            return self._entry.jwks
        jwks = self._fetch()
        self._entry = _CacheEntry(jwks=jwks, expires_at=now + self.ttl_seconds)
        return jwks

    def _fetch(self) -> Dict[str, object]:
        try:
            resp = requests.get(self.url, timeout=5)
        except requests.RequestException as exc:
            raise IDTokenVerificationError("jwks_fetch_failed") from exc
        if resp.status_code != 200:
            raise IDTokenVerificationError("jwks_fetch_failed")
        try:
            jwks = resp.json()
        except ValueError as exc:
            raise IDTokenVerificationError("jwks_invalid") from exc
        if not isinstance(jwks, dict) or "keys" not in jwks:
            raise IDTokenVerificationError("jwks_invalid")
        return jwks


JWKS_CACHE = JWKSCache()

MAX_CLOCK_SKEW_SECONDS = 5


def verify_id_token(
    *,
    id_token: str,
    project_id: str,
    cache: JWKSCache | None = None,
) -> Dict[str, object]:
    """Validate a Firebase ID token and return its claims.

    Parameters
    ----------
    id_token:
        The raw JWT issued by Firebase Auth.
    project_id:
        Firebase project; the token's audience and issuer suffix.
    cache:
        Optional JWKS cache (defaults to the module-level cache).

    Raises
    ------
    IDTokenVerificationError:
        When the token is invalid (signature, issuer, audience, expiry, kid, sub).
    """
    cache = cache or JWKS_CACHE
    try:
        header = jwt.get_unverified_header(id_token)
    except JOSEError as exc:
        raise IDTokenVerificationError("malformed_token") from exc
    kid = header.get("kid")
    if not kid:
        raise IDTokenVerificationError("missing_kid")
    key_dict = _find_key(cache.get(), kid)
    if not key_dict:
        raise IDTokenVerificationError("unknown_kid")

    try:
        claims = jwt.decode(
            id_token,
            key_dict,
            algorithms=["RS256"],
            audience=project_id,
            issuer=FIREBASE_ISSUER_PREFIX + project_id,
            options={
                "verify_signature": True,
                "verify_aud": True,
                "verify_exp": False,
                "verify_iat": False,
                "verify_nbf": False,
                "verify_at_hash": False,
            },
        )
    except JOSEError as exc:
        raise IDTokenVerificationError("invalid_id_token") from exc

    _validate_temporal_claims(claims)
    # Firebase guarantees a non-empty uid in `sub`; anything else is forged or broken.
    sub = claims.get("sub")
    if not isinstance(sub, str) or not sub.strip():
        raise IDTokenVerificationError("missing_sub")
    return claims


def _find_key(jwks: Dict[str, object], kid: str) -> Dict[str, object] | None:
    keys = jwks.get("keys")
    if not isinstance(keys, list):
        return None
    for key in keys:
        if isinstance(key, dict) and key.get("kid") == kid:
            return key
    return None


def _validate_temporal_claims(claims: Dict[str, object]) -> None:
    now = time.time()
    exp = claims.get("exp")
    if not isinstance(exp, (int, float)):
        raise IDTokenVerificationError("invalid_id_token")
    if exp + MAX_CLOCK_SKEW_SECONDS < now:
        raise IDTokenVerificationError("expired")

    iat = claims.get("iat")
    if isinstance(iat, (int, float)) and iat - MAX_CLOCK_SKEW_SECONDS > now:
        raise IDTokenVerificationError("invalid_id_token")
