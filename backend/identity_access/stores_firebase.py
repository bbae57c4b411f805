"""
Session lookup backed by Firebase Auth ID tokens.

Why: Sign-in happens in the Firebase Auth client, which writes the ID token
into the session cookie. Verifying that token here makes every instance of
this service able to authenticate the same cookie without shared state.

Behavior: Mirrors `SessionStore.get`: returns a `SessionRecord` for a valid
token and None otherwise. Verification failures are logged by code only,
never with the token itself.
"""
from __future__ import annotations

import logging
from typing import Optional

from backend.identity_access.stores import SessionRecord
from backend.identity_access.tokens import IDTokenVerificationError, JWKSCache, verify_id_token

logger = logging.getLogger("portal.identity_access")


class FirebaseSessionStore:
    def __init__(self, project_id: str, cache: JWKSCache | None = None):
        self.project_id = project_id
        self._cache = cache

    def get(self, session_id: str) -> Optional[SessionRecord]:
        try:
            claims = verify_id_token(id_token=session_id, project_id=self.project_id, cache=self._cache)
        except IDTokenVerificationError as exc:
            logger.info("session token rejected code=%s", exc.code)
            return None
        name = claims.get("name") or claims.get("email") or ""
        exp = claims.get("exp")
        return SessionRecord(
            session_id=session_id,
            sub=str(claims["sub"]),
            name=name if isinstance(name, str) else "",
            expires_at=int(exp) if isinstance(exp, (int, float)) else None,
        )
