"""
auth/tokens.py -- Admin login and bearer-token verification.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with SECRET_KEY and carry
       the subject (username), issued-at and expiry. Anyone without the key
       cannot mint or alter a token that verifies.

  Stateless: there is no session table and no revocation list. A token stays
       valid for its full TTL (2 hours by default) even after the admin
       "logs out" in the UI. Verification is a pure function of
       (token, secret, current time), so concurrent requests need no locking.

  Credentials: checked by a pluggable CredentialProvider (auth/credentials.py).
       The gate never sees how credentials are stored.

  SECRET_KEY: sourced from core.config.get_settings() by the API lifespan and
       passed in at construction. The gate treats it as immutable.

Layer rule: no imports from api/ or catalog/.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from auth.credentials import CredentialProvider

logger = logging.getLogger("lampshop.auth")

_ALGORITHM = "HS256"

DEFAULT_TTL_SECONDS = 2 * 60 * 60


class InvalidCredentials(Exception):
    """The username/password pair was rejected by the credential provider."""


class Unauthorized(Exception):
    """The presented token is missing, malformed, forged or expired."""


class AuthGate:
    """Issue and verify signed, time-limited admin tokens.

    Args:
        secret_key:  Symmetric HS256 signing key, known only to the service.
        credentials: Provider consulted by login().
        ttl_seconds: Lifetime of an issued token.
    """

    def __init__(
        self,
        secret_key: str,
        credentials: CredentialProvider,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
    ) -> None:
        if not secret_key:
            raise ValueError("secret_key must not be empty")
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._secret_key = secret_key
        self._credentials = credentials
        self.ttl_seconds = ttl_seconds

    def login(self, username: str, password: str) -> str:
        """Return a fresh token for a valid credential pair. Raises InvalidCredentials."""
        if not self._credentials.validate_credentials(username, password):
            logger.info("Rejected login for %r", username)
            raise InvalidCredentials("invalid username or password")
        logger.info("Issued token for %r", username)
        return self.create_access_token(username)

    def create_access_token(self, subject: str) -> str:
        """Encode a signed JWT with sub, iat and exp claims."""
        now = datetime.now(timezone.utc)
        payload = {
            "sub": subject,
            "iat": now,
            "exp": now + timedelta(seconds=self.ttl_seconds),
        }
        return jwt.encode(payload, self._secret_key, algorithm=_ALGORITHM)

    def decode_access_token(self, token: str) -> dict | None:
        """Decode and verify a JWT. Returns the payload dict or None on any failure.

        Covers bad signature, wrong algorithm, malformed input, expired exp
        and a missing or empty sub claim.
        """
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[_ALGORITHM])
        except JWTError:
            return None
        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject:
            return None
        return payload

    def authenticate(self, token: str) -> str:
        """Return the token's subject. Raises Unauthorized for any invalid token.

        Authentication only: the subject is not checked against any role or
        permission.
        """
        payload = self.decode_access_token(token)
        if payload is None:
            raise Unauthorized("invalid or expired token")
        return payload["sub"]
