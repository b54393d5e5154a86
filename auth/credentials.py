"""
auth/credentials.py -- Credential providers for the admin login.

AuthGate only asks a provider "is this username/password pair valid?". The
single configured admin account is one implementation; a real identity
backend can replace it without touching token issuance.

Layer rule: no imports from api/ or catalog/.
"""

from __future__ import annotations

import hmac
from typing import Protocol


class CredentialProvider(Protocol):
    def validate_credentials(self, username: str, password: str) -> bool: ...


class StaticCredentialProvider:
    """Accepts exactly one username/password pair (ADMIN_USERNAME / ADMIN_PASSWORD).

    Both comparisons always run and use hmac.compare_digest, so response time
    does not reveal which half of the pair was wrong.
    """

    def __init__(self, username: str, password: str) -> None:
        self._username = username.encode("utf-8")
        self._password = password.encode("utf-8")

    def validate_credentials(self, username: str, password: str) -> bool:
        user_ok = hmac.compare_digest(username.encode("utf-8"), self._username)
        pass_ok = hmac.compare_digest(password.encode("utf-8"), self._password)
        return user_ok and pass_ok
