from __future__ import annotations

import hashlib
import hmac
import re
import secrets
from datetime import timedelta

import jwt

from synapse.utils.time import utc_now

_ALGORITHM = "pbkdf2_sha256"
_ITERATIONS = 260_000
_EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")


def is_valid_email(email: str) -> bool:
    return bool(_EMAIL_PATTERN.match(email or ""))


def hash_password(password: str, *, iterations: int = _ITERATIONS) -> str:
    """
    Returns ``pbkdf2_sha256$<iterations>$<salt>$<hex digest>``.
    """
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("ascii"), iterations
    ).hex()
    return f"{_ALGORITHM}${iterations}${salt}${digest}"


def verify_password(password: str, encoded: str) -> bool:
    try:
        algorithm, iterations, salt, expected = encoded.split("$", 3)
    except ValueError:
        return False
    if algorithm != _ALGORITHM:
        return False
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("ascii"), int(iterations)
    ).hex()
    return hmac.compare_digest(digest, expected)


class TokenService:
    """
    Signs and checks bearer tokens carrying the user id.
    """

    def __init__(self, secret: str, *, algorithm: str = "HS256", expires_days: int = 30) -> None:
        self.secret = secret
        self.algorithm = algorithm
        self.expires_days = expires_days

    def create(self, user_id: str) -> str:
        now = utc_now()
        payload = {
            "id": user_id,
            "iat": now,
            "exp": now + timedelta(days=self.expires_days),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode(self, token: str) -> str:
        """
        Returns the user id; raises ``jwt.InvalidTokenError`` on a bad,
        expired or malformed token.
        """
        payload = jwt.decode(token, key=self.secret, algorithms=[self.algorithm])
        user_id = payload.get("id")
        if not isinstance(user_id, str) or not user_id:
            raise jwt.InvalidTokenError("token carries no user id")
        return user_id
