from __future__ import annotations

import logging
import secrets
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict

from synapse.config.settings import VerificationConfig
from synapse.verification.mailer import Mailer
from synapse.verification.store import KeyValueStore

logger = logging.getLogger("synapse.verification")

_OTP_PREFIX = "otp:"
_VERIFIED_PREFIX = "verified:"
_ATTEMPTS_PREFIX = "otp-attempts:"


@dataclass(frozen=True)
class VerificationResult:
    success: bool
    message: str


@dataclass(frozen=True)
class OTPRecord:
    code: str
    expires_at: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "expires_at": self.expires_at,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "OTPRecord":
        return OTPRecord(
            code=str(data["code"]),
            expires_at=float(data["expires_at"]),
        )


def generate_code() -> str:
    return str(100000 + secrets.randbelow(899999))


def normalize_email(email: str) -> str:
    return email.strip().lower()


class OTPService:
    """
    Email ownership verification with one-time codes.

    A code is valid for ``code_ttl_seconds``, accepts at most
    ``max_attempts`` guesses and is deleted once used. A verified
    email stays verified for ``verified_ttl_seconds`` or until consumed
    by registration.
    """

    def __init__(
        self,
        *,
        store: KeyValueStore,
        mailer: Mailer,
        config: VerificationConfig | None = None,
        clock: Callable[[], float] = time.time,
        code_factory: Callable[[], str] = generate_code,
    ) -> None:
        self.store = store
        self.mailer = mailer
        self.config = config or VerificationConfig()
        self.clock = clock
        self.code_factory = code_factory

    def request_code(self, email: str) -> VerificationResult:
        email = normalize_email(email)
        code = self.code_factory()
        ttl = self.config.code_ttl_seconds
        record = OTPRecord(code=code, expires_at=self.clock() + ttl)
        self.store.put(_OTP_PREFIX + email, record.to_dict(), ttl)
        self.store.delete(_ATTEMPTS_PREFIX + email)

        expires = datetime.fromtimestamp(record.expires_at, tz=timezone.utc)
        minutes = max(1, ttl // 60)
        try:
            self.mailer.send(
                to=email,
                subject="Your Synapse Email Verification Code",
                text=(
                    f"Your verification code is: {code}\n\n"
                    f"This code will expire at {expires:%H:%M:%S} UTC (in {minutes} minutes).\n"
                    "If you did not request this, please ignore this email."
                ),
                html=(
                    f"<p>Your verification code is: <b>{code}</b></p>"
                    f"<p>This code will expire at <b>{expires:%H:%M:%S} UTC</b> (in {minutes} minutes).</p>"
                    "<p>If you did not request this, please ignore this email.</p>"
                ),
            )
        except Exception as exc:
            logger.error("Error sending verification email to %s: %s", email, exc)
            return VerificationResult(False, "Failed to send verification email")

        return VerificationResult(True, "Verification email sent successfully")

    def verify_code(self, email: str, code: str) -> VerificationResult:
        email = normalize_email(email)
        key = _OTP_PREFIX + email

        raw = self.store.get(key)
        if raw is None:
            return VerificationResult(False, "No verification code found for this email")

        record = OTPRecord.from_dict(raw)
        now = self.clock()

        if record.expires_at < now:
            self.store.delete(key)
            return VerificationResult(False, "Verification code has expired")

        # Reserve an attempt before comparing.
        attempt = self.store.increment(_ATTEMPTS_PREFIX + email, record.expires_at - now)
        if attempt > self.config.max_attempts:
            self.store.delete(key)
            return VerificationResult(
                False,
                "Too many failed attempts. Please request a new verification code",
            )

        if not secrets.compare_digest(record.code, str(code).strip()):
            return VerificationResult(False, "Invalid verification code")

        self.store.delete(key)
        self.store.delete(_ATTEMPTS_PREFIX + email)
        self.mark_verified(email)
        logger.info("Email verified: %s", email)
        return VerificationResult(True, "Email verified successfully")

    def mark_verified(self, email: str) -> None:
        self.store.put(
            _VERIFIED_PREFIX + normalize_email(email),
            True,
            self.config.verified_ttl_seconds,
        )

    def is_verified(self, email: str) -> bool:
        return bool(self.store.get(_VERIFIED_PREFIX + normalize_email(email)))

    def consume_verification(self, email: str) -> None:
        self.store.delete(_VERIFIED_PREFIX + normalize_email(email))
