"""
Email verification subsystem for synapse.

One-time codes kept in an injected expiring key/value store and
delivered through a pluggable mailer.
"""

from synapse.verification.store import KeyValueStore, InMemoryStore, RedisStore
from synapse.verification.mailer import Mailer, SMTPMailer, SMTPSettings, ConsoleMailer
from synapse.verification.otp import OTPService, OTPRecord, VerificationResult

__all__ = [
    "KeyValueStore",
    "InMemoryStore",
    "RedisStore",
    "Mailer",
    "SMTPMailer",
    "SMTPSettings",
    "ConsoleMailer",
    "OTPService",
    "OTPRecord",
    "VerificationResult",
]
