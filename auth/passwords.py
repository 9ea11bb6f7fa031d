"""
auth/passwords.py -- bcrypt implementation of the credential-verifier capability.

Implements core.login.CredentialVerifier structurally. A different hashing
scheme means a new class with the same verify() signature; the orchestrator
does not change.

bcrypt is used directly rather than through passlib: passlib's wrap-bug
detection feeds bcrypt 4.x a password longer than 72 bytes, which it rejects.
bcrypt.checkpw compares digests in constant time.

Layer rule: may import core.models; never api/.
"""

from __future__ import annotations

import bcrypt

from core.models import MAX_SECRET_BYTES, CredentialRecord


class BcryptCredentialVerifier:
    """Hash and verify secrets with bcrypt.

    Usage:
        verifier = BcryptCredentialVerifier(rounds=12)
        stored = verifier.hash_secret("Admin@123")
        verifier.verify(record, "Admin@123")  # True
    """

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds

    def hash_secret(self, plain: str) -> str:
        """Return a bcrypt hash of the plaintext secret.

        Raises ValueError for secrets over MAX_SECRET_BYTES in UTF-8. Older
        bcrypt releases truncate such input and newer ones reject it; both are
        refused here so every release behaves the same.
        """
        encoded = plain.encode("utf-8")
        if len(encoded) > MAX_SECRET_BYTES:
            raise ValueError(f"Secret is {len(encoded)} bytes; bcrypt accepts at most {MAX_SECRET_BYTES} bytes.")
        return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, record: CredentialRecord, presented_secret: str) -> bool:
        """Return True if presented_secret matches record.secret_hash.

        A malformed or non-bcrypt stored hash verifies as False, and so does a
        presented secret over MAX_SECRET_BYTES.
        """
        encoded = presented_secret.encode("utf-8")
        if len(encoded) > MAX_SECRET_BYTES:
            return False
        try:
            return bcrypt.checkpw(encoded, record.secret_hash.encode("utf-8"))
        except ValueError:
            return False

    def needs_rehash(self, record: CredentialRecord) -> bool:
        """True when the stored hash uses fewer rounds than configured.

        Hook for verify-and-upgrade migration; the login pipeline itself only
        verifies. Hashes that do not parse as bcrypt always need rehashing.
        """
        parts = record.secret_hash.split("$")
        # bcrypt format: $2b$<cost>$<salt+digest>
        if len(parts) != 4 or not parts[2].isdigit():
            return True
        return int(parts[2]) < self.rounds

    def decoy_record(self) -> CredentialRecord:
        """Build a throwaway record for timing equalisation on unknown identifiers."""
        return CredentialRecord(
            id=0,
            identifier="",
            secret_hash=self.hash_secret("logingate_timing_decoy"),
            role="",
        )
