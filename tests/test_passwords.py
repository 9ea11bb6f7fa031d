"""Unit tests for auth/passwords.py -- BcryptCredentialVerifier."""

import pytest

from auth.passwords import BcryptCredentialVerifier
from core.models import CredentialRecord


def _record(secret_hash: str) -> CredentialRecord:
    return CredentialRecord(id=1, identifier="dave@example.com", secret_hash=secret_hash, role="User")


class TestVerify:
    def test_correct_secret_verifies(self, verifier):
        assert verifier.verify(_record(verifier.hash_secret("s3cret!")), "s3cret!") is True

    def test_wrong_secret_fails(self, verifier):
        assert verifier.verify(_record(verifier.hash_secret("s3cret!")), "S3cret!") is False

    def test_hash_is_not_plaintext_and_salted(self, verifier):
        first = verifier.hash_secret("s3cret!")
        second = verifier.hash_secret("s3cret!")
        assert "s3cret!" not in first
        assert first != second

    def test_malformed_hash_fails_closed(self, verifier):
        assert verifier.verify(_record("not-a-bcrypt-hash"), "anything") is False

    def test_decoy_record_rejects_ordinary_secrets(self, verifier):
        decoy = verifier.decoy_record()
        assert decoy.secret_hash.startswith("$2")
        assert verifier.verify(decoy, "Admin@123") is False


class TestNeedsRehash:
    def test_lower_cost_needs_rehash(self, verifier):
        stronger = BcryptCredentialVerifier(rounds=5)
        assert stronger.needs_rehash(_record(verifier.hash_secret("x"))) is True

    def test_same_cost_does_not(self, verifier):
        assert verifier.needs_rehash(_record(verifier.hash_secret("x"))) is False

    def test_unparseable_hash_needs_rehash(self, verifier):
        assert verifier.needs_rehash(_record("plaintext")) is True


class TestSecretLength:
    def test_secret_at_byte_limit_round_trips(self, verifier):
        secret = "a" * 72
        assert verifier.verify(_record(verifier.hash_secret(secret)), secret) is True

    def test_hashing_over_byte_limit_raises(self, verifier):
        with pytest.raises(ValueError, match="at most 72 bytes"):
            verifier.hash_secret("A" * 72 + "right")

    def test_multibyte_secret_measured_in_bytes(self, verifier):
        # 37 characters, 74 bytes
        with pytest.raises(ValueError):
            verifier.hash_secret("é" * 37)

    def test_secret_sharing_first_72_bytes_does_not_verify(self, verifier):
        stored = _record(verifier.hash_secret("A" * 72))
        assert verifier.verify(stored, "A" * 72 + "wrong") is False
