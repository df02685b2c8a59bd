"""
Unit tests for request signing.
"""

import base64
import hashlib
import hmac

import pytest

from serpmetrics import ConfigurationError, Credentials, SignatureToken, Signer


def expected_signature(secret, timestamp):
    mac = hmac.new(secret.encode('utf-8'), str(timestamp).encode('utf-8'), hashlib.sha256)
    return base64.b64encode(mac.digest()).decode('ascii')


class TestSigner:
    """Test signature token generation."""

    def test_known_vector(self):
        """Test secret 'abc' at timestamp 1000."""
        signer = Signer(clock=lambda: 1000)
        token = signer.sign(Credentials("key", "abc"))

        assert token == SignatureToken(1000, expected_signature("abc", 1000))
        assert token.signature == base64.b64encode(
            hmac.new(b"abc", b"1000", hashlib.sha256).digest()
        ).decode('ascii')

    def test_signature_is_base64_not_hex(self):
        """Test the signature is a base64-encoded 32-byte digest."""
        token = Signer(clock=lambda: 1000).sign(Credentials("key", "abc"))

        assert len(token.signature) == 44
        assert len(base64.b64decode(token.signature)) == 32

    def test_deterministic_for_fixed_clock(self):
        """Test signing twice at the same second gives the same token."""
        signer = Signer(clock=lambda: 1234567890)
        credentials = Credentials("key", "secret")

        assert signer.sign(credentials) == signer.sign(credentials)

    def test_timestamp_is_floored_seconds(self):
        """Test fractional clock values are truncated to whole seconds."""
        token = Signer(clock=lambda: 1700000000.999).sign(Credentials("key", "secret"))

        assert token.timestamp == 1700000000
        assert token.signature == expected_signature("secret", 1700000000)

    def test_signature_changes_with_time(self, clock):
        """Test tokens from different seconds differ."""
        signer = Signer(clock=clock)
        credentials = Credentials("key", "secret")

        first = signer.sign(credentials)
        clock.advance(1)
        second = signer.sign(credentials)

        assert first.timestamp + 1 == second.timestamp
        assert first.signature != second.signature

    def test_signature_depends_on_secret(self):
        """Test different secrets give different signatures."""
        signer = Signer(clock=lambda: 1000)

        assert signer.sign(Credentials("key", "a")).signature != \
            signer.sign(Credentials("key", "b")).signature

    def test_empty_secret(self):
        """Test signing with an empty secret fails."""
        with pytest.raises(ConfigurationError):
            Signer().sign(Credentials("key", ""))

    def test_missing_credentials(self):
        """Test signing without credentials fails."""
        with pytest.raises(ConfigurationError):
            Signer().sign(None)


class TestCredentials:
    """Test credentials coercion."""

    def test_coerce_mapping(self):
        """Test credentials from a mapping."""
        assert Credentials.coerce({'key': 'k', 'secret': 's'}) == Credentials('k', 's')

    def test_coerce_pair(self):
        """Test credentials from a (key, secret) pair."""
        assert Credentials.coerce(('k', 's')) == Credentials('k', 's')

    def test_coerce_instance(self):
        """Test Credentials instances pass through unchanged."""
        credentials = Credentials('k', 's')
        assert Credentials.coerce(credentials) is credentials

    @pytest.mark.parametrize("value", [None, {}, (), ""])
    def test_coerce_empty(self, value):
        """Test empty values mean no credentials."""
        assert Credentials.coerce(value) is None

    def test_coerce_unsupported(self):
        """Test unsupported values are rejected."""
        with pytest.raises(ConfigurationError):
            Credentials.coerce(42)

    def test_repr_hides_secret(self):
        """Test the secret never appears in repr."""
        assert "s3cr3t" not in repr(Credentials('k', 's3cr3t'))
