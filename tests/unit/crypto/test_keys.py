"""Tests for RSA key generation and JWK conversion."""

import base64

from proxima.crypto.keys import (
    generate_key_id,
    generate_rsa_private_key,
    public_key_pem,
    public_key_to_jwk_entry,
)


def _b64url_to_int(value: str) -> int:
    padded = value + "=" * (-len(value) % 4)
    return int.from_bytes(base64.urlsafe_b64decode(padded), "big")


class TestGenerateKeyId:
    """Tests for generated key identifiers."""

    def test_kid_is_nonempty(self) -> None:
        assert len(generate_key_id()) > 10

    def test_unique(self) -> None:
        assert len({generate_key_id() for _ in range(50)}) == 50


class TestGenerateRSAKey:
    """Tests for RSA key generation."""

    def test_key_size(self) -> None:
        key = generate_rsa_private_key()
        assert key.key_size == 2048

    def test_public_pem(self) -> None:
        pem = public_key_pem(generate_rsa_private_key())
        assert pem.startswith("-----BEGIN PUBLIC KEY-----")
        assert "PRIVATE" not in pem


class TestPublicKeyToJWK:
    """Tests for public key to JWK conversion."""

    def test_produces_valid_jwk(self) -> None:
        key = generate_rsa_private_key()
        jwk = public_key_to_jwk_entry(key.public_key(), "kid-1")
        assert jwk.kty == "RSA"
        assert jwk.use == "sig"
        assert jwk.alg == "RS256"
        assert jwk.kid == "kid-1"
        assert jwk.e == "AQAB"

    def test_modulus_matches_key(self) -> None:
        key = generate_rsa_private_key()
        jwk = public_key_to_jwk_entry(key.public_key(), "kid-1")
        assert _b64url_to_int(jwk.n) == key.public_key().public_numbers().n
        assert "=" not in jwk.n

    def test_no_private_members(self) -> None:
        key = generate_rsa_private_key()
        dumped = public_key_to_jwk_entry(key.public_key(), "kid-1").model_dump()
        assert set(dumped) == {"kty", "use", "alg", "kid", "n", "e"}
