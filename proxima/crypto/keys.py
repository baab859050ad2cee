"""RSA key generation and JWK conversion."""

import base64

import uuid_utils
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey

from proxima.crypto.types import JWKEntry

RSA_KEY_SIZE = 2048
RSA_PUBLIC_EXPONENT = 65537


def generate_key_id() -> str:
    """Generate a time-ordered key identifier."""
    return str(uuid_utils.uuid7())


def generate_rsa_private_key() -> RSAPrivateKey:
    """Generate a new RSA-2048 private key for JWT signing."""
    return rsa.generate_private_key(
        public_exponent=RSA_PUBLIC_EXPONENT,
        key_size=RSA_KEY_SIZE,
    )


def public_key_pem(private_key: RSAPrivateKey) -> str:
    """Serialize the public half of a private key as SubjectPublicKeyInfo PEM."""
    return (
        private_key.public_key()
        .public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode()
    )


def _int_to_base64url(value: int) -> str:
    """Encode an integer as base64url without padding."""
    byte_length = (value.bit_length() + 7) // 8
    raw = value.to_bytes(byte_length, byteorder="big")
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


def public_key_to_jwk_entry(public_key: RSAPublicKey, kid: str) -> JWKEntry:
    """Convert an RSA public key to JWK format."""
    numbers = public_key.public_numbers()
    return JWKEntry(
        kid=kid,
        n=_int_to_base64url(numbers.n),
        e=_int_to_base64url(numbers.e),
    )
