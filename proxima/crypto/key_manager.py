"""In-memory RS256 signing key registry.

Private keys are created here and never leave this module: callers get the
public ``SigningKey`` view, JWK entries, or finished compact JWTs.
"""

import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import jwt
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from proxima.crypto.keys import (
    generate_rsa_private_key,
    public_key_pem,
    public_key_to_jwk_entry,
)
from proxima.crypto.types import SIGNING_ALGORITHM, JWKEntry, SigningKey

logger = logging.getLogger(__name__)


class KeyManagerError(Exception):
    """Base class for signing key failures."""

    def __init__(self, kid: str) -> None:
        super().__init__(kid)
        self.kid = kid


class DuplicateKeyIdError(KeyManagerError):
    """A key with this kid already exists."""


class UnknownKeyIdError(KeyManagerError):
    """No key is registered under this kid."""


@dataclass(frozen=True)
class _KeyEntry:
    public: SigningKey
    private_key: RSAPrivateKey
    jwk: JWKEntry


class KeyManager:
    """Creates RSA signing keys and signs claims with them."""

    def __init__(self) -> None:
        self._keys: dict[str, _KeyEntry] = {}
        self._lock = threading.Lock()

    def create_key(self, kid: str) -> SigningKey:
        """Generate and register a new RSA-2048 key under ``kid``."""
        if kid in self._keys:
            raise DuplicateKeyIdError(kid)
        private_key = generate_rsa_private_key()
        public = SigningKey(kid=kid, public_key_pem=public_key_pem(private_key))
        entry = _KeyEntry(
            public=public,
            private_key=private_key,
            jwk=public_key_to_jwk_entry(private_key.public_key(), kid),
        )
        with self._lock:
            # re-check: key generation above runs outside the lock
            if kid in self._keys:
                raise DuplicateKeyIdError(kid)
            self._keys = {**self._keys, kid: entry}
        logger.info("Created RSA signing key %s", kid)
        return public

    def sign(self, kid: str, claims: Mapping[str, Any]) -> str:
        """Sign ``claims`` as a compact RS256 JWT with the ``kid`` header set."""
        entry = self._keys.get(kid)
        if entry is None:
            raise UnknownKeyIdError(kid)
        return jwt.encode(
            dict(claims),
            entry.private_key,
            algorithm=SIGNING_ALGORITHM,
            headers={"kid": kid},
        )

    def get_key(self, kid: str) -> SigningKey:
        entry = self._keys.get(kid)
        if entry is None:
            raise UnknownKeyIdError(kid)
        return entry.public

    def key_ids(self) -> list[str]:
        return list(self._keys)

    def public_jwk_set(self) -> list[JWKEntry]:
        """Public JWK entries for every registered key, in creation order."""
        return [entry.jwk for entry in self._keys.values()]
