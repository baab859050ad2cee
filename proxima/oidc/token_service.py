"""Authorization code exchange and token minting."""

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from proxima.crypto.key_manager import KeyManager
from proxima.oidc.auth_code import AuthCodeError, AuthorizationCodeStore
from proxima.oidc.claims import ClaimsComposer
from proxima.oidc.errors import (
    InvalidGrantError,
    InvalidRequestError,
    UnsupportedGrantTypeError,
)
from proxima.oidc.types import TokenRequest, TokenResponse

logger = logging.getLogger(__name__)

AUTHORIZATION_CODE_GRANT = "authorization_code"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TokenService:
    """Exchanges authorization codes for signed ID and access tokens."""

    def __init__(
        self,
        codes: AuthorizationCodeStore,
        keys: KeyManager,
        composer: ClaimsComposer,
        access_token_audience: str,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._codes = codes
        self._keys = keys
        self._composer = composer
        self._access_audience = access_token_audience
        self._clock = clock

    def exchange(self, form: TokenRequest) -> TokenResponse:
        """Validate a token request and mint tokens.

        Raises an ``OAuthError`` subclass for every client-facing failure.
        Key manager errors propagate: they indicate a misconfigured preset.
        """
        if form.grant_type != AUTHORIZATION_CODE_GRANT:
            raise UnsupportedGrantTypeError
        if not form.code or not form.client_id or not form.redirect_uri:
            raise InvalidRequestError

        try:
            record = self._codes.consume(form.code)
        except AuthCodeError as exc:
            logger.warning(
                "Code exchange failed for client %s: %s",
                form.client_id,
                type(exc).__name__,
            )
            raise InvalidGrantError from exc

        # the code is spent at this point whether or not the binding matches
        if (
            record.client_id != form.client_id
            or record.redirect_uri != form.redirect_uri
        ):
            logger.warning("Code binding mismatch for client %s", form.client_id)
            raise InvalidGrantError

        preset = record.preset_snapshot
        issued_at = self._clock()
        expires_at = self._composer.expires_at_for(preset, issued_at)
        id_claims = self._composer.compose(
            preset,
            subject=record.subject,
            audience=record.client_id,
            nonce=record.nonce,
            issued_at=issued_at,
            expires_at=expires_at,
        )
        access_claims = self._composer.compose_access(
            preset,
            subject=record.subject,
            audience=self._access_audience,
            scope=record.scope,
            issued_at=issued_at,
            expires_at=expires_at,
        )
        id_token = self._keys.sign(preset.signing_key_id, id_claims)
        access_token = self._keys.sign(preset.signing_key_id, access_claims)

        logger.info(
            "Tokens issued for client %s with scope %r", record.client_id, record.scope
        )
        return TokenResponse(
            access_token=access_token,
            id_token=id_token,
            token_type="Bearer",
            expires_in=id_claims["exp"] - id_claims["iat"],
            scope=record.scope,
        )
