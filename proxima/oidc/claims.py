"""ID token and access token claim composition."""

from collections.abc import Mapping
from datetime import datetime, timedelta
from typing import Any

from proxima.core.settings import MAX_TOKEN_TTL
from proxima.oidc.presets import Preset

ACCESS_TOKEN_TYPE = "access_token"


def _epoch(moment: datetime) -> int:
    return int(moment.timestamp())


class ClaimsComposer:
    """Builds claim sets from a preset snapshot and flow parameters.

    Output depends only on the arguments, so identical inputs always yield
    identical claims.
    """

    def __init__(self, issuer: str, max_ttl: int = MAX_TOKEN_TTL) -> None:
        self._issuer = issuer.rstrip("/")
        self._max_ttl = max_ttl

    @property
    def issuer(self) -> str:
        return self._issuer

    def expires_at_for(self, preset: Preset, issued_at: datetime) -> datetime:
        """Token expiry for ``preset``, capped at the maximum TTL."""
        ttl = min(preset.token_ttl_seconds, self._max_ttl)
        return issued_at + timedelta(seconds=ttl)

    def compose(
        self,
        preset: Preset,
        subject: str,
        audience: str,
        nonce: str | None,
        issued_at: datetime,
        expires_at: datetime,
    ) -> dict[str, Any]:
        """ID token claims: preset claims overlaid with the registered claims."""
        claims: dict[str, Any] = dict(preset.custom_claims)
        standard = preset.standard_claims
        if standard.email is not None:
            claims["email"] = standard.email
        if standard.name is not None:
            claims["name"] = standard.name
        if standard.preferred_username is not None:
            claims["preferred_username"] = standard.preferred_username
        if standard.groups:
            claims["groups"] = list(standard.groups)

        iat = _epoch(issued_at)
        exp = min(_epoch(expires_at), iat + self._max_ttl)
        claims.update(
            {
                "iss": self._issuer,
                "sub": subject,
                "aud": audience,
                "iat": iat,
                "exp": exp,
            }
        )
        if nonce is not None:
            claims["nonce"] = nonce
        return claims

    def compose_access(
        self,
        preset: Preset,
        subject: str,
        audience: str,
        scope: str,
        issued_at: datetime,
        expires_at: datetime,
    ) -> dict[str, Any]:
        """Access token claims: the ID token claims plus scope, without nonce."""
        claims = self.compose(preset, subject, audience, None, issued_at, expires_at)
        claims["scope"] = scope
        claims["token_type"] = ACCESS_TOKEN_TYPE
        return claims


def mint_claims(
    subject: str,
    claims: Mapping[str, Any],
    issued_at: datetime,
    expires_at: datetime,
) -> dict[str, Any]:
    """Claims for an ad-hoc token: caller claims with ``sub``/``iat``/``exp`` set."""
    minted = dict(claims)
    minted.update(
        {"sub": subject, "iat": _epoch(issued_at), "exp": _epoch(expires_at)}
    )
    return minted
