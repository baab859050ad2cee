"""Tests for authorization code exchange."""

from datetime import UTC, datetime, timedelta

import jwt
import pytest

from proxima.crypto.key_manager import KeyManager, UnknownKeyIdError
from proxima.oidc.auth_code import AuthCodeParams, AuthorizationCodeStore
from proxima.oidc.claims import ClaimsComposer
from proxima.oidc.errors import (
    InvalidGrantError,
    InvalidRequestError,
    UnsupportedGrantTypeError,
)
from proxima.oidc.presets import Preset
from proxima.oidc.token_service import TokenService
from proxima.oidc.types import TokenRequest

ISSUER = "http://localhost:8000"
CLIENT_ID = "test-client"
REDIRECT_URI = "http://localhost:3000/callback"
NOW = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


class FakeClock:
    """Manually advanced clock shared by the store and the service."""

    def __init__(self) -> None:
        self.now = NOW

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture(scope="module")
def keys() -> KeyManager:
    manager = KeyManager()
    manager.create_key("default")
    manager.create_key("alt")
    return manager


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def codes(clock: FakeClock) -> AuthorizationCodeStore:
    return AuthorizationCodeStore(ttl_seconds=60, clock=clock)


@pytest.fixture
def service(
    codes: AuthorizationCodeStore, keys: KeyManager, clock: FakeClock
) -> TokenService:
    return TokenService(
        codes=codes,
        keys=keys,
        composer=ClaimsComposer(ISSUER),
        access_token_audience="proxima-api",
        clock=clock,
    )


def _preset(**kwargs: object) -> Preset:
    base: dict[str, object] = {
        "name": "p",
        "client_id": CLIENT_ID,
        "redirect_uri": REDIRECT_URI,
        "subject": "u@example.com",
        "token_ttl_seconds": 1800,
        "custom_claims": {"test_claim": "test_value"},
    }
    base.update(kwargs)
    return Preset(**base)  # type: ignore[arg-type]


def _issue(
    codes: AuthorizationCodeStore, preset: Preset, nonce: str | None = "n-1"
) -> str:
    return codes.issue(
        AuthCodeParams(
            client_id=preset.client_id,
            redirect_uri=preset.redirect_uri,
            scope="openid email",
            subject=preset.subject,
            preset_snapshot=preset,
            state="s",
            nonce=nonce,
        )
    )


def _form(code: str | None, **overrides: str | None) -> TokenRequest:
    fields: dict[str, str | None] = {
        "grant_type": "authorization_code",
        "code": code,
        "client_id": CLIENT_ID,
        "redirect_uri": REDIRECT_URI,
    }
    fields.update(overrides)
    return TokenRequest(**fields)


def _claims(token: str) -> dict[str, object]:
    return jwt.decode(token, options={"verify_signature": False})


class TestExchange:
    """Tests for successful code exchange."""

    def test_token_response(
        self, service: TokenService, codes: AuthorizationCodeStore
    ) -> None:
        resp = service.exchange(_form(_issue(codes, _preset())))
        assert resp.token_type == "Bearer"
        assert resp.expires_in == 1800
        assert resp.scope == "openid email"

    def test_id_token_claims(
        self, service: TokenService, codes: AuthorizationCodeStore
    ) -> None:
        resp = service.exchange(_form(_issue(codes, _preset())))
        claims = _claims(resp.id_token)
        iat = int(NOW.timestamp())
        assert claims["iss"] == ISSUER
        assert claims["sub"] == "u@example.com"
        assert claims["aud"] == CLIENT_ID
        assert claims["iat"] == iat
        assert claims["exp"] == iat + 1800
        assert claims["nonce"] == "n-1"
        assert claims["test_claim"] == "test_value"

    def test_access_token_claims(
        self, service: TokenService, codes: AuthorizationCodeStore
    ) -> None:
        resp = service.exchange(_form(_issue(codes, _preset())))
        claims = _claims(resp.access_token)
        assert claims["aud"] == "proxima-api"
        assert claims["scope"] == "openid email"
        assert claims["token_type"] == "access_token"
        assert "nonce" not in claims

    def test_no_nonce(
        self, service: TokenService, codes: AuthorizationCodeStore
    ) -> None:
        resp = service.exchange(_form(_issue(codes, _preset(), nonce=None)))
        assert "nonce" not in _claims(resp.id_token)

    def test_signed_with_preset_key(
        self, service: TokenService, codes: AuthorizationCodeStore
    ) -> None:
        resp = service.exchange(
            _form(_issue(codes, _preset(signing_key_id="alt")))
        )
        assert jwt.get_unverified_header(resp.id_token)["kid"] == "alt"
        assert jwt.get_unverified_header(resp.access_token)["kid"] == "alt"

    def test_unknown_signing_key_propagates(
        self, service: TokenService, codes: AuthorizationCodeStore
    ) -> None:
        code = _issue(codes, _preset(signing_key_id="missing"))
        with pytest.raises(UnknownKeyIdError):
            service.exchange(_form(code))


class TestExchangeErrors:
    """Tests for rejected token requests."""

    @pytest.mark.parametrize("grant_type", [None, "client_credentials", "password"])
    def test_unsupported_grant_type(
        self, service: TokenService, grant_type: str | None
    ) -> None:
        with pytest.raises(UnsupportedGrantTypeError):
            service.exchange(_form("abc", grant_type=grant_type))

    @pytest.mark.parametrize("missing", ["code", "client_id", "redirect_uri"])
    def test_missing_params(self, service: TokenService, missing: str) -> None:
        form = _form("abc", **{missing: None})
        with pytest.raises(InvalidRequestError):
            service.exchange(form)

    def test_unknown_code(self, service: TokenService) -> None:
        with pytest.raises(InvalidGrantError):
            service.exchange(_form("f" * 32))

    def test_replay(
        self, service: TokenService, codes: AuthorizationCodeStore
    ) -> None:
        code = _issue(codes, _preset())
        service.exchange(_form(code))
        with pytest.raises(InvalidGrantError):
            service.exchange(_form(code))

    def test_expired(
        self,
        service: TokenService,
        codes: AuthorizationCodeStore,
        clock: FakeClock,
    ) -> None:
        code = _issue(codes, _preset())
        clock.advance(61)
        with pytest.raises(InvalidGrantError):
            service.exchange(_form(code))

    def test_client_mismatch_spends_code(
        self, service: TokenService, codes: AuthorizationCodeStore
    ) -> None:
        code = _issue(codes, _preset())
        with pytest.raises(InvalidGrantError):
            service.exchange(_form(code, client_id="other-client"))
        with pytest.raises(InvalidGrantError):
            service.exchange(_form(code))

    def test_redirect_mismatch(
        self, service: TokenService, codes: AuthorizationCodeStore
    ) -> None:
        code = _issue(codes, _preset())
        with pytest.raises(InvalidGrantError):
            service.exchange(_form(code, redirect_uri=REDIRECT_URI + "/"))

    def test_error_body_has_no_request_input(self, service: TokenService) -> None:
        with pytest.raises(InvalidGrantError) as exc_info:
            service.exchange(_form("<script>alert(1)</script>"))
        assert "script" not in str(exc_info.value.to_dict())
