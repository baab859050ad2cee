"""Preset registry: simulated client identities and the active preset."""

import logging
import threading
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    JsonValue,
    field_validator,
)

from proxima.core.settings import MAX_TOKEN_TTL

logger = logging.getLogger(__name__)

DEFAULT_SCOPES = ("openid", "profile", "email")
DEFAULT_TOKEN_TTL = 3600
# set by the token issuer, never taken from preset configuration
RESERVED_CLAIMS = frozenset(
    {"iss", "sub", "aud", "exp", "iat", "nonce", "scope", "token_type"}
)


def _to_camel(name: str) -> str:
    """Convert snake_case to camelCase for JSON configuration keys."""
    parts = name.split("_")
    return parts[0] + "".join(p.capitalize() for p in parts[1:])


class _ConfigModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=_to_camel,
        populate_by_name=True,
        frozen=True,
    )


class StandardClaims(_ConfigModel):
    """OIDC standard profile claims carried by a preset."""

    email: EmailStr | None = None
    name: str | None = None
    preferred_username: str | None = None
    groups: list[str] = Field(default_factory=list)


class Preset(_ConfigModel):
    """A pre-declared simulated client and identity."""

    name: str
    display_name: str | None = None
    client_id: str
    redirect_uri: str
    subject: str
    scopes: list[str] = Field(default_factory=lambda: list(DEFAULT_SCOPES))
    token_ttl_seconds: int = Field(default=DEFAULT_TOKEN_TTL, gt=0, le=MAX_TOKEN_TTL)
    signing_key_id: str = "default"
    standard_claims: StandardClaims = Field(default_factory=StandardClaims)
    custom_claims: dict[str, JsonValue] = Field(default_factory=dict)

    @field_validator("custom_claims")
    @classmethod
    def _no_reserved_claims(
        cls, value: dict[str, JsonValue]
    ) -> dict[str, JsonValue]:
        reserved = sorted(RESERVED_CLAIMS.intersection(value))
        if reserved:
            raise ValueError(f"custom claims may not set {', '.join(reserved)}")
        return value


class PresetFile(_ConfigModel):
    """Top-level shape of a presets JSON file."""

    active_preset: str | None = None
    presets: list[Preset] = Field(default_factory=list)


class PresetRegistryError(Exception):
    """Base class for preset lookup failures."""


class NoActivePresetError(PresetRegistryError):
    """No preset is currently active."""


class UnknownClientError(PresetRegistryError):
    """No preset is registered for the client id."""


class UnknownPresetError(PresetRegistryError):
    """No preset with the given name exists."""


@dataclass(frozen=True)
class _RegistrySnapshot:
    presets: tuple[Preset, ...]
    active: Preset | None
    redirect_uris: frozenset[str]


def default_presets() -> PresetFile:
    """Built-in presets used when no presets file is configured."""
    return PresetFile(
        active_preset="test_user",
        presets=[
            Preset(
                name="test_user",
                display_name="Test User",
                client_id="test-client",
                redirect_uri="http://localhost:3000/callback",
                subject="test-user@example.com",
                standard_claims=StandardClaims(
                    email="test-user@example.com",
                    name="Test User",
                    preferred_username="testuser",
                    groups=["users"],
                ),
                custom_claims={"test_claim": "test_value"},
            ),
            Preset(
                name="admin_user",
                display_name="Admin User",
                client_id="admin-client",
                redirect_uri="http://localhost:3000/admin/callback",
                subject="admin@example.com",
                token_ttl_seconds=1800,
                standard_claims=StandardClaims(
                    email="admin@example.com",
                    name="Admin User",
                    preferred_username="admin",
                    groups=["admins", "users"],
                ),
                custom_claims={"role": "admin"},
            ),
        ],
    )


class PresetRegistry:
    """Holds the declared presets and the active one as an immutable snapshot.

    Readers grab ``self._snapshot`` once per call and never lock; writers build
    a new snapshot and swap the reference under ``self._lock``.
    """

    def __init__(self, presets: Sequence[Preset], active: str | None = None) -> None:
        self._lock = threading.Lock()
        self._snapshot = self._build_snapshot(presets, active)

    @classmethod
    def from_file(cls, path: str | Path) -> "PresetRegistry":
        """Load presets from a JSON file (camelCase keys)."""
        raw = Path(path).read_text(encoding="utf-8")
        config = PresetFile.model_validate_json(raw)
        logger.info("Loaded %d presets from %s", len(config.presets), path)
        return cls.from_config(config)

    @classmethod
    def from_config(cls, config: PresetFile) -> "PresetRegistry":
        return cls(config.presets, config.active_preset)

    @staticmethod
    def _build_snapshot(
        presets: Sequence[Preset], active: str | None
    ) -> _RegistrySnapshot:
        names = [p.name for p in presets]
        if len(set(names)) != len(names):
            raise ValueError("preset names must be unique")
        active_preset = None
        if active is not None:
            active_preset = next((p for p in presets if p.name == active), None)
            if active_preset is None:
                raise UnknownPresetError(active)
        elif presets:
            active_preset = presets[0]
        return _RegistrySnapshot(
            presets=tuple(presets),
            active=active_preset,
            redirect_uris=frozenset(p.redirect_uri for p in presets),
        )

    def presets(self) -> list[Preset]:
        return list(self._snapshot.presets)

    def active_preset(self) -> Preset:
        """Return the active preset."""
        active = self._snapshot.active
        if active is None:
            raise NoActivePresetError
        return active

    def find_by_client_id(self, client_id: str) -> Preset:
        """Resolve a client id, preferring the active preset."""
        snapshot = self._snapshot
        if snapshot.active is not None and snapshot.active.client_id == client_id:
            return snapshot.active
        for preset in snapshot.presets:
            if preset.client_id == client_id:
                return preset
        raise UnknownClientError(client_id)

    def is_registered_redirect(self, redirect_uri: str) -> bool:
        """Whether any preset registers exactly this redirect URI."""
        return redirect_uri in self._snapshot.redirect_uris

    def scopes_supported(self) -> list[str]:
        scopes = {s for p in self._snapshot.presets for s in p.scopes}
        return sorted(scopes | set(DEFAULT_SCOPES))

    def activate(self, name: str) -> Preset:
        """Make the named preset active."""
        with self._lock:
            snapshot = self._build_snapshot(self._snapshot.presets, name)
            self._snapshot = snapshot
        assert snapshot.active is not None
        logger.info("Active preset changed to %s", name)
        return snapshot.active
