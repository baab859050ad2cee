"""Wiring of the authorization and token issuance components."""

import asyncio
import logging
from dataclasses import dataclass

from proxima.core.settings import AuthSettings
from proxima.crypto.key_manager import KeyManager
from proxima.oidc.auth_code import AuthorizationCodeStore
from proxima.oidc.claims import ClaimsComposer
from proxima.oidc.presets import PresetRegistry, default_presets
from proxima.oidc.token_service import TokenService

logger = logging.getLogger(__name__)


@dataclass
class Engine:
    """Process-wide components shared by every request."""

    settings: AuthSettings
    keys: KeyManager
    presets: PresetRegistry
    codes: AuthorizationCodeStore
    tokens: TokenService


def _load_presets(settings: AuthSettings) -> PresetRegistry:
    if settings.presets_file:
        return PresetRegistry.from_file(settings.presets_file)
    logger.info("No presets file configured, using built-in presets")
    return PresetRegistry.from_config(default_presets())


def build_engine(
    settings: AuthSettings, presets: PresetRegistry | None = None
) -> Engine:
    """Create the components and provision the default signing key."""
    keys = KeyManager()
    keys.create_key(settings.default_key_id)
    registry = presets if presets is not None else _load_presets(settings)
    codes = AuthorizationCodeStore(
        ttl_seconds=settings.auth_code_ttl,
        sweep_interval=settings.code_sweep_interval,
    )
    composer = ClaimsComposer(settings.issuer, max_ttl=settings.max_token_ttl)
    tokens = TokenService(
        codes=codes,
        keys=keys,
        composer=composer,
        access_token_audience=settings.access_token_audience,
    )
    return Engine(
        settings=settings,
        keys=keys,
        presets=registry,
        codes=codes,
        tokens=tokens,
    )


async def sweep_codes_forever(codes: AuthorizationCodeStore, interval: int) -> None:
    """Periodically drop expired authorization codes."""
    while True:
        await asyncio.sleep(interval)
        codes.sweep()
        logger.debug("Authorization code stats: %s", codes.stats())
