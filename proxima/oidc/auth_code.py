"""Single-use authorization codes held in memory."""

import logging
import secrets
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from pydantic import BaseModel, ConfigDict

from proxima.core.settings import AUTH_CODE_TTL_DEFAULT, CODE_SWEEP_INTERVAL_DEFAULT
from proxima.oidc.presets import Preset

logger = logging.getLogger(__name__)

CODE_BYTES = 16


def _utcnow() -> datetime:
    return datetime.now(UTC)


def generate_code() -> str:
    """Generate a 128-bit random code as 32 lowercase hex characters."""
    return secrets.token_hex(CODE_BYTES)


class AuthCodeParams(BaseModel):
    """Flow state to bind to a new authorization code."""

    model_config = ConfigDict(frozen=True)

    client_id: str
    redirect_uri: str
    scope: str
    subject: str
    preset_snapshot: Preset
    state: str | None = None
    nonce: str | None = None


class AuthorizationCode(BaseModel):
    """An issued authorization code and everything it was bound to."""

    model_config = ConfigDict(frozen=True)

    code: str
    client_id: str
    redirect_uri: str
    scope: str
    state: str | None = None
    nonce: str | None = None
    subject: str
    preset_snapshot: Preset
    issued_at: datetime
    expires_at: datetime


class AuthCodeError(Exception):
    """Base class for code consumption failures."""


class CodeNotFoundError(AuthCodeError):
    """The code was never issued, or has been swept."""


class CodeExpiredError(AuthCodeError):
    """The code outlived its TTL before being consumed."""


class CodeAlreadyUsedError(AuthCodeError):
    """The code has already been consumed."""


class CodeCollisionError(AuthCodeError):
    """A freshly generated code matched a live one."""


@dataclass
class _Entry:
    record: AuthorizationCode
    consumed: bool = False


@dataclass(frozen=True)
class AuthCodeStats:
    active: int
    expired: int
    consumed: int
    total_issued: int


class AuthorizationCodeStore:
    """Thread-safe store of single-use authorization codes.

    ``consume`` marks a code used under the same lock that checks it, so two
    concurrent calls for one code yield exactly one success. Consumed codes
    stay as tombstones until their expiry so replays surface as
    ``CodeAlreadyUsedError``.
    """

    def __init__(
        self,
        ttl_seconds: int = AUTH_CODE_TTL_DEFAULT,
        sweep_interval: int = CODE_SWEEP_INTERVAL_DEFAULT,
        clock: Callable[[], datetime] = _utcnow,
        code_factory: Callable[[], str] = generate_code,
    ) -> None:
        self._ttl = timedelta(seconds=ttl_seconds)
        self._sweep_interval = timedelta(seconds=sweep_interval)
        self._clock = clock
        self._code_factory = code_factory
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()
        self._total_issued = 0
        self._last_sweep = clock()

    def issue(self, params: AuthCodeParams) -> str:
        """Store a new code bound to ``params`` and return it."""
        now = self._clock()
        code = self._code_factory()
        record = AuthorizationCode(
            code=code,
            client_id=params.client_id,
            redirect_uri=params.redirect_uri,
            scope=params.scope,
            state=params.state,
            nonce=params.nonce,
            subject=params.subject,
            preset_snapshot=params.preset_snapshot.model_copy(deep=True),
            issued_at=now,
            expires_at=now + self._ttl,
        )
        with self._lock:
            self._maybe_sweep_locked(now)
            if code in self._entries:
                logger.error("Authorization code collision detected")
                raise CodeCollisionError
            self._entries[code] = _Entry(record=record)
            self._total_issued += 1
        logger.debug("Issued authorization code for client %s", params.client_id)
        return code

    def consume(self, code: str) -> AuthorizationCode:
        """Atomically check and consume a code."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(code)
            if entry is None:
                raise CodeNotFoundError
            if entry.consumed:
                raise CodeAlreadyUsedError
            if now >= entry.record.expires_at:
                raise CodeExpiredError
            entry.consumed = True
        return entry.record

    def sweep(self) -> int:
        """Drop every entry past its expiry. Returns the number removed."""
        now = self._clock()
        with self._lock:
            return self._sweep_locked(now)

    def _maybe_sweep_locked(self, now: datetime) -> None:
        if now - self._last_sweep >= self._sweep_interval:
            self._sweep_locked(now)

    def _sweep_locked(self, now: datetime) -> int:
        expired = [c for c, e in self._entries.items() if now >= e.record.expires_at]
        for code in expired:
            del self._entries[code]
        self._last_sweep = now
        if expired:
            logger.info("Swept %d expired authorization codes", len(expired))
        return len(expired)

    def stats(self) -> AuthCodeStats:
        now = self._clock()
        with self._lock:
            entries = list(self._entries.values())
            total = self._total_issued
        consumed = sum(1 for e in entries if e.consumed)
        expired = sum(
            1 for e in entries if not e.consumed and now >= e.record.expires_at
        )
        return AuthCodeStats(
            active=len(entries) - consumed - expired,
            expired=expired,
            consumed=consumed,
            total_issued=total,
        )
