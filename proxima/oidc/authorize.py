"""Authorization request validation and code issuance.

Validation is an ordered list of pure rules. Each rule inspects an
``AuthorizeContext`` and returns ``None`` to continue or a ``Rejection``.
A rejection only names a redirect target that has been verified against the
preset registry; anything else is answered with a plain 400.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from urllib.parse import urlencode, urlsplit, urlunsplit

from proxima.oidc.auth_code import AuthCodeParams, AuthorizationCodeStore
from proxima.oidc.errors import (
    InvalidClientError,
    InvalidRedirectUriError,
    InvalidRequestError,
    OAuthError,
    UnsupportedResponseTypeError,
)
from proxima.oidc.presets import Preset, PresetRegistry, UnknownClientError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthorizeRequest:
    response_type: str | None = None
    client_id: str | None = None
    redirect_uri: str | None = None
    scope: str | None = None
    state: str | None = None
    nonce: str | None = None


@dataclass(frozen=True)
class AuthorizeContext:
    """A request plus everything the rules need from the registry."""

    request: AuthorizeRequest
    preset: Preset | None
    redirect_registered: bool


@dataclass(frozen=True)
class Rejection:
    error: OAuthError
    redirect_to: str | None = None


@dataclass(frozen=True)
class Redirect:
    location: str


Rule = Callable[[AuthorizeContext], Rejection | None]


def _trusted_target(ctx: AuthorizeContext) -> str | None:
    return ctx.request.redirect_uri if ctx.redirect_registered else None


def require_client_and_redirect(ctx: AuthorizeContext) -> Rejection | None:
    if not ctx.request.client_id or not ctx.request.redirect_uri:
        return Rejection(InvalidRequestError())
    return None


def require_code_response_type(ctx: AuthorizeContext) -> Rejection | None:
    if ctx.request.response_type != "code":
        return Rejection(UnsupportedResponseTypeError(), _trusted_target(ctx))
    return None


def require_known_client(ctx: AuthorizeContext) -> Rejection | None:
    if ctx.preset is None:
        return Rejection(InvalidClientError(), _trusted_target(ctx))
    return None


def require_registered_redirect(ctx: AuthorizeContext) -> Rejection | None:
    if ctx.preset is None:
        return None
    if ctx.request.redirect_uri != ctx.preset.redirect_uri:
        return Rejection(InvalidRedirectUriError(), ctx.preset.redirect_uri)
    return None


AUTHORIZE_RULES: tuple[Rule, ...] = (
    require_client_and_redirect,
    require_code_response_type,
    require_known_client,
    require_registered_redirect,
)


def evaluate_rules(
    ctx: AuthorizeContext, rules: Sequence[Rule] = AUTHORIZE_RULES
) -> Rejection | None:
    """Run ``rules`` in order and return the first rejection."""
    for rule in rules:
        rejection = rule(ctx)
        if rejection is not None:
            return rejection
    return None


def build_context(
    registry: PresetRegistry, request: AuthorizeRequest
) -> AuthorizeContext:
    """Resolve the client and redirect target once per request."""
    preset = None
    if request.client_id:
        try:
            preset = registry.find_by_client_id(request.client_id)
        except UnknownClientError:
            preset = None
    registered = False
    if request.redirect_uri:
        registered = registry.is_registered_redirect(request.redirect_uri)
    return AuthorizeContext(
        request=request, preset=preset, redirect_registered=registered
    )


def append_query(uri: str, params: dict[str, str | None]) -> str:
    """Append non-empty ``params`` to ``uri``, keeping any existing query."""
    parts = urlsplit(uri)
    query = urlencode({k: v for k, v in params.items() if v})
    if parts.query:
        query = f"{parts.query}&{query}" if query else parts.query
    return urlunsplit(parts._replace(query=query))


def error_redirect(rejection: Rejection, state: str | None) -> Redirect:
    assert rejection.redirect_to is not None
    params = rejection.error.to_dict()
    return Redirect(append_query(rejection.redirect_to, {**params, "state": state}))


def authorize(
    registry: PresetRegistry,
    codes: AuthorizationCodeStore,
    request: AuthorizeRequest,
) -> Redirect | Rejection:
    """Validate ``request`` and issue a code.

    Returns a ``Redirect`` for success and for redirectable errors, or a
    ``Rejection`` without a target that the caller answers with a 400.
    """
    ctx = build_context(registry, request)
    rejection = evaluate_rules(ctx)
    if rejection is not None:
        logger.warning(
            "Authorization request rejected: %s (redirect=%s)",
            rejection.error.error,
            rejection.redirect_to is not None,
        )
        if rejection.redirect_to is None:
            return rejection
        return error_redirect(rejection, request.state)

    preset = ctx.preset
    assert preset is not None
    redirect_uri = preset.redirect_uri
    scope = request.scope or " ".join(preset.scopes)
    code = codes.issue(
        AuthCodeParams(
            client_id=preset.client_id,
            redirect_uri=redirect_uri,
            scope=scope,
            subject=preset.subject,
            preset_snapshot=preset,
            state=request.state,
            nonce=request.nonce,
        )
    )
    logger.info(
        "Authorization granted for client %s (preset %s)",
        preset.client_id,
        preset.name,
    )
    return Redirect(append_query(redirect_uri, {"code": code, "state": request.state}))
