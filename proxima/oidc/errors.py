"""OAuth 2.0 protocol errors returned by the authorize and token endpoints.

Each error carries an enumerated ``error`` code and a fixed description.
Request input is never interpolated into either.
"""

from typing import ClassVar


class OAuthError(Exception):
    """Base class for protocol errors."""

    error: ClassVar[str] = "server_error"
    description: ClassVar[str] = "Internal server error"

    def __init__(self) -> None:
        super().__init__(self.error)

    def to_dict(self) -> dict[str, str]:
        return {"error": self.error, "error_description": self.description}


class InvalidRequestError(OAuthError):
    error = "invalid_request"
    description = "A required parameter is missing"


class UnsupportedResponseTypeError(OAuthError):
    error = "unsupported_response_type"
    description = "Only the 'code' response type is supported"


class InvalidClientError(OAuthError):
    error = "invalid_client"
    description = "Unknown client"


class InvalidRedirectUriError(OAuthError):
    error = "invalid_redirect_uri"
    description = "Redirect URI does not match the registered URI"


class UnsupportedGrantTypeError(OAuthError):
    error = "unsupported_grant_type"
    description = "Only the 'authorization_code' grant type is supported"


class InvalidGrantError(OAuthError):
    error = "invalid_grant"
    description = "Authorization code is invalid, expired, or already used"
