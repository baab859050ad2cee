"""Application settings loaded from environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

AUTH_CODE_TTL_DEFAULT = 60
AUTH_CODE_TTL_MAX = 120
MAX_TOKEN_TTL = 7200
CODE_SWEEP_INTERVAL_DEFAULT = 300
SERVER_PORT_DEFAULT = 8080


class AuthSettings(BaseSettings):
    """OIDC engine settings."""

    model_config = SettingsConfigDict(env_prefix="PROXIMA_")

    issuer_url: str = "http://localhost:8080"
    cors_origins: str = ""
    presets_file: str = ""
    auth_code_ttl: int = Field(
        default=AUTH_CODE_TTL_DEFAULT, gt=0, le=AUTH_CODE_TTL_MAX
    )
    max_token_ttl: int = Field(default=MAX_TOKEN_TTL, gt=0, le=MAX_TOKEN_TTL)
    access_token_audience: str = "proxima-api"
    default_key_id: str = "default"
    code_sweep_interval: int = Field(default=CODE_SWEEP_INTERVAL_DEFAULT, gt=0)
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = SERVER_PORT_DEFAULT

    @property
    def issuer(self) -> str:
        """Issuer URL without a trailing slash."""
        return self.issuer_url.rstrip("/")

    def get_cors_origin_list(self) -> list[str]:
        """Parse comma-separated CORS origins."""
        if not self.cors_origins:
            return []
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
