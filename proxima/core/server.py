"""Command-line entry point that serves the app with uvicorn."""

import logging

import uvicorn

from proxima.core.app import create_app
from proxima.core.settings import AuthSettings


def main() -> None:
    """Run the OIDC mock server."""
    settings = AuthSettings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
