"""
oishine_backoffice.api.__main__

Entrypoint for running the service via `python -m oishine_backoffice.api`.

Responsibilities:
- Load settings (fails fast without a JWT secret outside dev).
- Create the app.
- Start uvicorn with structlog-compatible logging config.
"""

from __future__ import annotations

import uvicorn

from oishine_backoffice.api.app import create_app
from oishine_backoffice.settings import get_settings


def main() -> None:
    settings = get_settings()
    app = create_app(settings=settings)

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,  # structlog
    )


if __name__ == "__main__":
    main()
