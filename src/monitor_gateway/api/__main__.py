"""
monitor_gateway.api.__main__

`python -m monitor_gateway.api` / `monitor-gateway` console entrypoint.
"""

from __future__ import annotations

import uvicorn

from monitor_gateway.api.app import create_app
from monitor_gateway.observability.logging import get_logger
from monitor_gateway.settings import get_settings


def main() -> None:
    settings = get_settings()
    app = create_app(settings=settings)
    get_logger(__name__).info(
        "serving", host=settings.api_host, port=settings.api_port, env=settings.env
    )

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        # structlog owns formatting; RequestContextMiddleware already logs each request.
        log_config=None,
        access_log=False,
        # Let an in-flight test check reach its own timeout before the process exits.
        timeout_graceful_shutdown=int(settings.test_check_timeout_seconds) + 5,
    )


if __name__ == "__main__":
    main()
