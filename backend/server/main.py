"""
Kiosk display controller entry point.

Responsibilities:
- Load .env and process configuration
- Build the app
- Serve it with uvicorn on the configured local address
"""

from __future__ import annotations

import uvicorn
from dotenv import load_dotenv

from config import AppConfig
from server.app import create_app


def main() -> None:
    load_dotenv()
    config = AppConfig.load_from_env()

    uvicorn.run(
        create_app(config),
        host=config.http_host,
        port=config.http_port,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
