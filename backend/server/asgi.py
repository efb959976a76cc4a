"""
ASGI entry point for external servers.

    uvicorn server.asgi:app --host 127.0.0.1 --port 8765

Reads .env before configuration is loaded.
"""

from dotenv import load_dotenv

load_dotenv()

# pylint: disable=wrong-import-position
from config import AppConfig
from server.app import create_app

app = create_app(AppConfig.load_from_env())
