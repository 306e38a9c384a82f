"""Main application module for the Daily Info Center."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask
from flask_cors import CORS

from api_routes import register_error_handlers, register_routes
from app_utils import configure_logging
from dailynews.services import Services, build_services

PROJECT_ROOT = Path(__file__).resolve().parent
DEFAULT_PORT = 3001
DEFAULT_HOST = "127.0.0.1"

logger = logging.getLogger("dailynews")


def load_environment() -> None:
    load_dotenv(os.getenv("DAILYNEWS_DOTENV", ".env"))


def create_app(services: Optional[Services] = None) -> Flask:
    """Build the Flask app; tests pass their own ``services`` with fake providers."""
    if services is None:
        load_environment()
        configure_logging(PROJECT_ROOT / "logs")
        services = build_services()

    app = Flask(__name__)
    CORS(app)
    app.json.ensure_ascii = False
    app.extensions["dailynews"] = services

    register_error_handlers(app)
    register_routes(app, services)
    logger.info("Daily Info Center app created (database=%s)", services.store.engine.url.render_as_string(hide_password=True))
    return app
