"""Flask Extension for endpoint parameter exploration.

Provides the ApiParams class following Flask's Extension pattern.

init_app flow:
1. load_settings(app)
2. Create the configured metadata provider
3. Store settings and provider in app.extensions["apiparams"]
4. Register CLI commands
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from flask import current_app

from flask_apiparams.config import load_settings
from flask_apiparams.providers import get_provider
from flask_apiparams.scanner import EndpointScanner, ScanResult

if TYPE_CHECKING:
    from flask import Flask

logger = logging.getLogger("flask_apiparams")


class ApiParams:
    """Flask Extension deriving OpenAPI 2 parameters and definitions.

    Usage (direct):
        app = Flask(__name__)
        api_params = ApiParams(app)

    Usage (factory pattern):
        api_params = ApiParams()

        def create_app():
            app = Flask(__name__)
            api_params.init_app(app)
            return app
    """

    def __init__(self, app: Flask | None = None) -> None:
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        """Initialize the extension with a Flask application.

        Args:
            app: Flask application instance.

        Raises:
            ValueError: If any APIPARAMS_* config value is invalid.
        """
        settings = load_settings(app)
        provider = get_provider(settings.metadata_provider)

        app.extensions["apiparams"] = {
            "settings": settings,
            "provider": provider,
        }

        from flask_apiparams.cli import apiparams_cli

        app.cli.add_command(apiparams_cli)

        logger.debug("flask-apiparams initialized for app %s", app.name)

    def _ext_data(self, app: Flask | None) -> dict[str, Any]:
        if app is None:
            app = current_app._get_current_object()
        ext_data = app.extensions.get("apiparams")
        if ext_data is None:
            raise RuntimeError("flask-apiparams not initialized. Call ApiParams(app) or api_params.init_app(app) first.")
        return ext_data

    def get_provider(self, app: Flask | None = None) -> Any:
        """Return the metadata provider configured for the app."""
        return self._ext_data(app)["provider"]

    def scan(
        self,
        app: Flask | None = None,
        include: str | None = None,
        exclude: str | None = None,
    ) -> ScanResult:
        """Explore every endpoint of the app.

        include/exclude default to APIPARAMS_INCLUDE / APIPARAMS_EXCLUDE.
        """
        if app is None:
            app = current_app._get_current_object()
        ext_data = self._ext_data(app)
        settings = ext_data["settings"]

        scanner = EndpointScanner(ext_data["provider"], on_conflict=settings.definition_conflict)
        return scanner.scan(
            app,
            include=include if include is not None else settings.include,
            exclude=exclude if exclude is not None else settings.exclude,
        )
