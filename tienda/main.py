# ==============================================================================
# APLICACIÓN FLASK
# ==============================================================================
# create_app() arma la app: configuración, logging, contenedor de servicios,
# rutas y manejadores de error. Todas las respuestas son JSON.
#
# Formato de error:
#   {"message": "Stock insuficiente para ...", "error": "insufficient_stock",
#    "product": "...", "requested": 3, "available": 1}
# ==============================================================================

import atexit
import logging
from typing import Any, Dict, Optional

from flask import Flask, request
from werkzeug.exceptions import HTTPException

from tienda.app_container import AppContainer
from tienda.auth import bootstrap_admin
from tienda.config import Config
from tienda.errors import PersistenceError, TiendaError
from tienda.logging_setup import setup_logging
from tienda.performance_logger import init_profiling, log_function_stats_report
from tienda.routes import register_blueprints

logger = logging.getLogger(__name__)

TX_SETTINGS = ('TX_MAX_ATTEMPTS', 'TX_ATTEMPT_TIMEOUT', 'TX_BACKOFF_BASE', 'TX_BACKOFF_MAX')

_stats_report_registered = False


def _register_stats_report() -> None:
    """Al cerrar el proceso, vuelca al log el reporte de funciones medidas."""
    global _stats_report_registered
    if not _stats_report_registered:
        atexit.register(log_function_stats_report)
        _stats_report_registered = True


def register_error_handlers(app: Flask) -> None:

    def _tienda_error(e: TiendaError):
        if isinstance(e, PersistenceError):
            # El detalle queda en el log, el cliente recibe un mensaje genérico
            logger.error("Error de persistencia en %s %s: %s", request.method, request.path, e.message)
            return {"message": "Error interno del servidor", "error": e.error}, e.status_code
        return e.to_dict(), e.status_code

    def _http_error(e: HTTPException):
        return {"message": e.description, "error": e.name.lower().replace(' ', '_')}, e.code

    def _unexpected_error(e: Exception):
        logger.exception("Error no controlado en %s %s", request.method, request.path)
        return {"message": "Error interno del servidor", "error": "internal_error"}, 500

    app.register_error_handler(TiendaError, _tienda_error)
    app.register_error_handler(HTTPException, _http_error)
    app.register_error_handler(Exception, _unexpected_error)


def create_app(
    config_overrides: Optional[Dict[str, Any]] = None,
    container: Optional[AppContainer] = None
) -> Flask:
    """
    Crea la aplicación.

    Args:
        config_overrides: Claves de Config a reemplazar (tests, scripts)
        container: Contenedor ya armado (si no, se crea desde DATA_DIR)
    """
    app = Flask(__name__)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    data_dir = app.config.get('DATA_DIR')
    if data_dir:
        level = app.config.get('LOG_LEVEL') or (
            'INFO' if app.config.get('PRODUCTION_MODE') else 'DEBUG'
        )
        log_path = setup_logging(data_dir, level)
        logger.info("Log de la aplicación en %s", log_path)
        _register_stats_report()

    if container is None:
        container = AppContainer(
            data_dir=data_dir,
            settings={key: app.config[key] for key in TX_SETTINGS if key in app.config},
        )
    app.extensions['tienda'] = container.build()

    bootstrap_admin(container.user_repo, app.config.get('BOOTSTRAP_ADMIN_PASSWORD'))

    init_profiling(app)
    register_blueprints(app)
    register_error_handlers(app)

    @app.after_request
    def set_security_headers(response):
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['Referrer-Policy'] = 'no-referrer-when-downgrade'
        if request.is_secure:
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'
        return response

    return app
