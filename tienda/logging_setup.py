# ==============================================================================
# LOGGING
# ==============================================================================
# Log rotativo en <DATA_DIR>/logs/tienda.log + salida por consola.
# Los módulos usan logging.getLogger(__name__) bajo el logger "tienda".
# ==============================================================================

import logging
import logging.handlers
import os

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s - %(message)s'
LOG_FILENAME = 'tienda.log'


def setup_logging(data_dir: str, level: str = 'INFO') -> str:
    """
    Configura el logger "tienda" (archivo rotativo + consola).

    Args:
        data_dir: Carpeta de datos; los logs van en data_dir/logs
        level: Nivel mínimo (INFO, DEBUG, WARNING...)

    Returns:
        Ruta absoluta del archivo de log
    """
    log_dir = os.path.join(data_dir, 'logs')
    os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.abspath(os.path.join(log_dir, LOG_FILENAME))

    logger = logging.getLogger('tienda')
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    # Evitar handlers duplicados si create_app() se llama varias veces
    has_file = any(
        isinstance(h, logging.handlers.RotatingFileHandler)
        and getattr(h, 'baseFilename', '') == log_path
        for h in logger.handlers
    )
    if not has_file:
        handler = logging.handlers.RotatingFileHandler(
            log_path, maxBytes=5_000_000, backupCount=3, encoding='utf-8'
        )
        handler.setFormatter(logging.Formatter(LOG_FORMAT, '%Y-%m-%d %H:%M:%S'))
        logger.addHandler(handler)

    has_console = any(type(h) is logging.StreamHandler for h in logger.handlers)
    if not has_console:
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter(LOG_FORMAT, '%H:%M:%S'))
        logger.addHandler(console)

    return log_path
