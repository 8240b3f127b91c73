# ==============================================================================
# CONFIGURACIÓN
# ==============================================================================
# Todo se lee de variables de entorno con valores por defecto para desarrollo.
# En producción definir al menos:
#   export TIENDA_DATA_DIR="/var/lib/tienda"
# ==============================================================================

import os

BASE = os.path.dirname(os.path.abspath(__file__))


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'si', 'sí')


class Config:
    """Configuración base de la app Flask y del motor transaccional."""

    # False = modo desarrollo con logging verbose (DEBUG)
    PRODUCTION_MODE = _env_bool('TIENDA_PRODUCTION_MODE', False)

    # Carpeta donde viven store.json, users.json, audit.json y logs/
    DATA_DIR = os.environ.get('TIENDA_DATA_DIR') or os.path.join(BASE, 'data')

    # Sin definir: INFO en producción, DEBUG en desarrollo
    LOG_LEVEL = os.environ.get('TIENDA_LOG_LEVEL')

    # ═══════════════════════════════════════════════════════════════════════
    # TRANSACCIONES
    # ═══════════════════════════════════════════════════════════════════════
    # Intentos ante conflictos de escritura concurrente (backoff con jitter)
    TX_MAX_ATTEMPTS = int(os.environ.get('TIENDA_TX_MAX_ATTEMPTS', 3))
    # Plazo máximo de cada intento, en segundos
    TX_ATTEMPT_TIMEOUT = float(os.environ.get('TIENDA_TX_ATTEMPT_TIMEOUT', 5.0))
    TX_BACKOFF_BASE = float(os.environ.get('TIENDA_TX_BACKOFF_BASE', 0.02))
    TX_BACKOFF_MAX = float(os.environ.get('TIENDA_TX_BACKOFF_MAX', 0.5))

    # Si users.json está vacío se crea "admin" con esta contraseña
    BOOTSTRAP_ADMIN_PASSWORD = os.environ.get('TIENDA_BOOTSTRAP_ADMIN_PASSWORD')

    MAX_CONTENT_LENGTH = 1 * 1024 * 1024  # 1 MB
