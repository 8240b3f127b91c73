# ==============================================================================
# AUTENTICACIÓN - HTTP Basic contra users.json
# ==============================================================================
# Las rutas de administración usan @auth_required. El usuario autenticado
# queda en g.user y se usa como vendedor/autor en ventas y auditoría.
# ==============================================================================

import logging
from functools import wraps

from flask import g, request
from werkzeug.security import check_password_hash, generate_password_hash

from tienda.app_container import get_container
from tienda.repositories.interfaces import IUserRepository

logger = logging.getLogger(__name__)


def _unauthorized():
    return (
        {"message": "Se requiere autenticación", "error": "unauthorized"},
        401,
        {"WWW-Authenticate": 'Basic realm="tienda"'},
    )


def check_credentials(username: str, password: str) -> bool:
    user = get_container().user_repo.get_user(username)
    if not user or not password:
        return False
    return check_password_hash(user.get('password', ''), password)


def auth_required(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        auth = request.authorization
        if auth is None or not check_credentials(auth.username, auth.password):
            logger.info("Acceso denegado a %s %s", request.method, request.path)
            return _unauthorized()
        g.user = auth.username
        return f(*args, **kwargs)
    return wrapper


def bootstrap_admin(user_repo: IUserRepository, password: str) -> bool:
    """
    Crea el usuario "admin" si todavía no hay ningún usuario.

    Returns:
        True si se creó
    """
    if not password or not user_repo.is_empty():
        return False
    created = user_repo.create_user('admin', generate_password_hash(password), 'admin')
    if created:
        logger.warning("Usuario admin creado desde TIENDA_BOOTSTRAP_ADMIN_PASSWORD")
    return created
