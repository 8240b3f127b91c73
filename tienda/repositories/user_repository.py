# ==============================================================================
# REPOSITORIO DE USUARIOS
# ==============================================================================
# Encapsula todo el acceso a users.json
# Los usuarios se almacenan como diccionario: {username: {password, role}}
# ==============================================================================

import os
from typing import Any, Dict, Optional

from tienda.repositories.base import DictRepository


class UserRepository(DictRepository):
    """
    Formato de datos en users.json:
    {
        "admin": {"password": "hashed_pwd", "role": "admin"},
        "caja1": {"password": "hashed_pwd", "role": "vendedor"}
    }
    """

    def __init__(self, data_dir: Optional[str]):
        file_path = os.path.join(data_dir, 'users.json') if data_dir else None
        super().__init__(file_path)

    def get_user(self, username: str) -> Optional[Dict[str, Any]]:
        """
        Args:
            username: Nombre de usuario

        Returns:
            Datos del usuario o None
        """
        if not username:
            return None
        return self.get_by_id(username)

    def user_exists(self, username: str) -> bool:
        return self.get_user(username) is not None

    def create_user(self, username: str, password_hash: str, role: str = 'vendedor') -> bool:
        """
        Crea un nuevo usuario.

        Args:
            username: Nombre de usuario
            password_hash: Hash de la contraseña (werkzeug)
            role: Rol del usuario

        Returns:
            True si se creó, False si ya existía
        """
        with self._file_lock:
            if self.user_exists(username):
                return False
            self.update(username, {'password': password_hash, 'role': role})
            return True

    def is_empty(self) -> bool:
        return not self.get_all()
