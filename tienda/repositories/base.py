# ==============================================================================
# REPOSITORIO BASE - Funcionalidad común para acceso a archivos JSON
# ==============================================================================

import copy
import json
import os
from typing import Any, Dict, List, Optional
from abc import ABC, abstractmethod
import threading


class BaseRepository(ABC):
    """
    Clase base abstracta para todos los repositorios.
    Proporciona lectura/escritura de archivos JSON con un lock de proceso.

    Si file_path es None los datos viven solo en memoria (útil para tests).
    """

    # Lock global para evitar escrituras concurrentes a archivos
    _file_lock = threading.RLock()

    def __init__(self, file_path: Optional[str]):
        """
        Inicializa el repositorio con la ruta al archivo JSON.

        Args:
            file_path: Ruta absoluta al archivo JSON de datos, o None
        """
        self.file_path = file_path
        self._memory = self._empty_data()
        self._ensure_file_exists()

    def _ensure_file_exists(self) -> None:
        """Crea el archivo con datos vacíos si no existe."""
        if self.file_path is None:
            return
        directory = os.path.dirname(self.file_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        if not os.path.exists(self.file_path):
            self._write_raw(self._empty_data())

    @abstractmethod
    def _empty_data(self) -> Any:
        """
        Retorna la estructura de datos vacía para este repositorio.
        Debe ser implementado por cada repositorio concreto.
        """
        pass

    def _read_raw(self) -> Any:
        """
        Lee los datos crudos del archivo JSON.

        Returns:
            Datos parseados del JSON (vacíos si el archivo no existe)

        Raises:
            json.JSONDecodeError: Si el archivo tiene JSON inválido
            OSError: Si hay error de lectura
        """
        with self._file_lock:
            if self.file_path is None:
                return copy.deepcopy(self._memory)
            try:
                with open(self.file_path, 'r', encoding='utf-8') as f:
                    return json.load(f)
            except FileNotFoundError:
                return self._empty_data()

    def _write_raw(self, data: Any) -> None:
        """
        Escribe datos al archivo JSON.

        Args:
            data: Datos a serializar y escribir

        Raises:
            OSError: Si hay error de escritura
            TypeError: Si los datos no son serializables
        """
        with self._file_lock:
            if self.file_path is None:
                # Validar que sea serializable igual que en disco
                json.dumps(data)
                self._memory = copy.deepcopy(data)
                return
            # Escribir a archivo temporal primero para atomicidad
            temp_path = self.file_path + '.tmp'
            try:
                with open(temp_path, 'w', encoding='utf-8') as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                # Reemplazar archivo original (operación atómica en la mayoría de sistemas)
                os.replace(temp_path, self.file_path)
            except Exception:
                # Limpiar archivo temporal si algo falla
                if os.path.exists(temp_path):
                    os.remove(temp_path)
                raise


class DictRepository(BaseRepository):
    """
    Repositorio base para datos almacenados como diccionario.
    El ID es la clave del diccionario.

    Ejemplo: users.json -> {"admin": {...}, "caja1": {...}}
    """

    def _empty_data(self) -> Dict:
        return {}

    def get_all(self) -> Dict[str, Any]:
        return self._read_raw()

    def get_by_id(self, record_id: Any) -> Optional[Dict[str, Any]]:
        """
        Obtiene un registro por su ID.

        Args:
            record_id: ID del registro

        Returns:
            Datos del registro o None si no existe
        """
        return self._read_raw().get(str(record_id))

    def update(self, record_id: Any, record_data: Dict[str, Any]) -> None:
        """
        Crea o reemplaza un registro específico.

        Args:
            record_id: ID del registro
            record_data: Nuevos datos del registro
        """
        with self._file_lock:
            data = self._read_raw()
            data[str(record_id)] = record_data
            self._write_raw(data)


class ListRepository(BaseRepository):
    """
    Repositorio base para datos almacenados como lista.

    Ejemplo: audit.json -> [{...}, {...}]
    """

    def _empty_data(self) -> List:
        return []

    def get_all(self) -> List[Dict[str, Any]]:
        data = self._read_raw()
        return data if isinstance(data, list) else []

    def save_all(self, data: List[Dict[str, Any]]) -> None:
        self._write_raw(data)
