# ==============================================================================
# DOCUMENT STORE - Colecciones JSON con transacciones optimistas
# ==============================================================================
# Un único archivo store.json guarda todas las colecciones:
#
#   {
#       "products": {"<id>": {..., "_version": 3}},
#       "sales":    {"<id>": {...}},
#       "orders":   {"<id>": {...}},
#       "counters": {"orders:20240315": {"id": ..., "value": 7}}
#   }
#
# AISLAMIENTO:
# - Cada Transaction lee del último estado confirmado y recuerda la versión
#   de cada documento que leyó.
# - Las escrituras quedan en staging dentro de la transacción (nadie más las ve).
# - commit() toma el lock del store, verifica que ninguna versión leída haya
#   cambiado (si cambió → ConflictError) y aplica todo junto, persistiendo con
#   archivo temporal + os.replace. Si la escritura a disco falla, el estado en
#   memoria no cambia.
# ==============================================================================

import copy
import logging
import threading
import time
from typing import Any, Dict, List, Optional, Tuple

from tienda.errors import ConflictError, PersistenceError, TransactionTimeoutError
from tienda.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

DocKey = Tuple[str, str]


class Transaction:
    """
    Ámbito atómico sobre el DocumentStore.

    Uso:
        tx = store.begin()
        product = tx.get('products', pid)
        product['stock'] -= 1
        tx.put('products', product)
        tx.commit()      # o tx.abort()
    """

    ACTIVE = 'active'
    COMMITTED = 'committed'
    ABORTED = 'aborted'

    def __init__(self, store: 'DocumentStore', deadline: Optional[float] = None):
        self._store = store
        self.deadline = deadline
        self.state = self.ACTIVE
        # (colección, id) -> versión leída (None = no existía)
        self.read_versions: Dict[DocKey, Optional[int]] = {}
        # (colección, id) -> documento nuevo (None = borrado)
        self.writes: Dict[DocKey, Optional[Dict[str, Any]]] = {}

    @property
    def is_active(self) -> bool:
        return self.state == self.ACTIVE

    def _ensure_active(self) -> None:
        if not self.is_active:
            raise PersistenceError(f"La transacción ya está {self.state}")
        if self.deadline is not None and time.monotonic() > self.deadline:
            raise TransactionTimeoutError(
                "La operación excedió el tiempo máximo permitido"
            )

    # =========================================================================
    # LECTURAS
    # =========================================================================

    def get(self, collection: str, doc_id: Any) -> Optional[Dict[str, Any]]:
        """
        Lee un documento viendo las escrituras propias de esta transacción.

        Raises:
            ConflictError: Si el documento cambió desde la primera lectura
        """
        self._ensure_active()
        key = (collection, str(doc_id))
        if key in self.writes:
            staged = self.writes[key]
            return copy.deepcopy(staged) if staged is not None else None

        doc = self._store.get(collection, key[1])
        version = doc.get(DocumentStore.VERSION_FIELD, 0) if doc else None
        if key in self.read_versions and self.read_versions[key] != version:
            raise ConflictError(
                f"{collection}/{key[1]} fue modificado por otra operación",
                collection=collection, id=key[1]
            )
        self.read_versions.setdefault(key, version)
        return doc

    # =========================================================================
    # ESCRITURAS (staging)
    # =========================================================================

    def _track(self, key: DocKey) -> None:
        """Registra la versión actual si el documento no fue leído antes."""
        if key not in self.read_versions and key not in self.writes:
            self.get(key[0], key[1])

    def insert(self, collection: str, doc: Dict[str, Any]) -> None:
        self._ensure_active()
        key = (collection, str(doc['id']))
        if self.get(collection, key[1]) is not None:
            raise PersistenceError(f"{collection}/{key[1]} ya existe")
        self.writes[key] = copy.deepcopy(doc)

    def put(self, collection: str, doc: Dict[str, Any]) -> None:
        self._ensure_active()
        key = (collection, str(doc['id']))
        self._track(key)
        self.writes[key] = copy.deepcopy(doc)

    def delete(self, collection: str, doc_id: Any) -> None:
        self._ensure_active()
        key = (collection, str(doc_id))
        self._track(key)
        self.writes[key] = None

    def increment(self, counter_id: str) -> int:
        """
        Incrementa un contador dentro de la transacción.
        Dos transacciones que incrementan el mismo contador entran en
        conflicto al confirmar; solo una gana.

        Returns:
            Nuevo valor del contador (el primero es 1)
        """
        doc = self.get('counters', counter_id) or {'id': counter_id, 'value': 0}
        doc['value'] = int(doc.get('value', 0)) + 1
        self.put('counters', doc)
        return doc['value']

    # =========================================================================
    # CIERRE
    # =========================================================================

    def commit(self) -> None:
        self._ensure_active()
        self._store.commit(self)
        self.state = self.COMMITTED

    def abort(self) -> None:
        """Descarta todo lo que quedó en staging."""
        if self.is_active:
            self.writes.clear()
            self.state = self.ABORTED


class DocumentStore(BaseRepository):
    """
    Almacén de documentos JSON con commits atómicos y detección de conflictos.

    Las lecturas fuera de una transacción (get, all) devuelven copias del
    último estado confirmado: nunca ven una transacción a medio aplicar.
    """

    COLLECTIONS = ('products', 'sales', 'orders', 'counters')
    VERSION_FIELD = '_version'

    def __init__(self, file_path: Optional[str] = None):
        """
        Args:
            file_path: Ruta a store.json (None = solo memoria)
        """
        super().__init__(file_path)
        self._commit_lock = threading.RLock()
        self._data = self._normalize(self._read_raw())

    def _empty_data(self) -> Dict[str, Dict[str, Any]]:
        return {name: {} for name in self.COLLECTIONS}

    def _normalize(self, raw: Any) -> Dict[str, Dict[str, Any]]:
        data = self._empty_data()
        if isinstance(raw, dict):
            for name in self.COLLECTIONS:
                docs = raw.get(name)
                if isinstance(docs, dict):
                    data[name] = {str(k): v for k, v in docs.items()}
        return data

    def _collection(self, name: str) -> Dict[str, Any]:
        if name not in self._data:
            raise PersistenceError(f"Colección desconocida: {name}")
        return self._data[name]

    # =========================================================================
    # LECTURAS CONFIRMADAS
    # =========================================================================

    def get(self, collection: str, doc_id: Any) -> Optional[Dict[str, Any]]:
        with self._commit_lock:
            doc = self._collection(collection).get(str(doc_id))
            return copy.deepcopy(doc) if doc is not None else None

    def all(self, collection: str) -> List[Dict[str, Any]]:
        with self._commit_lock:
            return [copy.deepcopy(d) for d in self._collection(collection).values()]

    # =========================================================================
    # TRANSACCIONES
    # =========================================================================

    def begin(self, deadline: Optional[float] = None) -> Transaction:
        """
        Abre una transacción.

        Args:
            deadline: Instante (time.monotonic) a partir del cual la
                      transacción ya no puede avanzar ni confirmar
        """
        return Transaction(self, deadline)

    def commit(self, tx: Transaction) -> None:
        """
        Valida las versiones leídas y aplica las escrituras de `tx`.

        Raises:
            ConflictError: Otra transacción confirmó cambios sobre algo leído
            PersistenceError: No se pudo escribir el archivo
        """
        with self._commit_lock:
            for (collection, doc_id), expected in tx.read_versions.items():
                current = self._collection(collection).get(doc_id)
                version = current.get(self.VERSION_FIELD, 0) if current is not None else None
                if version != expected:
                    raise ConflictError(
                        f"{collection}/{doc_id} fue modificado por otra operación",
                        collection=collection, id=doc_id
                    )

            if not tx.writes:
                return

            new_data = {name: dict(docs) for name, docs in self._data.items()}
            for (collection, doc_id), doc in tx.writes.items():
                if doc is None:
                    new_data[collection].pop(doc_id, None)
                    continue
                previous = self._data[collection].get(doc_id)
                stored = copy.deepcopy(doc)
                stored[self.VERSION_FIELD] = (
                    previous.get(self.VERSION_FIELD, 0) if previous else 0
                ) + 1
                new_data[collection][doc_id] = stored

            try:
                self._write_raw(new_data)
            except (OSError, TypeError, ValueError) as e:
                logger.error("Fallo al persistir la transacción: %s", e)
                raise PersistenceError("No se pudo guardar la operación") from e

            self._data = new_data

    def increment_counter(self, counter_id: str) -> int:
        """Incremento atómico de un contador fuera de cualquier transacción."""
        with self._commit_lock:
            tx = self.begin()
            value = tx.increment(counter_id)
            tx.commit()
            return value
