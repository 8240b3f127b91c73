# ==============================================================================
# REPOSITORIO DE COLECCIÓN - Entidades sobre una colección del DocumentStore
# ==============================================================================

from typing import Any, Callable, Generic, List, Optional, TypeVar

from tienda.repositories.document_store import DocumentStore, Transaction

T = TypeVar('T')


class CollectionRepository(Generic[T]):
    """
    Traduce entre documentos JSON y dataclasses para una colección.

    Subclases definen COLLECTION y ENTITY (clase con to_dict/from_dict).
    """

    COLLECTION = ''
    ENTITY: Callable[..., Any] = None

    def __init__(self, store: DocumentStore):
        self.store = store

    def _to_entity(self, doc: Optional[dict]) -> Optional[T]:
        if doc is None:
            return None
        return self.ENTITY.from_dict(doc)

    # Dentro de una transacción

    def get(self, tx: Transaction, record_id: str) -> Optional[T]:
        return self._to_entity(tx.get(self.COLLECTION, record_id))

    def insert(self, tx: Transaction, entity: T) -> None:
        tx.insert(self.COLLECTION, entity.to_dict())

    def save(self, tx: Transaction, entity: T) -> None:
        tx.put(self.COLLECTION, entity.to_dict())

    def delete(self, tx: Transaction, record_id: str) -> None:
        tx.delete(self.COLLECTION, record_id)

    # Último estado confirmado

    def find(self, record_id: str) -> Optional[T]:
        return self._to_entity(self.store.get(self.COLLECTION, record_id))

    def list_all(self) -> List[T]:
        return [self.ENTITY.from_dict(doc) for doc in self.store.all(self.COLLECTION)]
