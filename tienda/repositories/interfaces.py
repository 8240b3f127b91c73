# ==============================================================================
# INTERFACES DE REPOSITORIOS
# ==============================================================================
# Contratos que usan los servicios. Los servicios se tipan contra estos
# protocolos y no contra DocumentStore ni los repositorios concretos.
#
# Operaciones con `tx`: leen/escriben dentro de una transacción abierta.
# Operaciones sin `tx`: leen el último estado confirmado.
# ==============================================================================

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from tienda.models import Order, Product, Sale


@runtime_checkable
class ITransaction(Protocol):
    """Ámbito transaccional: lecturas versionadas y escrituras en staging."""

    def get(self, collection: str, doc_id: Any) -> Optional[Dict[str, Any]]:
        ...

    def insert(self, collection: str, doc: Dict[str, Any]) -> None:
        ...

    def put(self, collection: str, doc: Dict[str, Any]) -> None:
        ...

    def delete(self, collection: str, doc_id: Any) -> None:
        ...

    def increment(self, counter_id: str) -> int:
        ...

    def commit(self) -> None:
        ...

    def abort(self) -> None:
        ...


@runtime_checkable
class IDocumentStore(Protocol):

    def begin(self, deadline: Optional[float] = None) -> ITransaction:
        """Abre una transacción nueva."""
        ...

    def get(self, collection: str, doc_id: Any) -> Optional[Dict[str, Any]]:
        ...

    def all(self, collection: str) -> List[Dict[str, Any]]:
        ...

    def increment_counter(self, counter_id: str) -> int:
        """Incremento atómico fuera de transacción."""
        ...


@runtime_checkable
class IProductRepository(Protocol):

    def get(self, tx: ITransaction, product_id: str) -> Optional[Product]:
        ...

    def save_stock(self, tx: ITransaction, product: Product) -> None:
        """Escribe solo el stock; el resto del documento queda igual."""
        ...

    def create_product(self, product: Product) -> Product:
        ...

    def find(self, product_id: str) -> Optional[Product]:
        ...

    def list_all(self) -> List[Product]:
        ...


@runtime_checkable
class ISaleRepository(Protocol):

    def get(self, tx: ITransaction, sale_id: str) -> Optional[Sale]:
        ...

    def insert(self, tx: ITransaction, sale: Sale) -> None:
        ...

    def delete(self, tx: ITransaction, sale_id: str) -> None:
        ...

    def find(self, sale_id: str) -> Optional[Sale]:
        ...

    def list_all(self) -> List[Sale]:
        ...


@runtime_checkable
class IOrderRepository(Protocol):

    def get(self, tx: ITransaction, order_id: str) -> Optional[Order]:
        ...

    def insert(self, tx: ITransaction, order: Order) -> None:
        ...

    def save(self, tx: ITransaction, order: Order) -> None:
        ...

    def delete(self, tx: ITransaction, order_id: str) -> None:
        ...

    def find(self, order_id: str) -> Optional[Order]:
        ...

    def list_all(self) -> List[Order]:
        ...


@runtime_checkable
class IAuditRepository(Protocol):

    def load(self) -> List[Dict[str, Any]]:
        """Carga todos los eventos (más recientes primero)."""
        ...

    def log(
        self,
        log_type: str,
        user: str,
        message: str,
        related_id: str,
        details: Dict[str, Any]
    ) -> None:
        """Registra un evento de auditoría."""
        ...

    def get_logs_by_type(self, log_type: str) -> List[Dict[str, Any]]:
        ...

    def get_logs_by_related_id(self, related_id: str) -> List[Dict[str, Any]]:
        ...


@runtime_checkable
class IUserRepository(Protocol):

    def get_user(self, username: str) -> Optional[Dict[str, Any]]:
        ...

    def create_user(self, username: str, password_hash: str, role: str) -> bool:
        ...

    def is_empty(self) -> bool:
        ...
