# ==============================================================================
# CAPA DE REPOSITORIOS - Acceso a datos
# ==============================================================================
# store.json (DocumentStore) guarda productos, ventas, pedidos y contadores
# con transacciones optimistas. audit.json y users.json son archivos propios.
# Los servicios dependen de los protocolos de interfaces.py.
# ==============================================================================

from .base import BaseRepository, DictRepository, ListRepository
from .document_store import DocumentStore, Transaction
from .collection import CollectionRepository
from .product_repository import ProductRepository
from .sale_repository import SaleRepository
from .order_repository import OrderRepository
from .audit_repository import AuditRepository
from .user_repository import UserRepository
from .interfaces import (
    IAuditRepository,
    IDocumentStore,
    IOrderRepository,
    IProductRepository,
    ISaleRepository,
    ITransaction,
    IUserRepository,
)

__all__ = [
    'BaseRepository',
    'DictRepository',
    'ListRepository',
    'DocumentStore',
    'Transaction',
    'CollectionRepository',
    'ProductRepository',
    'SaleRepository',
    'OrderRepository',
    'AuditRepository',
    'UserRepository',
    'ITransaction',
    'IDocumentStore',
    'IProductRepository',
    'ISaleRepository',
    'IOrderRepository',
    'IAuditRepository',
    'IUserRepository',
]
