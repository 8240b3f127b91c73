# ==============================================================================
# REPOSITORIO DE PEDIDOS
# ==============================================================================
# Colección "orders" del DocumentStore.
# ==============================================================================

from typing import List

from tienda.models import Order
from tienda.repositories.collection import CollectionRepository


class OrderRepository(CollectionRepository[Order]):

    COLLECTION = 'orders'
    ENTITY = Order

    def list_all(self) -> List[Order]:
        """Pedidos confirmados en el store, más recientes primero."""
        orders = super().list_all()
        return sorted(orders, key=lambda o: o.created_at, reverse=True)
