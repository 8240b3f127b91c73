# ==============================================================================
# REPOSITORIO DE VENTAS
# ==============================================================================
# Colección "sales" del DocumentStore. Las ventas no se editan: solo se
# insertan (con el descuento de stock) o se eliminan (reponiendo stock).
# ==============================================================================

from typing import List

from tienda.models import Sale
from tienda.repositories.collection import CollectionRepository


class SaleRepository(CollectionRepository[Sale]):

    COLLECTION = 'sales'
    ENTITY = Sale

    def list_all(self) -> List[Sale]:
        """Ventas confirmadas, más recientes primero."""
        sales = super().list_all()
        return sorted(sales, key=lambda s: s.created_at, reverse=True)
