# ==============================================================================
# REPOSITORIO DE PRODUCTOS
# ==============================================================================
# Colección "products" del DocumentStore.
# El stock solo se modifica a través de InventoryLedger; este repositorio
# solo sabe leer y escribir documentos.
# ==============================================================================

from tienda.errors import NotFoundError, ValidationError
from tienda.models import Product
from tienda.repositories.collection import CollectionRepository
from tienda.repositories.document_store import Transaction


class ProductRepository(CollectionRepository[Product]):
    """
    Formato de un documento:
    {
        "id": "remera-negra",
        "name": "Remera negra",
        "price": 12000.0,
        "stock": 10,
        "stockMinimo": 5,
        "visible": true,
        "sizes": ["S", "M", "L"],
        "_version": 4
    }
    """

    COLLECTION = 'products'
    ENTITY = Product

    def create_product(self, product: Product) -> Product:
        """
        Da de alta un producto en su propia transacción.

        Raises:
            ValidationError: Si falta el id, el stock es negativo o el id ya existe
        """
        if not product.id:
            raise ValidationError("El producto requiere un id")
        if product.stock < 0 or product.price < 0:
            raise ValidationError("Stock y precio deben ser mayores o iguales a 0")
        if self.find(product.id) is not None:
            raise ValidationError(f"Ya existe el producto {product.id}")

        tx = self.store.begin()
        self.insert(tx, product)
        tx.commit()
        return product

    def save_stock(self, tx: Transaction, product: Product) -> None:
        """
        Escribe solo el stock de `product` sobre su documento.

        Los demás campos del documento (categoría, imagen, descripción...)
        pertenecen al catálogo y se conservan tal cual.
        """
        doc = tx.get(self.COLLECTION, product.id)
        if doc is None:
            raise NotFoundError(f"Producto {product.id} no encontrado", product=product.id)
        doc['stock'] = product.stock
        tx.put(self.COLLECTION, doc)
