# ==============================================================================
# LIBRO DE INVENTARIO - Única vía para modificar el stock
# ==============================================================================
# Todas las operaciones reciben una Transaction abierta: los cambios quedan en
# staging y solo se aplican si la transacción completa confirma.
#
# decrement(): valida TODAS las líneas antes de tocar nada (todo o nada).
# restore():   repone línea por línea; si un producto ya no existe se omite
#              y se informa, nunca falla el lote.
# ==============================================================================

import logging
from collections import OrderedDict
from typing import Dict, Iterable, List

from tienda.errors import InsufficientStockError, NotFoundError, ValidationError
from tienda.models import Product, RestoreOutcome, RestoreResult, StockMovement
from tienda.repositories.interfaces import IProductRepository, ITransaction

logger = logging.getLogger(__name__)


def _validate_quantity(movement: StockMovement) -> None:
    qty = movement.quantity
    if isinstance(qty, bool) or not isinstance(qty, int) or qty < 1:
        raise ValidationError(
            f"Cantidad inválida para {movement.product_id}: debe ser un entero mayor a 0",
            product=movement.product_id
        )


def merge_movements(items: Iterable[StockMovement]) -> "OrderedDict[str, int]":
    """
    Agrupa líneas del mismo producto sumando cantidades.

    Raises:
        ValidationError: Lista vacía o cantidad no válida
    """
    merged: "OrderedDict[str, int]" = OrderedDict()
    for movement in items:
        _validate_quantity(movement)
        merged[movement.product_id] = merged.get(movement.product_id, 0) + movement.quantity
    if not merged:
        raise ValidationError("Debe incluir al menos un producto")
    return merged


class InventoryLedger:
    """
    Servicio de stock.

    Responsabilidades:
    - Descontar stock de forma atómica y validada
    - Reponer stock (compensación) tolerando productos borrados
    - Verificar disponibilidad sin modificar nada
    """

    def __init__(self, product_repo: IProductRepository):
        self.product_repo = product_repo

    # =========================================================================
    # VALIDACIÓN
    # =========================================================================

    def _load_checked(self, tx: ITransaction, items: Iterable[StockMovement]) -> Dict[str, tuple]:
        """
        Lee cada producto y verifica que alcance el stock.

        Returns:
            {product_id: (Product, cantidad total solicitada)}
        """
        checked = OrderedDict()
        for product_id, qty in merge_movements(items).items():
            product = self.product_repo.get(tx, product_id)
            if product is None:
                raise NotFoundError(f"Producto {product_id} no encontrado", product=product_id)
            if product.stock < qty:
                raise InsufficientStockError(product.id, product.name, qty, product.stock)
            checked[product_id] = (product, qty)
        return checked

    def check_availability(self, tx: ITransaction, items: Iterable[StockMovement]) -> List[Product]:
        """
        Verifica que todo el pedido pueda cubrirse con el stock actual.

        Returns:
            Productos involucrados (sin modificar)

        Raises:
            NotFoundError: Algún producto no existe
            InsufficientStockError: Algún producto no alcanza
        """
        return [product for product, _ in self._load_checked(tx, items).values()]

    # =========================================================================
    # MOVIMIENTOS
    # =========================================================================

    def decrement(self, tx: ITransaction, items: Iterable[StockMovement]) -> List[Product]:
        """
        Descuenta el stock de todas las líneas dentro de `tx`.

        Args:
            tx: Transacción abierta
            items: Movimientos (producto, cantidad)

        Returns:
            Productos con el stock ya descontado (staging)

        Raises:
            ValidationError: Cantidad inválida o lista vacía
            NotFoundError: Algún producto no existe
            InsufficientStockError: Algún producto no alcanza (nada se descuenta)
        """
        checked = self._load_checked(tx, items)

        updated = []
        for product, qty in checked.values():
            product.stock -= qty
            self.product_repo.save_stock(tx, product)
            updated.append(product)
            if product.is_low_stock:
                logger.warning(
                    "Stock bajo: %s (%s) quedan %d (mínimo %d)",
                    product.name, product.id, product.stock, product.stock_min
                )
        return updated

    def restore(self, tx: ITransaction, items: Iterable[StockMovement]) -> List[RestoreResult]:
        """
        Repone el stock de cada línea dentro de `tx`.

        Un producto inexistente no interrumpe el resto: su línea vuelve como
        SKIPPED_MISSING.

        Returns:
            Un RestoreResult por línea, en el orden recibido
        """
        results = []
        for movement in items:
            _validate_quantity(movement)
            product = self.product_repo.get(tx, movement.product_id)
            if product is None:
                logger.warning(
                    "Reposición omitida: producto %s no existe (%d unidades)",
                    movement.product_id, movement.quantity
                )
                results.append(RestoreResult(
                    movement.product_id, movement.quantity, RestoreOutcome.SKIPPED_MISSING
                ))
                continue

            product.stock += movement.quantity
            self.product_repo.save_stock(tx, product)
            results.append(RestoreResult(
                movement.product_id, movement.quantity, RestoreOutcome.RESTORED, product.stock
            ))
        return results
