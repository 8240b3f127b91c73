# ==============================================================================
# SERVICIO DE VENTAS (punto de venta)
# ==============================================================================
# Una venta descuenta stock en el mismo momento en que se registra:
#   descontar todas las líneas + insertar la venta  → una sola transacción
# Eliminar una venta repone su stock:
#   reponer todas las líneas + borrar la venta      → una sola transacción
# La visibilidad del producto no importa en el mostrador.
# ==============================================================================

import logging
import uuid
from typing import Any, Dict, List, Optional

from tienda.errors import NotFoundError, ValidationError
from tienda.models import (
    RestoreOutcome,
    RestoreResult,
    Sale,
    SaleCustomer,
    SaleLineItem,
    SalePaymentMethod,
)
from tienda.repositories.interfaces import ISaleRepository, ITransaction
from tienda.services.audit_service import AuditService
from tienda.services.inventory_ledger import InventoryLedger
from tienda.services.transaction_coordinator import TransactionCoordinator
from tienda.services.validation import parse_enum, parse_line_requests

logger = logging.getLogger(__name__)


class SaleRecorder:
    """
    Servicio para registrar y eliminar ventas.

    Responsabilidades:
    - Validar la venta y calcular totales
    - Descontar stock junto con el alta (todo o nada)
    - Reponer stock junto con la baja
    """

    def __init__(
        self,
        sale_repo: ISaleRepository,
        ledger: InventoryLedger,
        coordinator: TransactionCoordinator,
        audit_service: AuditService = None
    ):
        self.sale_repo = sale_repo
        self.ledger = ledger
        self.coordinator = coordinator
        self.audit_service = audit_service

    # =========================================================================
    # ALTA
    # =========================================================================

    def record_sale(
        self,
        items: List[Dict[str, Any]],
        payment_method: Optional[str] = None,
        seller: str = '',
        customer: Optional[Dict[str, Any]] = None,
        notes: str = ''
    ) -> Sale:
        """
        Registra una venta descontando el stock de cada línea.

        Args:
            items: [{"product": id, "qty": n, "unitPrice"?: precio}]
            payment_method: Método de pago (por defecto efectivo)
            seller: Usuario que vende
            customer: {"name", "phone"} opcional
            notes: Notas libres

        Returns:
            Venta confirmada

        Raises:
            ValidationError: Datos inválidos
            NotFoundError: Algún producto no existe
            InsufficientStockError: Algún producto no alcanza (no se descuenta nada)
        """
        lines = parse_line_requests(items, allow_unit_price=True)
        method = parse_enum(SalePaymentMethod, payment_method or 'cash', 'Método de pago')
        if customer is not None and not isinstance(customer, dict):
            raise ValidationError("Cliente inválido")
        sale_customer = SaleCustomer.from_dict(customer)
        sale_id = uuid.uuid4().hex

        def stage_sale(tx: ITransaction) -> Sale:
            updated = self.ledger.decrement(tx, [line.to_movement() for line in lines])
            products = {p.id: p for p in updated}

            sale_items = []
            for line in lines:
                product = products[line.product_id]
                # Un precio explícito (incluido 0) manda sobre el de lista
                price = product.price if line.unit_price is None else line.unit_price
                sale_items.append(
                    SaleLineItem(product.id, product.name, line.quantity, price)
                )

            sale = Sale(
                id=sale_id,
                items=sale_items,
                payment_method=method,
                seller=seller,
                customer=sale_customer,
                notes=str(notes or '').strip(),
            )
            self.sale_repo.insert(tx, sale)
            return sale

        sale = self.coordinator.run(stage_sale, label=f"venta {sale_id}")
        logger.info("Venta %s registrada por %s: total %.2f", sale.id, seller, sale.total)

        if self.audit_service:
            self.audit_service.log_sale_created(seller, sale)
        return sale

    # =========================================================================
    # BAJA
    # =========================================================================

    def delete_sale(self, sale_id: str, user: str = '') -> List[RestoreResult]:
        """
        Elimina una venta reponiendo el stock de todas sus líneas.

        Returns:
            Resultado de la reposición por línea

        Raises:
            NotFoundError: La venta no existe
        """
        def stage_delete(tx: ITransaction):
            sale = self.sale_repo.get(tx, sale_id)
            if sale is None:
                raise NotFoundError(f"Venta {sale_id} no encontrada", sale=sale_id)
            restored = self.ledger.restore(tx, sale.movements())
            self.sale_repo.delete(tx, sale_id)
            return sale, restored

        sale, restored = self.coordinator.run(stage_delete, label=f"baja venta {sale_id}")
        logger.info("Venta %s eliminada por %s", sale_id, user or 'sistema')

        if self.audit_service:
            self.audit_service.log_sale_deleted(user, sale, restored)
            for result in restored:
                if result.outcome == RestoreOutcome.SKIPPED_MISSING:
                    self.audit_service.log_stock_restore_skipped(user, sale_id, result)
        return restored

    # =========================================================================
    # CONSULTAS
    # =========================================================================

    def get_sale(self, sale_id: str) -> Sale:
        sale = self.sale_repo.find(sale_id)
        if sale is None:
            raise NotFoundError(f"Venta {sale_id} no encontrada", sale=sale_id)
        return sale

    def list_sales(self) -> List[Sale]:
        return self.sale_repo.list_all()
