# ==============================================================================
# SERVICIO DE AUDITORÍA
# ==============================================================================
# Formatea mensajes de auditoría y los categoriza.
# Se llama DESPUÉS de confirmar cada transacción; si el archivo de auditoría
# no se puede escribir, el error queda en el log y la operación sigue válida.
# ==============================================================================

import logging
from typing import Any, Dict, List

from tienda.models import Order, RestoreResult, Sale
from tienda.repositories.interfaces import IAuditRepository

logger = logging.getLogger(__name__)


class AuditService:
    """
    Servicio para registro y consulta de auditoría.

    Tipos de evento:
    - VENTA: alta y baja de ventas de mostrador
    - PEDIDO: alta, cambios de estado y baja de pedidos
    - PAGO: cambios de estado de pago
    - STOCK: reposiciones omitidas por productos inexistentes
    """

    TYPE_VENTA = 'VENTA'
    TYPE_PEDIDO = 'PEDIDO'
    TYPE_PAGO = 'PAGO'
    TYPE_STOCK = 'STOCK'

    def __init__(self, audit_repo: IAuditRepository):
        self.audit_repo = audit_repo

    # =========================================================================
    # REGISTRO DE EVENTOS
    # =========================================================================

    def log(
        self,
        log_type: str,
        user: str,
        message: str,
        related_id: str = '',
        details: Dict[str, Any] = None
    ) -> None:
        """
        Registra un evento de auditoría genérico.

        Args:
            log_type: Tipo de evento (VENTA, PEDIDO, PAGO, STOCK)
            user: Usuario que realizó la acción
            message: Mensaje descriptivo
            related_id: ID de la venta o pedido
            details: Detalles adicionales
        """
        try:
            self.audit_repo.log(log_type, user, message, related_id, details)
        except (OSError, TypeError, ValueError):
            logger.exception("No se pudo registrar auditoría: %s", message)

    def log_sale_created(self, user: str, sale: Sale) -> None:
        message = (
            f"Venta {sale.id} registrada por {user} - Total: $ {sale.total:.2f} "
            f"- {len(sale.items)} items - Pago: {sale.payment_method.value}"
        )
        self.log(
            self.TYPE_VENTA,
            user,
            message,
            sale.id,
            {'total': sale.total, 'items_count': len(sale.items)}
        )

    def log_sale_deleted(self, user: str, sale: Sale, restored: List[RestoreResult]) -> None:
        message = f"Venta {sale.id} eliminada por {user} - stock repuesto"
        self.log(
            self.TYPE_VENTA,
            user,
            message,
            sale.id,
            {'total': sale.total, 'restored': [r.to_dict() for r in restored]}
        )

    def log_order_created(self, order: Order) -> None:
        message = (
            f"Pedido {order.order_number} creado por {order.customer.name} "
            f"- Total: $ {order.total:.2f}"
        )
        self.log(
            self.TYPE_PEDIDO,
            'cliente',
            message,
            order.id,
            {'orderNumber': order.order_number, 'total': order.total}
        )

    def log_order_status_change(
        self,
        user: str,
        order: Order,
        old_status: str,
        new_status: str
    ) -> None:
        """
        Args:
            user: Usuario que cambió el estado
            order: Pedido ya actualizado
            old_status: Estado anterior
            new_status: Nuevo estado
        """
        message = f"Pedido {order.order_number}: {old_status} → {new_status} por {user}"
        self.log(
            self.TYPE_PEDIDO,
            user,
            message,
            order.id,
            {'from': old_status, 'to': new_status}
        )

    def log_payment_status_change(
        self,
        user: str,
        order: Order,
        old_status: str,
        new_status: str
    ) -> None:
        message = f"Pago del pedido {order.order_number}: {old_status} → {new_status} por {user}"
        self.log(
            self.TYPE_PAGO,
            user,
            message,
            order.id,
            {'from': old_status, 'to': new_status}
        )

    def log_order_deleted(self, user: str, order: Order, restored: List[RestoreResult]) -> None:
        message = f"Pedido {order.order_number} eliminado por {user}"
        if restored:
            message += " - stock repuesto"
        self.log(
            self.TYPE_PEDIDO,
            user,
            message,
            order.id,
            {'status': order.order_status.value, 'restored': [r.to_dict() for r in restored]}
        )

    def log_stock_restore_skipped(self, user: str, related_id: str, result: RestoreResult) -> None:
        """El producto ya no existe: la reposición de esa línea se omitió."""
        message = (
            f"Reposición omitida: el producto {result.product_id} no existe "
            f"({result.quantity} unidades)"
        )
        self.log(
            self.TYPE_STOCK,
            user,
            message,
            related_id,
            result.to_dict()
        )

    # =========================================================================
    # CONSULTAS
    # =========================================================================

    def get_logs(self, log_type: str = None) -> List[Dict[str, Any]]:
        if log_type:
            return self.audit_repo.get_logs_by_type(log_type)
        return self.audit_repo.load()

    def get_history(self, related_id: str) -> List[Dict[str, Any]]:
        return self.audit_repo.get_logs_by_related_id(related_id)
