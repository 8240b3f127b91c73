# ==============================================================================
# CICLO DE VIDA DE PEDIDOS
# ==============================================================================
# Un pedido online NO descuenta stock al crearse: solo se verifica que haya.
# El stock se compromete al confirmarlo y se devuelve si se cancela estando
# confirmado. La tabla ORDER_TRANSITIONS es la única fuente de verdad:
#
#   pending   → confirmed   descuenta stock
#   pending   → cancelled   sin efecto
#   confirmed → preparing   sin efecto
#   confirmed → cancelled   repone stock
#   preparing → shipped     sin efecto
#   shipped   → delivered   sin efecto
#
# Cualquier otro par (reconfirmar, retroceder, saltear pasos, salir de un
# estado terminal o repetir el estado actual) se rechaza sin efectos.
# ==============================================================================

import logging
import uuid
from typing import Any, Dict, List, Optional

from tienda.errors import NotFoundError, ValidationError
from tienda.models import (
    DeliveryType,
    Order,
    OrderCustomer,
    OrderLineItem,
    OrderPaymentMethod,
    OrderStatus,
    PaymentDetails,
    PaymentStatus,
    RestoreOutcome,
    RestoreResult,
    StatusHistoryEntry,
    StockEffect,
)
from tienda.repositories.interfaces import IOrderRepository, IProductRepository, ITransaction
from tienda.services.audit_service import AuditService
from tienda.services.inventory_ledger import InventoryLedger
from tienda.services.order_number import OrderNumberGenerator
from tienda.services.transaction_coordinator import TransactionCoordinator
from tienda.services.validation import parse_amount, parse_enum, parse_line_requests

logger = logging.getLogger(__name__)

ORDER_TRANSITIONS = {
    OrderStatus.PENDING: {
        OrderStatus.CONFIRMED: StockEffect.DECREMENT,
        OrderStatus.CANCELLED: StockEffect.NONE,
    },
    OrderStatus.CONFIRMED: {
        OrderStatus.PREPARING: StockEffect.NONE,
        OrderStatus.CANCELLED: StockEffect.RESTORE,
    },
    OrderStatus.PREPARING: {
        OrderStatus.SHIPPED: StockEffect.NONE,
    },
    OrderStatus.SHIPPED: {
        OrderStatus.DELIVERED: StockEffect.NONE,
    },
    OrderStatus.DELIVERED: {},
    OrderStatus.CANCELLED: {},
}

CREATED_NOTE = 'Pedido creado'


def transition_effect(current: OrderStatus, target: OrderStatus) -> StockEffect:
    """
    Efecto sobre el stock de pasar de `current` a `target`.

    Raises:
        ValidationError: La transición no está permitida
    """
    allowed = ORDER_TRANSITIONS.get(current, {})
    if target not in allowed:
        if current.is_terminal or current == target:
            reason = f"el pedido ya está {current.value}"
        else:
            valid = ', '.join(s.value for s in allowed) or 'ninguno'
            reason = f"desde {current.value} solo se puede pasar a: {valid}"
        raise ValidationError(
            f"Transición inválida {current.value} → {target.value}: {reason}",
            currentStatus=current.value,
            requestedStatus=target.value
        )
    return allowed[target]


def _parse_customer(customer: Any) -> OrderCustomer:
    if not isinstance(customer, dict):
        raise ValidationError("Faltan los datos del cliente")

    name = str(customer.get('name') or '').strip()
    phone = str(customer.get('phone') or '').strip()
    if not name or not phone:
        raise ValidationError("Nombre y teléfono del cliente son obligatorios")

    delivery_type = parse_enum(
        DeliveryType, customer.get('deliveryType') or 'pickup', 'Tipo de entrega'
    )
    address = str(customer.get('address') or '').strip()
    if delivery_type == DeliveryType.SHIPPING and not address:
        raise ValidationError("La dirección es obligatoria para envíos")

    return OrderCustomer(
        name=name,
        phone=phone,
        delivery_type=delivery_type,
        address=address,
        email=str(customer.get('email') or '').strip(),
        zone=str(customer.get('zone') or '').strip(),
    )


class OrderLifecycle:
    """
    Servicio de pedidos online.

    Responsabilidades:
    - Alta de pedidos (verifica stock, no lo descuenta)
    - Máquina de estados con efecto sobre el stock
    - Estado de pago y datos del comprobante
    - Baja de pedidos (repone solo si estaba confirmado)
    """

    def __init__(
        self,
        order_repo: IOrderRepository,
        product_repo: IProductRepository,
        ledger: InventoryLedger,
        numbers: OrderNumberGenerator,
        coordinator: TransactionCoordinator,
        audit_service: AuditService = None
    ):
        self.order_repo = order_repo
        self.product_repo = product_repo
        self.ledger = ledger
        self.numbers = numbers
        self.coordinator = coordinator
        self.audit_service = audit_service

    def _require(self, tx: ITransaction, order_id: str) -> Order:
        order = self.order_repo.get(tx, order_id)
        if order is None:
            raise NotFoundError(f"Pedido {order_id} no encontrado", order=order_id)
        return order

    def _audit_skipped(self, user: str, order: Order, restored: List[RestoreResult]) -> None:
        for result in restored:
            if result.outcome == RestoreOutcome.SKIPPED_MISSING:
                self.audit_service.log_stock_restore_skipped(user, order.id, result)

    # =========================================================================
    # ALTA
    # =========================================================================

    def create_order(
        self,
        items: List[Dict[str, Any]],
        customer: Dict[str, Any],
        payment_method: Optional[str],
        shipping_cost: Optional[float] = None,
        notes: str = ''
    ) -> Order:
        """
        Crea un pedido en estado pending/pending.

        Args:
            items: [{"product": id, "qty": n, "talle"?: talle}]
            customer: {"name", "phone", "deliveryType", "address"?, "email"?, "zone"?}
            payment_method: transfer, cash, visa, mastercard o naranja
            shipping_cost: Costo de envío (solo aplica a envíos)
            notes: Notas del cliente

        Returns:
            Pedido creado (el stock NO se descuenta)

        Raises:
            ValidationError: Datos inválidos o producto no visible
            NotFoundError: Algún producto no existe
            InsufficientStockError: No hay stock para alguna línea
        """
        lines = parse_line_requests(items, allow_unit_price=False)
        order_customer = _parse_customer(customer)
        if not payment_method:
            raise ValidationError("El método de pago es obligatorio")
        method = parse_enum(OrderPaymentMethod, payment_method, 'Método de pago')
        shipping = parse_amount(shipping_cost, 'El costo de envío')
        order_id = uuid.uuid4().hex

        def stage_order(tx: ITransaction) -> Order:
            products = {}
            for line in lines:
                product = self.product_repo.get(tx, line.product_id)
                if product is None:
                    raise NotFoundError(
                        f"Producto {line.product_id} no encontrado", product=line.product_id
                    )
                if not product.visible:
                    raise ValidationError(
                        f"El producto {product.name} no está disponible", product=product.id
                    )
                if line.size and product.sizes and line.size not in product.sizes:
                    raise ValidationError(
                        f"Talle {line.size} no disponible para {product.name}",
                        product=product.id
                    )
                products[product.id] = product

            self.ledger.check_availability(tx, [line.to_movement() for line in lines])

            order_items = [
                OrderLineItem(
                    product_id=line.product_id,
                    product_name=products[line.product_id].name,
                    quantity=line.quantity,
                    unit_price=products[line.product_id].price,
                    size=line.size,
                )
                for line in lines
            ]

            order = Order(
                id=order_id,
                order_number=self.numbers.next(tx),
                items=order_items,
                customer=order_customer,
                payment_method=method,
                shipping_cost=shipping,
                notes=str(notes or '').strip(),
                status_history=[StatusHistoryEntry(OrderStatus.PENDING, note=CREATED_NOTE)],
            )
            self.order_repo.insert(tx, order)
            return order

        order = self.coordinator.run(stage_order, label=f"pedido {order_id}")
        logger.info("Pedido %s creado: total %.2f", order.order_number, order.total)

        if self.audit_service:
            self.audit_service.log_order_created(order)
        return order

    # =========================================================================
    # ESTADOS
    # =========================================================================

    def change_status(
        self,
        order_id: str,
        status: Any,
        note: str = '',
        user: str = ''
    ) -> Order:
        """
        Aplica una transición de estado y su efecto sobre el stock.

        Raises:
            NotFoundError: El pedido no existe
            ValidationError: Estado desconocido o transición no permitida
            InsufficientStockError: Al confirmar, alguna línea no alcanza
        """
        target = parse_enum(OrderStatus, status, 'Estado')

        def stage_transition(tx: ITransaction):
            order = self._require(tx, order_id)
            previous = order.order_status
            effect = transition_effect(previous, target)

            restored = []
            if effect == StockEffect.DECREMENT:
                self.ledger.decrement(tx, order.movements())
            elif effect == StockEffect.RESTORE:
                restored = self.ledger.restore(tx, order.movements())

            order.change_status(target, str(note or '').strip())
            self.order_repo.save(tx, order)
            return order, previous, restored

        order, previous, restored = self.coordinator.run(
            stage_transition, label=f"estado pedido {order_id}"
        )
        logger.info(
            "Pedido %s: %s → %s", order.order_number, previous.value, target.value
        )

        if self.audit_service:
            self.audit_service.log_order_status_change(
                user, order, previous.value, target.value
            )
            self._audit_skipped(user, order, restored)
        return order

    def update_payment_status(
        self,
        order_id: str,
        payment_status: Any,
        payment_details: Optional[Dict[str, Any]] = None,
        user: str = ''
    ) -> Order:
        """
        Cambia el estado de pago. No toca el stock.

        Args:
            payment_details: Campos a mezclar sobre los existentes
                             (receiptUrl, transactionNumber, paidAt)
        """
        new_status = parse_enum(PaymentStatus, payment_status, 'Estado de pago')
        if payment_details is not None and not isinstance(payment_details, dict):
            raise ValidationError("Datos de pago inválidos")

        def stage_payment(tx: ITransaction):
            order = self._require(tx, order_id)
            previous = order.payment_status
            order.payment_status = new_status
            if payment_details:
                details = order.payment_details or PaymentDetails()
                details.merge(payment_details)
                order.payment_details = details
            self.order_repo.save(tx, order)
            return order, previous

        order, previous = self.coordinator.run(
            stage_payment, label=f"pago pedido {order_id}"
        )

        if self.audit_service:
            self.audit_service.log_payment_status_change(
                user, order, previous.value, new_status.value
            )
        return order

    # =========================================================================
    # BAJA
    # =========================================================================

    def delete_order(self, order_id: str, user: str = '') -> List[RestoreResult]:
        """
        Elimina un pedido. Solo repone stock si estaba confirmado.

        Returns:
            Resultado de la reposición (vacío si no correspondía reponer)
        """
        def stage_delete(tx: ITransaction):
            order = self._require(tx, order_id)
            restored = []
            if order.order_status == OrderStatus.CONFIRMED:
                restored = self.ledger.restore(tx, order.movements())
            self.order_repo.delete(tx, order_id)
            return order, restored

        order, restored = self.coordinator.run(stage_delete, label=f"baja pedido {order_id}")
        logger.info("Pedido %s eliminado (%s)", order.order_number, order.order_status.value)

        if self.audit_service:
            self.audit_service.log_order_deleted(user, order, restored)
            self._audit_skipped(user, order, restored)
        return restored

    # =========================================================================
    # CONSULTAS
    # =========================================================================

    def get_order(self, order_id: str) -> Order:
        order = self.order_repo.find(order_id)
        if order is None:
            raise NotFoundError(f"Pedido {order_id} no encontrado", order=order_id)
        return order

    def list_orders(self, status: Any = None, payment_status: Any = None) -> List[Order]:
        """Pedidos más recientes primero, filtrados por estado y/o estado de pago."""
        orders = self.order_repo.list_all()
        if status:
            wanted = parse_enum(OrderStatus, status, 'Estado')
            orders = [o for o in orders if o.order_status == wanted]
        if payment_status:
            wanted_payment = parse_enum(PaymentStatus, payment_status, 'Estado de pago')
            orders = [o for o in orders if o.payment_status == wanted_payment]
        return orders
