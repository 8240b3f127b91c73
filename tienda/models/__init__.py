# ==============================================================================
# CAPA DE MODELOS - Estructuras de datos del sistema
# ==============================================================================
# Entidades del dominio como dataclasses, independientes del almacenamiento.
# ==============================================================================

from .entities import (
    # Inventario
    Product,
    StockMovement,
    RestoreResult,
    RestoreOutcome,
    StockEffect,

    # Ventas
    Sale,
    SaleLineItem,
    SaleCustomer,
    SalePaymentMethod,

    # Pedidos
    Order,
    OrderLineItem,
    OrderCustomer,
    OrderStatus,
    OrderPaymentMethod,
    PaymentStatus,
    PaymentDetails,
    StatusHistoryEntry,
    DeliveryType,

    utc_now_iso,
)

__all__ = [
    'Product',
    'StockMovement',
    'RestoreResult',
    'RestoreOutcome',
    'StockEffect',

    'Sale',
    'SaleLineItem',
    'SaleCustomer',
    'SalePaymentMethod',

    'Order',
    'OrderLineItem',
    'OrderCustomer',
    'OrderStatus',
    'OrderPaymentMethod',
    'PaymentStatus',
    'PaymentDetails',
    'StatusHistoryEntry',
    'DeliveryType',

    'utc_now_iso',
]
