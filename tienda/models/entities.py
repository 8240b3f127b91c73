# ==============================================================================
# ENTIDADES DEL DOMINIO - Definiciones de dataclasses
# ==============================================================================
# Cada entidad representa un concepto del negocio.
# Los documentos JSON usan claves camelCase (formato de la API y del store);
# los atributos Python usan snake_case.
# ==============================================================================

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any
from enum import Enum
from datetime import datetime, timezone


def utc_now_iso() -> str:
    """Timestamp ISO-8601 en UTC."""
    return datetime.now(timezone.utc).isoformat()


# ==============================================================================
# ENUMERACIONES - Estados y tipos válidos
# ==============================================================================

class OrderStatus(str, Enum):
    """Estados del pedido. Terminales: DELIVERED y CANCELLED."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.DELIVERED, OrderStatus.CANCELLED)


class PaymentStatus(str, Enum):
    """Estado del pago de un pedido."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class SalePaymentMethod(str, Enum):
    """Métodos de pago aceptados en el punto de venta."""
    CASH = "cash"
    TRANSFER = "transfer"
    DEBIT_CARD = "debit_card"
    CREDIT_CARD = "credit_card"
    MERCADOPAGO = "mercadopago"
    OTHER = "other"


class OrderPaymentMethod(str, Enum):
    """Métodos de pago aceptados en pedidos online."""
    TRANSFER = "transfer"
    CASH = "cash"
    VISA = "visa"
    MASTERCARD = "mastercard"
    NARANJA = "naranja"


class DeliveryType(str, Enum):
    """Tipos de entrega disponibles."""
    SHIPPING = "shipping"  # Envío a domicilio (requiere dirección)
    PICKUP = "pickup"      # Retiro en el local


class StockEffect(str, Enum):
    """Efecto sobre el stock de una transición de estado."""
    NONE = "none"
    DECREMENT = "decrement"
    RESTORE = "restore"


class RestoreOutcome(str, Enum):
    """Resultado de reponer stock de una línea."""
    RESTORED = "restored"
    SKIPPED_MISSING = "skipped_missing"  # El producto ya no existe


# ==============================================================================
# ENTIDADES DE INVENTARIO
# ==============================================================================

@dataclass
class Product:
    """
    Producto del catálogo.

    Attributes:
        id: Identificador único
        name: Nombre del producto
        price: Precio de venta actual (>= 0)
        stock: Unidades disponibles (>= 0). Solo lo modifica InventoryLedger
        stock_min: Umbral de stock bajo
        visible: Si aparece en el catálogo online
        sizes: Talles ofrecidos
    """
    id: str
    name: str
    price: float = 0.0
    stock: int = 0
    stock_min: int = 5
    visible: bool = True
    sizes: List[str] = field(default_factory=list)

    @property
    def is_low_stock(self) -> bool:
        """Verifica si el stock está en o por debajo del mínimo."""
        return self.stock <= self.stock_min

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'price': self.price,
            'stock': self.stock,
            'stockMinimo': self.stock_min,
            'visible': self.visible,
            'sizes': list(self.sizes),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Product':
        return cls(
            id=data.get('id', ''),
            name=data.get('name', ''),
            price=data.get('price', 0.0),
            stock=data.get('stock', 0),
            stock_min=data.get('stockMinimo', 5),
            visible=data.get('visible', True),
            sizes=list(data.get('sizes', [])),
        )


@dataclass
class StockMovement:
    """Cantidad de un producto a descontar o reponer."""
    product_id: str
    quantity: int


@dataclass
class RestoreResult:
    """
    Resultado por línea de una reposición de stock.

    Attributes:
        product_id: Producto referenciado
        quantity: Cantidad que se intentó reponer
        outcome: RESTORED o SKIPPED_MISSING
        stock_after: Stock resultante (None si se omitió)
    """
    product_id: str
    quantity: int
    outcome: RestoreOutcome
    stock_after: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'product': self.product_id,
            'quantity': self.quantity,
            'outcome': self.outcome.value,
            'stockAfter': self.stock_after,
        }


# ==============================================================================
# ENTIDADES DE VENTA
# ==============================================================================

@dataclass
class SaleLineItem:
    """
    Línea de una venta. Inmutable una vez creada.

    Attributes:
        product_id: ID del producto
        product_name: Nombre del producto al momento de la venta
        quantity: Cantidad vendida (>= 1)
        unit_price: Precio unitario (>= 0)
        line_total: quantity * unit_price
    """
    product_id: str
    product_name: str
    quantity: int
    unit_price: float
    line_total: float = 0.0

    def __post_init__(self):
        """Calcula el total de la línea."""
        self.line_total = round(self.quantity * self.unit_price, 2)

    def to_movement(self) -> StockMovement:
        return StockMovement(self.product_id, self.quantity)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'product': self.product_id,
            'productName': self.product_name,
            'quantity': self.quantity,
            'unitPrice': self.unit_price,
            'lineTotal': self.line_total,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SaleLineItem':
        return cls(
            product_id=data.get('product', ''),
            product_name=data.get('productName', ''),
            quantity=data.get('quantity', 0),
            unit_price=data.get('unitPrice', 0.0),
        )


@dataclass
class SaleCustomer:
    """Datos opcionales del cliente en una venta de mostrador."""
    name: str = ''
    phone: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'phone': self.phone}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'SaleCustomer':
        data = data or {}
        return cls(
            name=str(data.get('name') or '').strip(),
            phone=str(data.get('phone') or '').strip(),
        )


@dataclass
class Sale:
    """
    Venta de punto de venta. Se crea junto con el descuento de stock y
    solo puede eliminarse (reponiendo el stock).

    Attributes:
        id: Identificador único
        items: Líneas vendidas
        payment_method: Método de pago
        seller: Usuario que registró la venta
        customer: Cliente (opcional)
        notes: Notas libres
        total: Suma de los totales de línea
        created_at: Timestamp de creación (UTC)
    """
    id: str
    items: List[SaleLineItem]
    payment_method: SalePaymentMethod
    seller: str
    customer: SaleCustomer = field(default_factory=SaleCustomer)
    notes: str = ''
    total: float = 0.0
    created_at: str = ''

    def __post_init__(self):
        if not self.created_at:
            self.created_at = utc_now_iso()
        self.calculate_total()

    def calculate_total(self) -> float:
        """Recalcula el total desde las líneas."""
        self.total = round(sum(item.line_total for item in self.items), 2)
        return self.total

    def movements(self) -> List[StockMovement]:
        return [item.to_movement() for item in self.items]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'items': [item.to_dict() for item in self.items],
            'total': self.total,
            'paymentMethod': self.payment_method.value,
            'customer': self.customer.to_dict(),
            'notes': self.notes,
            'seller': self.seller,
            'createdAt': self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Sale':
        return cls(
            id=data.get('id', ''),
            items=[SaleLineItem.from_dict(i) for i in data.get('items', [])],
            payment_method=SalePaymentMethod(data.get('paymentMethod', 'cash')),
            seller=data.get('seller', ''),
            customer=SaleCustomer.from_dict(data.get('customer')),
            notes=data.get('notes', ''),
            created_at=data.get('createdAt', ''),
        )


# ==============================================================================
# ENTIDADES DE PEDIDO
# ==============================================================================

@dataclass
class OrderLineItem(SaleLineItem):
    """Línea de pedido: igual que la de venta más el talle elegido."""
    size: str = ''

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d['size'] = self.size
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'OrderLineItem':
        return cls(
            product_id=data.get('product', ''),
            product_name=data.get('productName', ''),
            quantity=data.get('quantity', 0),
            unit_price=data.get('unitPrice', 0.0),
            size=data.get('size', ''),
        )


@dataclass
class OrderCustomer:
    """
    Cliente de un pedido online.
    Nombre y teléfono son obligatorios; la dirección solo para envíos.
    """
    name: str
    phone: str
    delivery_type: DeliveryType = DeliveryType.PICKUP
    address: str = ''
    email: str = ''
    zone: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'phone': self.phone,
            'deliveryType': self.delivery_type.value,
            'address': self.address,
            'email': self.email,
            'zone': self.zone,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'OrderCustomer':
        return cls(
            name=data.get('name', ''),
            phone=data.get('phone', ''),
            delivery_type=DeliveryType(data.get('deliveryType', 'pickup')),
            address=data.get('address', ''),
            email=data.get('email', ''),
            zone=data.get('zone', ''),
        )


@dataclass
class PaymentDetails:
    """Datos del pago informados por el cliente (transferencias)."""
    receipt_url: str = ''
    transaction_number: str = ''
    paid_at: Optional[str] = None

    def merge(self, updates: Dict[str, Any]) -> None:
        """Mezcla campos recibidos en camelCase sobre los existentes."""
        if 'receiptUrl' in updates:
            self.receipt_url = updates['receiptUrl'] or ''
        if 'transactionNumber' in updates:
            self.transaction_number = updates['transactionNumber'] or ''
        if 'paidAt' in updates:
            self.paid_at = updates['paidAt']

    def to_dict(self) -> Dict[str, Any]:
        return {
            'receiptUrl': self.receipt_url,
            'transactionNumber': self.transaction_number,
            'paidAt': self.paid_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PaymentDetails':
        return cls(
            receipt_url=data.get('receiptUrl', ''),
            transaction_number=data.get('transactionNumber', ''),
            paid_at=data.get('paidAt'),
        )


@dataclass
class StatusHistoryEntry:
    """Entrada del historial de estados (solo se agregan, nunca se editan)."""
    status: OrderStatus
    timestamp: str = ''
    note: str = ''

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = utc_now_iso()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'status': self.status.value,
            'timestamp': self.timestamp,
            'note': self.note,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StatusHistoryEntry':
        return cls(
            status=OrderStatus(data.get('status', 'pending')),
            timestamp=data.get('timestamp', ''),
            note=data.get('note', ''),
        )


@dataclass
class Order:
    """
    Pedido online. El stock se compromete al confirmarlo, no al crearlo.

    Attributes:
        id: Identificador único
        order_number: Número visible PED-YYYYMMDD-NNN
        items: Líneas del pedido
        customer: Datos del cliente y tipo de entrega
        payment_method: Método de pago elegido
        shipping_cost: Costo de envío (0 si es retiro)
        subtotal: Suma de líneas
        total: subtotal + shipping_cost
        order_status: Estado del pedido
        payment_status: Estado del pago
        payment_details: Datos del pago (opcional)
        notes: Notas del cliente
        status_history: Historial de estados
        created_at: Timestamp de creación (UTC)
    """
    id: str
    order_number: str
    items: List[OrderLineItem]
    customer: OrderCustomer
    payment_method: OrderPaymentMethod
    shipping_cost: float = 0.0
    subtotal: float = 0.0
    total: float = 0.0
    order_status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_details: Optional[PaymentDetails] = None
    notes: str = ''
    status_history: List[StatusHistoryEntry] = field(default_factory=list)
    created_at: str = ''

    def __post_init__(self):
        if not self.created_at:
            self.created_at = utc_now_iso()
        if self.customer.delivery_type != DeliveryType.SHIPPING:
            self.shipping_cost = 0.0
        self.calculate_totals()

    def calculate_totals(self) -> float:
        """Recalcula subtotal y total."""
        self.subtotal = round(sum(item.line_total for item in self.items), 2)
        self.total = round(self.subtotal + (self.shipping_cost or 0), 2)
        return self.total

    def change_status(self, new_status: OrderStatus, note: str = '') -> None:
        """Cambia el estado y lo agrega al historial."""
        self.order_status = new_status
        self.status_history.append(StatusHistoryEntry(new_status, note=note))

    def movements(self) -> List[StockMovement]:
        return [item.to_movement() for item in self.items]

    def to_dict(self) -> Dict[str, Any]:
        d = {
            'id': self.id,
            'orderNumber': self.order_number,
            'items': [item.to_dict() for item in self.items],
            'subtotal': self.subtotal,
            'shippingCost': self.shipping_cost,
            'total': self.total,
            'customer': self.customer.to_dict(),
            'orderStatus': self.order_status.value,
            'paymentStatus': self.payment_status.value,
            'paymentMethod': self.payment_method.value,
            'notes': self.notes,
            'statusHistory': [h.to_dict() for h in self.status_history],
            'createdAt': self.created_at,
        }
        if self.payment_details:
            d['paymentDetails'] = self.payment_details.to_dict()
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Order':
        details = None
        if data.get('paymentDetails'):
            details = PaymentDetails.from_dict(data['paymentDetails'])

        return cls(
            id=data.get('id', ''),
            order_number=data.get('orderNumber', ''),
            items=[OrderLineItem.from_dict(i) for i in data.get('items', [])],
            customer=OrderCustomer.from_dict(data.get('customer', {})),
            payment_method=OrderPaymentMethod(data.get('paymentMethod', 'cash')),
            shipping_cost=data.get('shippingCost', 0.0),
            order_status=OrderStatus(data.get('orderStatus', 'pending')),
            payment_status=PaymentStatus(data.get('paymentStatus', 'pending')),
            payment_details=details,
            notes=data.get('notes', ''),
            status_history=[
                StatusHistoryEntry.from_dict(h) for h in data.get('statusHistory', [])
            ],
            created_at=data.get('createdAt', ''),
        )
