# ==============================================================================
# LECTURA PARA REPORTES
# ==============================================================================
# Contrato de lectura para quien arme reportes: ventas y pedidos confirmados
# en un rango de fechas. Solo ve datos confirmados en el store, nunca una
# transacción en curso. No agrega ni resume: eso queda del lado del reporte.
# ==============================================================================

from datetime import date, datetime, time, timezone
from typing import Any, List, Optional

from tienda.errors import ValidationError
from tienda.models import Order, OrderPaymentMethod, OrderStatus, Sale, SalePaymentMethod
from tienda.repositories.interfaces import IOrderRepository, ISaleRepository
from tienda.services.validation import parse_enum


def parse_bound(value: Any, end: bool = False) -> Optional[datetime]:
    """
    Normaliza un límite de rango a datetime con zona horaria (UTC si no trae).

    Acepta datetime, date o texto ISO ("2024-03-15" o "2024-03-15T10:00:00").
    Una fecha sin hora como límite final incluye el día completo.

    Raises:
        ValidationError: Formato de fecha inválido
    """
    if value is None or value == '':
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.max if end else time.min)
    elif isinstance(value, str):
        text = value.strip()
        try:
            if len(text) == 10:
                parsed = datetime.combine(
                    date.fromisoformat(text), time.max if end else time.min
                )
            else:
                parsed = datetime.fromisoformat(text.replace('Z', '+00:00'))
        except ValueError:
            raise ValidationError(f"Fecha inválida: {value}. Formato esperado: YYYY-MM-DD")
    else:
        raise ValidationError(f"Fecha inválida: {value}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _created(record) -> Optional[datetime]:
    try:
        return parse_bound(record.created_at)
    except ValidationError:
        return None


def _in_range(record, start: Optional[datetime], end: Optional[datetime]) -> bool:
    created = _created(record)
    if created is None:
        return False
    if start and created < start:
        return False
    if end and created > end:
        return False
    return True


class ReportReader:

    def __init__(self, sale_repo: ISaleRepository, order_repo: IOrderRepository):
        self.sale_repo = sale_repo
        self.order_repo = order_repo

    def sales_between(
        self,
        start: Any = None,
        end: Any = None,
        payment_method: Any = None
    ) -> List[Sale]:
        """
        Ventas confirmadas con createdAt dentro de [start, end].

        Args:
            start: Límite inicial (None = sin límite)
            end: Límite final inclusive (None = sin límite)
            payment_method: Filtra por método de pago
        """
        start_dt, end_dt = parse_bound(start), parse_bound(end, end=True)
        method = None
        if payment_method:
            method = parse_enum(SalePaymentMethod, payment_method, 'Método de pago')

        return [
            sale for sale in self.sale_repo.list_all()
            if _in_range(sale, start_dt, end_dt)
            and (method is None or sale.payment_method == method)
        ]

    def orders_between(
        self,
        start: Any = None,
        end: Any = None,
        payment_method: Any = None,
        order_status: Any = None
    ) -> List[Order]:
        """Pedidos confirmados con createdAt dentro de [start, end]."""
        start_dt, end_dt = parse_bound(start), parse_bound(end, end=True)
        method = None
        if payment_method:
            method = parse_enum(OrderPaymentMethod, payment_method, 'Método de pago')
        status = None
        if order_status:
            status = parse_enum(OrderStatus, order_status, 'Estado')

        return [
            order for order in self.order_repo.list_all()
            if _in_range(order, start_dt, end_dt)
            and (method is None or order.payment_method == method)
            and (status is None or order.order_status == status)
        ]
