# ==============================================================================
# VALIDACIÓN DE ENTRADA
# ==============================================================================
# Convierte los datos que llegan por la API (dicts JSON) en valores del
# dominio. Todo lo inválido termina en ValidationError con un mensaje claro.
# ==============================================================================

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Type, TypeVar

from tienda.errors import ValidationError
from tienda.models import StockMovement

E = TypeVar('E', bound=Enum)


@dataclass
class LineRequest:
    """Línea tal como la pidió el cliente, antes de precio y nombre."""
    product_id: str
    quantity: int
    unit_price: Optional[float] = None
    size: str = ''

    def to_movement(self) -> StockMovement:
        return StockMovement(self.product_id, self.quantity)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_enum(enum_cls: Type[E], value: Any, label: str) -> E:
    """
    Args:
        enum_cls: Enum destino
        value: Valor recibido
        label: Nombre del campo para el mensaje de error
    """
    try:
        return enum_cls(value)
    except ValueError:
        valid = ', '.join(m.value for m in enum_cls)
        raise ValidationError(f"{label} inválido: {value}. Valores permitidos: {valid}")


def parse_amount(value: Any, label: str, default: float = 0.0) -> float:
    """Monto opcional mayor o igual a 0."""
    if value is None:
        return default
    if not _is_number(value) or value < 0:
        raise ValidationError(f"{label} debe ser un número mayor o igual a 0")
    return float(value)


def parse_json_object(data: Any) -> Dict[str, Any]:
    """Cuerpo JSON del request. Sin cuerpo equivale a {}."""
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("El cuerpo del request debe ser un objeto JSON")
    return data


def parse_line_requests(items: Any, allow_unit_price: bool = True) -> List[LineRequest]:
    """
    Valida la lista de ítems de una venta o pedido.

    Cada ítem: {"product": id, "qty": n, "unitPrice"?: precio, "talle"?: talle}

    Raises:
        ValidationError: Lista vacía, producto faltante o cantidad inválida
    """
    if not isinstance(items, list) or not items:
        raise ValidationError("Debe incluir al menos un producto")

    lines = []
    for index, raw in enumerate(items, start=1):
        if not isinstance(raw, dict):
            raise ValidationError(f"Ítem {index} inválido")

        product_id = raw.get('product')
        if isinstance(product_id, bool) or not isinstance(product_id, (str, int)) \
                or not str(product_id).strip():
            raise ValidationError(f"Ítem {index}: falta el producto")
        product_id = str(product_id).strip()

        qty = raw.get('qty', raw.get('quantity'))
        if isinstance(qty, bool) or not isinstance(qty, int) or qty < 1:
            raise ValidationError(
                f"Ítem {index}: la cantidad debe ser un entero mayor a 0",
                product=product_id
            )

        unit_price = None
        if allow_unit_price and raw.get('unitPrice') is not None:
            unit_price = parse_amount(raw['unitPrice'], f"Ítem {index}: el precio unitario")

        size = raw.get('talle', raw.get('size')) or ''
        lines.append(LineRequest(product_id, qty, unit_price, str(size)))

    return lines
