# ==============================================================================
# ERRORES DEL DOMINIO
# ==============================================================================
# Taxonomía de errores de la tienda. Cada error conoce su código HTTP y su
# identificador corto para que las rutas solo tengan que serializarlo.
#
#   ValidationError          → 400 (nunca se reintenta)
#   NotFoundError            → 404
#   InsufficientStockError   → 400 (incluye producto, solicitado y disponible)
#   ConflictError            → 409 (modificación concurrente, se reintenta)
#   TransactionTimeoutError  → 503 (intento de transacción fuera de plazo)
#   PersistenceError         → 500 (fallo inesperado del almacenamiento)
# ==============================================================================

from typing import Any, Dict


class TiendaError(Exception):
    """Error base. `context` viaja tal cual en la respuesta JSON."""

    status_code = 500
    error = 'error'

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> Dict[str, Any]:
        data = {'message': self.message, 'error': self.error}
        data.update(self.context)
        return data


class ValidationError(TiendaError):
    """Campo faltante o inválido, lista vacía o transición de estado ilegal."""
    status_code = 400
    error = 'validation_error'


class NotFoundError(TiendaError):
    """El producto, venta o pedido referenciado no existe."""
    status_code = 404
    error = 'not_found'


class InsufficientStockError(TiendaError):
    """La cantidad solicitada supera el stock actual de un producto."""

    status_code = 400
    error = 'insufficient_stock'

    def __init__(self, product_id: str, product_name: str, requested: int, available: int):
        super().__init__(
            f"Stock insuficiente para {product_name}. "
            f"Disponible: {available}, Solicitado: {requested}",
            product=product_id,
            productName=product_name,
            requested=requested,
            available=available,
        )
        self.product_id = product_id
        self.product_name = product_name
        self.requested = requested
        self.available = available


class ConflictError(TiendaError):
    """La transacción leyó un documento que otra transacción modificó."""
    status_code = 409
    error = 'conflict'


class TransactionTimeoutError(TiendaError):
    status_code = 503
    error = 'timeout'


class PersistenceError(TiendaError):
    """
    Fallo inesperado al leer o escribir el almacenamiento.
    El mensaje que llega al cliente es genérico; el detalle queda en el log.
    """
    status_code = 500
    error = 'persistence_error'
