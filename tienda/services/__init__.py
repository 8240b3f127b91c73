# ==============================================================================
# CAPA DE SERVICIOS - Lógica de negocio
# ==============================================================================
# Los servicios no saben nada de HTTP: reciben datos, devuelven entidades y
# lanzan errores de tienda.errors.
# ==============================================================================

from .audit_service import AuditService
from .inventory_ledger import InventoryLedger
from .order_number import OrderNumberGenerator
from .transaction_coordinator import TransactionCoordinator
from .sale_recorder import SaleRecorder
from .order_lifecycle import ORDER_TRANSITIONS, OrderLifecycle, transition_effect
from .report_reader import ReportReader

__all__ = [
    'AuditService',
    'InventoryLedger',
    'OrderNumberGenerator',
    'TransactionCoordinator',
    'SaleRecorder',
    'OrderLifecycle',
    'ORDER_TRANSITIONS',
    'transition_effect',
    'ReportReader',
]
