# ==============================================================================
# REPOSITORIO DE AUDITORÍA
# ==============================================================================
# Encapsula todo el acceso a audit.json
# La auditoría se almacena como lista: [{evento más reciente}, ...]
# Va fuera del store transaccional: un fallo al auditar nunca deshace una
# venta o un pedido ya confirmados.
# ==============================================================================

import os
from typing import Any, Dict, List, Optional

from tienda.models import utc_now_iso
from tienda.repositories.base import ListRepository


class AuditRepository(ListRepository):
    """
    Formato de datos en audit.json:
    [
        {
            "type": "PEDIDO",
            "user": "admin",
            "message": "Pedido PED-20240315-001: pending → confirmed",
            "timestamp": "2024-03-15T13:00:00+00:00",
            "related_id": "9f1c...",
            "details": {...}
        }
    ]
    """

    # Límite de registros para evitar archivos muy grandes
    MAX_LOGS = 10000

    def __init__(self, data_dir: Optional[str]):
        """
        Args:
            data_dir: Carpeta de datos (None = solo memoria)
        """
        file_path = os.path.join(data_dir, 'audit.json') if data_dir else None
        super().__init__(file_path)

    def load(self) -> List[Dict[str, Any]]:
        """
        Returns:
            Lista de eventos (más recientes primero)
        """
        logs = self.get_all()
        return sorted(logs, key=lambda x: x.get('timestamp', ''), reverse=True)

    def save(self, logs: List[Dict[str, Any]]) -> None:
        if len(logs) > self.MAX_LOGS:
            logs = logs[:self.MAX_LOGS]
        self.save_all(logs)

    def log(
        self,
        log_type: str,
        user: str,
        message: str,
        related_id: str = '',
        details: Dict[str, Any] = None
    ) -> None:
        """
        Registra un nuevo evento de auditoría.

        Args:
            log_type: VENTA, PEDIDO, PAGO o STOCK
            user: Usuario que realizó la acción
            message: Mensaje descriptivo
            related_id: ID de la venta o pedido
            details: Detalles adicionales
        """
        log_entry = {
            'type': log_type,
            'user': user or 'sistema',
            'message': message,
            'timestamp': utc_now_iso(),
            'related_id': related_id,
            'details': details or {}
        }

        with self._file_lock:
            logs = self.get_all()
            logs.insert(0, log_entry)
            self.save(logs)

    def get_logs_by_type(self, log_type: str) -> List[Dict[str, Any]]:
        return [log for log in self.load() if log.get('type') == log_type]

    def get_logs_by_related_id(self, related_id: str) -> List[Dict[str, Any]]:
        """Historial de auditoría de una venta o pedido."""
        return [log for log in self.load() if log.get('related_id') == related_id]
