# ==============================================================================
# NUMERACIÓN DE PEDIDOS - PED-YYYYMMDD-NNN
# ==============================================================================
# Un contador por día ("orders:YYYYMMDD") en la colección counters.
# El número se obtiene incrementando el contador, nunca contando pedidos,
# así dos pedidos simultáneos no pueden recibir el mismo número.
# ==============================================================================

from datetime import datetime
from typing import Callable, Optional

from tienda.repositories.interfaces import IDocumentStore, ITransaction

ORDER_PREFIX = 'PED'
COUNTER_PREFIX = 'orders:'


class OrderNumberGenerator:

    def __init__(self, store: IDocumentStore, clock: Callable[[], datetime] = datetime.now):
        """
        Args:
            store: Almacén con la colección counters
            clock: Fuente de la fecha local (inyectable en tests)
        """
        self.store = store
        self.clock = clock

    def next(self, tx: Optional[ITransaction] = None) -> str:
        """
        Genera el próximo número de pedido del día.

        Args:
            tx: Si se pasa, el incremento queda dentro de esa transacción y
                solo se consume si la transacción confirma

        Returns:
            "PED-20240315-001", "PED-20240315-002", ... ("1000" pasado el 999)
        """
        day = self.clock().strftime('%Y%m%d')
        counter_id = COUNTER_PREFIX + day
        if tx is not None:
            seq = tx.increment(counter_id)
        else:
            seq = self.store.increment_counter(counter_id)
        return f"{ORDER_PREFIX}-{day}-{seq:03d}"
