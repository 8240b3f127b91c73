# ==============================================================================
# COORDINADOR DE TRANSACCIONES
# ==============================================================================
# Ejecuta una secuencia de pasos sobre UNA transacción: o se confirma todo lo
# que dejaron en staging o no se aplica nada.
#
#   coordinator.run(
#       lambda tx: ledger.decrement(tx, movimientos),
#       lambda tx: sale_repo.insert(tx, venta),
#       label='venta',
#   )
#
# REINTENTOS:
# - ConflictError (otra operación modificó algo que leímos): se reintenta
#   desde cero hasta TX_MAX_ATTEMPTS, con backoff exponencial y jitter.
# - Errores de negocio (validación, stock, no encontrado): nunca se reintentan.
# - Cualquier otra excepción: se loguea y se convierte en PersistenceError.
# ==============================================================================

import logging
import random
import time
from typing import Any, Callable, Optional

from tienda.errors import ConflictError, PersistenceError, TiendaError
from tienda.performance_logger import profile_function
from tienda.repositories.interfaces import IDocumentStore, ITransaction

logger = logging.getLogger(__name__)

Step = Callable[[ITransaction], Any]


class TransactionCoordinator:

    def __init__(
        self,
        store: IDocumentStore,
        max_attempts: int = 3,
        attempt_timeout: Optional[float] = 5.0,
        backoff_base: float = 0.02,
        backoff_max: float = 0.5,
        sleep: Callable[[float], None] = time.sleep,
        rand: Callable[[], float] = random.random
    ):
        """
        Args:
            store: Almacén transaccional
            max_attempts: Intentos totales ante conflictos (>= 1)
            attempt_timeout: Segundos por intento (None = sin límite)
            backoff_base: Espera base del primer reintento
            backoff_max: Tope de espera entre reintentos
            sleep: Función de espera (inyectable en tests)
            rand: Fuente de aleatoriedad en [0, 1) para el jitter
        """
        self.store = store
        self.max_attempts = max(1, int(max_attempts))
        self.attempt_timeout = attempt_timeout
        self.backoff_base = backoff_base
        self.backoff_max = backoff_max
        self.sleep = sleep
        self.rand = rand

    def backoff_delay(self, attempt: int) -> float:
        """Full jitter: uniforme entre 0 y min(max, base * 2^(intento-1))."""
        cap = min(self.backoff_max, self.backoff_base * (2 ** (attempt - 1)))
        return self.rand() * cap

    @profile_function(name='Transacción')
    def run(self, *steps: Step, label: str = '') -> Any:
        """
        Ejecuta los pasos en una transacción y la confirma.

        Args:
            *steps: Callables que reciben la Transaction
            label: Nombre de la operación para los logs

        Returns:
            Lo que devuelva el último paso

        Raises:
            TiendaError: El error del paso que falló, sin modificar
            ConflictError: Se agotaron los reintentos
            TransactionTimeoutError: Un intento superó el plazo
            PersistenceError: Fallo inesperado
        """
        if not steps:
            raise ValueError("run() necesita al menos un paso")

        label = label or 'operación'
        attempt = 0
        while True:
            attempt += 1
            deadline = None
            if self.attempt_timeout:
                deadline = time.monotonic() + self.attempt_timeout
            tx = self.store.begin(deadline)

            try:
                result = None
                for step in steps:
                    result = step(tx)
                tx.commit()
            except ConflictError as e:
                tx.abort()
                if attempt >= self.max_attempts:
                    logger.warning(
                        "Conflicto en %s: se agotaron los %d intentos (%s)",
                        label, attempt, e.message
                    )
                    raise
                delay = self.backoff_delay(attempt)
                logger.info(
                    "Conflicto en %s (intento %d/%d), reintento en %.3fs: %s",
                    label, attempt, self.max_attempts, delay, e.message
                )
                self.sleep(delay)
                continue
            except TiendaError as e:
                tx.abort()
                logger.info("%s abortada: %s", label, e.message)
                raise
            except Exception as e:
                tx.abort()
                logger.exception("Error inesperado en %s", label)
                raise PersistenceError("Error interno al procesar la operación") from e

            logger.debug("%s confirmada (intento %d)", label, attempt)
            return result
