# ==============================================================================
# CONTENEDOR DE DEPENDENCIAS - Inyección de servicios
# ==============================================================================
# Punto único donde se arman repositorios y servicios. Facilita:
#   - Inyección de dependencias
#   - Testing (data_dir=None deja todo en memoria; reloj y sleep inyectables)
#   - Cambiar el almacenamiento sin tocar los servicios
#
# Cada app Flask tiene su propio contenedor en app.extensions['tienda'].
# ==============================================================================

import os
import time
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from tienda.repositories import (
    AuditRepository,
    DocumentStore,
    OrderRepository,
    ProductRepository,
    SaleRepository,
    UserRepository,
)
from tienda.services import (
    AuditService,
    InventoryLedger,
    OrderLifecycle,
    OrderNumberGenerator,
    ReportReader,
    SaleRecorder,
    TransactionCoordinator,
)

STORE_FILENAME = 'store.json'


class AppContainer:
    """
    Contenedor de dependencias de la aplicación.

    Uso:
        container = AppContainer(data_dir='/var/lib/tienda')
        sale = container.sale_recorder.record_sale(...)
    """

    def __init__(
        self,
        data_dir: Optional[str] = None,
        settings: Optional[Dict[str, Any]] = None,
        clock: Callable[[], datetime] = datetime.now,
        sleep: Callable[[float], None] = time.sleep
    ):
        """
        Args:
            data_dir: Carpeta de los JSON (None = solo memoria)
            settings: Claves TX_* de la configuración
            clock: Reloj local para la numeración de pedidos
            sleep: Espera entre reintentos
        """
        self._data_dir = data_dir
        self._settings = settings or {}
        self._clock = clock
        self._sleep = sleep

        # Repositorios (lazy loading)
        self._store: Optional[DocumentStore] = None
        self._product_repo: Optional[ProductRepository] = None
        self._sale_repo: Optional[SaleRepository] = None
        self._order_repo: Optional[OrderRepository] = None
        self._audit_repo: Optional[AuditRepository] = None
        self._user_repo: Optional[UserRepository] = None

        # Servicios (lazy loading)
        self._audit_service: Optional[AuditService] = None
        self._ledger: Optional[InventoryLedger] = None
        self._order_numbers: Optional[OrderNumberGenerator] = None
        self._coordinator: Optional[TransactionCoordinator] = None
        self._sale_recorder: Optional[SaleRecorder] = None
        self._order_lifecycle: Optional[OrderLifecycle] = None
        self._report_reader: Optional[ReportReader] = None

    @property
    def data_dir(self) -> Optional[str]:
        return self._data_dir

    def build(self) -> 'AppContainer':
        """
        Instancia todo de una vez. Llamar antes de atender requests en
        paralelo: la carga lazy no está protegida con lock.
        """
        self.sale_recorder
        self.order_lifecycle
        self.report_reader
        self.user_repo
        return self

    # =========================================================================
    # REPOSITORIOS
    # =========================================================================

    @property
    def store(self) -> DocumentStore:
        if self._store is None:
            path = os.path.join(self._data_dir, STORE_FILENAME) if self._data_dir else None
            self._store = DocumentStore(path)
        return self._store

    @property
    def product_repo(self) -> ProductRepository:
        if self._product_repo is None:
            self._product_repo = ProductRepository(self.store)
        return self._product_repo

    @property
    def sale_repo(self) -> SaleRepository:
        if self._sale_repo is None:
            self._sale_repo = SaleRepository(self.store)
        return self._sale_repo

    @property
    def order_repo(self) -> OrderRepository:
        if self._order_repo is None:
            self._order_repo = OrderRepository(self.store)
        return self._order_repo

    @property
    def audit_repo(self) -> AuditRepository:
        if self._audit_repo is None:
            self._audit_repo = AuditRepository(self._data_dir)
        return self._audit_repo

    @property
    def user_repo(self) -> UserRepository:
        if self._user_repo is None:
            self._user_repo = UserRepository(self._data_dir)
        return self._user_repo

    # =========================================================================
    # SERVICIOS
    # =========================================================================

    @property
    def audit_service(self) -> AuditService:
        if self._audit_service is None:
            self._audit_service = AuditService(self.audit_repo)
        return self._audit_service

    @property
    def ledger(self) -> InventoryLedger:
        if self._ledger is None:
            self._ledger = InventoryLedger(self.product_repo)
        return self._ledger

    @property
    def order_numbers(self) -> OrderNumberGenerator:
        if self._order_numbers is None:
            self._order_numbers = OrderNumberGenerator(self.store, clock=self._clock)
        return self._order_numbers

    @property
    def coordinator(self) -> TransactionCoordinator:
        """Coordinador con los reintentos y plazos de la configuración."""
        if self._coordinator is None:
            s = self._settings
            self._coordinator = TransactionCoordinator(
                self.store,
                max_attempts=s.get('TX_MAX_ATTEMPTS', 3),
                attempt_timeout=s.get('TX_ATTEMPT_TIMEOUT', 5.0),
                backoff_base=s.get('TX_BACKOFF_BASE', 0.02),
                backoff_max=s.get('TX_BACKOFF_MAX', 0.5),
                sleep=self._sleep,
            )
        return self._coordinator

    @property
    def sale_recorder(self) -> SaleRecorder:
        if self._sale_recorder is None:
            self._sale_recorder = SaleRecorder(
                self.sale_repo,
                self.ledger,
                self.coordinator,
                self.audit_service
            )
        return self._sale_recorder

    @property
    def order_lifecycle(self) -> OrderLifecycle:
        if self._order_lifecycle is None:
            self._order_lifecycle = OrderLifecycle(
                self.order_repo,
                self.product_repo,
                self.ledger,
                self.order_numbers,
                self.coordinator,
                self.audit_service
            )
        return self._order_lifecycle

    @property
    def report_reader(self) -> ReportReader:
        if self._report_reader is None:
            self._report_reader = ReportReader(self.sale_repo, self.order_repo)
        return self._report_reader


def get_container() -> AppContainer:
    """Contenedor de la app Flask activa."""
    from flask import current_app
    return current_app.extensions['tienda']
