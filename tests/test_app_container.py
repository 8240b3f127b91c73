# -*- coding: utf-8 -*-
"""
Tests del armado de servicios y del reporte de rendimiento.
"""
import logging

from tienda.performance_logger import (
    get_function_stats,
    log_function_stats_report,
    reset_stats,
)
from tienda.repositories import (
    IAuditRepository,
    IDocumentStore,
    IOrderRepository,
    IProductRepository,
    ISaleRepository,
    ITransaction,
    IUserRepository,
)


def test_repositories_fulfil_service_contracts(container):
    assert isinstance(container.store, IDocumentStore)
    assert isinstance(container.store.begin(), ITransaction)
    assert isinstance(container.product_repo, IProductRepository)
    assert isinstance(container.sale_repo, ISaleRepository)
    assert isinstance(container.order_repo, IOrderRepository)
    assert isinstance(container.audit_repo, IAuditRepository)
    assert isinstance(container.user_repo, IUserRepository)


def test_transactions_are_profiled(container, add_product):
    add_product('remera', 5)
    reset_stats()

    container.sale_recorder.record_sale([{'product': 'remera', 'qty': 1}])
    container.sale_recorder.record_sale([{'product': 'remera', 'qty': 1}])

    stats = get_function_stats()['Transacción']
    assert stats['calls'] == 2
    assert stats['max_time'] >= stats['avg_time'] >= 0

    reset_stats()
    assert get_function_stats() == {}


def test_stats_report_is_logged(container, add_product, caplog):
    add_product('remera', 5)
    reset_stats()
    container.sale_recorder.record_sale([{'product': 'remera', 'qty': 1}])

    with caplog.at_level(logging.INFO, logger='tienda.performance'):
        log_function_stats_report()

    assert 'Reporte de rendimiento de funciones' in caplog.text
    assert 'Transacción' in caplog.text
    assert '1 llamadas' in caplog.text
    reset_stats()
