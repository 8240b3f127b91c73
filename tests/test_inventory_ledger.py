# -*- coding: utf-8 -*-
"""
Tests del InventoryLedger: descuento todo-o-nada y reposición tolerante.
"""
import logging

import pytest

from tienda.errors import InsufficientStockError, NotFoundError, ValidationError
from tienda.models import RestoreOutcome, StockMovement


def _commit(container, fn):
    tx = container.store.begin()
    result = fn(tx)
    tx.commit()
    return result


def test_decrement_all_lines(container, add_product, stock_of):
    add_product('remera', 10)
    add_product('gorra', 3)

    _commit(container, lambda tx: container.ledger.decrement(tx, [
        StockMovement('remera', 4),
        StockMovement('gorra', 3),
    ]))

    assert stock_of('remera') == 6
    assert stock_of('gorra') == 0


def test_decrement_is_all_or_nothing(container, add_product, stock_of):
    add_product('remera', 10)
    add_product('gorra', 1)

    tx = container.store.begin()
    with pytest.raises(InsufficientStockError) as exc:
        container.ledger.decrement(tx, [
            StockMovement('remera', 2),
            StockMovement('gorra', 2),
        ])

    # Nada quedó en staging
    assert tx.writes == {}
    assert exc.value.product_id == 'gorra'
    assert exc.value.requested == 2
    assert exc.value.available == 1
    assert stock_of('remera') == 10


def test_decrement_merges_duplicate_lines(container, add_product):
    add_product('remera', 3)

    tx = container.store.begin()
    with pytest.raises(InsufficientStockError) as exc:
        container.ledger.decrement(tx, [
            StockMovement('remera', 2),
            StockMovement('remera', 2),
        ])
    assert exc.value.requested == 4


def test_decrement_missing_product(container):
    tx = container.store.begin()
    with pytest.raises(NotFoundError) as exc:
        container.ledger.decrement(tx, [StockMovement('nada', 1)])
    assert exc.value.context['product'] == 'nada'


@pytest.mark.parametrize('qty', [0, -1, 1.5, True])
def test_decrement_rejects_bad_quantity(container, add_product, qty):
    add_product('remera', 3)
    tx = container.store.begin()
    with pytest.raises(ValidationError):
        container.ledger.decrement(tx, [StockMovement('remera', qty)])


def test_decrement_rejects_empty_list(container):
    tx = container.store.begin()
    with pytest.raises(ValidationError):
        container.ledger.decrement(tx, [])


def test_low_stock_is_logged(container, add_product, caplog):
    add_product('remera', 6, stock_min=5)
    with caplog.at_level(logging.WARNING, logger='tienda'):
        _commit(container, lambda tx: container.ledger.decrement(tx, [StockMovement('remera', 2)]))
    assert any('Stock bajo' in r.getMessage() for r in caplog.records)


def test_restore_skips_missing_products(container, add_product, stock_of):
    add_product('remera', 1)

    results = _commit(container, lambda tx: container.ledger.restore(tx, [
        StockMovement('remera', 2),
        StockMovement('borrado', 5),
    ]))

    assert [r.outcome for r in results] == [RestoreOutcome.RESTORED, RestoreOutcome.SKIPPED_MISSING]
    assert results[0].stock_after == 3
    assert results[1].stock_after is None
    assert stock_of('remera') == 3


def test_check_availability_does_not_mutate(container, add_product, stock_of):
    add_product('remera', 2)
    tx = container.store.begin()
    container.ledger.check_availability(tx, [StockMovement('remera', 2)])
    assert tx.writes == {}

    with pytest.raises(InsufficientStockError):
        container.ledger.check_availability(tx, [StockMovement('remera', 3)])
    assert stock_of('remera') == 2
