# -*- coding: utf-8 -*-
"""
Operaciones simultáneas sobre el mismo stock: nunca queda negativo y cada
descuento se aplica una sola vez.
"""
import threading

from tienda.errors import InsufficientStockError


def _run_parallel(*targets):
    barrier = threading.Barrier(len(targets))
    results = [None] * len(targets)

    def wrap(index, fn):
        barrier.wait()
        try:
            results[index] = fn()
        except Exception as e:
            results[index] = e

    threads = [threading.Thread(target=wrap, args=(i, fn)) for i, fn in enumerate(targets)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    return results


def test_parallel_confirms_only_one_fits(container, add_product, stock_of, customer):
    add_product('remera', 2)
    lifecycle = container.order_lifecycle
    first = lifecycle.create_order([{'product': 'remera', 'qty': 2}], customer, 'cash')
    second = lifecycle.create_order([{'product': 'remera', 'qty': 2}], customer, 'cash')

    results = _run_parallel(
        lambda: lifecycle.change_status(first.id, 'confirmed'),
        lambda: lifecycle.change_status(second.id, 'confirmed'),
    )

    failures = [r for r in results if isinstance(r, Exception)]
    assert len(failures) == 1
    assert isinstance(failures[0], InsufficientStockError)
    assert stock_of('remera') == 0

    statuses = sorted(lifecycle.get_order(o.id).order_status.value for o in (first, second))
    assert statuses == ['confirmed', 'pending']


def test_parallel_confirms_that_fit_both_apply(container, add_product, stock_of, customer):
    add_product('remera', 4)
    lifecycle = container.order_lifecycle
    first = lifecycle.create_order([{'product': 'remera', 'qty': 2}], customer, 'cash')
    second = lifecycle.create_order([{'product': 'remera', 'qty': 2}], customer, 'cash')

    results = _run_parallel(
        lambda: lifecycle.change_status(first.id, 'confirmed'),
        lambda: lifecycle.change_status(second.id, 'confirmed'),
    )

    assert not any(isinstance(r, Exception) for r in results)
    assert stock_of('remera') == 0


def test_parallel_sales_never_oversell(container, add_product, stock_of):
    add_product('remera', 5)
    recorder = container.sale_recorder

    results = _run_parallel(*[
        (lambda: recorder.record_sale([{'product': 'remera', 'qty': 1}]))
        for _ in range(8)
    ])

    sold = [r for r in results if not isinstance(r, Exception)]
    failed = [r for r in results if isinstance(r, Exception)]
    assert len(sold) == 5
    assert all(isinstance(e, InsufficientStockError) for e in failed)
    assert stock_of('remera') == 0
    assert len(recorder.list_sales()) == 5


def test_parallel_cancel_restores_once(container, add_product, stock_of, customer):
    add_product('remera', 5)
    lifecycle = container.order_lifecycle
    order = lifecycle.create_order([{'product': 'remera', 'qty': 3}], customer, 'cash')
    lifecycle.change_status(order.id, 'confirmed')

    results = _run_parallel(
        lambda: lifecycle.change_status(order.id, 'cancelled'),
        lambda: lifecycle.change_status(order.id, 'cancelled'),
    )

    assert sum(1 for r in results if isinstance(r, Exception)) == 1
    assert stock_of('remera') == 5
