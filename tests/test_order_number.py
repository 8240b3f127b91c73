# -*- coding: utf-8 -*-
"""
Tests de numeración de pedidos PED-YYYYMMDD-NNN.
"""
import threading
from datetime import datetime

from tienda.repositories.document_store import DocumentStore
from tienda.services.order_number import OrderNumberGenerator


class Clock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


def test_numbers_are_sequential_per_day():
    clock = Clock(datetime(2024, 3, 15, 9, 0))
    numbers = OrderNumberGenerator(DocumentStore(), clock=clock)

    assert numbers.next() == 'PED-20240315-001'
    assert numbers.next() == 'PED-20240315-002'

    clock.now = datetime(2024, 3, 16, 0, 5)
    assert numbers.next() == 'PED-20240316-001'


def test_number_widens_past_999():
    store = DocumentStore()
    tx = store.begin()
    tx.put('counters', {'id': 'orders:20240315', 'value': 999})
    tx.commit()

    numbers = OrderNumberGenerator(store, clock=Clock(datetime(2024, 3, 15)))
    assert numbers.next() == 'PED-20240315-1000'


def test_number_inside_aborted_transaction_is_not_consumed():
    store = DocumentStore()
    numbers = OrderNumberGenerator(store, clock=Clock(datetime(2024, 3, 15)))

    tx = store.begin()
    assert numbers.next(tx) == 'PED-20240315-001'
    tx.abort()

    assert numbers.next() == 'PED-20240315-001'


def test_concurrent_numbers_are_unique():
    numbers = OrderNumberGenerator(DocumentStore(), clock=Clock(datetime(2024, 3, 15)))
    results = []
    lock = threading.Lock()
    barrier = threading.Barrier(8)

    def worker():
        barrier.wait()
        for _ in range(5):
            value = numbers.next()
            with lock:
                results.append(value)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(results) == 40
    assert sorted(results) == [f'PED-20240315-{n:03d}' for n in range(1, 41)]


def test_concurrent_order_creation_gets_distinct_numbers(container, add_product, customer):
    add_product('remera', 100)
    lifecycle = container.order_lifecycle
    created = []
    errors = []
    barrier = threading.Barrier(6)

    def worker():
        barrier.wait()
        try:
            order = lifecycle.create_order(
                [{'product': 'remera', 'qty': 1}], customer, 'cash'
            )
            created.append(order.order_number)
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=worker) for _ in range(6)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert sorted(created) == [f'PED-20240315-{n:03d}' for n in range(1, 7)]
    stored = sorted(o.order_number for o in lifecycle.list_orders())
    assert stored == sorted(created)
