# -*- coding: utf-8 -*-
"""
Tests del TransactionCoordinator: reintentos, aborto y errores.
"""
import time

import pytest

from tienda.errors import (
    ConflictError,
    InsufficientStockError,
    PersistenceError,
    TransactionTimeoutError,
    ValidationError,
)
from tienda.repositories.document_store import DocumentStore
from tienda.services.transaction_coordinator import TransactionCoordinator


class ConflictingStore(DocumentStore):
    """Rechaza los primeros `conflicts` commits con ConflictError."""

    def __init__(self, conflicts):
        super().__init__()
        self.conflicts = conflicts
        self.commits = 0

    def commit(self, tx):
        self.commits += 1
        if self.conflicts > 0:
            self.conflicts -= 1
            raise ConflictError("products/p1 fue modificado por otra operación")
        super().commit(tx)


def _coordinator(store, **kwargs):
    sleeps = []
    kwargs.setdefault('max_attempts', 3)
    coordinator = TransactionCoordinator(store, sleep=sleeps.append, rand=lambda: 1.0, **kwargs)
    return coordinator, sleeps


def _insert(doc_id):
    return lambda tx: tx.insert('sales', {'id': doc_id})


def test_run_commits_all_steps_and_returns_last_result():
    store = DocumentStore()
    coordinator, _ = _coordinator(store)

    result = coordinator.run(_insert('a'), _insert('b'), lambda tx: 'listo')

    assert result == 'listo'
    assert store.get('sales', 'a') is not None
    assert store.get('sales', 'b') is not None


def test_failing_step_aborts_everything():
    store = DocumentStore()
    coordinator, _ = _coordinator(store)

    def fail(tx):
        raise InsufficientStockError('p1', 'Remera', 3, 1)

    with pytest.raises(InsufficientStockError) as exc:
        coordinator.run(_insert('a'), fail)

    assert exc.value.product_id == 'p1'
    assert store.get('sales', 'a') is None


def test_conflicts_are_retried_with_backoff():
    store = ConflictingStore(conflicts=2)
    coordinator, sleeps = _coordinator(store, backoff_base=0.01, backoff_max=1.0)

    coordinator.run(_insert('a'))

    assert store.commits == 3
    assert store.get('sales', 'a') is not None
    # rand=1.0 → espera = tope: base * 2^(intento-1)
    assert sleeps == [pytest.approx(0.01), pytest.approx(0.02)]


def test_backoff_is_capped():
    coordinator, _ = _coordinator(DocumentStore(), backoff_base=0.1, backoff_max=0.25)
    assert coordinator.backoff_delay(1) == pytest.approx(0.1)
    assert coordinator.backoff_delay(2) == pytest.approx(0.2)
    assert coordinator.backoff_delay(5) == pytest.approx(0.25)


def test_conflict_gives_up_after_max_attempts():
    store = ConflictingStore(conflicts=10)
    coordinator, sleeps = _coordinator(store, max_attempts=3)

    with pytest.raises(ConflictError):
        coordinator.run(_insert('a'))

    assert store.commits == 3
    assert len(sleeps) == 2
    assert store.get('sales', 'a') is None


def test_validation_errors_are_not_retried():
    store = DocumentStore()
    coordinator, sleeps = _coordinator(store)
    calls = []

    def invalid(tx):
        calls.append(1)
        raise ValidationError("dato inválido")

    with pytest.raises(ValidationError):
        coordinator.run(invalid)

    assert len(calls) == 1
    assert sleeps == []


def test_unexpected_error_becomes_persistence_error():
    store = DocumentStore()
    coordinator, _ = _coordinator(store)

    def boom(tx):
        raise KeyError('x')

    with pytest.raises(PersistenceError) as exc:
        coordinator.run(_insert('a'), boom)

    assert isinstance(exc.value.__cause__, KeyError)
    assert store.get('sales', 'a') is None


def test_slow_attempt_times_out():
    store = DocumentStore()
    coordinator, _ = _coordinator(store, attempt_timeout=0.01)

    def slow(tx):
        time.sleep(0.05)
        tx.insert('sales', {'id': 'a'})

    with pytest.raises(TransactionTimeoutError):
        coordinator.run(slow)
    assert store.get('sales', 'a') is None


def test_run_requires_steps():
    coordinator, _ = _coordinator(DocumentStore())
    with pytest.raises(ValueError):
        coordinator.run()
