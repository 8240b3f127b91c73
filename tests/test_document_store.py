# -*- coding: utf-8 -*-
"""
Tests del DocumentStore: commits atómicos, conflictos y persistencia.
"""
import json
import os
import time

import pytest

from tienda.errors import ConflictError, PersistenceError, TransactionTimeoutError
from tienda.repositories.document_store import DocumentStore


class FailingStore(DocumentStore):
    """Store cuyo disco falla a pedido."""

    fail_writes = False

    def _write_raw(self, data):
        if self.fail_writes:
            raise OSError("disco lleno")
        super()._write_raw(data)


def _seed(store, doc_id='p1', stock=5):
    tx = store.begin()
    tx.insert('products', {'id': doc_id, 'name': 'Remera', 'stock': stock})
    tx.commit()


def test_commit_persists_and_versions(tmp_path):
    path = os.path.join(str(tmp_path), 'store.json')
    store = DocumentStore(path)
    _seed(store)

    assert store.get('products', 'p1')['_version'] == 1

    tx = store.begin()
    doc = tx.get('products', 'p1')
    doc['stock'] = 3
    tx.put('products', doc)
    tx.commit()

    assert store.get('products', 'p1')['stock'] == 3
    assert store.get('products', 'p1')['_version'] == 2

    with open(path, encoding='utf-8') as f:
        on_disk = json.load(f)
    assert on_disk['products']['p1']['stock'] == 3

    # Otro proceso que abre el archivo ve lo confirmado
    assert DocumentStore(path).get('products', 'p1')['stock'] == 3


def test_staged_writes_are_invisible_until_commit():
    store = DocumentStore()
    _seed(store)

    tx = store.begin()
    doc = tx.get('products', 'p1')
    doc['stock'] = 0
    tx.put('products', doc)

    assert tx.get('products', 'p1')['stock'] == 0
    assert store.get('products', 'p1')['stock'] == 5

    tx.abort()
    assert store.get('products', 'p1')['stock'] == 5


def test_conflicting_commit_is_rejected():
    store = DocumentStore()
    _seed(store)

    tx1 = store.begin()
    tx2 = store.begin()
    doc1 = tx1.get('products', 'p1')
    doc2 = tx2.get('products', 'p1')

    doc2['stock'] = 4
    tx2.put('products', doc2)
    tx2.commit()

    doc1['stock'] = 1
    tx1.put('products', doc1)
    with pytest.raises(ConflictError):
        tx1.commit()

    assert store.get('products', 'p1')['stock'] == 4


def test_conflict_applies_nothing_from_the_losing_transaction():
    store = DocumentStore()
    _seed(store, 'p1')
    _seed(store, 'p2')

    loser = store.begin()
    a = loser.get('products', 'p1')
    b = loser.get('products', 'p2')

    winner = store.begin()
    doc = winner.get('products', 'p2')
    doc['stock'] = 2
    winner.put('products', doc)
    winner.commit()

    a['stock'] = 0
    b['stock'] = 0
    loser.put('products', a)
    loser.put('products', b)
    with pytest.raises(ConflictError):
        loser.commit()

    assert store.get('products', 'p1')['stock'] == 5
    assert store.get('products', 'p2')['stock'] == 2


def test_two_inserts_of_same_id_conflict():
    store = DocumentStore()
    tx1 = store.begin()
    tx2 = store.begin()
    tx1.insert('sales', {'id': 's1'})
    tx2.insert('sales', {'id': 's1'})
    tx1.commit()
    with pytest.raises(ConflictError):
        tx2.commit()


def test_write_failure_leaves_state_unchanged(tmp_path):
    store = FailingStore(os.path.join(str(tmp_path), 'store.json'))
    _seed(store)
    store.fail_writes = True

    tx = store.begin()
    doc = tx.get('products', 'p1')
    doc['stock'] = 0
    tx.put('products', doc)
    tx.insert('sales', {'id': 's1'})

    with pytest.raises(PersistenceError):
        tx.commit()

    assert store.get('products', 'p1')['stock'] == 5
    assert store.get('sales', 's1') is None


def test_expired_deadline_times_out():
    store = DocumentStore()
    _seed(store)
    tx = store.begin(deadline=time.monotonic() - 1)
    with pytest.raises(TransactionTimeoutError):
        tx.get('products', 'p1')


def test_increment_counter_is_sequential():
    store = DocumentStore()
    assert store.increment_counter('orders:20240315') == 1
    assert store.increment_counter('orders:20240315') == 2
    assert store.increment_counter('orders:20240316') == 1


def test_delete_removes_document():
    store = DocumentStore()
    _seed(store)
    tx = store.begin()
    tx.delete('products', 'p1')
    tx.commit()
    assert store.get('products', 'p1') is None
    assert store.all('products') == []
