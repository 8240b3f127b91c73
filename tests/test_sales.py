# -*- coding: utf-8 -*-
"""
Tests de ventas de mostrador: descuento al registrar, reposición al eliminar.
"""
import pytest

from tienda.errors import InsufficientStockError, NotFoundError, ValidationError
from tienda.models import RestoreOutcome, SalePaymentMethod


def test_sale_decrements_and_delete_restores(container, add_product, stock_of):
    add_product('remera', 10, price=12000.0)
    recorder = container.sale_recorder

    sale = recorder.record_sale([{'product': 'remera', 'qty': 3}], seller='admin')

    assert stock_of('remera') == 7
    assert sale.total == 36000.0
    assert sale.items[0].unit_price == 12000.0
    assert sale.items[0].product_name == 'Remera'
    assert sale.payment_method == SalePaymentMethod.CASH
    assert sale.seller == 'admin'

    restored = recorder.delete_sale(sale.id, user='admin')

    assert stock_of('remera') == 10
    assert [r.outcome for r in restored] == [RestoreOutcome.RESTORED]
    with pytest.raises(NotFoundError):
        recorder.get_sale(sale.id)


def test_sale_with_insufficient_stock_changes_nothing(container, add_product, stock_of):
    add_product('remera', 10)
    add_product('gorra', 1)

    with pytest.raises(InsufficientStockError) as exc:
        container.sale_recorder.record_sale([
            {'product': 'remera', 'qty': 2},
            {'product': 'gorra', 'qty': 2},
        ])

    assert exc.value.product_id == 'gorra'
    assert stock_of('remera') == 10
    assert stock_of('gorra') == 1
    assert container.sale_recorder.list_sales() == []


def test_explicit_unit_price_is_honoured(container, add_product):
    add_product('remera', 5, price=12000.0)
    add_product('gorra', 5, price=5000.0)

    sale = container.sale_recorder.record_sale([
        {'product': 'remera', 'qty': 1, 'unitPrice': 10000},
        {'product': 'gorra', 'qty': 2, 'unitPrice': 0},
    ], payment_method='transfer')

    assert [i.unit_price for i in sale.items] == [10000, 0]
    assert sale.total == 10000.0
    assert sale.payment_method == SalePaymentMethod.TRANSFER


def test_hidden_products_can_be_sold(container, add_product, stock_of):
    add_product('oculto', 2, visible=False)
    container.sale_recorder.record_sale([{'product': 'oculto', 'qty': 2}])
    assert stock_of('oculto') == 0


def test_sale_validation(container, add_product):
    add_product('remera', 5)
    recorder = container.sale_recorder

    with pytest.raises(ValidationError):
        recorder.record_sale([])
    with pytest.raises(ValidationError):
        recorder.record_sale([{'product': 'remera', 'qty': 0}])
    with pytest.raises(ValidationError):
        recorder.record_sale([{'product': 'remera', 'qty': 1}], payment_method='bitcoin')
    with pytest.raises(ValidationError):
        recorder.record_sale([{'product': 'remera', 'qty': 1, 'unitPrice': -5}])
    with pytest.raises(NotFoundError):
        recorder.record_sale([{'product': 'nada', 'qty': 1}])


def test_delete_sale_skips_deleted_product(container, add_product, stock_of):
    add_product('remera', 5)
    add_product('gorra', 5)
    sale = container.sale_recorder.record_sale([
        {'product': 'remera', 'qty': 1},
        {'product': 'gorra', 'qty': 2},
    ])

    tx = container.store.begin()
    tx.delete('products', 'gorra')
    tx.commit()

    restored = container.sale_recorder.delete_sale(sale.id, user='admin')

    assert [r.outcome for r in restored] == [
        RestoreOutcome.RESTORED, RestoreOutcome.SKIPPED_MISSING
    ]
    assert stock_of('remera') == 5
    assert container.sale_repo.find(sale.id) is None

    skipped = container.audit_service.get_logs('STOCK')
    assert len(skipped) == 1
    assert skipped[0]['details']['product'] == 'gorra'


def test_delete_missing_sale(container):
    with pytest.raises(NotFoundError):
        container.sale_recorder.delete_sale('no-existe')


def test_sale_is_audited(container, add_product):
    add_product('remera', 5)
    sale = container.sale_recorder.record_sale([{'product': 'remera', 'qty': 1}], seller='caja1')

    history = container.audit_service.get_history(sale.id)
    assert len(history) == 1
    assert history[0]['type'] == 'VENTA'
    assert history[0]['user'] == 'caja1'


def test_stock_changes_keep_catalog_fields(container, stock_of):
    tx = container.store.begin()
    tx.insert('products', {
        'id': 'remera', 'name': 'Remera', 'price': 1000.0, 'stock': 5,
        'category': 'remeras', 'image': 'https://img/remera.png',
        'description': 'Algodón peinado',
    })
    tx.commit()

    sale = container.sale_recorder.record_sale([{'product': 'remera', 'qty': 1}])
    doc = container.store.get('products', 'remera')
    assert doc['stock'] == 4
    assert doc['category'] == 'remeras'
    assert doc['image'] == 'https://img/remera.png'
    assert doc['description'] == 'Algodón peinado'

    container.sale_recorder.delete_sale(sale.id)
    doc = container.store.get('products', 'remera')
    assert doc['stock'] == 5
    assert doc['category'] == 'remeras'
    assert doc['description'] == 'Algodón peinado'


def test_numeric_customer_fields_are_text(container, add_product):
    add_product('remera', 5)
    sale = container.sale_recorder.record_sale(
        [{'product': 'remera', 'qty': 1}],
        customer={'name': 'Ana', 'phone': 3415551234},
    )
    assert sale.customer.phone == '3415551234'
    assert container.sale_recorder.get_sale(sale.id).customer.phone == '3415551234'


def test_delete_restores_exactly_its_own_quantities(container, add_product, stock_of):
    add_product('remera', 20)
    add_product('gorra', 10)
    recorder = container.sale_recorder

    first = recorder.record_sale([
        {'product': 'remera', 'qty': 3},
        {'product': 'gorra', 'qty': 1},
    ])
    recorder.record_sale([{'product': 'remera', 'qty': 5}])
    recorder.record_sale([
        {'product': 'gorra', 'qty': 4},
        {'product': 'remera', 'qty': 2},
    ])
    assert stock_of('remera') == 10
    assert stock_of('gorra') == 5

    recorder.delete_sale(first.id)

    assert stock_of('remera') == 13
    assert stock_of('gorra') == 6
    assert len(recorder.list_sales()) == 2
