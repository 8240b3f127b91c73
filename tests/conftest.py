# -*- coding: utf-8 -*-
"""
Fixtures comunes: contenedor sobre tmp_path, app Flask y cliente de prueba.
"""
import base64
from datetime import datetime

import pytest
from werkzeug.security import generate_password_hash

from tienda.app_container import AppContainer
from tienda.main import create_app
from tienda.models import Product

FIXED_NOW = datetime(2024, 3, 15, 10, 30)

ADMIN_USER = 'admin'
ADMIN_PASSWORD = 'secreto'

FAST_TX = {
    'TX_MAX_ATTEMPTS': 20,
    'TX_ATTEMPT_TIMEOUT': 5.0,
    'TX_BACKOFF_BASE': 0.001,
    'TX_BACKOFF_MAX': 0.005,
}


@pytest.fixture
def container(tmp_path):
    return AppContainer(
        data_dir=str(tmp_path),
        settings=FAST_TX,
        clock=lambda: FIXED_NOW,
    ).build()


@pytest.fixture
def add_product(container):
    """Da de alta un producto y lo devuelve."""
    def _add(pid, stock, price=1000.0, visible=True, name=None, sizes=None, stock_min=5):
        return container.product_repo.create_product(Product(
            id=pid,
            name=name or pid.replace('-', ' ').title(),
            price=price,
            stock=stock,
            stock_min=stock_min,
            visible=visible,
            sizes=list(sizes or []),
        ))
    return _add


@pytest.fixture
def stock_of(container):
    def _stock(pid):
        return container.product_repo.find(pid).stock
    return _stock


@pytest.fixture
def customer():
    return {'name': 'Ana Pérez', 'phone': '3415551234', 'deliveryType': 'pickup'}


@pytest.fixture
def app(container):
    container.user_repo.create_user(ADMIN_USER, generate_password_hash(ADMIN_PASSWORD), 'admin')
    # DATA_DIR=None: sin log a archivo en tests
    return create_app({'TESTING': True, 'DATA_DIR': None}, container=container)


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c


@pytest.fixture
def auth_headers():
    token = base64.b64encode(f'{ADMIN_USER}:{ADMIN_PASSWORD}'.encode()).decode()
    return {'Authorization': f'Basic {token}'}
