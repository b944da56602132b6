"""
Pytest fixtures for channelstock backend tests.

Provides test database setup, product factory, and test client.
"""

import pytest
from channelstock import create_app
from channelstock.extensions import db
from channelstock.services import inventory_service
from channelstock.services.cart_service import init_cart_registry


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'LOW_STOCK_THRESHOLD': 10,
        'DEFAULT_PAGE_SIZE': 10,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database (and cart registry) for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()
        init_cart_registry(app)

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def make_product(db_session):
    """Factory creating products through the ledger (so creation is logged)."""
    counter = {"n": 0}

    def _make(*, total_stock=100, price=150000, color="denim", product_code=None, **channel_stock):
        counter["n"] += 1
        product = inventory_service.create_product(
            price=price,
            total_stock=total_stock,
            color=color,
            product_code=product_code or f"TEST{counter['n']:03d}",
        )
        if channel_stock:
            product = inventory_service.add_stock(product.id, sum(channel_stock.values()))
            product = inventory_service.distribute_stock(product.id, channel_stock)
        return product

    return _make
