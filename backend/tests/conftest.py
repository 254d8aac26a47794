"""
Pytest fixtures for the SLADY backend tests.

Provides the application on an in-memory database, a per-test clean
database, a test client and a small catalog to sell from.
"""

import httpx
import pytest

from slady import create_app
from slady.client import SladyClient
from slady.extensions import db
from slady.services import catalog_service, stock_service


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'ORDER_EXPORT_MAX_ROWS': 50,
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
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def api(app, db_session):
    """SladyClient driving the real app in-process."""
    with SladyClient("http://testserver", transport=httpx.WSGITransport(app=app)) as c:
        yield c


@pytest.fixture(scope='function')
def design(db_session):
    """A design offered in two colors and three sizes."""
    return catalog_service.create_design({
        "code": "D1001",
        "type_tags": ["DR"],
        "purchase_price": "20.00",
        "sale_price": "100.00",
        "fabric_list": [{"fabric": "Cotton", "percent": 80}, {"fabric": "Linen", "percent": 20}],
        "colors": ["Black", "White"],
        "sizes": ["S", "M", "L"],
    })


@pytest.fixture(scope='function')
def item(design):
    """SLADY / Black / M with 3 in stock."""
    items = stock_service.create_items(design.id, ["SLADY"], ["Black"], ["M"], 3)
    return items[0]


@pytest.fixture(scope='function')
def sibling(design, item):
    """SLADY / White / M, the color sibling of `item`, with 5 in stock."""
    return stock_service.create_items(design.id, ["SLADY"], ["White"], ["M"], 5)[0]


def receipt_payload(**overrides):
    """The reference cart: 2 x 100.00 less 10% and 5.00, plus a 30.00 alteration."""
    payload = {
        "store": 1,
        "cashier": "Mei",
        "items": [
            {"code": "D1001", "qty": 2, "unit_price": "100", "discount_percent": "10", "discount_amount": "5"},
            {"code": "Alteration", "qty": 1, "unit_price": "30"},
        ],
        "payments": [
            {"method": "Cash", "amount": "105.00"},
            {"method": "VISA", "amount": "100.00"},
        ],
    }
    payload.update(overrides)
    return payload
