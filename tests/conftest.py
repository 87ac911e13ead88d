import pytest
from decimal import Decimal

from stockpos import create_app
from stockpos.database import get_session, create_all, drop_all
from stockpos.models import Product, Combo, ComboLine


@pytest.fixture(scope='session')
def app():
    """Create application instance for testing (in-memory SQLite, cache disabled)."""
    app = create_app('config.TestConfig')
    return app


@pytest.fixture(scope='function')
def client(app, session):
    """Create test client (tables already created by the session fixture)."""
    return app.test_client()


@pytest.fixture(scope='function')
def session(app):
    """Database session with fresh tables for every test."""
    create_all()
    session = get_session()
    yield session
    session.rollback()
    session.remove()
    drop_all()


def _make_product(session, name, qty, price, active=True, package_type='Tray'):
    product = Product(
        name=name,
        quantity_on_hand=Decimal(qty),
        unit_price=Decimal(price),
        package_type=package_type,
        active=active
    )
    session.add(product)
    session.commit()
    return product


@pytest.fixture(scope='function')
def product_a(session):
    """Product A: 10 lb on hand at 5.00 per pound."""
    return _make_product(session, 'Product A', '10', '5.00')


@pytest.fixture(scope='function')
def product_b(session):
    """Product B: 20 lb on hand at 3.00 per pound."""
    return _make_product(session, 'Product B', '20', '3.00')


@pytest.fixture(scope='function')
def inactive_product(session):
    """Inactive product with plenty of stock."""
    return _make_product(session, 'Retired Cut', '100', '2.00', active=False)


@pytest.fixture(scope='function')
def make_product(session):
    """Factory for ad-hoc products."""
    def factory(name, qty, price, active=True):
        return _make_product(session, name, qty, price, active=active)
    return factory


@pytest.fixture(scope='function')
def make_combo(session):
    """Factory: make_combo('Name', '15.00', [(product, '2'), ...])."""
    def factory(name, price, recipe, active=True):
        combo = Combo(
            name=name,
            description=f'{name} bundle',
            price=Decimal(price),
            active=active
        )
        combo.lines = [
            ComboLine(product_id=product.id, quantity=Decimal(qty))
            for product, qty in recipe
        ]
        session.add(combo)
        session.commit()
        return combo
    return factory


@pytest.fixture(scope='function')
def combo_c(make_combo, product_a, product_b):
    """Combo C = {2 lb of A, 1 lb of B} at 15.00."""
    return make_combo('Combo C', '15.00', [(product_a, '2'), (product_b, '1')])
