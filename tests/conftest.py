import pytest
from decimal import Decimal

from partstock import create_app
from partstock.database import make_engine, make_session_factory, create_schema, get_session
from partstock.models import (
    Category, Product, Promotion, PromotionRequirement, PromotionPaymentMethod
)


@pytest.fixture(scope='function')
def engine():
    """Fresh in-memory database per test."""
    engine = make_engine('sqlite://')
    create_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope='function')
def session(engine):
    """Create database session for testing."""
    session = make_session_factory(engine)()
    yield session
    session.rollback()
    session.close()


@pytest.fixture(scope='function')
def app():
    """Create application instance for testing."""
    app = create_app('config.TestingConfig')
    return app


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def app_session(app):
    """Session bound to the app's database, inside an app context."""
    with app.app_context():
        yield get_session()


def _add_category(session, name='Brakes'):
    category = Category(name=name)
    session.add(category)
    session.commit()
    return category


def _add_product(session, category_id, name='Brake pad set', list_price='100.00',
                 wholesale_price='80.00', stock=10, min_stock=0, cost='60.00', deleted=False):
    product = Product(
        name=name,
        category_id=category_id,
        cost_price=Decimal(cost),
        list_price=Decimal(list_price),
        wholesale_price=Decimal(wholesale_price),
        stock_qty=stock,
        min_stock_qty=min_stock,
        deleted=deleted
    )
    session.add(product)
    session.commit()
    return product


def _add_promotion(session, name, percentage, requirements, payment_methods=(), **kwargs):
    promotion = Promotion(name=name, discount_percentage=Decimal(str(percentage)), **kwargs)
    promotion.requirements = [
        PromotionRequirement(product_id=pid, required_qty=qty) for pid, qty in requirements.items()
    ]
    promotion.payment_methods = [
        PromotionPaymentMethod(payment_method=method) for method in payment_methods
    ]
    session.add(promotion)
    session.commit()
    return promotion


@pytest.fixture(scope='function')
def category(session):
    """Create test category."""
    return _add_category(session)


@pytest.fixture(scope='function')
def make_product(session, category):
    """Factory for products in the test category."""
    def _make(**kwargs):
        return _add_product(session, category.id, **kwargs)
    return _make


@pytest.fixture(scope='function')
def make_promotion(session):
    """Factory for promotions; requirements map product_id -> required qty."""
    def _make(name, percentage, requirements, **kwargs):
        return _add_promotion(session, name, percentage, requirements, **kwargs)
    return _make


@pytest.fixture(scope='function')
def shop(app_session):
    """
    Seed the app database and return plain ids.

    Pads: 30.00 list / 24.00 wholesale, stock 10
    Disc: 60.00 list / 50.00 wholesale, stock 4, minimum 3
    Promotion "Brake kit": 1 pad + 2 discs at 10%
    """
    category = _add_category(app_session)
    pads = _add_product(app_session, category.id, name='Brake pad set', list_price='30.00',
                        wholesale_price='24.00', stock=10)
    disc = _add_product(app_session, category.id, name='Brake disc', list_price='60.00',
                        wholesale_price='50.00', stock=4, min_stock=3)
    promotion = _add_promotion(app_session, 'Brake kit', 10, {pads.id: 1, disc.id: 2})
    return {'pads': pads.id, 'disc': disc.id, 'promotion': promotion.id}
