"""
Flask CLI commands for database setup.

Commands:
- flask init-db: Create all tables
- flask seed-demo: Load a small demo catalog with one bundle promotion
"""

from decimal import Decimal

import click
from sqlalchemy.exc import SQLAlchemyError

from partstock.database import create_schema, get_engine, get_session
from partstock.models import Category, Product, Promotion, PromotionRequirement


def seed_demo_data(session):
    """Insert demo categories, products and a promotion. Returns the products created."""
    brakes = Category(name='Brakes', color='#C0392B')
    lighting = Category(name='Lighting', color='#F1C40F')
    session.add_all([brakes, lighting])
    session.flush()

    products = [
        Product(name='Brake pad set', category_id=brakes.id, cost_price=Decimal('18.00'),
                list_price=Decimal('30.00'), wholesale_price=Decimal('24.00'), stock_qty=40, min_stock_qty=5),
        Product(name='Brake disc', category_id=brakes.id, cost_price=Decimal('35.00'),
                list_price=Decimal('60.00'), wholesale_price=Decimal('50.00'), stock_qty=20, min_stock_qty=4),
        Product(name='LED tail light', category_id=lighting.id, cost_price=Decimal('9.50'),
                list_price=Decimal('16.00'), wholesale_price=Decimal('13.00'), stock_qty=60, min_stock_qty=10),
    ]
    session.add_all(products)
    session.flush()

    promo = Promotion(name='Brake kit', discount_percentage=Decimal('15.00'), active=True)
    promo.requirements = [
        PromotionRequirement(product_id=products[0].id, required_qty=1),
        PromotionRequirement(product_id=products[1].id, required_qty=2),
    ]
    session.add(promo)
    session.commit()
    return products


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('init-db')
    def init_db_command():
        """Create database tables."""
        create_schema(get_engine())
        click.echo(click.style('Database schema created.', fg='green'))

    @app.cli.command('seed-demo')
    def seed_demo_command():
        """Load demo catalog data."""
        db_session = get_session()
        create_schema(get_engine())
        try:
            products = seed_demo_data(db_session)
        except SQLAlchemyError as e:
            db_session.rollback()
            click.echo(click.style(f'Error loading demo data: {e}', fg='red'))
            raise click.Abort()

        click.echo(click.style(f'Loaded {len(products)} demo products.', fg='green', bold=True))
        for product in products:
            click.echo(f'   #{product.id} {product.name} (stock {product.stock_qty})')
