"""
Flask CLI commands for local database management.

Commands:
- flask init-db: Create all tables
- flask seed-demo: Insert a small demo catalog
"""

from decimal import Decimal

import click
from sqlalchemy.exc import SQLAlchemyError

from stockpos.database import create_all, get_session
from stockpos.models import Product, Combo, ComboLine


DEMO_PRODUCTS = [
    # name, pounds on hand, price per pound, package type
    ('Ground Beef', Decimal('50'), Decimal('5.00'), 'Tray'),
    ('Chicken Breast', Decimal('40'), Decimal('3.50'), 'Bag'),
    ('Pork Chops', Decimal('30'), Decimal('4.25'), 'Tray'),
]


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('init-db')
    def init_db_command():
        """Create all database tables."""
        create_all()
        click.echo(click.style('Database tables created.', fg='green'))

    @app.cli.command('seed-demo')
    def seed_demo():
        """Insert demo products and a combo (skipped if products exist)."""
        session = get_session()

        if session.query(Product).first():
            click.echo(click.style('Catalog already has products; nothing to do.', fg='yellow'))
            return

        try:
            products = [
                Product(name=name, quantity_on_hand=qty, unit_price=price, package_type=package, active=True)
                for name, qty, price, package in DEMO_PRODUCTS
            ]
            session.add_all(products)
            session.flush()

            combo = Combo(
                name='Grill Pack',
                description='2 lb ground beef + 1 lb chicken breast',
                price=Decimal('12.00'),
                active=True,
            )
            combo.lines = [
                ComboLine(product_id=products[0].id, quantity=Decimal('2')),
                ComboLine(product_id=products[1].id, quantity=Decimal('1')),
            ]
            session.add(combo)
            session.commit()

            click.echo(click.style(f'Seeded {len(products)} products and 1 combo.', fg='green'))

        except SQLAlchemyError as e:
            session.rollback()
            click.echo(click.style(f'Error seeding demo data: {str(e)}', fg='red'))
            raise click.Abort()
