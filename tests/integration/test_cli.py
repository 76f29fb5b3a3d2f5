"""
Integration tests for the Flask CLI commands.
"""

from partstock.database import get_session
from partstock.models import Product, Promotion


def test_init_db(app):
    result = app.test_cli_runner().invoke(args=['init-db'])

    assert result.exit_code == 0
    assert 'schema created' in result.output


def test_seed_demo(app):
    result = app.test_cli_runner().invoke(args=['seed-demo'])

    assert result.exit_code == 0
    assert 'Loaded 3 demo products.' in result.output

    with app.app_context():
        session = get_session()
        assert session.query(Product).count() == 3
        promotion = session.query(Promotion).one()
        assert promotion.name == 'Brake kit'
        assert len(promotion.requirements) == 2
