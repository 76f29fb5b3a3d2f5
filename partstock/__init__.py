"""Flask application factory."""
import logging

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from partstock.database import init_db


def create_app(config_object='config.Config'):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_object)

    logging.basicConfig(
        level=app.config.get('LOG_LEVEL', 'INFO'),
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s'
    )
    app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    # Initialize database
    init_db(app)

    # Error Handlers
    from partstock.exceptions import PartStockError, PersistenceError

    @app.errorhandler(PartStockError)
    def handle_partstock_error(error):
        """Handle custom application exceptions."""
        if isinstance(error, PersistenceError):
            app.logger.error(f"PersistenceError: {error.message} (cause: {error.cause!r})")
        else:
            app.logger.warning(f"{type(error).__name__} [{error.status_code}]: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({'status': 'error', 'message': error.description}), error.code

    @app.errorhandler(Exception)
    def internal_error(error):
        app.logger.exception(f"Unhandled Exception on {request.path}: {error}")
        return jsonify({'status': 'error', 'message': 'Internal Server Error'}), 500

    # CLI commands
    from partstock.cli_commands import init_cli_commands
    init_cli_commands(app)

    # Register blueprints
    from partstock.blueprints.sales import sales_bp
    app.register_blueprint(sales_bp)

    return app
