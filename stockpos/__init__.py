"""Flask application factory."""
import logging
import os
import traceback

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from stockpos.database import init_db


def create_app(config_object='config.Config'):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_object)

    logging.basicConfig(
        level=app.config.get('LOG_LEVEL', 'INFO'),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    # Initialize Sentry for error tracking in production
    if app.config.get('SENTRY_DSN') and app.config.get('ENV') == 'production':
        import sentry_sdk
        from sentry_sdk.integrations.flask import FlaskIntegration

        sentry_sdk.init(
            dsn=app.config['SENTRY_DSN'],
            integrations=[FlaskIntegration()],
            traces_sample_rate=0.1,  # 10% of transactions for performance monitoring
            environment=app.config.get('ENV', 'production'),
            release=os.getenv('GIT_COMMIT', 'unknown')
        )

    # Initialize Redis Cache
    from stockpos.services.cache_service import init_cache
    init_cache(app)

    # Setup Prometheus metrics instrumentation
    from stockpos.blueprints.metrics import setup_metrics_instrumentation
    setup_metrics_instrumentation(app)

    # Production: Enable ProxyFix behind a reverse proxy
    if app.config.get('ENV') == 'production':
        from werkzeug.middleware.proxy_fix import ProxyFix
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1, x_prefix=0)

    # Initialize database
    init_db(app)

    # Error Handlers
    from stockpos.exceptions import PosError

    @app.errorhandler(PosError)
    def handle_pos_error(error):
        """Handle custom application exceptions."""
        if error.status_code >= 500:
            app.logger.error(f"PosError [{error.status_code}]: {error.message}")
        else:
            app.logger.warning(f"PosError [{error.status_code}]: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        """Routing and method errors as JSON."""
        return jsonify({'status': 'error', 'message': error.description}), error.code

    @app.errorhandler(Exception)
    def internal_error(error):
        app.logger.error(f"Unhandled Exception: {error}")
        app.logger.error(f"Traceback: {traceback.format_exc()}")
        return jsonify({'status': 'error', 'message': 'Internal Server Error'}), 500

    # Register blueprints
    from stockpos.blueprints.main import main_bp
    from stockpos.blueprints.catalog import catalog_bp
    from stockpos.blueprints.sales import sales_bp
    from stockpos.blueprints.metrics import metrics_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(catalog_bp)
    app.register_blueprint(sales_bp)
    app.register_blueprint(metrics_bp)

    # Register CLI commands
    from stockpos.cli_commands import init_cli_commands
    init_cli_commands(app)

    app.logger.info(f"stockpos started (env={app.config.get('ENV')}, cache={app.config.get('CACHE_ENABLED')})")

    return app
