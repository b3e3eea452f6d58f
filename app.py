import logging
import os

from flask import Flask, jsonify

from config import ProductionConfig, DevelopmentConfig, TestingConfig
from error_handler import register_error_handlers

# Import extensions to avoid circular imports
from extensions import db, migrate


def create_app(config_class=None):
    """
    Factory function to create the Flask application.
    Automatically selects configuration based on environment.
    """
    if config_class is None:
        # Auto-detect environment and select appropriate config
        env = os.environ.get('FLASK_ENV', 'production').lower()
        if env == 'development':
            config_class = DevelopmentConfig
        elif env == 'testing':
            config_class = TestingConfig
        else:
            config_class = ProductionConfig

    app = Flask(__name__)
    app.config.from_object(config_class)
    # Averages are keyed by ids and 'overall'; mixed key types cannot be sorted
    app.json.sort_keys = False
    app.logger.setLevel(getattr(logging, app.config.get('LOG_LEVEL', 'INFO'), logging.INFO))

    if app.config['SQLALCHEMY_DATABASE_URI'].startswith('sqlite:///') and ':memory:' not in app.config['SQLALCHEMY_DATABASE_URI']:
        os.makedirs(os.path.dirname(app.config['SQLALCHEMY_DATABASE_URI'][len('sqlite:///'):]), exist_ok=True)

    # Initialize extensions with the app
    db.init_app(app)
    migrate.init_app(app, db)

    # Models must be imported before create_all() so their tables are known
    import models  # noqa: F401

    with app.app_context():
        try:
            db.create_all()
        except Exception as e:
            app.logger.critical(f"Database initialization failed: {e}")
            raise

    from journal_routes import api_blueprint
    app.register_blueprint(api_blueprint, url_prefix='/api')
    register_error_handlers(app)

    @app.route('/health')
    def health():
        return jsonify({'status': 'ok'})

    app.logger.info(f"Journal app created with {config_class.__name__}")
    return app
