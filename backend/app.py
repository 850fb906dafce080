"""Flask application factory for the meter application backend."""
from flask import Flask
import logging
from pathlib import Path
from .config import ServerSettings
from .models import db
from .blueprints import applications, reports
from .cli import init_db_command, check_images_command
from .logging_config import setup_logging
from .services.image_store import ImageStore

logger = logging.getLogger(__name__)


def create_app(test_config=None, settings=None):
    """Flask application factory for the meter application backend.

    Creates and configures a Flask application instance with:
    - Settings from ``METER_*`` environment variables
    - SQLAlchemy database integration
    - The uploads image store
    - Blueprint registration for API endpoints
    - CLI command registration
    - Logging configuration

    Args:
        test_config (dict, optional): Configuration overrides for testing
        settings (ServerSettings, optional): Settings to use instead of the environment

    Returns:
        Flask: Configured Flask application instance
    """
    settings = settings or ServerSettings()
    config = settings.to_flask_config()
    if test_config:
        config.update(test_config)

    setup_logging(config.get('LOG_LEVEL'), config.get('LOG_DIR'))
    logger.info("Starting Flask application initialization")

    app = Flask(__name__, instance_relative_config=True)
    app.config.from_mapping(config)

    if test_config is None:
        # Load the instance config, if it exists, when not testing
        config_loaded = app.config.from_pyfile('config.py', silent=True)
        if config_loaded:
            logger.info("Loaded configuration from instance/config.py")
        else:
            logger.debug("No instance config file found, using defaults")
    else:
        logger.info("Loaded test configuration")

    # Ensure the instance folder exists
    Path(app.instance_path).mkdir(parents=True, exist_ok=True)

    logger.info(f"Using database URI: {app.config['SQLALCHEMY_DATABASE_URI']}")
    db.init_app(app)
    logger.info("SQLAlchemy database initialized")

    app.extensions['image_store'] = ImageStore(app.config['UPLOADS_DIR'])
    logger.info(f"Image store using uploads directory: {app.config['UPLOADS_DIR']}")

    logger.info("Registering API blueprints")
    app.register_blueprint(applications.bp)
    logger.debug("Registered applications blueprint")
    app.register_blueprint(reports.bp)
    logger.debug("Registered reports blueprint")

    app.cli.add_command(init_db_command)
    app.cli.add_command(check_images_command)
    logger.info("CLI commands registered: init-db, check-images")

    logger.info("Flask application initialization completed successfully")
    return app


if __name__ == '__main__':
    app = create_app()
    app.run(debug=True)
