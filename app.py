import os
import logging

from flask import Flask

from config import Config
from database import db
from routes import register_blueprints
from utils.auth import load_user

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

logger = logging.getLogger(__name__)


def configure_logging(level):
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)


def create_app(config_object=Config):
    """Build the Flask app and create tables for the configured database"""
    app = Flask(__name__)
    app.config.from_object(config_object)
    configure_logging(app.config.get('LOG_LEVEL', 'INFO'))

    db.init_app(app)
    app.before_request(load_user)
    register_blueprints(app)

    with app.app_context():
        import models  # noqa: F401
        db.create_all()

    logger.info("Listly app created")
    return app


if __name__ == "__main__":
    create_app().run(
        host="0.0.0.0",
        port=int(os.environ.get("PORT", "5000")),
        debug=os.environ.get("FLASK_DEBUG") == "1",
    )
