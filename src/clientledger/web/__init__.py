"""Flask application factory."""

import logging
from typing import Optional

from flask import Flask

from clientledger.config import Settings, load_settings
from clientledger.database import Database, create_database
from clientledger.logging_config import setup_logging
from clientledger.services import ClassifierNotifier, StorageGateway, SupabaseStorage
from clientledger.web.context import EXTENSION_KEY, AppServices
from clientledger.web.errors import register_error_handlers
from clientledger.web.routes import api

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    db: Optional[Database] = None,
    storage: Optional[StorageGateway] = None,
    notifier=None,
) -> Flask:
    """Create the API application.

    Collaborators not passed in are built from ``settings``.

    Args:
        settings: Configuration; loaded from the environment if None
        db: Database instance
        storage: Object-storage gateway
        notifier: Classification trigger

    Returns:
        Configured Flask app
    """
    if settings is None:
        settings = load_settings()
    setup_logging(settings.log_level, settings.log_json)

    if db is None:
        db = create_database(settings.database_url, settings.database_path)
        db.connect()
        db.initialize_schema()
    if storage is None:
        storage = SupabaseStorage(
            settings.storage_url, settings.storage_service_key, bucket=settings.storage_bucket
        )
    if notifier is None:
        notifier = ClassifierNotifier(settings.classifier_url)

    app = Flask(__name__)
    app.json.sort_keys = False
    app.extensions[EXTENSION_KEY] = AppServices(
        settings=settings, db=db, storage=storage, notifier=notifier
    )
    app.register_blueprint(api)
    register_error_handlers(app)

    @app.teardown_appcontext
    def release_session(exc):
        db.disconnect()

    logger.debug("API application created")
    return app
