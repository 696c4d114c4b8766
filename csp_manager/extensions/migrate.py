import logging
from flask import Flask
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

logger = logging.getLogger(__name__)

migrate: Migrate = Migrate()

def init_migrate(app: Flask, db: SQLAlchemy) -> None:
    """Initializes Flask-Migrate.

    The migrations directory is configurable so `flask db` works both from
    the repository root and from an installed package.
    """
    directory = app.config.get('MIGRATIONS_DIRECTORY', 'migrations')
    try:
        migrate.init_app(app, db, directory=directory)
        logger.debug(f"Flask-Migrate initialized (directory='{directory}')")
    except Exception as e:
        logger.error("Flask-Migrate initialization failed", exc_info=True)
        raise RuntimeError(f"Migrate initialization failed: {e}") from e
