import logging
from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event

logger = logging.getLogger(__name__)

db: SQLAlchemy = SQLAlchemy()

def init_db(app: Flask) -> None:
    """Initializes SQLAlchemy."""
    try:
        db.init_app(app)
        logger.debug("SQLAlchemy initialized")

        # Apply SQLite PRAGMAs on every new connection
        with app.app_context():
            core_engine = db.engine
            if 'sqlite' in core_engine.name:
                logger.debug("Configuring SQLite PRAGMAs for core engine...")

                @event.listens_for(core_engine, "connect")
                def set_sqlite_pragmas_core(dbapi_connection, connection_record):
                    try:
                        cursor = dbapi_connection.cursor()
                        cursor.execute("PRAGMA busy_timeout=5000")
                        cursor.execute("PRAGMA foreign_keys=ON")
                        cursor.close()
                    except Exception:
                        logger.warning("Failed to apply SQLite PRAGMAs on core connect.")
    except Exception as e:
        logger.error("SQLAlchemy initialization failed", exc_info=True)
        raise RuntimeError(f"Database initialization failed: {e}") from e
