import logging
from flask import Flask
from flask_wtf.csrf import CSRFProtect

logger = logging.getLogger(__name__)

csrf: CSRFProtect = CSRFProtect()

def init_csrf(app: Flask) -> None:
    """Initializes Flask-WTF CSRF protection.

    The policy API is session authenticated, so its writes stay protected;
    clients send the token in the X-CSRFToken header.
    """
    try:
        csrf.init_app(app)
        logger.debug("Flask-WTF CSRF protection initialized successfully.")
    except Exception as e:
        logger.error("Flask-WTF CSRF initialization failed.", exc_info=True)
        raise RuntimeError(f"CSRF initialization failed: {e}") from e
