import logging
from flask import Flask, jsonify
from flask_login import LoginManager

logger = logging.getLogger(__name__)

login_manager: LoginManager = LoginManager()

def init_login(app: Flask) -> None:
    """
    Initializes the Flask-Login extension.

    Login screens belong to the host application; this only wires the user
    loader so `current_user` is available when choosing the CSP context.
    """
    try:
        login_manager.session_protection = 'strong'
        login_manager.init_app(app)

        # Configure user_loader callback
        @login_manager.user_loader
        def load_user(user_id):
            """Load user by ID for Flask-Login."""
            try:
                from csp_manager.extensions.db import db
                from csp_manager.models.user import User
                return db.session.get(User, int(user_id))
            except Exception as e:
                logger.error(f"Error loading user {user_id}: {e}")
                return None

        logger.debug("Flask-Login initialized successfully.")
    except Exception as e:
        logger.error("Flask-Login initialization failed.", exc_info=True)
        raise RuntimeError(f"LoginManager initialization failed: {e}") from e

    @login_manager.unauthorized_handler
    def _unauthorized():
        return jsonify({'error': 'Authentication required'}), 401
