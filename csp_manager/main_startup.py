#!/usr/bin/env python3
"""
Inicialização da aplicação CSP Manager.
Fábrica da aplicação Flask e preparação do banco de dados.
"""

import logging
import os
from typing import Optional, Type

from dotenv import load_dotenv
from flask import Flask

from csp_manager.extensions import init_extensions, db
from csp_manager.settings import BaseConfig, DevelopmentConfig, config_map

load_dotenv()

logger = logging.getLogger(__name__)


def _select_config(env_name: Optional[str], config_class) -> Type[BaseConfig]:
    if config_class is None:
        env = (env_name or os.getenv('FLASK_ENV', 'development') or 'development').strip().lower()
        return config_map.get(env, DevelopmentConfig)
    if isinstance(config_class, str):
        return config_map.get(config_class.strip().lower(), BaseConfig)
    return config_class


def create_app(env_name: Optional[str] = None, config_class=None) -> Flask:
    """
    Factory para criar a aplicação Flask.
    """
    try:
        app = Flask(__name__)

        # Configuração
        selected_config = _select_config(env_name, config_class)
        selected_config.validate()
        app.config.from_object(selected_config)
        selected_config.init_app(app)

        # Validar configurações críticas
        required_configs = ['SECRET_KEY', 'SQLALCHEMY_DATABASE_URI']
        for config_key in required_configs:
            if not app.config.get(config_key):
                raise ValueError(f"Configuração obrigatória '{config_key}' não encontrada")

        # Inicializar extensões
        init_extensions(app)

        # Registrar blueprints
        from csp_manager.controllers import BLUEPRINTS
        for blueprint in BLUEPRINTS:
            app.register_blueprint(blueprint)

        if not initialize_database(app):
            logger.warning("Database initialization incomplete; CSP policies will be treated as disabled.")

        logger.info(f"CSP Manager started with {selected_config.__name__}")
        return app
    except Exception as e:
        logger.error(f"Erro ao criar aplicação Flask: {e}")
        raise


def initialize_database(app: Flask) -> bool:
    """
    Cria as tabelas ausentes e, se configurado, grava as políticas padrão.
    """
    from sqlalchemy import inspect
    from sqlalchemy.exc import SQLAlchemyError
    from csp_manager.models import policy_option, user  # noqa: F401 (registra as tabelas)
    from csp_manager.services.policy_store import get_policy_store
    from csp_manager.utils.policy_errors import PolicyStoreError

    with app.app_context():
        try:
            disable_create_all = (os.getenv('DISABLE_CREATE_ALL', '').lower() in ('1', 'true', 'yes'))
            if not disable_create_all:
                db.create_all()
            tables = inspect(db.engine).get_table_names()
            logger.debug(f"Database tables available: {tables}")
        except SQLAlchemyError as e:
            logger.error(f"Erro durante create_all(): {e}")
            return False

        if app.config.get('CSP_SEED_DEFAULTS', True):
            try:
                get_policy_store().ensure_defaults()
            except PolicyStoreError as e:
                logger.error(f"Falha ao gravar políticas padrão: {e}")
                return False
    return True

