# settings/production.py

import os
from .base import BaseConfig, ConfigError

class ProductionConfig(BaseConfig):
    """
    Configurações específicas para o ambiente de Produção.
    DEBUG é desativado.
    Requer que SECRET_KEY e DATABASE_URL sejam explicitamente definidos no ambiente.
    """
    DEBUG = False

    SESSION_COOKIE_SECURE = os.getenv('SESSION_COOKIE_SECURE', 'true').lower() == 'true'

    # Logs estruturados por padrão (agregadores de log)
    LOG_FORMAT = os.getenv('LOG_FORMAT', 'json').lower()

    # Tuning de pool de conexões para cargas reais em PostgreSQL
    # Configurável via variáveis de ambiente
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_size': int(os.getenv('DB_POOL_SIZE', '10')),
        'max_overflow': int(os.getenv('DB_MAX_OVERFLOW', '20')),
        'pool_timeout': int(os.getenv('DB_POOL_TIMEOUT', '30')),
        'pool_recycle': int(os.getenv('DB_POOL_RECYCLE', '3600')),
        'pool_pre_ping': True,
    }

    @classmethod
    def validate(cls) -> None:
        # Chama a validação da classe base primeiro
        super().validate()
        # Adiciona validação específica para produção
        if not os.getenv('SECRET_KEY'):
            raise ConfigError("SECRET_KEY must be set in production environment variables")
        if not os.getenv('DATABASE_URL'):
            raise ConfigError("DATABASE_URL must be set in production environment variables")
        if cls.SQLALCHEMY_DATABASE_URI.endswith(':memory:'):
            raise ConfigError("In-memory databases lose CSP policies on restart")
        if not cls.CSP_ADMIN_PATH_PREFIXES and not cls.CSP_ADMIN_BLUEPRINTS:
            raise ConfigError("CSP_ADMIN_PATH_PREFIXES or CSP_ADMIN_BLUEPRINTS must be set")
