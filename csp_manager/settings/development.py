# settings/development.py

from .base import BaseConfig

class DevelopmentConfig(BaseConfig):
    """
    Configurações específicas para o ambiente de Desenvolvimento.

    - Ativa DEBUG.
    - Define nível de log para DEBUG.
    - Cache de políticas curto para ver alterações quase imediatamente.
    """

    # Ativa o modo debug do Flask
    DEBUG: bool = True

    # Disable SQL query logging for cleaner output
    SQLALCHEMY_ECHO: bool = False

    SQLALCHEMY_DATABASE_URI = f"sqlite:///{BaseConfig.INSTANCE_PATH / 'csp_manager_dev.sqlite'}"

    CSP_POLICY_CACHE_TTL = 5

    # Define nível de log para detalhamento máximo
    LOG_LEVEL: str = 'DEBUG'
