# settings/testing.py

from .base import BaseConfig

class TestingConfig(BaseConfig):
    """
    Configurações específicas para o ambiente de Teste.
    Ativa TESTING.
    Desativa CSRF.
    Define nível de log para ERROR para reduzir ruído em testes.
    Usa SQLite em memória e não grava log em arquivo.
    """
    DEBUG = False
    TESTING = True
    SECRET_KEY = 'test-secret-key'
    WTF_CSRF_ENABLED = False # Comum desativar CSRF em testes de API
    LOG_LEVEL = 'ERROR' # Reduz o output de log durante a execução dos testes
    LOG_FILE = None

    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"

    # Sem cache: cada teste enxerga imediatamente o que gravou
    CSP_POLICY_CACHE_TTL = 0
    CSP_SEED_DEFAULTS = False
