import os, logging
from pathlib import Path
from urllib.parse import urlparse

class ConfigError(Exception):
    pass

def getenv_typed(name, cast, default=None):
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return cast(raw)
    except Exception as e:
        raise ConfigError(f"Env var {name} invalid: {e}")

def _as_bool(raw):
    return raw.strip().lower() in ('1', 'true', 'yes', 'on')

def _as_list(raw):
    return tuple(item.strip() for item in raw.split(',') if item.strip())

class BaseConfig:
    SECRET_KEY = os.getenv('SECRET_KEY', '1234')
    DEBUG = False

    # Caminho da pasta 'instance' na raiz do projeto
    INSTANCE_PATH = Path(os.getenv('INSTANCE_PATH', Path(__file__).parent.parent.parent / 'instance'))

    # Configuração do banco principal
    _db_url = os.getenv('DATABASE_URL')
    if _db_url and _db_url.startswith('postgres://'):
        _db_url = 'postgresql://' + _db_url[len('postgres://'):]
    if not _db_url:
        _db_url = f"sqlite:///{INSTANCE_PATH / 'csp_manager.sqlite'}"
    SQLALCHEMY_DATABASE_URI = _db_url

    SQLALCHEMY_TRACK_MODIFICATIONS = False
    MIGRATIONS_DIRECTORY = os.getenv('MIGRATIONS_DIRECTORY', 'migrations')

    # LOG_FILE vazio desativa o log em arquivo
    LOG_FILE = getenv_typed('LOG_FILE', lambda x: Path(x) if x.strip() else None, Path('logs/app.log'))
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
    # 'text' ou 'json' (StructuredFormatter)
    LOG_FORMAT = os.getenv('LOG_FORMAT', 'text').lower()

    # -----------------------------
    # Sessão e Cookies (Segurança)
    # -----------------------------
    SESSION_COOKIE_NAME = os.getenv('SESSION_COOKIE_NAME', 'csp_session')
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = os.getenv('SESSION_COOKIE_SAMESITE', 'Lax')
    SESSION_COOKIE_SECURE = getenv_typed('SESSION_COOKIE_SECURE', _as_bool, False)

    # -----------------------------
    # Content Security Policy
    # -----------------------------
    # Liga/desliga a emissão de headers sem apagar as políticas salvas
    CSP_MANAGER_ENABLED = getenv_typed('CSP_MANAGER_ENABLED', _as_bool, True)
    # TTL (segundos) do cache de políticas; 0 desativa o cache
    CSP_POLICY_CACHE_TTL = getenv_typed('CSP_POLICY_CACHE_TTL', int, 300)
    # Requisições nestes caminhos/blueprints usam a política 'admin'
    CSP_ADMIN_PATH_PREFIXES = getenv_typed('CSP_ADMIN_PATH_PREFIXES', _as_list, ('/admin',))
    CSP_ADMIN_BLUEPRINTS = getenv_typed('CSP_ADMIN_BLUEPRINTS', _as_list, ('csp_policy',))
    # Report-To só é emitido quando a política do contexto não está desabilitada
    CSP_REPORT_TO_REQUIRES_POLICY = getenv_typed('CSP_REPORT_TO_REQUIRES_POLICY', _as_bool, True)
    # Política sem nenhuma diretiva habilitada: emitir header vazio (False) ou omitir (True)
    CSP_SKIP_EMPTY_POLICY = getenv_typed('CSP_SKIP_EMPTY_POLICY', _as_bool, False)
    # Gravar a política padrão nos contextos sem opção ao inicializar o banco
    CSP_SEED_DEFAULTS = getenv_typed('CSP_SEED_DEFAULTS', _as_bool, True)
    CSP_MANAGER_INIT_LOGIN = getenv_typed('CSP_MANAGER_INIT_LOGIN', _as_bool, True)

    @classmethod
    def init_app(cls, app):
        cls.INSTANCE_PATH.mkdir(parents=True, exist_ok=True)
        # logs: handlers ficam no logger do pacote para cobrir todos os módulos
        from csp_manager.utils.logging_config import configure_package_logger
        configure_package_logger(
            log_level=cls.LOG_LEVEL,
            log_format=cls.LOG_FORMAT,
            log_file=cls.LOG_FILE,
        )
        app.logger.setLevel(getattr(logging, cls.LOG_LEVEL, logging.INFO))

    @classmethod
    def validate(cls):
        if not cls.SECRET_KEY:
            raise ConfigError("SECRET_KEY must be set")
        scheme = urlparse(cls.SQLALCHEMY_DATABASE_URI).scheme
        if scheme and scheme not in ('sqlite','postgresql','mysql','oracle','mssql'):
            raise ConfigError(f"Unsupported DB scheme {scheme}")
        if cls.CSP_POLICY_CACHE_TTL < 0:
            raise ConfigError("CSP_POLICY_CACHE_TTL must be >= 0")
        if cls.LOG_FORMAT not in ('text', 'json'):
            raise ConfigError(f"Unsupported LOG_FORMAT {cls.LOG_FORMAT}")
