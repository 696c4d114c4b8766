import logging
from typing import Iterable

from flask import Flask, current_app, request
from flask_login import current_user

from csp_manager.csp import compile_headers
from csp_manager.models.policy import CONTEXT_ADMIN, CONTEXT_FRONTEND, CONTEXT_LOGGEDIN
from csp_manager.services.policy_store import EXTENSION_KEY, PolicyStore, get_policy_store

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_PATH_PREFIXES = ('/admin',)
DEFAULT_ADMIN_BLUEPRINTS = ('csp_policy',)


def _matches_prefix(path: str, prefixes: Iterable[str]) -> bool:
    for prefix in prefixes:
        prefix = (prefix or '').rstrip('/')
        if not prefix:
            continue
        if path == prefix or path.startswith(prefix + '/'):
            return True
    return False


def _is_authenticated() -> bool:
    # Flask-Login pode não estar registrado na aplicação hospedeira
    if not hasattr(current_app, 'login_manager'):
        return False
    return bool(getattr(current_user, 'is_authenticated', False))


def resolve_request_context() -> str:
    """
    Decide qual política se aplica à requisição corrente.

    Área administrativa (prefixo de caminho ou blueprint configurado) usa
    'admin'; fora dela, usuários autenticados usam 'loggedin' e visitantes
    anônimos usam 'frontend'.
    """
    path = request.path or ''
    prefixes = current_app.config.get('CSP_ADMIN_PATH_PREFIXES', DEFAULT_ADMIN_PATH_PREFIXES)
    blueprints = current_app.config.get('CSP_ADMIN_BLUEPRINTS', DEFAULT_ADMIN_BLUEPRINTS)

    if _matches_prefix(path, prefixes) or (request.blueprint and request.blueprint in blueprints):
        return CONTEXT_ADMIN
    if _is_authenticated():
        return CONTEXT_LOGGEDIN
    return CONTEXT_FRONTEND


class CSPHeaderMiddleware:
    """
    Middleware que escreve o header de CSP do contexto em cada resposta.
    """

    def __init__(self, app=None):
        self.app = app
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask):
        """Inicializa o middleware com a aplicação Flask."""
        app.config.setdefault('CSP_MANAGER_ENABLED', True)
        app.config.setdefault('CSP_POLICY_CACHE_TTL', 300)
        app.config.setdefault('CSP_ADMIN_PATH_PREFIXES', DEFAULT_ADMIN_PATH_PREFIXES)
        app.config.setdefault('CSP_ADMIN_BLUEPRINTS', DEFAULT_ADMIN_BLUEPRINTS)
        app.config.setdefault('CSP_REPORT_TO_REQUIRES_POLICY', True)
        app.config.setdefault('CSP_SKIP_EMPTY_POLICY', False)

        app.extensions[EXTENSION_KEY] = PolicyStore(cache_ttl=app.config['CSP_POLICY_CACHE_TTL'])
        app.after_request(self.after_request)
        logger.debug("CSP header middleware initialized.")

    def after_request(self, response):
        """Executado após cada requisição."""
        if not current_app.config.get('CSP_MANAGER_ENABLED', True):
            return response

        try:
            context = resolve_request_context()
            config = get_policy_store().get_policy_config(context)
            headers = compile_headers(
                config,
                report_to_requires_policy=current_app.config.get('CSP_REPORT_TO_REQUIRES_POLICY', True),
            )
            skip_empty = current_app.config.get('CSP_SKIP_EMPTY_POLICY', False)
            for name, value in headers:
                # Headers definidos pela própria view têm precedência
                if name in response.headers:
                    continue
                if skip_empty and not value:
                    continue
                response.headers[name] = value
            logger.debug(
                f"Applied {len(headers)} CSP header(s) on {request.path}",
                extra={'csp_context': context, 'policy_mode': config.mode.value},
            )
        except Exception as e:
            logger.error(f"Failed to apply CSP headers on {request.path}: {e}", exc_info=True)

        return response


csp_header_middleware = CSPHeaderMiddleware()
