# tests/conftest.py

import pytest
import sys
import os

from flask import Blueprint, make_response
from flask_login import login_user, logout_user

# Adicionar o diretório raiz ao path (raiz do projeto)
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from csp_manager import create_app
from csp_manager.extensions import db
from csp_manager.models.user import User

# Rotas mínimas que fazem o papel da aplicação hospedeira
site_bp = Blueprint('site', __name__)


@site_bp.route('/')
def index():
    return 'home'


@site_bp.route('/admin/dashboard')
def admin_dashboard():
    return 'dashboard'


@site_bp.route('/administrators')
def administrators():
    return 'not the admin area'


@site_bp.route('/custom-csp')
def custom_csp():
    response = make_response('custom')
    response.headers['Content-Security-Policy'] = "default-src 'none'"
    return response


@site_bp.route('/_test/login/<int:user_id>')
def login_as(user_id):
    login_user(db.session.get(User, user_id))
    return 'ok'


@site_bp.route('/_test/logout')
def logout():
    logout_user()
    return 'ok'


@pytest.fixture
def app():
    """Aplicação de teste com SQLite em memória (banco novo a cada teste)."""
    app = create_app('testing')
    app.register_blueprint(site_bp)
    return app


@pytest.fixture
def app_ctx(app):
    with app.app_context():
        yield app
        db.session.rollback()


@pytest.fixture
def client(app):
    """Fixture para cliente de teste."""
    return app.test_client()


@pytest.fixture
def make_user(app):
    def _make_user(username='user', is_admin=False):
        with app.app_context():
            user = User(username=username, is_admin=is_admin)
            db.session.add(user)
            db.session.commit()
            return user.id
    return _make_user


@pytest.fixture
def admin_client(app, make_user):
    client = app.test_client()
    user_id = make_user('admin', is_admin=True)
    assert client.get(f'/_test/login/{user_id}').status_code == 200
    return client


@pytest.fixture
def user_client(app, make_user):
    client = app.test_client()
    user_id = make_user('visitor', is_admin=False)
    assert client.get(f'/_test/login/{user_id}').status_code == 200
    return client


# Configurações para pytest
def pytest_configure(config):
    """Configuração do pytest."""
    import warnings
    warnings.filterwarnings("ignore", category=DeprecationWarning)
    warnings.filterwarnings("ignore", category=PendingDeprecationWarning)
