"""
Testes do middleware que emite os headers de CSP em cada resposta.
"""

import json
import logging
from unittest.mock import patch

from csp_manager.extensions import db
from csp_manager.extensions.middleware import resolve_request_context
from csp_manager.models.policy import PolicyConfig
from csp_manager.models.policy_option import PolicyOption, option_key
from csp_manager.services.policy_store import get_policy_store

REPORT_TO = '{"group":"csp-endpoint","max_age":10886400,"endpoints":[{"url":"https://example.com/csp-reports"}]}'


def _save(app, context, data):
    with app.app_context():
        get_policy_store().save_policy(context, data)


def _enforce(source):
    return {'mode': 'enforce', 'directives': {'default-src': {'enabled': True, 'source': source}}}


def test_no_configuration_means_no_header(client):
    response = client.get('/')
    assert response.status_code == 200
    assert 'Content-Security-Policy' not in response.headers
    assert 'Content-Security-Policy-Report-Only' not in response.headers
    assert 'Report-To' not in response.headers


def test_frontend_enforce(app, client):
    _save(app, 'frontend', _enforce("'self'"))
    response = client.get('/')
    assert response.headers['Content-Security-Policy'] == "default-src 'self';"


def test_frontend_report_only_with_report_to(app, client):
    _save(app, 'frontend', {
        'mode': 'report',
        'directives': {
            'default-src': {'enabled': True, 'source': "'self'\nhttps://a.com"},
            'report-to': {'enabled': True, 'source': 'csp-endpoint'},
        },
        'report_to': REPORT_TO,
    })
    response = client.get('/')
    assert 'Content-Security-Policy' not in response.headers
    assert response.headers['Content-Security-Policy-Report-Only'] == \
        "default-src 'self' https://a.com; report-to csp-endpoint;"
    assert response.headers['Report-To'] == REPORT_TO


def test_disabled_policy_emits_nothing(app, client):
    _save(app, 'frontend', {
        'mode': 'disabled',
        'directives': {'default-src': {'enabled': True, 'source': "'self'"}},
        'report_to': REPORT_TO,
    })
    response = client.get('/')
    assert 'Content-Security-Policy' not in response.headers
    assert 'Report-To' not in response.headers


def test_report_to_can_be_emitted_for_disabled_policy(app, client):
    app.config['CSP_REPORT_TO_REQUIRES_POLICY'] = False
    _save(app, 'frontend', {'mode': 'disabled', 'report_to': REPORT_TO})
    response = client.get('/')
    assert 'Content-Security-Policy' not in response.headers
    assert response.headers['Report-To'] == REPORT_TO


def test_admin_prefix_uses_admin_policy(app, client):
    _save(app, 'admin', _enforce("'self' https://admin.example"))
    _save(app, 'frontend', _enforce("'none'"))

    assert client.get('/admin/dashboard').headers['Content-Security-Policy'] == \
        "default-src 'self' https://admin.example;"
    assert client.get('/administrators').headers['Content-Security-Policy'] == "default-src 'none';"


def test_logged_in_users_get_loggedin_policy(app, user_client):
    _save(app, 'loggedin', _enforce("'self' https://members.example"))
    _save(app, 'frontend', _enforce("'none'"))

    response = user_client.get('/')
    assert response.headers['Content-Security-Policy'] == "default-src 'self' https://members.example;"

    user_client.get('/_test/logout')
    assert user_client.get('/').headers['Content-Security-Policy'] == "default-src 'none';"


def test_admin_area_wins_over_logged_in(app, user_client):
    _save(app, 'admin', _enforce("'self'"))
    _save(app, 'loggedin', _enforce("'none'"))
    assert user_client.get('/admin/dashboard').headers['Content-Security-Policy'] == "default-src 'self';"


def test_view_header_is_not_overwritten(app, client):
    _save(app, 'frontend', _enforce("'self'"))
    assert client.get('/custom-csp').headers['Content-Security-Policy'] == "default-src 'none'"


def test_manager_can_be_switched_off(app, client):
    _save(app, 'frontend', _enforce("'self'"))
    app.config['CSP_MANAGER_ENABLED'] = False
    assert 'Content-Security-Policy' not in client.get('/').headers


def test_empty_policy_header(app, client):
    _save(app, 'frontend', {'mode': 'enforce', 'directives': {'default-src': {'enabled': False, 'source': "'self'"}}})
    assert client.get('/').headers['Content-Security-Policy'] == ''

    app.config['CSP_SKIP_EMPTY_POLICY'] = True
    assert 'Content-Security-Policy' not in client.get('/').headers


def test_store_failure_does_not_break_response(app, client):
    with patch('csp_manager.extensions.middleware.compile_headers', side_effect=RuntimeError('boom')):
        response = client.get('/')
    assert response.status_code == 200
    assert response.get_data(as_text=True) == 'home'
    assert 'Content-Security-Policy' not in response.headers


def test_resolve_request_context(app):
    with app.test_request_context('/admin'):
        assert resolve_request_context() == 'admin'
    with app.test_request_context('/admin/settings/'):
        assert resolve_request_context() == 'admin'
    with app.test_request_context('/blog/admin'):
        assert resolve_request_context() == 'frontend'

    app.config['CSP_ADMIN_PATH_PREFIXES'] = ('/wp-admin/',)
    with app.test_request_context('/wp-admin/options.php'):
        assert resolve_request_context() == 'admin'
    with app.test_request_context('/admin'):
        assert resolve_request_context() == 'frontend'


def test_policy_api_is_admin_context(app, admin_client):
    _save(app, 'admin', _enforce("'self'"))
    response = admin_client.get('/api/v1/csp/directives')
    assert response.headers['Content-Security-Policy'] == "default-src 'self';"


def test_stored_non_ascii_report_to_does_not_break_response(app, client):
    # linha gravada direto no banco, sem passar pela validação da API
    with app.app_context():
        db.session.add(PolicyOption(key=option_key('frontend'), value=json.dumps({
            'mode': 'enforce',
            'directives': {'default-src': {'enabled': True, 'source': "'self'"}},
            'report_to': '{"url":"https://例え.jp/r"}',
        })))
        db.session.commit()

    # a linha não passa na validação: o contexto é tratado como desabilitado
    response = client.get('/')
    assert response.status_code == 200
    assert response.get_data(as_text=True) == 'home'
    assert 'Content-Security-Policy' not in response.headers
    assert 'Report-To' not in response.headers
    for value in response.headers.values():
        value.encode('latin-1')


def test_applied_context_is_logged(app, client, caplog):
    _save(app, 'admin', _enforce("'self'"))
    caplog.set_level(logging.DEBUG, logger='csp_manager.extensions.middleware')

    client.get('/admin/dashboard')

    records = [r for r in caplog.records if getattr(r, 'csp_context', None)]
    assert records
    assert records[-1].csp_context == 'admin'
    assert records[-1].policy_mode == 'enforce'


def test_non_ascii_report_to_from_store_is_stripped(app, client):
    config = PolicyConfig(mode='report', report_to='{"url":"https://例え.jp/r"}')
    with app.app_context():
        store = get_policy_store()
    with patch.object(store, 'get_policy_config', return_value=config):
        response = client.get('/')
    assert response.status_code == 200
    assert response.headers['Content-Security-Policy-Report-Only'] == ''
    assert response.headers['Report-To'] == '{"url":"https://.jp/r"}'
    response.headers['Report-To'].encode('latin-1')
