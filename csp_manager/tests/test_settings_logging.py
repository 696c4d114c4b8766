"""
Testes de configuração (settings) e do formatter de logs estruturados.
"""

import json
import logging

import pytest

from csp_manager.settings import ConfigError, config_map
from csp_manager.settings.base import getenv_typed
from csp_manager.utils.logging_config import StructuredFormatter, build_formatter, configure_package_logger

TESTING_CONFIG = config_map['testing']


def test_getenv_typed(monkeypatch):
    monkeypatch.delenv('CSP_TEST_TTL', raising=False)
    assert getenv_typed('CSP_TEST_TTL', int, 300) == 300

    monkeypatch.setenv('CSP_TEST_TTL', '42')
    assert getenv_typed('CSP_TEST_TTL', int, 300) == 42

    monkeypatch.setenv('CSP_TEST_TTL', 'soon')
    with pytest.raises(ConfigError):
        getenv_typed('CSP_TEST_TTL', int, 300)


def test_validate_rejects_negative_ttl(monkeypatch):
    monkeypatch.setattr(TESTING_CONFIG, 'CSP_POLICY_CACHE_TTL', -1)
    with pytest.raises(ConfigError):
        TESTING_CONFIG.validate()


def test_validate_rejects_unknown_log_format(monkeypatch):
    monkeypatch.setattr(TESTING_CONFIG, 'LOG_FORMAT', 'xml')
    with pytest.raises(ConfigError):
        TESTING_CONFIG.validate()


def test_config_map():
    assert config_map['testing'] is TESTING_CONFIG
    assert TESTING_CONFIG.CSP_POLICY_CACHE_TTL == 0


def test_app_uses_testing_config(app):
    assert app.config['TESTING'] is True
    assert app.config['CSP_MANAGER_ENABLED'] is True
    assert 'csp_policy' in app.blueprints


def test_structured_formatter_includes_context_fields():
    record = logging.LogRecord(
        name='csp_manager.extensions.middleware',
        level=logging.WARNING,
        pathname=__file__,
        lineno=10,
        msg='policy %s applied',
        args=('admin',),
        exc_info=None,
    )
    record.csp_context = 'admin'
    record.policy_mode = 'report'

    entry = json.loads(StructuredFormatter().format(record))

    assert entry['level'] == 'WARNING'
    assert entry['message'] == 'policy admin applied'
    assert entry['csp_context'] == 'admin'
    assert entry['policy_mode'] == 'report'
    assert 'request_id' not in entry


def test_build_formatter():
    assert isinstance(build_formatter('json'), StructuredFormatter)
    assert not isinstance(build_formatter('text'), StructuredFormatter)


def test_configure_package_logger_does_not_duplicate_handlers():
    logger = configure_package_logger('DEBUG', 'text', None)
    count = len(logger.handlers)
    logger = configure_package_logger('WARNING', 'json', None)
    assert len(logger.handlers) == count
    assert logger.level == logging.WARNING
