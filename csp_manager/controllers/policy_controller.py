# controllers/policy_controller.py

from functools import wraps
from typing import Callable

from flask import Blueprint, jsonify, request, current_app
from flask.wrappers import Response
from flask_login import current_user, login_required
from werkzeug.exceptions import BadRequest, NotFound

from csp_manager.csp import compile_headers
from csp_manager.models.policy import POLICY_CONTEXTS, PolicyConfig
from csp_manager.services.policy_store import get_policy_store, validate_context
from csp_manager.schemas.policy_schema import PolicySchema
from csp_manager.utils.directive_catalog import catalog_as_list
from csp_manager.utils.policy_errors import (
    ERROR_MESSAGES,
    PolicyStoreError,
    PolicyValidationError,
    UnknownContextError,
)
from marshmallow import ValidationError

policy_bp = Blueprint('csp_policy', __name__, url_prefix='/api/v1/csp')

# --- Blueprint-local error handlers ---

@policy_bp.errorhandler(BadRequest)
def _handle_bad_request(e: BadRequest) -> Response:
    return jsonify(error=ERROR_MESSAGES['invalid_request'], details=e.description), 400

@policy_bp.errorhandler(NotFound)
def _handle_not_found(e: NotFound) -> Response:
    return jsonify(error='Not Found'), 404

@policy_bp.errorhandler(UnknownContextError)
def _handle_unknown_context(e: UnknownContextError) -> Response:
    return jsonify(error=str(e), details={'contexts': list(POLICY_CONTEXTS)}), 404

@policy_bp.errorhandler(PolicyValidationError)
def _handle_validation_error(e: PolicyValidationError) -> Response:
    return jsonify(error=str(e), details=e.errors), 400

@policy_bp.errorhandler(PolicyStoreError)
def _handle_store_error(e: PolicyStoreError) -> Response:
    current_app.logger.error("Policy store error", exc_info=e)
    return jsonify(error=ERROR_MESSAGES['store_write']), 500


def admin_required(f: Callable) -> Callable:
    """Exige usuário autenticado com `is_admin`."""
    @wraps(f)
    @login_required
    def decorated_function(*args, **kwargs):
        if not getattr(current_user, 'is_admin', False):
            return jsonify(error=ERROR_MESSAGES['forbidden']), 403
        return f(*args, **kwargs)
    return decorated_function


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise BadRequest(description='Expected a JSON object.')
    return data


def _serialize(context: str, config: PolicyConfig) -> dict:
    report_to_requires_policy = current_app.config.get('CSP_REPORT_TO_REQUIRES_POLICY', True)
    return {
        'context': context,
        'policy': config.to_dict(),
        'headers': [
            {'name': name, 'value': value}
            for name, value in compile_headers(config, report_to_requires_policy=report_to_requires_policy)
        ],
    }

# --- Catálogo ---

@policy_bp.route('/directives', methods=['GET'])
@admin_required
def list_directives() -> Response:
    """
    GET /api/v1/csp/directives
    Diretivas suportadas, na ordem em que são emitidas.
    """
    return jsonify({'directives': catalog_as_list()})

# --- Políticas ---

@policy_bp.route('/policies', methods=['GET'])
@admin_required
def list_policies() -> Response:
    store = get_policy_store()
    return jsonify({
        'policies': [
            _serialize(context, config)
            for context, config in store.get_all_policy_configs().items()
        ]
    })


@policy_bp.route('/policies/<context>', methods=['GET'])
@admin_required
def get_policy(context: str) -> Response:
    config = get_policy_store().get_policy_config(validate_context(context))
    return jsonify(_serialize(context, config))


@policy_bp.route('/policies/<context>', methods=['PUT'])
@admin_required
def save_policy(context: str) -> Response:
    """
    PUT /api/v1/csp/policies/<context>
    Valida e grava a política; aceita também o formato plano legado.
    """
    validate_context(context)
    config = get_policy_store().save_policy(context, _json_body())
    current_app.logger.info(
        f"CSP policy for '{context}' updated by user {getattr(current_user, 'id', None)}"
    )
    return jsonify(_serialize(context, config))


@policy_bp.route('/policies/<context>/preview', methods=['POST'])
@admin_required
def preview_policy(context: str) -> Response:
    """
    POST /api/v1/csp/policies/<context>/preview
    Compila os dados enviados sem gravar nada.
    """
    validate_context(context)
    try:
        config = PolicySchema().load(_json_body())
    except ValidationError as e:
        raise PolicyValidationError(e.messages) from e
    return jsonify(_serialize(context, config))
