# utils/policy_errors.py

from typing import Any, Dict, Optional

# Mensagens padronizadas devolvidas pela API de configuração
ERROR_MESSAGES = {
    'unknown_context': "Unknown policy context '{}'.",
    'validation': 'Invalid policy data.',
    'store_write': 'Could not save the policy. Try again.',
    'forbidden': 'Administrator access required.',
    'invalid_request': 'Request body must be a JSON object.',
}


class PolicyError(Exception):
    """Base de erros do gerenciador de CSP."""


class UnknownContextError(PolicyError, LookupError):
    def __init__(self, context: Any):
        self.context = context
        super().__init__(ERROR_MESSAGES['unknown_context'].format(context))


class PolicyValidationError(PolicyError, ValueError):
    """Dados de política rejeitados pelo schema; `errors` segue o formato do marshmallow."""

    def __init__(self, errors: Optional[Dict[str, Any]] = None):
        self.errors = errors or {}
        super().__init__(ERROR_MESSAGES['validation'])


class PolicyStoreError(PolicyError, RuntimeError):
    """Falha de escrita no armazenamento de opções."""
