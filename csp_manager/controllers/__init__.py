# controllers/__init__.py

"""
Pacote de controllers da aplicação.
Lista todos os Blueprints a serem registrados na aplicação Flask.
"""

from flask import Blueprint
from typing import List

from csp_manager.controllers.policy_controller import policy_bp

BLUEPRINTS: List[Blueprint] = [
    policy_bp,
]

__all__ = ['BLUEPRINTS', 'policy_bp']
