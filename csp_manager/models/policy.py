# project/models/policy.py

"""
Snapshots imutáveis de configuração de CSP, um por contexto de requisição.

Estes objetos não são mapeados pelo SQLAlchemy: o armazenamento persiste JSON
em `PolicyOption` e o `PolicyStore` reconstrói um `PolicyConfig` novo a cada
leitura.
"""

import enum
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

CONTEXT_ADMIN = 'admin'
CONTEXT_LOGGEDIN = 'loggedin'
CONTEXT_FRONTEND = 'frontend'

POLICY_CONTEXTS = (CONTEXT_ADMIN, CONTEXT_LOGGEDIN, CONTEXT_FRONTEND)


class PolicyMode(str, enum.Enum):
    """Modo de aplicação da política de um contexto."""
    ENFORCE = 'enforce'
    REPORT = 'report'
    DISABLED = 'disabled'

    @classmethod
    def parse(cls, value: Any) -> 'PolicyMode':
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


@dataclass(frozen=True)
class DirectiveSetting:
    enabled: bool = False
    source: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {'enabled': self.enabled, 'source': self.source}


@dataclass(frozen=True)
class PolicyConfig:
    """
    Configuração de CSP de um contexto.

    `directives` é exposto como mapeamento somente leitura; a ordem de
    inserção não importa, o compilador percorre o catálogo.
    """
    mode: PolicyMode = PolicyMode.DISABLED
    directives: Mapping[str, DirectiveSetting] = field(default_factory=dict)
    report_to: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, 'mode', PolicyMode.parse(self.mode))
        object.__setattr__(self, 'directives', MappingProxyType(dict(self.directives)))

    @classmethod
    def disabled(cls) -> 'PolicyConfig':
        return cls(mode=PolicyMode.DISABLED)

    @property
    def is_disabled(self) -> bool:
        return self.mode is PolicyMode.DISABLED

    def directive(self, name: str) -> Optional[DirectiveSetting]:
        return self.directives.get(name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'mode': self.mode.value,
            'directives': {name: setting.to_dict() for name, setting in self.directives.items()},
            'report_to': self.report_to or '',
        }
