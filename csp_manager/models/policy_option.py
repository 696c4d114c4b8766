# project/models/policy_option.py

from sqlalchemy import Column, String, Text

from csp_manager.models.base_model import BaseModel

OPTION_PREFIX = 'csp_manager_'


def option_key(context: str) -> str:
    """Chave da opção persistida para um contexto (ex.: 'csp_manager_admin')."""
    return f"{OPTION_PREFIX}{context}"


class PolicyOption(BaseModel):
    """
    Opção chave/valor com a política de CSP de um contexto.
    O valor é o JSON normalizado produzido pelo PolicySchema.
    """
    __tablename__ = 'csp_policy_options'

    key   = Column(String(100), nullable=False, unique=True)
    value = Column(Text, nullable=True)

    def __repr__(self):
        return f"<PolicyOption id={self.id} key={self.key}>"
