# project/models/user.py

import logging

from flask_login import UserMixin
from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from csp_manager.models.base_model import BaseModel

logger = logging.getLogger(__name__)


class User(BaseModel, UserMixin):
    """
    Usuário mínimo usado pelo Flask-Login.

    A autenticação em si pertence à aplicação hospedeira; aqui só importam
    `is_active` (sessão válida) e `is_admin` (acesso à API de configuração).
    """
    __tablename__ = 'users'

    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def __repr__(self):
        return f"<User id={self.id} username={self.username} admin={self.is_admin}>"
