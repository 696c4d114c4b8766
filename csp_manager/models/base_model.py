# base_model.py

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Type, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from csp_manager.extensions.db import db

logger = logging.getLogger(__name__)
T = TypeVar('T', bound='BaseModel')

class BaseModel(db.Model):
    """
    Modelo base abstrato para SQLAlchemy (Flask-SQLAlchemy).
    Fornece colunas de auditoria e métodos utilitários leves.
    """
    __abstract__ = True
    __allow_unmapped__ = True

    id = db.Column(
        db.Integer,
        primary_key=True,
        autoincrement=True,
        doc='Chave primária'
    )
    created_at = db.Column(
        db.DateTime,
        server_default=db.func.now(),
        nullable=False,
        doc='Data de criação'
    )
    updated_at = db.Column(
        db.DateTime,
        server_default=db.func.now(),
        onupdate=db.func.now(),
        nullable=False,
        doc='Data da última atualização'
    )

    def save(self) -> 'BaseModel':
        """
        Adiciona a instância à sessão, mas não faz commit.
        Retorna self para encadeamento.
        """
        db.session.add(self)
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Converte colunas em dict (datas em ISO 8601)."""
        data: Dict[str, Any] = {}
        for col in self.__table__.columns:
            v = getattr(self, col.name, None)
            data[col.name] = v.isoformat() if isinstance(v, datetime) else v
        return data

    @classmethod
    def find_by_id(cls: Type[T], obj_id: Any) -> Optional[T]:
        """
        Retorna instância pelo ID, ou None.
        """
        try:
            return db.session.get(cls, obj_id)
        except SQLAlchemyError as e:
            logger.error(f"find_by_id error on {cls.__name__}({obj_id}): {e}")
            return None

    @classmethod
    def find_all(cls: Type[T]) -> List[T]:
        """
        Retorna todos registros (lista vazia em erro).
        """
        try:
            return db.session.query(cls).all()
        except SQLAlchemyError as e:
            logger.error(f"find_all error on {cls.__name__}: {e}")
            return []
