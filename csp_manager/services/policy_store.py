# services/policy_store.py

"""
Armazenamento das políticas de CSP por contexto.

Lê e grava opções chave/valor (`csp_manager_<contexto>`) na tabela
`csp_policy_options`, normaliza o conteúdo via `PolicySchema` e mantém um
cache em memória invalidado a cada gravação.
"""

import json
import logging
import threading
import time
from typing import Any, Dict, List, Optional, Tuple

from flask import current_app
from marshmallow import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from csp_manager.extensions.db import db
from csp_manager.models.policy import POLICY_CONTEXTS, DirectiveSetting, PolicyConfig, PolicyMode
from csp_manager.models.policy_option import PolicyOption, option_key
from csp_manager.schemas.policy_schema import PolicySchema, is_legacy_option
from csp_manager.utils.directive_catalog import DEFAULT_ENABLED_DIRECTIVES, is_known_directive
from csp_manager.utils.policy_errors import PolicyStoreError, PolicyValidationError, UnknownContextError

logger = logging.getLogger(__name__)

EXTENSION_KEY = 'csp_manager.policy_store'


def default_policy_config() -> PolicyConfig:
    """Política inicial de um contexto: desabilitada, com as diretivas básicas marcadas."""
    return PolicyConfig(
        mode=PolicyMode.DISABLED,
        directives={name: DirectiveSetting(enabled=True, source='') for name in DEFAULT_ENABLED_DIRECTIVES},
    )


def validate_context(context: Any) -> str:
    if context not in POLICY_CONTEXTS:
        raise UnknownContextError(context)
    return context


class PolicyStore:
    """
    Fonte dos snapshots `PolicyConfig` consumidos pelo compilador.

    Falhas de leitura nunca são propagadas: o contexto é tratado como
    desabilitado. Falhas de escrita levantam `PolicyStoreError`.
    """

    def __init__(self, cache_ttl: int = 300, session: Optional[Session] = None):
        self.cache_ttl = max(int(cache_ttl or 0), 0)
        self._session = session
        self._cache: Dict[str, Tuple[float, PolicyConfig]] = {}
        self.lock = threading.RLock()

    @property
    def session(self) -> Session:
        return self._session or db.session

    # --- Cache ---

    def _cache_get(self, context: str) -> Optional[PolicyConfig]:
        with self.lock:
            entry = self._cache.get(context)
            if entry is None:
                return None
            expires_at, config = entry
            if time.monotonic() >= expires_at:
                del self._cache[context]
                return None
            return config

    def _cache_set(self, context: str, config: PolicyConfig) -> None:
        if not self.cache_ttl:
            return
        with self.lock:
            self._cache[context] = (time.monotonic() + self.cache_ttl, config)

    def invalidate(self, context: Optional[str] = None) -> None:
        """Descarta snapshots em cache (todos, ou só o de `context`)."""
        with self.lock:
            if context is None:
                self._cache.clear()
            else:
                self._cache.pop(context, None)

    # --- Leitura ---

    def _fetch_option(self, context: str) -> Optional[PolicyOption]:
        return self.session.execute(
            select(PolicyOption).where(PolicyOption.key == option_key(context))
        ).scalar_one_or_none()

    def _parse_option(self, context: str, raw: str) -> PolicyConfig:
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.warning(f"Stored policy for '{context}' is not valid JSON; treating as disabled: {e}")
            return PolicyConfig.disabled()

        if isinstance(data, dict) and not is_legacy_option(data) and isinstance(data.get('directives'), dict):
            unknown = [name for name in data['directives'] if not is_known_directive(name)]
            if unknown:
                logger.warning(f"Ignoring unknown directives in stored policy for '{context}': {unknown}")
                data = dict(data, directives={
                    name: value for name, value in data['directives'].items() if is_known_directive(name)
                })

        try:
            return PolicySchema().load(data)
        except ValidationError as e:
            logger.warning(f"Stored policy for '{context}' failed validation; treating as disabled: {e.messages}")
            return PolicyConfig.disabled()

    def get_policy_config(self, context: str) -> PolicyConfig:
        """
        Retorna o snapshot normalizado de um contexto.

        Contexto sem configuração, JSON ilegível ou erro de banco resultam em
        um `PolicyConfig` desabilitado e vazio.
        """
        validate_context(context)

        cached = self._cache_get(context)
        if cached is not None:
            return cached

        try:
            option = self._fetch_option(context)
        except SQLAlchemyError as e:
            logger.warning(f"Could not read policy for '{context}'; treating as disabled: {e}")
            return PolicyConfig.disabled()

        if option is None or not option.value:
            config = PolicyConfig.disabled()
        else:
            config = self._parse_option(context, option.value)

        self._cache_set(context, config)
        return config

    def get_all_policy_configs(self) -> Dict[str, PolicyConfig]:
        return {context: self.get_policy_config(context) for context in POLICY_CONTEXTS}

    # --- Escrita ---

    def _upsert_option(self, key: str, value: str) -> PolicyOption:
        """
        Upsert da opção usando ON CONFLICT quando o dialeto suporta,
        com fallback get/update ou insert via ORM.
        """
        sess = self.session
        dialect_name = sess.get_bind().dialect.name

        if dialect_name in ('sqlite', 'postgresql'):
            try:
                if dialect_name == 'sqlite':
                    from sqlalchemy.dialects.sqlite import insert as dialect_insert
                else:
                    from sqlalchemy.dialects.postgresql import insert as dialect_insert

                ins = dialect_insert(PolicyOption.__table__).values(key=key, value=value)
                sess.execute(ins.on_conflict_do_update(
                    index_elements=[PolicyOption.key],
                    set_={'value': ins.excluded.value, 'updated_at': db.func.now()},
                ))
                return sess.execute(
                    select(PolicyOption).where(PolicyOption.key == key)
                ).scalar_one()
            except SQLAlchemyError as e:
                logger.debug(f"Dialect upsert failed ({dialect_name}); falling back to ORM: {e}")
                sess.rollback()

        instance = sess.execute(
            select(PolicyOption).where(PolicyOption.key == key)
        ).scalar_one_or_none()
        if instance:
            instance.value = value
        else:
            instance = PolicyOption(key=key, value=value)
            sess.add(instance)
        return instance

    def save_policy(self, context: str, data: Any) -> PolicyConfig:
        """
        Valida, normaliza e grava a política de um contexto.

        Raises:
            UnknownContextError: contexto inexistente
            PolicyValidationError: dados rejeitados pelo schema
            PolicyStoreError: falha de banco
        """
        validate_context(context)
        try:
            config = PolicySchema().load(data)
        except ValidationError as e:
            raise PolicyValidationError(e.messages) from e

        payload = json.dumps(config.to_dict(), sort_keys=True)
        try:
            self._upsert_option(option_key(context), payload)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to save policy for '{context}'", exc_info=True)
            raise PolicyStoreError(str(e)) from e
        finally:
            self.invalidate(context)

        logger.info(f"Saved CSP policy for '{context}' (mode={config.mode.value})")
        return config

    def ensure_defaults(self) -> List[str]:
        """
        Grava a política padrão nos contextos que ainda não têm opção.
        Nunca sobrescreve uma opção existente. Retorna os contextos criados.
        """
        seeded = []
        payload = json.dumps(default_policy_config().to_dict(), sort_keys=True)
        try:
            for context in POLICY_CONTEXTS:
                if self._fetch_option(context) is None:
                    self.session.add(PolicyOption(key=option_key(context), value=payload))
                    seeded.append(context)
            if seeded:
                self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error("Failed to seed default CSP policies", exc_info=True)
            raise PolicyStoreError(str(e)) from e
        finally:
            self.invalidate()

        if seeded:
            logger.info(f"Seeded default CSP policies for: {', '.join(seeded)}")
        return seeded


def get_policy_store() -> PolicyStore:
    """Store registrado na aplicação corrente (cria um se ainda não existir)."""
    store = current_app.extensions.get(EXTENSION_KEY)
    if store is None:
        store = PolicyStore(cache_ttl=current_app.config.get('CSP_POLICY_CACHE_TTL', 300))
        current_app.extensions[EXTENSION_KEY] = store
    return store
