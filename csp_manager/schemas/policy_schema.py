from marshmallow import EXCLUDE, Schema, fields, post_load, pre_load, validate

from csp_manager.models.policy import DirectiveSetting, PolicyConfig, PolicyMode
from csp_manager.utils.directive_catalog import DIRECTIVE_NAMES, is_known_directive

LEGACY_ENABLE_PREFIX = 'enable_'
MAX_SOURCE_LENGTH = 4096


def is_legacy_option(data) -> bool:
    """
    Detecta o formato plano antigo: `mode`, `enable_<diretiva>` e `<diretiva>`
    como chaves de primeiro nível.
    """
    if not isinstance(data, dict) or 'directives' in data:
        return False
    return any(
        key.startswith(LEGACY_ENABLE_PREFIX) or is_known_directive(key)
        for key in data
    )


def convert_legacy_option(data: dict) -> dict:
    """Converte o formato plano antigo para o formato estruturado."""
    directives = {}
    for key, value in data.items():
        if key.startswith(LEGACY_ENABLE_PREFIX):
            name = key[len(LEGACY_ENABLE_PREFIX):]
            if is_known_directive(name):
                directives.setdefault(name, {})['enabled'] = value
        elif is_known_directive(key):
            directives.setdefault(key, {})['source'] = value

    converted = {'directives': directives}
    for key in ('mode', 'report_to'):
        if key in data:
            converted[key] = data[key]
    return converted


class DirectiveSettingSchema(Schema):
    """
    Schema de uma diretiva: habilitada ou não, e a lista de fontes digitada.
    """
    class Meta:
        unknown = EXCLUDE

    enabled = fields.Boolean(load_default=False)
    source = fields.String(
        load_default='',
        allow_none=True,
        validate=validate.Length(
            max=MAX_SOURCE_LENGTH,
            error=f"Source lists are limited to {MAX_SOURCE_LENGTH} characters."
        )
    )

    @post_load
    def _make_setting(self, data, **kwargs):
        return DirectiveSetting(
            enabled=bool(data.get('enabled')),
            source=data.get('source') or '',
        )


class PolicySchema(Schema):
    """
    Schema para validação e normalização da política de um contexto.
    Aceita também o formato plano legado e devolve um `PolicyConfig`.
    """
    class Meta:
        unknown = EXCLUDE

    mode = fields.String(
        load_default=PolicyMode.DISABLED.value,
        validate=validate.OneOf(
            [mode.value for mode in PolicyMode],
            error="Mode must be one of: {choices}."
        )
    )
    directives = fields.Dict(
        keys=fields.String(validate=validate.OneOf(DIRECTIVE_NAMES, error="Unknown directive '{input}'.")),
        values=fields.Nested(DirectiveSettingSchema),
        load_default=dict,
    )
    report_to = fields.String(
        load_default='',
        allow_none=True,
        validate=[
            validate.Length(max=MAX_SOURCE_LENGTH),
            # Headers saem em ISO-8859-1: só ASCII visível (quebras de linha são removidas depois)
            validate.Regexp(
                r'\A[\t\r\n\x20-\x7e]*\Z',
                error="Report-To must contain only printable ASCII; use punycode for internationalized domains."
            ),
        ]
    )

    @pre_load
    def _normalize_input(self, data, **kwargs):
        if is_legacy_option(data):
            data = convert_legacy_option(data)
        if isinstance(data, dict) and isinstance(data.get('mode'), str):
            data = dict(data, mode=data['mode'].strip().lower())
        return data

    @post_load
    def _make_config(self, data, **kwargs):
        return PolicyConfig(
            mode=PolicyMode.parse(data['mode']),
            directives=data.get('directives') or {},
            report_to=data.get('report_to') or None,
        )
