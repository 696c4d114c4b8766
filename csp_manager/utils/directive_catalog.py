#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Catálogo fixo de diretivas CSP suportadas pelo gerenciador.

A ordem das entradas é a ordem de emissão no header compilado. Não reordene
entradas existentes: isso muda a saída de todas as políticas já salvas.
"""

from typing import Dict, Optional, Tuple

DIRECTIVES: Tuple[Tuple[str, str], ...] = (
    ('default-src', 'Fallback for every fetch directive that is not set explicitly.'),
    ('script-src', 'Valid sources for JavaScript.'),
    ('style-src', 'Valid sources for stylesheets.'),
    ('img-src', 'Valid sources for images and favicons.'),
    ('media-src', 'Valid sources for <audio>, <video> and <track> elements.'),
    ('font-src', 'Valid sources for fonts loaded with @font-face.'),
    ('connect-src', 'URLs that can be loaded with fetch, XHR, WebSocket and EventSource.'),
    ('frame-src', 'Valid sources for nested browsing contexts such as <frame> and <iframe>.'),
    ('manifest-src', 'Valid sources for application manifest files.'),
    ('object-src', 'Valid sources for <object> and <embed> elements.'),
    ('prefetch-src', 'Valid sources to be prefetched or prerendered.'),
    ('script-src-elem', 'Valid sources for <script> elements.'),
    ('script-src-attr', 'Valid sources for inline event handlers.'),
    ('style-src-elem', 'Valid sources for <style> and <link rel="stylesheet"> elements.'),
    ('style-src-attr', 'Valid sources for inline style attributes.'),
    ('worker-src', 'Valid sources for Worker, SharedWorker and ServiceWorker scripts.'),
    ('child-src', 'Valid sources for web workers and nested browsing contexts.'),
    ('base-uri', 'URLs that can be used in the document <base> element.'),
    ('form-action', 'URLs that can be used as the target of form submissions.'),
    ('frame-ancestors', 'Parents that may embed the page in a frame.'),
    ('sandbox', 'Enables a sandbox for the requested resource.'),
    ('upgrade-insecure-requests', 'Treat all insecure URLs as if they had been replaced with HTTPS URLs.'),
    ('block-all-mixed-content', 'Prevent loading any assets over HTTP when the page uses HTTPS.'),
    ('report-uri', 'Legacy endpoint that receives violation reports.'),
    ('report-to', 'Reporting group (declared in the Report-To header) that receives violation reports.'),
)

DIRECTIVE_NAMES: Tuple[str, ...] = tuple(name for name, _ in DIRECTIVES)

_DESCRIPTIONS: Dict[str, str] = dict(DIRECTIVES)

# Diretivas habilitadas por padrão na primeira ativação
DEFAULT_ENABLED_DIRECTIVES: Tuple[str, ...] = ('default-src', 'script-src', 'style-src', 'img-src')


def is_known_directive(name: Optional[str]) -> bool:
    """Indica se `name` pertence ao catálogo."""
    return name in _DESCRIPTIONS


def describe_directive(name: str) -> Optional[str]:
    return _DESCRIPTIONS.get(name)


def catalog_as_list() -> list:
    """Retorna o catálogo serializável, na ordem de emissão."""
    return [
        {'name': name, 'description': description, 'position': index}
        for index, (name, description) in enumerate(DIRECTIVES)
    ]
