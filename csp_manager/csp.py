# csp.py
"""
Content Security Policy (CSP) header compiler.

Turns a per-context `PolicyConfig` snapshot into response header lines. Every
function here is pure and safe to call concurrently with the same snapshot.
"""

import logging
import re
from typing import List, Optional, Tuple

from csp_manager.models.policy import PolicyConfig, PolicyMode
from csp_manager.utils.directive_catalog import DIRECTIVE_NAMES

logger = logging.getLogger(__name__)

CSP_HEADER = 'Content-Security-Policy'
CSP_REPORT_ONLY_HEADER = 'Content-Security-Policy-Report-Only'
REPORT_TO_HEADER = 'Report-To'

Header = Tuple[str, str]

# CRLF first so it collapses to a single space
_LINE_BREAKS = re.compile(r'\r\n|[\n\r\x0b\x0c\x1c\x1d\x1e\x85\u2028\u2029]')
# Directive-value grammar: tab, space and visible ASCII except ',' and ';'
_DISALLOWED_DIRECTIVE_CHARS = re.compile(r'[^\t\x20-\x2b\x2d-\x3a\x3c-\x7e]')
# Header values are written as ISO-8859-1; keep Report-To to tab and visible ASCII
_NON_HEADER_CHARS = re.compile(r'[^\t\x20-\x7e]')


def _collapse_line_breaks(raw: Optional[str]) -> str:
    if not raw:
        return ''
    return _LINE_BREAKS.sub(' ', str(raw))


def sanitize_directive_value(raw: Optional[str]) -> str:
    """
    Sanitize a raw, user supplied source list.

    Line breaks become single spaces, then anything outside the CSP
    directive-value grammar is dropped.

    Args:
        raw: Source list as typed by the administrator

    Returns:
        Sanitized value (empty string for empty input)
    """
    return _DISALLOWED_DIRECTIVE_CHARS.sub('', _collapse_line_breaks(raw))


def build_csp_header(config: PolicyConfig) -> str:
    """
    Build the CSP header value from a policy snapshot.

    Directives are emitted in catalog order; disabled or absent ones are
    skipped even when they still hold source text.
    """
    csp_parts = []

    for directive in DIRECTIVE_NAMES:
        setting = config.directives.get(directive)
        if setting is None or not setting.enabled:
            continue

        source = sanitize_directive_value(setting.source).strip()
        if source:
            csp_parts.append(f"{directive} {source}; ")
        else:
            csp_parts.append(f"{directive}; ")

    return ''.join(csp_parts).strip()


def compile_header(config: PolicyConfig) -> Optional[Header]:
    """
    Compile the CSP header line for a context.

    Returns:
        (header name, header value), or None when the policy is disabled
    """
    if config.mode is PolicyMode.DISABLED:
        return None

    header_name = CSP_HEADER if config.mode is PolicyMode.ENFORCE else CSP_REPORT_ONLY_HEADER
    return header_name, build_csp_header(config)


def compile_report_to(config: PolicyConfig) -> Optional[Header]:
    """
    Compile the companion Report-To header.

    The value is opaque JSON, so only line breaks are collapsed and anything
    outside tab and visible ASCII is dropped. Mode is not consulted here.
    """
    value = _NON_HEADER_CHARS.sub('', _collapse_line_breaks(config.report_to)).strip()
    if not value:
        return None
    return REPORT_TO_HEADER, value


def compile_headers(config: PolicyConfig, report_to_requires_policy: bool = True) -> List[Header]:
    """
    Compile every header a context contributes to a response.

    Args:
        config: Policy snapshot
        report_to_requires_policy: Drop Report-To when the policy is disabled

    Returns:
        List of (name, value) pairs, CSP header first
    """
    headers: List[Header] = []

    csp_header = compile_header(config)
    if csp_header is not None:
        headers.append(csp_header)

    if report_to_requires_policy and config.is_disabled:
        return headers

    report_to = compile_report_to(config)
    if report_to is not None:
        headers.append(report_to)

    logger.debug(f"Compiled {len(headers)} CSP header(s) for mode '{config.mode.value}'")
    return headers
