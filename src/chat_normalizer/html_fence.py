# -*- coding: utf-8 -*-
"""
Wrap raw HTML documents in ```html fences.

A model that answers with a bare HTML page would otherwise have its markup
interpreted by the renderer. Text that already holds any fence is left alone.
"""

import re


FENCE = '```'
DOCTYPE = '<!DOCTYPE html>'

_OPEN_FENCE = '\n```html\n'
_CLOSE_FENCE = '\n```\n'

_DOCTYPE_PATTERN = re.compile(re.escape(DOCTYPE))
_HTML_END_PATTERN = re.compile(r'(</body>\s*?</html>)([\r\n]*)(`*)')


def _is_quoted(text: str, start: int) -> bool:
    """True if a backtick run (plus optional language word and line breaks) precedes ``start``."""
    i = start
    while i > 0 and text[i - 1] in '\r\n':
        i -= 1
    while i > 0 and (text[i - 1].isalnum() or text[i - 1] == '_'):
        i -= 1
    return i > 0 and text[i - 1] == '`'


def _open_fences(text: str) -> str:
    parts = []
    last = 0
    for m in _DOCTYPE_PATTERN.finditer(text):
        if _is_quoted(text, m.start()):
            continue
        parts.append(text[last:m.start()])
        parts.append(_OPEN_FENCE)
        last = m.start()
    parts.append(text[last:])
    return ''.join(parts)


def _close_fences(text: str) -> str:
    def _replacer(m):
        if m.group(3):
            return m.group(0)
        return m.group(1) + _CLOSE_FENCE

    return _HTML_END_PATTERN.sub(_replacer, text)


def wrap_html_code(text: str) -> str:
    """
    Fence an un-fenced ``<!DOCTYPE html>`` document.

    The opening fence goes right before the declaration, the closing fence
    right after ``</body></html>``. A document that has not reached
    ``</html>`` yet stays open-ended so partial output still shows as code.
    """
    if not text or FENCE in text:
        return text
    return _close_fences(_open_fences(text))
