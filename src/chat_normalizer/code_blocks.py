# -*- coding: utf-8 -*-
"""
Fenced code blocks of normalized text, as the code block hook sees them.

Diagram blocks go to the diagram renderer, HTML-like blocks get a preview,
plain-text languages are soft-wrapped.
"""

import re
from typing import Iterator

from pydantic import BaseModel


DIAGRAM_LANGUAGES = ('mermaid',)
HTML_PREVIEW_PREFIXES = ('<!DOCTYPE', '<svg', '<?xml')
WRAP_LANGUAGES = ('', 'md', 'markdown', 'text', 'txt', 'plaintext', 'tex', 'latex')

# Unclosed fences run to end of text, as while streaming
_FENCE_PATTERN = re.compile(r'```([\w+#.-]*)[^\n]*\n(.*?)(?:\n?```|\Z)', re.DOTALL)


class CodeBlock(BaseModel):
    """Блок кода из нормализованного текста."""
    language: str = ""
    code: str
    closed: bool = True

    @property
    def is_diagram(self) -> bool:
        return self.language.lower() in DIAGRAM_LANGUAGES

    @property
    def html_preview(self) -> bool:
        if self.language.lower() == 'html':
            return True
        return self.code.startswith(HTML_PREVIEW_PREFIXES)

    @property
    def wrap(self) -> bool:
        return self.language.lower() in WRAP_LANGUAGES


def iter_code_blocks(text: str) -> Iterator[CodeBlock]:
    for m in _FENCE_PATTERN.finditer(text or ''):
        closed = m.group(0).endswith('```')
        yield CodeBlock(language=m.group(1), code=m.group(2), closed=closed)
