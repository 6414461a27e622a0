# -*- coding: utf-8 -*-
"""
LaTeX bracket delimiters -> dollar math.

Models write math as \\(x\\) and \\[x\\]; the markdown math plugin only
understands $x$ and $$x$$. Code spans are matched first at every offset so
literal backslash-brackets inside code examples are never reinterpreted.
"""

import re


# Alternatives in priority order: fenced block, inline code, block math, inline math.
# An unclosed fence counts only when it opens a line; it then runs to end of
# text (code still being streamed).
_BRACKET_PATTERN = re.compile(
    r'(```[\s\S]*?```|(?<![^\n])```[\s\S]*\Z|`[^`\n]*`)'
    r'|\\\[([\s\S]*?[^\\])\\\]'
    r'|\\\((.*?)\\\)'
)


def escape_brackets(text: str) -> str:
    """Rewrite \\[...\\] to $$...$$ and \\(...\\) to $...$ outside code spans."""
    if not text:
        return text

    def _replacer(m):
        code, block, inline = m.group(1), m.group(2), m.group(3)
        if code:
            return code
        if block:
            return f'$${block}$$'
        if inline:
            return f'${inline}$'
        return m.group(0)

    return _BRACKET_PATTERN.sub(_replacer, text)
