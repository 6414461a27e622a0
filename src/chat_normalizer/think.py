# -*- coding: utf-8 -*-
"""
Leading <think> block -> collapsible quoted section.

Reasoning models open their answer with ``<think>...</think>``. While the
reasoning is still streaming there is no closing tag; the block is then shown
with an in-progress spinner. Only a tag at the very start of the text counts.
"""

from typing import Optional

from chat_normalizer.models import ThinkBlock


THINK_OPEN = '<think>'
THINK_CLOSE = '</think>'

DEFAULT_THINKING_LABEL = 'Thinking...'
DEFAULT_DONE_LABEL = 'Thought process'

_SPINNER = '<span class="thinking-loader"></span>'


def scan_think_block(text: str) -> Optional[ThinkBlock]:
    """Locate a leading think block, or None if the text does not start with one."""
    if not text.startswith(THINK_OPEN):
        return None

    start = len(THINK_OPEN)
    close = text.find(THINK_CLOSE, start)
    if close < 0:
        return ThinkBlock(content=text[start:], terminated=False, end=len(text))

    return ThinkBlock(
        content=text[start:close],
        terminated=True,
        end=close + len(THINK_CLOSE),
    )


def quote_lines(content: str) -> str:
    """Prefix every line with '> '; blank lines become a bare '>'."""
    return '\n'.join(
        f'> {line}' if line.strip() else '>'
        for line in content.split('\n')
    )


def render_think_block(
    block: ThinkBlock,
    thinking_label: str = DEFAULT_THINKING_LABEL,
    done_label: str = DEFAULT_DONE_LABEL,
) -> str:
    if block.terminated:
        summary = done_label
    else:
        summary = f'{thinking_label} {_SPINNER}'
    return (
        '<details open>\n'
        f'<summary>{summary}</summary>\n'
        '\n'
        f'{quote_lines(block.content)}\n'
        '\n'
        '</details>'
    )


def format_think_text(
    text: str,
    thinking_label: str = DEFAULT_THINKING_LABEL,
    done_label: str = DEFAULT_DONE_LABEL,
) -> str:
    """Replace the leading think block with its rendered form; trailing text is kept as-is."""
    block = scan_think_block(text)
    if block is None:
        return text
    rendered = render_think_block(block, thinking_label, done_label)
    return rendered + text[block.end:]
