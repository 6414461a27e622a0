# -*- coding: utf-8 -*-
"""
Message normalization pipeline.

Stage order is fixed:

    attachments -> bracket escaping -> think block -> HTML fencing

Attachment headers are removed before the other stages can touch them, and
HTML fencing runs last so it sees the final fence state.
"""

import logging
from typing import Optional

from chat_normalizer.attachments import extract_attachments
from chat_normalizer.escaping import escape_brackets
from chat_normalizer.html_fence import wrap_html_code
from chat_normalizer.models import NormalizedMessage, NormalizerConfig
from chat_normalizer.think import format_think_text

logger = logging.getLogger(__name__)


class Normalizer:
    """
    Нормализатор сообщений с фиксированной конфигурацией.

    Не хранит состояния между вызовами, поэтому один экземпляр можно
    использовать из нескольких потоков.

    ```python
    normalizer = Normalizer(NormalizerConfig(wrap_html=False))
    message = normalizer.normalize(raw)
    print(message.text)
    ```
    """

    def __init__(self, config: Optional[NormalizerConfig] = None):
        self.config = config or NormalizerConfig()

    def normalize(self, raw: str) -> NormalizedMessage:
        """
        Прогнать текст через все включённые стадии.

        Args:
            raw: Исходный текст сообщения (может быть неполным при стриминге)

        Returns:
            Нормализованный текст и извлечённые вложения
        """
        raw = raw or ''
        config = self.config
        text = raw
        attachments = []

        if config.enable_attachment_links:
            extraction = extract_attachments(text)
            text = extraction.text
            attachments = extraction.records
            if attachments:
                logger.debug(f"Extracted {len(attachments)} attachment(s)")

        if config.escape_brackets:
            text = escape_brackets(text)

        if config.format_think:
            text = format_think_text(
                text,
                thinking_label=config.thinking_label,
                done_label=config.think_done_label,
            )

        if config.wrap_html:
            text = wrap_html_code(text)

        if text != raw:
            logger.debug(f"Normalized message: {len(raw)} -> {len(text)} chars")

        return NormalizedMessage(text=text, attachments=attachments, source=raw)


def normalize(raw: str, config: Optional[NormalizerConfig] = None) -> NormalizedMessage:
    """Normalize one message with ``config`` (defaults when omitted)."""
    return Normalizer(config).normalize(raw)
