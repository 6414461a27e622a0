"""
Chat Normalizer.

Подготовка текста сообщений чата к рендерингу markdown: вложения,
LaTeX-скобки, блок <think>, HTML-документы.
"""

from chat_normalizer.pipeline import Normalizer, normalize
from chat_normalizer.escaping import escape_brackets
from chat_normalizer.html_fence import wrap_html_code
from chat_normalizer.think import format_think_text
from chat_normalizer.attachments import (
    AttachmentIndex,
    extract_attachments,
    find_reference_tokens,
    parse_reference,
    recover_body,
)
from chat_normalizer.links import LinkKind, LinkInfo, classify_link
from chat_normalizer.code_blocks import CodeBlock, iter_code_blocks
from chat_normalizer.models import (
    AttachmentRecord,
    AttachmentRef,
    ExtractionResult,
    NormalizedMessage,
    NormalizerConfig,
    ThinkBlock,
)
from chat_normalizer.exceptions import (
    NormalizerError,
    ConfigError,
    InvalidReferenceError,
    AttachmentNotFoundError,
)

__version__ = "1.0.0"

__all__ = [
    # Pipeline
    "Normalizer",
    "normalize",
    # Stages
    "escape_brackets",
    "wrap_html_code",
    "format_think_text",
    "extract_attachments",
    # Attachments
    "AttachmentIndex",
    "find_reference_tokens",
    "parse_reference",
    "recover_body",
    # Renderer hooks
    "LinkKind",
    "LinkInfo",
    "classify_link",
    "CodeBlock",
    "iter_code_blocks",
    # Models
    "AttachmentRecord",
    "AttachmentRef",
    "ExtractionResult",
    "NormalizedMessage",
    "NormalizerConfig",
    "ThinkBlock",
    # Exceptions
    "NormalizerError",
    "ConfigError",
    "InvalidReferenceError",
    "AttachmentNotFoundError",
]
