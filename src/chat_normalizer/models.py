"""
Pydantic модели нормализатора сообщений.

Records extracted from raw chat text and the result of a pipeline run.
"""

from typing import Optional, List, Tuple
from pydantic import BaseModel, ConfigDict, Field


# ===== ATTACHMENT MODELS =====

def format_size_kb(size_bytes: float) -> str:
    """Render a byte count as the two-decimal KB figure used in headers."""
    return f"{size_bytes / 1024:.2f}"


def format_number(value: float) -> str:
    """Render a number the way it appears in reference tokens (1024, not 1024.0)."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


class AttachmentRef(BaseModel):
    """Ссылка на вложение, декодированная из reference token."""
    model_config = ConfigDict(frozen=True)

    file_name: str
    file_type: str
    file_size_bytes: float

    @property
    def key(self) -> Tuple[str, str, str]:
        return (self.file_name, self.file_type, format_number(self.file_size_bytes))


class AttachmentRecord(BaseModel):
    """Файл, извлечённый из текста сообщения."""
    model_config = ConfigDict(frozen=True)

    file_name: str
    file_type: str
    file_size_bytes: float = Field(description="Размер в байтах (KB x 1024)")
    body: str
    source_span: Tuple[int, int] = Field(
        description="Смещения (start, end) заголовка и тела в исходном тексте"
    )

    @property
    def size_kb_label(self) -> str:
        return format_size_kb(self.file_size_bytes)

    @property
    def header(self) -> str:
        # Imported lazily: attachments depends on this module
        from chat_normalizer.attachments import build_header
        return build_header(self.file_name, self.file_type, self.file_size_bytes)

    @property
    def ref(self) -> AttachmentRef:
        return AttachmentRef(
            file_name=self.file_name,
            file_type=self.file_type,
            file_size_bytes=self.file_size_bytes,
        )

    @property
    def key(self) -> Tuple[str, str, str]:
        return self.ref.key

    @property
    def reference(self) -> str:
        from chat_normalizer.attachments import build_reference
        return build_reference(self.file_name, self.file_type, self.file_size_bytes)


class ExtractionResult(BaseModel):
    """Результат работы экстрактора вложений."""
    text: str
    records: List[AttachmentRecord] = Field(default_factory=list)


# ===== THINK MODELS =====

class ThinkBlock(BaseModel):
    """Ведущий блок <think>, найденный сканером (живёт один проход)."""
    open: bool = Field(
        default=True,
        description="Всегда True: без ведущего <think> сканер возвращает None, а не блок",
    )
    content: str
    terminated: bool
    end: int = Field(description="Смещение конца ведущего блока в тексте")


# ===== PIPELINE MODELS =====

class NormalizedMessage(BaseModel):
    """Нормализованный текст и индекс извлечённых вложений."""
    text: str
    attachments: List[AttachmentRecord] = Field(default_factory=list)
    source: str = Field(description="Исходный текст, сохранённый для восстановления вложений")

    def lookup(self, ref) -> AttachmentRecord:
        """
        Найти запись по ссылке.

        Args:
            ref: AttachmentRef или href вида file://...

        Returns:
            Запись вложения

        Raises:
            InvalidReferenceError: href не разбирается
            AttachmentNotFoundError: запись не найдена
        """
        from chat_normalizer.attachments import AttachmentIndex
        return AttachmentIndex(self.attachments, self.source).lookup(ref)

    def recover(self, ref) -> Optional[str]:
        """Вернуть исходное содержимое файла или None если его не найти."""
        from chat_normalizer.attachments import AttachmentIndex
        return AttachmentIndex(self.attachments, self.source).recover(ref)


# ===== LOCAL CONFIG MODELS =====

class NormalizerConfig(BaseModel):
    """Настройки конвейера нормализации."""
    enable_attachment_links: bool = Field(
        default=True,
        description="Заменять вложения на reference token"
    )
    escape_brackets: bool = Field(default=True, description="Переводить \\( \\) и \\[ \\] в $ и $$")
    format_think: bool = Field(default=True, description="Сворачивать ведущий блок <think>")
    wrap_html: bool = Field(default=True, description="Оборачивать HTML-документы в ```html")
    thinking_label: str = Field(default="Thinking...", description="Заголовок незавершённого блока")
    think_done_label: str = Field(default="Thought process", description="Заголовок завершённого блока")
