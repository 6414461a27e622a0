"""
Исключения для Chat Normalizer.

Стадии конвейера никогда не бросают исключений; эти классы используются
API поиска вложений и конфигурацией.
"""

from typing import Optional, Dict, Any


class NormalizerError(Exception):
    """Базовое исключение для Chat Normalizer."""
    
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ConfigError(NormalizerError):
    """Ошибка конфигурации (неизвестный параметр или неверное значение)."""
    pass


class InvalidReferenceError(NormalizerError):
    """Reference token не удалось разобрать."""
    
    def __init__(self, href: str, reason: str = "malformed attachment reference"):
        self.href = href
        super().__init__(f"{reason}: {href}", details={"href": href})


class AttachmentNotFoundError(NormalizerError):
    """Вложение не найдено в индексе."""
    
    def __init__(self, file_name: str, details: Optional[Dict[str, Any]] = None):
        self.file_name = file_name
        super().__init__(f"Attachment not found: {file_name}", details=details)
