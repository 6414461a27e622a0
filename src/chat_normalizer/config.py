"""
Управление конфигурацией нормализатора.

Хранит настройки конвейера в файле в домашней директории пользователя.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Dict, Any

from pydantic import ValidationError

from chat_normalizer.exceptions import ConfigError
from chat_normalizer.models import NormalizerConfig

logger = logging.getLogger(__name__)

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


class ConfigManager:
    """Менеджер конфигурации нормализатора."""
    
    # Директория для хранения конфигурации
    CONFIG_DIR_NAME = ".chat_normalizer"
    CONFIG_FILE_NAME = "config.json"
    
    def __init__(self, config_dir: Optional[Path] = None):
        """
        Инициализация менеджера конфигурации.
        
        Args:
            config_dir: Путь к директории конфигурации.
                        По умолчанию ~/.chat_normalizer/
        """
        if config_dir is None:
            self.config_dir = Path.home() / self.CONFIG_DIR_NAME
        else:
            self.config_dir = Path(config_dir)
        
        self.config_file = self.config_dir / self.CONFIG_FILE_NAME
        self._config: Optional[NormalizerConfig] = None
    
    def _ensure_config_dir(self) -> None:
        """Создать директорию конфигурации если не существует."""
        self.config_dir.mkdir(parents=True, exist_ok=True)
    
    def load(self) -> NormalizerConfig:
        """
        Загрузить конфигурацию из файла.
        
        Returns:
            Конфигурация конвейера (по умолчанию, если файла нет)
        """
        if self._config is not None:
            return self._config
        
        if not self.config_file.exists():
            self._config = NormalizerConfig()
            return self._config
        
        try:
            with open(self.config_file, "r", encoding="utf-8") as f:
                data = json.load(f)
            self._config = NormalizerConfig(**data)
        except (ValueError, TypeError) as e:
            # Поврежденный файл - работаем с настройками по умолчанию
            logger.warning(f"Ignoring unreadable config {self.config_file}: {e}")
            self._config = NormalizerConfig()
        
        return self._config
    
    def save(self, config: Optional[NormalizerConfig] = None) -> None:
        """
        Сохранить конфигурацию в файл.
        
        Args:
            config: Конфигурация для сохранения.
                   Если не указана, сохраняет текущую.
        """
        if config is not None:
            self._config = config
        
        if self._config is None:
            return
        
        self._ensure_config_dir()
        
        with open(self.config_file, "w", encoding="utf-8") as f:
            json.dump(self._config.model_dump(), f, indent=2, ensure_ascii=False)
        logger.debug(f"Config saved to: {self.config_file}")
    
    def get_config(self) -> NormalizerConfig:
        """Получить текущую конфигурацию."""
        if self._config is None:
            return self.load()
        return self._config
    
    def as_dict(self) -> Dict[str, Any]:
        return self.get_config().model_dump()
    
    def set_option(self, name: str, value: Any) -> NormalizerConfig:
        """
        Изменить один параметр и сохранить.
        
        Строковые значения для булевых параметров принимаются в виде
        true/false, yes/no, on/off, 1/0.
        
        Args:
            name: Имя параметра
            value: Новое значение
        
        Returns:
            Обновлённая конфигурация
        
        Raises:
            ConfigError: Неизвестный параметр или неверное значение
        """
        fields = NormalizerConfig.model_fields
        if name not in fields:
            raise ConfigError(
                f"Unknown option: {name}",
                details={"available": sorted(fields)}
            )
        
        if fields[name].annotation is bool and isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE_VALUES:
                value = True
            elif lowered in _FALSE_VALUES:
                value = False
            else:
                raise ConfigError(f"Option {name} expects true/false, got: {value}")
        
        data = self.as_dict()
        data[name] = value
        try:
            config = NormalizerConfig(**data)
        except ValidationError as e:
            raise ConfigError(f"Invalid value for {name}: {value}", details={"errors": e.errors()})
        
        self.save(config)
        return config
    
    def reset(self) -> NormalizerConfig:
        """Сбросить настройки к значениям по умолчанию."""
        config = NormalizerConfig()
        self.save(config)
        return config


# Глобальный экземпляр менеджера конфигурации
_config_manager: Optional[ConfigManager] = None


def get_config_manager(config_dir: Optional[Path] = None) -> ConfigManager:
    """
    Получить глобальный экземпляр менеджера конфигурации.
    
    Args:
        config_dir: Путь к директории конфигурации
    
    Returns:
        ConfigManager
    """
    global _config_manager
    
    if _config_manager is None or config_dir is not None:
        _config_manager = ConfigManager(config_dir)
    
    return _config_manager
