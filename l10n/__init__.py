"""
l10n - 内存翻译管理器

持有 键 -> 文本 映射（含复数形式），按数量选择复数形式，
记录查找未命中的键，并把持久化委托给可替换的存储后端。

使用方法：
    from l10n import Translator, MemoryStorage, get_plural_strategy

    with Translator(get_plural_strategy("en"), MemoryStorage()) as tr:
        tr.set_text("items", "%d item", 0)
        tr.set_text("items", "%d items", 1)
        tr.translate("items", 5)   # "5 items"
        tr.translate("apple", 1)   # "apple"（未翻译，回退到 key）
        tr.get_untranslated()      # {"apple": {0: False}}
"""

from .bootstrap import create_storage, create_translator, open_translator
from .config import ConfigManager, TranslatorConfig
from .exceptions import (
    ErrorType,
    L10nException,
    PluralRangeError,
    StorageError,
    StorageNotConfiguredError,
    TranslationFormatError,
    UnsupportedLocaleError,
)
from .logger import setup_logging
from .plural import PluralStrategy, RulePlural, get_plural_strategy
from .storage import JsonFileStorage, MemoryStorage, Storage
from .translator import Translator, format_printf

__version__ = "1.0.0"

__all__ = [
    "Translator",
    "format_printf",
    "PluralStrategy",
    "RulePlural",
    "get_plural_strategy",
    "Storage",
    "JsonFileStorage",
    "MemoryStorage",
    "TranslatorConfig",
    "ConfigManager",
    "create_storage",
    "create_translator",
    "open_translator",
    "setup_logging",
    "ErrorType",
    "L10nException",
    "PluralRangeError",
    "StorageError",
    "StorageNotConfiguredError",
    "TranslationFormatError",
    "UnsupportedLocaleError",
]
