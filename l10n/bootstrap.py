"""
Bootstrap - 按配置组装翻译器

使用方法：
    from l10n.bootstrap import open_translator
    from l10n.config import TranslatorConfig

    with open_translator(TranslatorConfig(locale="ru")) as tr:
        tr.translate("files", 3)
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from l10n.config.manager import TranslatorConfig
from l10n.logger import clear_log_context, set_log_context, setup_logging
from l10n.plural.rules import get_plural_strategy
from l10n.storage.base import Storage
from l10n.storage.json_storage import JsonFileStorage
from l10n.storage.memory_storage import MemoryStorage
from l10n.translator.translator import Translator

logger = logging.getLogger(__name__)


def create_storage(config: TranslatorConfig) -> Optional[Storage]:
    """根据配置创建存储后端

    Returns:
        存储后端实例；storage 为 "none" 时返回 None
    """
    if config.storage == "json":
        return JsonFileStorage(config.get_storage_dir(), config.locale)
    if config.storage == "memory":
        return MemoryStorage()
    return None


def create_translator(config: Optional[TranslatorConfig] = None) -> Translator:
    """根据配置创建翻译器（立即从存储后端加载）

    调用方负责在结束时调用 close()，推荐使用 open_translator()

    Raises:
        UnsupportedLocaleError: 没有该语言的复数规则
        StorageError: 翻译文件无法读取或解析
    """
    config = config or TranslatorConfig.default()
    setup_logging(config.log_level)
    set_log_context(locale=config.locale)
    plural = get_plural_strategy(config.locale)
    storage = create_storage(config)
    logger.info(
        f"Creating translator for {config.locale} "
        f"(storage={config.storage}, plurals={plural.get_plurals_count()})"
    )
    return Translator(plural, storage)


@contextmanager
def open_translator(config: Optional[TranslatorConfig] = None) -> Iterator[Translator]:
    """创建翻译器，并保证在所有退出路径上执行最后一次保存

    退出时清除 create_translator 设置的日志上下文
    """
    try:
        with create_translator(config) as translator:
            yield translator
    finally:
        clear_log_context()
