"""
统一日志系统
支持：控制台输出、文件输出（轮转）、上下文字段（locale）

各模块使用标准的 logging.getLogger(__name__)，
由应用在启动时调用 setup_logging() 配置 handler。
"""

import logging
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from threading import local
from typing import Optional

ROOT_LOGGER_NAME = "l10n"

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# 线程本地存储，用于存储上下文信息（locale 等）
_context = local()


def set_log_context(locale: Optional[str] = None, **kwargs) -> None:
    """设置日志上下文（线程本地）

    Args:
        locale: 当前语言代码
        **kwargs: 其他上下文字段（storage, key 等）
    """
    _context.locale = locale
    _context.extra_fields = kwargs


def clear_log_context() -> None:
    """清除日志上下文"""
    if hasattr(_context, "locale"):
        delattr(_context, "locale")
    if hasattr(_context, "extra_fields"):
        delattr(_context, "extra_fields")


class ContextFormatter(logging.Formatter):
    """支持上下文字段的日志格式化器

    格式：[时间] [级别] [locale:<code>] 消息 [额外字段]
    """

    def format(self, record: logging.LogRecord) -> str:
        locale = getattr(_context, "locale", None) or getattr(record, "locale", None)
        context_str = f" [locale:{locale}]" if locale else ""

        extra_fields = getattr(_context, "extra_fields", {}) or {}
        extra_str = "".join(f" {k}={v}" for k, v in extra_fields.items() if v is not None)

        # 格式化时间戳（到毫秒）
        timestamp = datetime.fromtimestamp(record.created).strftime(
            "%Y-%m-%d %H:%M:%S.%f"
        )[:-3]

        formatted = f"[{timestamp}] [{record.levelname:5s}]{context_str} {record.getMessage()}{extra_str}"
        if record.exc_info:
            formatted += "\n" + self.formatException(record.exc_info)
        return formatted


def _create_file_handler(log_file: Path, level: int) -> Optional[RotatingFileHandler]:
    """创建文件 handler

    Returns:
        RotatingFileHandler 实例，目录不可写时返回 None
    """
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        # 最大 20MB，保留 5 个备份
        handler = RotatingFileHandler(
            log_file,
            maxBytes=20 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
    except OSError:
        return None
    handler.setLevel(level)
    handler.setFormatter(ContextFormatter())
    return handler


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    console_output: bool = True,
) -> logging.Logger:
    """配置 l10n 包的日志输出

    重复调用只更新级别，不会重复添加 handler

    Args:
        level: 日志级别（DEBUG/INFO/WARN/ERROR）
        log_file: 日志文件路径，为 None 时不输出到文件
        console_output: 是否输出到控制台

    Returns:
        l10n 根 logger
    """
    numeric_level = LEVELS.get(level.upper(), logging.INFO)
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(numeric_level)

    if root.handlers:
        for handler in root.handlers:
            handler.setLevel(numeric_level)
        return root

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(ContextFormatter())
        root.addHandler(console_handler)

    if log_file is not None:
        file_handler = _create_file_handler(Path(log_file), numeric_level)
        if file_handler:
            root.addHandler(file_handler)
        else:
            # 文件 handler 创建失败，回退到控制台
            if not console_output:
                console_handler = logging.StreamHandler(sys.stdout)
                console_handler.setLevel(numeric_level)
                console_handler.setFormatter(ContextFormatter())
                root.addHandler(console_handler)
            root.warning(f"Log file {log_file} is not writable, falling back to console")

    return root
