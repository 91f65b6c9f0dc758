"""
统一异常定义
翻译器的错误分类与异常基础设施
"""
from enum import Enum
from typing import Optional


class ErrorType(str, Enum):
    """统一错误类型枚举

    所有模块抛出的异常都映射到以下类型
    """
    RANGE = "range"  # 复数索引越界
    USAGE = "usage"  # 编程错误（例如未配置存储后端就调用依赖后端的方法）
    FORMAT = "format"  # 占位符格式化失败（参数不足、类型不匹配）
    FILE_IO = "file_io"  # 文件系统异常（权限不足、磁盘满、原子重命名失败）
    PARSE = "parse"  # 翻译文件 / 配置文件解析失败
    INVALID_INPUT = "invalid_input"  # 不支持的语言、非法参数
    UNKNOWN = "unknown"  # 无法归类的其他错误


class L10nException(Exception):
    """统一应用异常

    Attributes:
        error_type: 错误类型（ErrorType 枚举）
        cause: 原始异常（可选）
    """

    def __init__(
        self,
        message: str,
        *,
        error_type: ErrorType,
        cause: Optional[Exception] = None
    ):
        super().__init__(message)
        self.error_type = error_type
        self.cause = cause

    def __str__(self) -> str:
        base = f"[{self.error_type.value}] {super().__str__()}"
        if self.cause:
            base += f" (caused by: {type(self.cause).__name__}: {self.cause})"
        return base


class PluralRangeError(L10nException, ValueError):
    """复数索引越界

    索引必须满足 0 <= plural <= plurals_count - 1，
    在任何状态修改之前抛出，从不截断。
    """

    def __init__(self, plural: int, max_plural: int):
        super().__init__(
            message=f"The plural ({plural}) is out of the allowed range (0..{max_plural})",
            error_type=ErrorType.RANGE,
        )
        self.plural = plural
        self.max_plural = max_plural


class StorageNotConfiguredError(L10nException, RuntimeError):
    """未配置存储后端时调用了依赖后端的方法（save_text / remove_text 等）"""

    def __init__(self, operation: str):
        super().__init__(
            message=f"'{operation}' requires a storage backend, but none is configured",
            error_type=ErrorType.USAGE,
        )
        self.operation = operation


class TranslationFormatError(L10nException, ValueError):
    """占位符格式化失败

    模板中的占位符多于传入的参数，或参数与转换符不匹配
    """

    def __init__(self, message: str, template: str, cause: Optional[Exception] = None):
        super().__init__(message, error_type=ErrorType.FORMAT, cause=cause)
        self.template = template


class StorageError(L10nException):
    """内置存储后端的读写失败"""


class UnsupportedLocaleError(L10nException, LookupError):
    """没有该语言的复数规则"""

    def __init__(self, locale: str):
        super().__init__(
            message=f"No plural rule is defined for locale '{locale}'",
            error_type=ErrorType.INVALID_INPUT,
        )
        self.locale = locale
