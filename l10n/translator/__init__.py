"""
Translator Module - 内存翻译管理
"""

from .formatting import format_printf
from .translator import Translator

__all__ = [
    "Translator",
    "format_printf",
]
