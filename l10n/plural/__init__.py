"""
Pluralization Module - 复数策略
"""

from .base import PluralStrategy
from .rules import (
    PLURAL_RULES,
    RulePlural,
    get_plural_strategy,
    normalize_locale,
    supported_locales,
)

__all__ = [
    "PluralStrategy",
    "PLURAL_RULES",
    "RulePlural",
    "get_plural_strategy",
    "normalize_locale",
    "supported_locales",
]
