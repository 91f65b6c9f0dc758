"""
Plural Rules

按 gettext Plural-Forms 表达式实现的各语言复数规则
不同语言复数形式差异大：
- 中文 / 日文 / 韩文：无复数变化（1 种）
- 英文 / 德文：1 个 vs 多个（2 种）
- 法文 / 土耳其文：0 和 1 都用单数（2 种）
- 俄文 / 波兰文 / 捷克文：3 种
- 阿拉伯文：6 种
"""

from typing import Callable, Dict, List, Tuple

from l10n.exceptions import UnsupportedLocaleError
from l10n.plural.base import Number

PluralRule = Callable[[Number], int]


def _singular_only(n: Number) -> int:
    return 0


def _one_other(n: Number) -> int:
    # nplurals=2; plural=(n != 1);
    return 0 if n == 1 else 1


def _zero_one_other(n: Number) -> int:
    # nplurals=2; plural=(n > 1);
    return 0 if n <= 1 else 1


def _slavic_east(n: Number) -> int:
    # nplurals=3; plural=(n%10==1 && n%100!=11 ? 0 : n%10>=2 && n%10<=4 && (n%100<10 || n%100>=20) ? 1 : 2);
    if n % 10 == 1 and n % 100 != 11:
        return 0
    if 2 <= n % 10 <= 4 and (n % 100 < 10 or n % 100 >= 20):
        return 1
    return 2


def _polish(n: Number) -> int:
    # nplurals=3; plural=(n==1 ? 0 : n%10>=2 && n%10<=4 && (n%100<12 || n%100>14) ? 1 : 2);
    if n == 1:
        return 0
    if 2 <= n % 10 <= 4 and (n % 100 < 12 or n % 100 > 14):
        return 1
    return 2


def _czech(n: Number) -> int:
    # nplurals=3; plural=(n==1) ? 0 : (n>=2 && n<=4) ? 1 : 2;
    if n == 1:
        return 0
    if 2 <= n <= 4:
        return 1
    return 2


def _arabic(n: Number) -> int:
    # nplurals=6; zero, one, two, few (3-10), many (11-99), other
    if n == 0:
        return 0
    if n == 1:
        return 1
    if n == 2:
        return 2
    if 3 <= n % 100 <= 10:
        return 3
    if 11 <= n % 100 <= 99:
        return 4
    return 5


# locale -> (复数形式数量, 规则函数)
PLURAL_RULES: Dict[str, Tuple[int, PluralRule]] = {
    "en": (2, _one_other),
    "de": (2, _one_other),
    "nl": (2, _one_other),
    "sv": (2, _one_other),
    "da": (2, _one_other),
    "no": (2, _one_other),
    "es": (2, _one_other),
    "it": (2, _one_other),
    "pt": (2, _one_other),
    "pt_BR": (2, _zero_one_other),
    "fr": (2, _zero_one_other),
    "tr": (2, _zero_one_other),
    "ru": (3, _slavic_east),
    "uk": (3, _slavic_east),
    "pl": (3, _polish),
    "cs": (3, _czech),
    "sk": (3, _czech),
    "ar": (6, _arabic),
    "ja": (1, _singular_only),
    "ko": (1, _singular_only),
    "zh": (1, _singular_only),
}


class RulePlural:
    """基于规则函数的复数策略

    实现 PluralStrategy 协议

    Attributes:
        locale: 语言代码
        plurals_count: 复数形式数量
    """

    def __init__(self, locale: str, plurals_count: int, rule: PluralRule):
        if plurals_count < 1:
            raise ValueError(f"plurals_count must be >= 1, got {plurals_count}")
        self.locale = locale
        self.plurals_count = plurals_count
        self._rule = rule

    def get_plural(self, n: Number) -> int:
        # gettext 规则按非负整数计算，小数截断取整
        return self._rule(int(abs(n)))

    def get_plurals_count(self) -> int:
        return self.plurals_count

    def __repr__(self) -> str:
        return f"RulePlural(locale={self.locale!r}, plurals_count={self.plurals_count})"


def normalize_locale(locale: str) -> str:
    """标准化语言代码

    Args:
        locale: 语言代码（如 "en-us", "pt_br", "zh-CN"）

    Returns:
        标准化后的代码（如 "en_US", "pt_BR", "zh_CN"）
    """
    parts = (locale or "").strip().replace("-", "_").split("_")
    if len(parts) == 1:
        return parts[0].lower()
    return parts[0].lower() + "_" + parts[1].upper()


def get_plural_strategy(locale: str) -> RulePlural:
    """根据语言代码获取复数策略

    先精确匹配（pt_BR），再回退到基础语言（pt）

    Args:
        locale: 语言代码

    Returns:
        RulePlural 实例

    Raises:
        UnsupportedLocaleError: 没有该语言的规则
    """
    normalized = normalize_locale(locale)
    entry = PLURAL_RULES.get(normalized) or PLURAL_RULES.get(normalized.split("_")[0])
    if entry is None:
        raise UnsupportedLocaleError(locale)
    plurals_count, rule = entry
    return RulePlural(normalized, plurals_count, rule)


def supported_locales() -> List[str]:
    """获取所有有复数规则的语言代码"""
    return sorted(PLURAL_RULES)
