"""
Plural Strategy Protocol

定义复数策略的接口协议，翻译器只依赖此协议
"""

from typing import Protocol, Union

Number = Union[int, float]


class PluralStrategy(Protocol):
    """复数策略协议

    纯函数，无状态：
    - get_plural：根据数量选择复数形式索引
    - get_plurals_count：该语言共有多少种复数形式
    """

    def get_plural(self, n: Number) -> int:
        """根据数量获取复数形式索引

        Args:
            n: 数量

        Returns:
            复数形式索引（0 <= index < get_plurals_count()）
        """
        ...

    def get_plurals_count(self) -> int:
        """获取复数形式总数

        Returns:
            复数形式数量（>= 1）
        """
        ...
