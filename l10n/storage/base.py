"""
Storage Protocol

定义存储后端的接口协议，翻译器只依赖此协议
文件、数据库等实现此协议即可无缝替换
"""

from typing import TYPE_CHECKING, Any, Optional, Protocol

if TYPE_CHECKING:
    from l10n.translator.translator import Translator


class Storage(Protocol):
    """存储后端协议

    所有方法都可能失败，异常原样传递给翻译器的调用方
    """

    def load(self, translator: "Translator") -> None:
        """从持久化存储加载全部翻译到翻译器

        通常通过 translator.set_text() / set_untranslated() 写入

        Args:
            translator: 目标翻译器
        """
        ...

    def save(self, translator: "Translator") -> None:
        """持久化翻译器当前的全部状态

        Args:
            translator: 来源翻译器
        """
        ...

    def save_one(self, key: str, text: str, plural: int) -> None:
        """增量保存单条翻译

        Args:
            key: 翻译键
            text: 翻译文本
            plural: 复数形式索引
        """
        ...

    def delete(self, key: str, plural: Optional[int] = None) -> Any:
        """删除翻译

        Args:
            key: 翻译键
            plural: 复数形式索引，为 None 时删除该键的全部复数形式

        Returns:
            实现自定义的删除结果
        """
        ...
