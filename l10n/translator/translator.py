"""
Translator - 内存翻译管理器

单一语言的内存翻译数据中心，并记录查找未命中的键。

状态机（每个 键 + 复数索引）：
    absent ──查找未命中 / set_untranslated──▶ untranslated(flag)
    untranslated ──set_text / save_text / get_text 命中──▶ translated
    translated ──remove_text / remove_key──▶ absent
    untranslated ──remove_untranslated──▶ absent

translated 与 untranslated 互斥：任何成功的读取或赋值都会清除对应的未翻译标记。

生命周期：
- 构造时如果传入存储后端，立即同步调用 storage.load(self)
- save_text / remove_text / remove_key 立即把单条变更写入后端
- close()（或 with 块结束）时执行一次完整保存

使用方法：
    with Translator(get_plural_strategy("en"), JsonFileStorage(path, "en")) as tr:
        tr.set_text("items", "%d item", 0)
        tr.set_text("items", "%d items", 1)
        tr.translate("items", 5)  # "5 items"
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from l10n.exceptions import PluralRangeError, StorageNotConfiguredError
from l10n.plural.base import Number, PluralStrategy
from l10n.storage.base import Storage
from l10n.translator.formatting import format_printf

logger = logging.getLogger(__name__)

Parameters = Union[Sequence[Any], Mapping[Any, Any]]


def _is_parameters(value: Any) -> bool:
    """判断 translate() 的 n 参数是否实际是格式化参数"""
    if isinstance(value, Mapping):
        return True
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


class Translator:
    """内存翻译管理器

    不拥有复数策略和存储后端，只调用它们。
    没有内部锁：多线程使用时需由调用方用同一把锁保护整个实例。

    Attributes:
        plural: 复数策略（只读）
        storage: 存储后端（可能为 None）
    """

    def __init__(self, plural: PluralStrategy, storage: Optional[Storage] = None):
        """初始化翻译器

        Args:
            plural: 复数策略
            storage: 存储后端，如果提供则立即加载全部翻译

        Raises:
            存储后端 load() 抛出的任何异常（原样传递）
        """
        self._plural = plural
        self._storage = storage
        self._translated: Dict[str, Dict[int, str]] = {}
        self._untranslated: Dict[str, Dict[int, bool]] = {}
        self._closed = False

        if storage is not None:
            storage.load(self)
            logger.debug(
                f"Loaded {len(self._translated)} keys from {type(storage).__name__}"
            )

    # ============ 生命周期 ============

    def __enter__(self) -> "Translator":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            self.close()
            return False

        # 已有异常在传播时，保存失败只记录日志，保留原始异常
        try:
            self.close()
        except Exception as save_error:
            logger.error(
                f"Final save failed while handling {exc_type.__name__}: {save_error}"
            )
        return False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """结束翻译器生命周期，执行最后一次完整保存

        未配置存储后端时不做任何事。重复调用无副作用。
        保存失败时异常原样抛出，翻译器保持未关闭状态，可以再次调用。
        """
        if self._closed:
            return
        if self._storage is not None:
            self._storage.save(self)
            logger.debug(f"Final save to {type(self._storage).__name__} complete")
        self._closed = True

    def save(self) -> None:
        """立即把全部状态保存到存储后端

        Raises:
            StorageNotConfiguredError: 未配置存储后端
        """
        storage = self._require_storage("save")
        storage.save(self)

    # ============ 访问器 ============

    @property
    def plural(self) -> PluralStrategy:
        return self._plural

    @property
    def storage(self) -> Optional[Storage]:
        return self._storage

    def get_plural(self) -> PluralStrategy:
        """获取复数策略"""
        return self._plural

    def get_translated(self) -> Dict[str, Dict[int, str]]:
        """获取已翻译映射的快照（修改快照不影响翻译器）"""
        return {key: dict(forms) for key, forms in self._translated.items()}

    def get_untranslated(self) -> Dict[str, Dict[int, bool]]:
        """获取未翻译标记的快照

        Returns:
            {key: {plural: probably_exists_in_storage}}
        """
        return {key: dict(marks) for key, marks in self._untranslated.items()}

    # ============ 内部工具 ============

    def _check_plural(self, plural: int) -> None:
        """校验复数索引，越界立即抛出，不做截断"""
        max_plural = self._plural.get_plurals_count() - 1
        if plural < 0 or plural > max_plural:
            raise PluralRangeError(plural, max_plural)

    def _require_storage(self, operation: str) -> Storage:
        if self._storage is None:
            raise StorageNotConfiguredError(operation)
        return self._storage

    def _store(self, key: str, text: str, plural: int) -> None:
        # 按需创建该键的内层映射
        forms = self._translated.get(key)
        if forms is None:
            forms = {}
            self._translated[key] = forms
        forms[plural] = text
        self.remove_untranslated(key, plural)

    # ============ 已翻译条目 ============

    def set_text(self, key: str, text: str, plural: int = 0) -> None:
        """设置翻译文本（仅内存，不写入后端）

        Args:
            key: 翻译键
            text: 翻译文本
            plural: 复数形式索引

        Raises:
            PluralRangeError: 复数索引越界
        """
        self._check_plural(plural)
        self._store(key, text, plural)

    def save_text(self, key: str, text: str, plural: int = 0) -> None:
        """设置翻译文本并立即增量保存到后端

        Raises:
            StorageNotConfiguredError: 未配置存储后端
            PluralRangeError: 复数索引越界
        """
        storage = self._require_storage("save_text")
        self._check_plural(plural)
        self._store(key, text, plural)
        storage.save_one(key, text, plural)

    def get_text(self, key: str, plural: int = 0) -> Optional[str]:
        """获取指定复数形式的翻译

        命中时清除该条目的未翻译标记

        Args:
            key: 翻译键
            plural: 复数形式索引

        Returns:
            翻译文本，未找到时返回 None

        Raises:
            PluralRangeError: 复数索引越界
        """
        self._check_plural(plural)
        forms = self._translated.get(key)
        if forms is None or plural not in forms:
            return None
        self.remove_untranslated(key, plural)
        return forms[plural]

    def get_forms(self, key: str) -> Optional[Dict[int, str]]:
        """获取某个键的全部复数形式

        命中时清除该键的全部未翻译标记

        Returns:
            {plural: text}，键不存在时返回 None
        """
        forms = self._translated.get(key)
        if not forms:
            return None
        self.remove_untranslated_key(key)
        return dict(forms)

    def remove_text(self, key: str, plural: int) -> Any:
        """删除某个键的单个复数形式（内存 + 后端）

        Returns:
            后端 delete() 的返回值

        Raises:
            StorageNotConfiguredError: 未配置存储后端
            PluralRangeError: 复数索引越界
        """
        storage = self._require_storage("remove_text")
        self._check_plural(plural)
        forms = self._translated.get(key)
        if forms is not None:
            forms.pop(plural, None)
            if not forms:
                del self._translated[key]
        self.remove_untranslated(key, plural)
        return storage.delete(key, plural)

    def remove_key(self, key: str) -> Any:
        """删除某个键的全部复数形式（内存 + 后端）

        Returns:
            后端 delete() 的返回值

        Raises:
            StorageNotConfiguredError: 未配置存储后端
        """
        storage = self._require_storage("remove_key")
        self._translated.pop(key, None)
        self.remove_untranslated_key(key)
        return storage.delete(key)

    def clear_translated(self) -> None:
        """清空已翻译映射（仅内存）"""
        self._translated = {}

    # ============ 未翻译标记 ============

    def set_untranslated(
        self, key: str, plural: int = 0, probably_exists_in_storage: bool = False
    ) -> None:
        """记录一次查找未命中

        标记只会从 False 升级为 True，不会降级：
        已标记为"可能存在于存储中"的条目，在被清除之前一直保持 True

        Args:
            key: 翻译键
            plural: 复数形式索引
            probably_exists_in_storage: 该条目是否可能仍能从存储中找到

        Raises:
            PluralRangeError: 复数索引越界
        """
        self._check_plural(plural)
        marks = self._untranslated.get(key)
        if marks is None:
            marks = {}
            self._untranslated[key] = marks
        if marks.get(plural) is not True:
            marks[plural] = bool(probably_exists_in_storage)

    def remove_untranslated(self, key: str, plural: int) -> None:
        """清除单个未翻译标记，该键没有剩余标记时一并删除"""
        marks = self._untranslated.get(key)
        if marks is None:
            return
        marks.pop(plural, None)
        if not marks:
            del self._untranslated[key]

    def remove_untranslated_key(self, key: str) -> None:
        """清除某个键的全部未翻译标记"""
        self._untranslated.pop(key, None)

    def clear_untranslated(self) -> None:
        """清空未翻译标记（仅内存）"""
        self._untranslated = {}

    # ============ 翻译入口 ============

    def translate(
        self,
        key: str,
        n: Union[Number, Parameters, None] = None,
        parameters: Optional[Parameters] = None,
    ) -> str:
        """翻译（主入口）

        未找到翻译时不报错：记录未翻译标记并返回 key 本身

        Args:
            key: 翻译键
            n: 数量，为 None 时使用单数；如果是列表 / 字典则视为 parameters
            parameters: printf 风格的位置参数；字典按值的顺序使用

        Returns:
            翻译并格式化后的字符串；如果给出了 n，它会追加到参数末尾

        Raises:
            TranslationFormatError: 模板占位符多于参数
            PluralRangeError: 复数策略返回了越界索引

        Examples:
            >>> tr.translate("items", 5)
            "5 items"
            >>> tr.translate("Hello %s", ["Bob"])
            "Hello Bob"
        """
        if _is_parameters(n):
            parameters = n
            n = None

        if parameters is None:
            args: List[Any] = []
        elif isinstance(parameters, Mapping):
            args = list(parameters.values())
        else:
            args = list(parameters)

        plural = 0 if n is None else self._plural.get_plural(n)

        text = self.get_text(key, plural)
        if text is None:
            logger.debug(f"Untranslated: {key!r} (plural {plural})")
            self.set_untranslated(key, plural)
            text = key

        if n is not None:
            args.append(n)

        if args:
            return format_printf(text, args)
        return text

    def __repr__(self) -> str:
        return (
            f"Translator(plural={self._plural!r}, "
            f"storage={type(self._storage).__name__ if self._storage else None}, "
            f"keys={len(self._translated)})"
        )
