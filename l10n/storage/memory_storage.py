"""
Memory Storage

进程内存储后端，实现 Storage 协议
适用于测试，或由上层代码自行负责持久化的场景
"""

import copy
import logging
from typing import TYPE_CHECKING, Dict, Optional

if TYPE_CHECKING:
    from l10n.translator.translator import Translator

logger = logging.getLogger(__name__)


class MemoryStorage:
    """内存存储后端

    输入和输出都做深拷贝，与翻译器之间不共享可变状态

    Attributes:
        translated: {key: {plural: text}}
        untranslated: {key: {plural: probably_exists_in_storage}}
    """

    def __init__(
        self,
        translated: Optional[Dict[str, Dict[int, str]]] = None,
        untranslated: Optional[Dict[str, Dict[int, bool]]] = None,
    ):
        self.translated: Dict[str, Dict[int, str]] = copy.deepcopy(translated or {})
        self.untranslated: Dict[str, Dict[int, bool]] = copy.deepcopy(untranslated or {})
        self.save_count = 0

    def load(self, translator: "Translator") -> None:
        for key, forms in self.translated.items():
            for plural, text in forms.items():
                translator.set_text(key, text, plural)

        for key, marks in self.untranslated.items():
            for plural, flag in marks.items():
                # 已有翻译的条目不再恢复未翻译标记
                if plural in self.translated.get(key, {}):
                    continue
                translator.set_untranslated(key, plural, flag)

    def save(self, translator: "Translator") -> None:
        self.translated = translator.get_translated()
        self.untranslated = translator.get_untranslated()
        self.save_count += 1
        logger.debug(f"Saved {len(self.translated)} keys to memory")

    def save_one(self, key: str, text: str, plural: int) -> None:
        forms = self.translated.get(key)
        if forms is None:
            forms = {}
            self.translated[key] = forms
        forms[plural] = text

        marks = self.untranslated.get(key)
        if marks is not None:
            marks.pop(plural, None)
            if not marks:
                del self.untranslated[key]

    def delete(self, key: str, plural: Optional[int] = None) -> bool:
        """删除翻译

        Returns:
            是否有条目被删除
        """
        if plural is None:
            self.untranslated.pop(key, None)
            return self.translated.pop(key, None) is not None

        marks = self.untranslated.get(key)
        if marks is not None:
            marks.pop(plural, None)
            if not marks:
                del self.untranslated[key]

        forms = self.translated.get(key)
        if forms is None or plural not in forms:
            return False
        del forms[plural]
        if not forms:
            del self.translated[key]
        return True
