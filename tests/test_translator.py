"""
Tests for l10n/translator/translator.py

运行: python -m pytest tests/test_translator.py -v
"""

import pytest

from l10n.exceptions import (
    PluralRangeError,
    StorageNotConfiguredError,
    TranslationFormatError,
)
from l10n.storage.memory_storage import MemoryStorage
from l10n.translator.translator import Translator


class TwoFormsPlural:
    """测试用复数策略：1 -> 0，其他 -> 1"""

    def get_plural(self, n):
        return 0 if n == 1 else 1

    def get_plurals_count(self):
        return 2


class RecordingStorage(MemoryStorage):
    """记录调用顺序的存储后端"""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.calls = []

    def load(self, translator):
        self.calls.append(("load",))
        super().load(translator)

    def save(self, translator):
        self.calls.append(("save",))
        super().save(translator)

    def save_one(self, key, text, plural):
        self.calls.append(("save_one", key, text, plural))
        super().save_one(key, text, plural)

    def delete(self, key, plural=None):
        self.calls.append(("delete", key, plural))
        return super().delete(key, plural)


class FailingStorage(MemoryStorage):
    """save 总是失败的存储后端"""

    def save(self, translator):
        raise OSError("disk full")


@pytest.fixture
def translator():
    return Translator(TwoFormsPlural())


class TestSetAndGetText:
    """set_text / get_text / get_forms 测试"""

    def test_set_then_get(self, translator):
        """测试设置后读取"""
        translator.set_text("hello", "Hallo", 0)
        assert translator.get_text("hello", 0) == "Hallo"
        assert "hello" not in translator.get_untranslated()

    def test_default_plural_is_zero(self, translator):
        """测试默认复数索引为 0"""
        translator.set_text("hello", "Hallo")
        assert translator.get_text("hello") == "Hallo"
        assert translator.get_translated() == {"hello": {0: "Hallo"}}

    def test_get_missing_returns_none(self, translator):
        """测试未找到返回 None"""
        assert translator.get_text("missing", 0) is None
        translator.set_text("k", "a", 0)
        assert translator.get_text("k", 1) is None

    def test_get_forms_returns_all_plurals(self, translator):
        """测试读取全部复数形式"""
        translator.set_text("k", "a", 0)
        translator.set_text("k", "b", 1)
        assert translator.get_forms("k") == {0: "a", 1: "b"}
        assert translator.get_text("k", 0) == "a"

    def test_get_forms_missing(self, translator):
        """测试读取不存在的键"""
        assert translator.get_forms("missing") is None

    def test_get_forms_clears_all_markers(self, translator):
        """测试读取全部形式时清除该键的全部未翻译标记"""
        translator.set_text("k", "a", 0)
        translator.set_untranslated("k", 1)
        translator.get_forms("k")
        assert translator.get_untranslated() == {}

    def test_get_text_hit_clears_marker(self, translator):
        """测试命中时清除未翻译标记"""
        translator.set_text("k", "a", 0)
        # 直接标记一个已存在的条目，模拟外部标记
        translator.set_untranslated("k", 0)
        assert translator.get_text("k", 0) == "a"
        assert translator.get_untranslated() == {}

    def test_get_forms_returns_copy(self, translator):
        """测试返回值修改不影响内部状态"""
        translator.set_text("k", "a", 0)
        forms = translator.get_forms("k")
        forms[0] = "changed"
        assert translator.get_text("k", 0) == "a"

    def test_overwrite(self, translator):
        """测试覆盖已有翻译"""
        translator.set_text("k", "a", 0)
        translator.set_text("k", "b", 0)
        assert translator.get_text("k", 0) == "b"


class TestPluralRange:
    """复数索引校验测试"""

    def test_set_text_at_count_fails(self, translator):
        """测试索引等于复数形式数量时失败"""
        with pytest.raises(PluralRangeError):
            translator.set_text("k", "text", 2)

    def test_set_text_at_last_index_succeeds(self, translator):
        """测试最后一个合法索引"""
        translator.set_text("k", "text", 1)
        assert translator.get_text("k", 1) == "text"

    def test_negative_index_fails(self, translator):
        """测试负数索引"""
        with pytest.raises(PluralRangeError):
            translator.set_text("k", "text", -1)

    def test_range_error_is_value_error(self, translator):
        """测试异常类型"""
        with pytest.raises(ValueError):
            translator.get_text("k", 5)

    def test_failure_does_not_mutate(self, translator):
        """测试越界时不修改状态"""
        with pytest.raises(PluralRangeError):
            translator.set_text("k", "text", 3)
        with pytest.raises(PluralRangeError):
            translator.set_untranslated("k", 3)
        assert translator.get_translated() == {}
        assert translator.get_untranslated() == {}

    def test_error_message(self, translator):
        """测试错误信息"""
        with pytest.raises(PluralRangeError) as exc_info:
            translator.set_text("k", "text", 7)
        assert exc_info.value.plural == 7
        assert exc_info.value.max_plural == 1
        assert "[range]" in str(exc_info.value)


class TestUntranslated:
    """未翻译标记测试"""

    def test_set_untranslated_default(self, translator):
        """测试默认标记"""
        translator.set_untranslated("x")
        assert translator.get_untranslated() == {"x": {0: False}}

    def test_flag_never_downgrades(self, translator):
        """测试标记只升级不降级"""
        translator.set_untranslated("x", 0, True)
        translator.set_untranslated("x", 0, False)
        assert translator.get_untranslated() == {"x": {0: True}}

    def test_flag_upgrades(self, translator):
        """测试 False 升级为 True"""
        translator.set_untranslated("x", 0, False)
        translator.set_untranslated("x", 0, True)
        assert translator.get_untranslated() == {"x": {0: True}}

    def test_remove_untranslated_is_idempotent(self, translator):
        """测试重复清除与清除一次效果相同"""
        translator.set_untranslated("x", 0)
        translator.set_untranslated("x", 1)
        translator.remove_untranslated("x", 0)
        once = translator.get_untranslated()
        translator.remove_untranslated("x", 0)
        assert translator.get_untranslated() == once == {"x": {1: False}}

    def test_remove_last_marker_drops_key(self, translator):
        """测试清除最后一个标记时删除该键"""
        translator.set_untranslated("x", 0)
        translator.remove_untranslated("x", 0)
        assert translator.get_untranslated() == {}

    def test_remove_untranslated_key(self, translator):
        """测试清除整个键的标记"""
        translator.set_untranslated("x", 0)
        translator.set_untranslated("x", 1)
        translator.remove_untranslated_key("x")
        translator.remove_untranslated_key("x")
        assert translator.get_untranslated() == {}

    def test_set_text_clears_marker(self, translator):
        """测试赋值后互斥：不再是未翻译"""
        translator.set_untranslated("x", 0)
        translator.set_text("x", "y", 0)
        assert ("x" in translator.get_untranslated()) is False
        assert translator.get_text("x", 0) == "y"

    def test_set_text_keeps_other_plural_markers(self, translator):
        """测试只清除对应复数形式的标记"""
        translator.set_untranslated("x", 0)
        translator.set_untranslated("x", 1)
        translator.set_text("x", "y", 0)
        assert translator.get_untranslated() == {"x": {1: False}}

    def test_snapshot_is_detached(self, translator):
        """测试快照修改不影响翻译器"""
        translator.set_untranslated("x", 0)
        snapshot = translator.get_untranslated()
        snapshot["x"][0] = True
        snapshot["y"] = {0: True}
        assert translator.get_untranslated() == {"x": {0: False}}


class TestClear:
    """clear_translated / clear_untranslated 测试"""

    def test_clear_translated(self):
        """测试清空已翻译映射（不访问后端）"""
        storage = RecordingStorage()
        translator = Translator(TwoFormsPlural(), storage)
        translator.set_text("a", "A")
        translator.set_untranslated("b")
        translator.clear_translated()
        assert translator.get_translated() == {}
        assert translator.get_untranslated() == {"b": {0: False}}
        assert storage.calls == [("load",)]

    def test_clear_untranslated(self, translator):
        """测试清空未翻译标记"""
        translator.set_text("a", "A")
        translator.set_untranslated("b")
        translator.clear_untranslated()
        assert translator.get_untranslated() == {}
        assert translator.get_translated() == {"a": {0: "A"}}


class TestTranslate:
    """translate() 测试"""

    def test_singular_fallback(self, translator):
        """测试未翻译时回退到 key 并记录"""
        assert translator.translate("apple", 1) == "apple"
        assert translator.get_untranslated() == {"apple": {0: False}}

    def test_fallback_without_count(self, translator):
        """测试无数量时回退"""
        assert translator.translate("banana") == "banana"
        assert translator.get_untranslated() == {"banana": {0: False}}

    def test_fallback_plural_marker(self, translator):
        """测试复数形式未翻译时记录对应索引"""
        assert translator.translate("pears", 5) == "pears"
        assert translator.get_untranslated() == {"pears": {1: False}}

    def test_pluralized_formatting(self, translator):
        """测试复数选择和数量格式化"""
        translator.set_text("items", "%d item", 0)
        translator.set_text("items", "%d items", 1)
        assert translator.translate("items", 5) == "5 items"
        assert translator.translate("items", 1) == "1 item"
        assert translator.get_untranslated() == {}

    def test_hit_clears_marker(self, translator):
        """测试先未命中后命中"""
        translator.translate("x")
        translator.set_text("x", "X")
        assert translator.translate("x") == "X"
        assert translator.get_untranslated() == {}

    def test_parameters_in_place_of_count(self, translator):
        """测试第二个参数是列表时作为格式化参数"""
        translator.set_text("greet", "Hello %s, you are %d")
        assert translator.translate("greet", ["Bob", 30]) == "Hello Bob, you are 30"

    def test_mapping_parameters(self, translator):
        """测试字典参数按值的顺序使用"""
        translator.set_text("greet", "%s-%s")
        assert translator.translate("greet", {"a": "x", "b": "y"}) == "x-y"

    def test_count_appended_after_parameters(self, translator):
        """测试数量追加到参数末尾"""
        translator.set_text("files", "%s has %d file", 0)
        translator.set_text("files", "%s has %d files", 1)
        assert translator.translate("files", 3, ["disk"]) == "disk has 3 files"

    def test_positional_count_reference(self, translator):
        """测试通过位置引用数量"""
        translator.set_text("files", "%2$d files in %1$s", 1)
        assert translator.translate("files", 4, ["/tmp"]) == "4 files in /tmp"

    def test_no_parameters_returns_text_unchanged(self, translator):
        """测试无参数时不做格式化（% 原样保留）"""
        translator.set_text("pct", "100% done")
        assert translator.translate("pct") == "100% done"

    def test_missing_argument_raises(self, translator):
        """测试占位符多于参数时报错"""
        translator.set_text("greet", "%s and %s")
        with pytest.raises(TranslationFormatError):
            translator.translate("greet", ["only one"])

    def test_parameters_list_not_mutated(self, translator):
        """测试不修改调用方的参数列表"""
        translator.set_text("files", "%s %d", 1)
        params = ["disk"]
        translator.translate("files", 2, params)
        assert params == ["disk"]


class TestStorageInteraction:
    """存储后端交互测试"""

    def test_load_on_construct(self):
        """测试构造时加载"""
        storage = RecordingStorage(
            translated={"k": {0: "a", 1: "b"}},
            untranslated={"m": {0: True}},
        )
        translator = Translator(TwoFormsPlural(), storage)
        assert storage.calls == [("load",)]
        assert translator.get_forms("k") == {0: "a", 1: "b"}
        assert translator.get_untranslated() == {"m": {0: True}}

    def test_load_error_propagates(self):
        """测试加载错误原样传递"""

        class BrokenStorage(MemoryStorage):
            def load(self, translator):
                raise KeyError("boom")

        with pytest.raises(KeyError):
            Translator(TwoFormsPlural(), BrokenStorage())

    def test_set_text_does_not_touch_storage(self):
        """测试 set_text 只修改内存"""
        storage = RecordingStorage()
        translator = Translator(TwoFormsPlural(), storage)
        translator.set_text("k", "v")
        assert storage.calls == [("load",)]

    def test_save_text(self):
        """测试增量保存"""
        storage = RecordingStorage()
        translator = Translator(TwoFormsPlural(), storage)
        translator.set_untranslated("k", 1)
        translator.save_text("k", "v", 1)
        assert storage.calls[-1] == ("save_one", "k", "v", 1)
        assert translator.get_text("k", 1) == "v"
        assert translator.get_untranslated() == {}

    def test_save_text_range_error_before_storage(self):
        """测试越界时不调用后端"""
        storage = RecordingStorage()
        translator = Translator(TwoFormsPlural(), storage)
        with pytest.raises(PluralRangeError):
            translator.save_text("k", "v", 2)
        assert storage.calls == [("load",)]

    def test_remove_text_single_plural(self):
        """测试删除单个复数形式"""
        storage = RecordingStorage(translated={"k": {0: "a", 1: "b"}})
        translator = Translator(TwoFormsPlural(), storage)
        result = translator.remove_text("k", 1)
        assert result is True
        assert storage.calls[-1] == ("delete", "k", 1)
        assert translator.get_text("k", 1) is None
        assert translator.get_forms("k") == {0: "a"}

    def test_remove_text_last_plural_drops_key(self):
        """测试删除最后一个复数形式后键不存在"""
        translator = Translator(TwoFormsPlural(), MemoryStorage())
        translator.set_text("k", "a", 0)
        translator.remove_text("k", 0)
        assert translator.get_forms("k") is None
        assert translator.get_translated() == {}

    def test_remove_text_clears_marker(self):
        """测试删除时清除对应标记"""
        translator = Translator(TwoFormsPlural(), MemoryStorage())
        translator.set_untranslated("k", 1)
        translator.remove_text("k", 1)
        assert translator.get_untranslated() == {}

    def test_remove_key(self):
        """测试删除整个键"""
        storage = RecordingStorage(translated={"k": {0: "a", 1: "b"}})
        translator = Translator(TwoFormsPlural(), storage)
        translator.set_untranslated("k", 1, True)
        result = translator.remove_key("k")
        assert result is True
        assert storage.calls[-1] == ("delete", "k", None)
        assert translator.get_forms("k") is None
        assert translator.get_untranslated() == {}

    def test_delete_result_passthrough(self):
        """测试返回后端 delete 的结果"""
        translator = Translator(TwoFormsPlural(), MemoryStorage())
        assert translator.remove_key("never-existed") is False

    def test_backend_operations_require_storage(self, translator):
        """测试未配置后端时报错且不修改状态"""
        with pytest.raises(StorageNotConfiguredError):
            translator.save_text("k", "v")
        assert translator.get_translated() == {}

        translator.set_text("k", "v")
        with pytest.raises(StorageNotConfiguredError):
            translator.remove_text("k", 0)
        with pytest.raises(StorageNotConfiguredError):
            translator.remove_key("k")
        with pytest.raises(StorageNotConfiguredError):
            translator.save()
        assert translator.get_text("k") == "v"

    def test_backend_errors_not_wrapped(self):
        """测试后端错误原样传递"""
        translator = Translator(TwoFormsPlural(), FailingStorage())
        with pytest.raises(OSError, match="disk full"):
            translator.save()


class TestLifecycle:
    """作用域生命周期测试"""

    def test_close_saves_once(self):
        """测试关闭时保存一次"""
        storage = RecordingStorage()
        translator = Translator(TwoFormsPlural(), storage)
        translator.set_text("k", "v")
        translator.close()
        translator.close()
        assert storage.calls == [("load",), ("save",)]
        assert storage.translated == {"k": {0: "v"}}
        assert translator.closed is True

    def test_close_without_storage(self, translator):
        """测试无后端时关闭不报错"""
        translator.close()
        assert translator.closed is True

    def test_context_manager_saves(self):
        """测试 with 块正常结束时保存"""
        storage = RecordingStorage()
        with Translator(TwoFormsPlural(), storage) as translator:
            translator.translate("missing")
        assert storage.calls[-1] == ("save",)
        assert storage.untranslated == {"missing": {0: False}}

    def test_context_manager_saves_on_error(self):
        """测试 with 块异常退出时也保存，且原异常继续传播"""
        storage = RecordingStorage()
        with pytest.raises(RuntimeError, match="caller failed"):
            with Translator(TwoFormsPlural(), storage) as translator:
                translator.set_text("k", "v")
                raise RuntimeError("caller failed")
        assert storage.calls[-1] == ("save",)
        assert storage.translated == {"k": {0: "v"}}

    def test_save_failure_propagates_on_normal_exit(self):
        """测试正常退出时保存失败会抛出"""
        with pytest.raises(OSError):
            with Translator(TwoFormsPlural(), FailingStorage()):
                pass

    def test_caller_error_wins_over_save_failure(self):
        """测试已有异常时保留原异常"""
        with pytest.raises(RuntimeError, match="caller failed"):
            with Translator(TwoFormsPlural(), FailingStorage()):
                raise RuntimeError("caller failed")

    def test_failed_close_can_retry(self):
        """测试保存失败后翻译器仍未关闭"""
        translator = Translator(TwoFormsPlural(), FailingStorage())
        with pytest.raises(OSError):
            translator.close()
        assert translator.closed is False

    def test_accessors(self):
        """测试访问器"""
        plural = TwoFormsPlural()
        storage = MemoryStorage()
        translator = Translator(plural, storage)
        assert translator.get_plural() is plural
        assert translator.plural is plural
        assert translator.storage is storage
