"""
JSON File Storage

JSON 翻译文件存储后端，实现 Storage 协议
每个语言一个文件：<directory>/<locale>.json

文件格式：
    {
      "locale": "en_US",
      "translated": {"items": {"0": "%d item", "1": "%d items"}},
      "untranslated": {"apple": {"0": false}}
    }

设计原则：
- 原子写入：tmp 文件 + os.replace，不会留下半截文件
- 编码容错：非 UTF-8 文件使用 chardet 检测编码，置信度不足时按 cp1252 解码
- 读-改-写：save_one / delete 每次都基于磁盘上的最新内容
"""

import json
import logging
import os
import time
import uuid
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional

import chardet

from l10n.exceptions import ErrorType, StorageError

if TYPE_CHECKING:
    from l10n.translator.translator import Translator

logger = logging.getLogger(__name__)

# chardet 检测结果低于该置信度时不可信
MIN_DETECT_CONFIDENCE = 0.7
FALLBACK_ENCODING = "cp1252"


def _empty_document(locale: str) -> Dict[str, Any]:
    return {"locale": locale, "translated": {}, "untranslated": {}}


class JsonFileStorage:
    """JSON 文件存储后端

    Attributes:
        directory: 翻译文件目录
        locale: 语言代码
        path: 当前语言的翻译文件路径
    """

    def __init__(self, directory: Path, locale: str):
        """初始化 JSON 存储

        Args:
            directory: 翻译文件目录（不存在时在第一次写入时创建）
            locale: 语言代码（如 "en_US"），决定文件名
        """
        self.directory = Path(directory)
        self.locale = locale
        self.path = self.directory / f"{locale}.json"

    # ============ 文件读写 ============

    def _decode(self, raw: bytes) -> str:
        """解码文件内容

        先尝试 UTF-8；失败后使用 chardet 检测，
        检测结果置信度不足时按 FALLBACK_ENCODING 解码
        """
        try:
            return raw.decode("utf-8-sig")
        except UnicodeDecodeError:
            pass

        detected = chardet.detect(raw)
        encoding = detected.get("encoding")
        confidence = detected.get("confidence") or 0.0
        if not encoding or confidence < MIN_DETECT_CONFIDENCE:
            logger.warning(
                f"{self.path} is not UTF-8 and detection is unreliable "
                f"({encoding}, confidence {confidence:.2f}), decoding as {FALLBACK_ENCODING}"
            )
            encoding = FALLBACK_ENCODING
        else:
            logger.warning(
                f"{self.path} is not UTF-8, decoding as {encoding} "
                f"(confidence {confidence:.2f})"
            )
        try:
            return raw.decode(encoding)
        except (UnicodeDecodeError, LookupError) as e:
            raise StorageError(
                f"Cannot decode {self.path} as {encoding}",
                error_type=ErrorType.PARSE,
                cause=e,
            ) from e

    def _read_document(self) -> Dict[str, Any]:
        """读取翻译文件

        Returns:
            文件内容，文件不存在时返回空文档

        Raises:
            StorageError: 文件无法读取或解析
        """
        if not self.path.exists():
            return _empty_document(self.locale)

        try:
            raw = self.path.read_bytes()
        except OSError as e:
            raise StorageError(
                f"Cannot read {self.path}", error_type=ErrorType.FILE_IO, cause=e
            ) from e

        try:
            data = json.loads(self._decode(raw))
        except json.JSONDecodeError as e:
            raise StorageError(
                f"Invalid JSON in {self.path}", error_type=ErrorType.PARSE, cause=e
            ) from e

        if not isinstance(data, dict):
            raise StorageError(
                f"{self.path} must contain a JSON object", error_type=ErrorType.PARSE
            )

        data.setdefault("locale", self.locale)
        for section in ("translated", "untranslated"):
            if not isinstance(data.setdefault(section, {}), dict):
                raise StorageError(
                    f"'{section}' in {self.path} must be a JSON object",
                    error_type=ErrorType.PARSE,
                )
        self._check_entries(data["translated"], "translated", str)
        self._check_entries(data["untranslated"], "untranslated", bool)
        return data

    def _check_entries(self, section: Dict[str, Any], name: str, value_type: type) -> None:
        """检查 section 中每个键都映射到 {复数索引: value_type} 对象

        Raises:
            StorageError: 结构不符合文件格式
        """
        for key, entries in section.items():
            if not isinstance(entries, dict):
                raise StorageError(
                    f"'{name}.{key}' in {self.path} must be a JSON object, "
                    f"got {type(entries).__name__}",
                    error_type=ErrorType.PARSE,
                )
            for plural, value in entries.items():
                if not isinstance(value, value_type):
                    raise StorageError(
                        f"'{name}.{key}.{plural}' in {self.path} must be "
                        f"{value_type.__name__}, got {type(value).__name__}",
                        error_type=ErrorType.PARSE,
                    )

    def _write_document(self, data: Dict[str, Any], max_retries: int = 5) -> None:
        """原子写入翻译文件

        使用 tmp + os.replace 模式确保写入完整
        Windows 文件锁冲突时指数退避重试

        Raises:
            StorageError: 写入失败
        """
        content = json.dumps(data, ensure_ascii=False, indent=2, sort_keys=True)

        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(
                f"Cannot create {self.directory}", error_type=ErrorType.FILE_IO, cause=e
            ) from e

        last_error: Optional[OSError] = None
        for attempt in range(max_retries):
            # 使用唯一的 tmp 文件名避免冲突
            tmp_path = self.path.with_suffix(f".{uuid.uuid4().hex[:8]}.tmp")
            try:
                tmp_path.write_text(content, encoding="utf-8")
                os.replace(tmp_path, self.path)
                return
            except OSError as e:
                last_error = e
                # Windows 文件锁冲突 (winerror 5, 32) 或 Permission denied (errno 13)
                is_retryable = (
                    getattr(e, "winerror", None) in (5, 32) or e.errno == 13
                )
                if not is_retryable:
                    break
                wait_time = (2 ** attempt) * 0.01 + (0.01 * (attempt + 1))
                logger.debug(
                    f"Write conflict (attempt {attempt + 1}/{max_retries}), "
                    f"retrying in {wait_time:.3f}s"
                )
                time.sleep(wait_time)
            finally:
                if tmp_path.exists():
                    tmp_path.unlink()

        raise StorageError(
            f"Atomic write to {self.path} failed",
            error_type=ErrorType.FILE_IO,
            cause=last_error,
        ) from last_error

    @staticmethod
    def _parse_plural(key: str, plural: str) -> int:
        try:
            return int(plural)
        except ValueError as e:
            raise StorageError(
                f"Invalid plural index {plural!r} for key {key!r}",
                error_type=ErrorType.PARSE,
                cause=e,
            ) from e

    # ============ Storage 协议 ============

    def load(self, translator: "Translator") -> None:
        data = self._read_document()

        for key, forms in data["translated"].items():
            for plural, text in forms.items():
                translator.set_text(key, text, self._parse_plural(key, plural))

        for key, marks in data["untranslated"].items():
            translated_forms = data["translated"].get(key, {})
            for plural, flag in marks.items():
                if plural in translated_forms:
                    continue
                translator.set_untranslated(key, self._parse_plural(key, plural), flag)

        logger.debug(f"Loaded {len(data['translated'])} keys from {self.path}")

    def save(self, translator: "Translator") -> None:
        data = _empty_document(self.locale)
        for key, forms in translator.get_translated().items():
            data["translated"][key] = {str(plural): text for plural, text in forms.items()}
        for key, marks in translator.get_untranslated().items():
            data["untranslated"][key] = {str(plural): flag for plural, flag in marks.items()}

        self._write_document(data)
        logger.debug(f"Saved {len(data['translated'])} keys to {self.path}")

    def save_one(self, key: str, text: str, plural: int) -> None:
        data = self._read_document()
        data["translated"].setdefault(key, {})[str(plural)] = text

        marks = data["untranslated"].get(key)
        if marks is not None:
            marks.pop(str(plural), None)
            if not marks:
                del data["untranslated"][key]

        self._write_document(data)

    def delete(self, key: str, plural: Optional[int] = None) -> bool:
        """删除翻译

        Args:
            key: 翻译键
            plural: 复数形式索引，为 None 时删除整个键

        Returns:
            是否有已翻译条目被删除
        """
        data = self._read_document()
        translated = data["translated"]
        untranslated = data["untranslated"]

        if plural is None:
            removed = translated.pop(key, None) is not None
            changed = untranslated.pop(key, None) is not None or removed
        else:
            slot = str(plural)
            forms = translated.get(key, {})
            removed = forms.pop(slot, None) is not None
            if key in translated and not forms:
                del translated[key]

            marks = untranslated.get(key, {})
            changed = marks.pop(slot, None) is not None or removed
            if key in untranslated and not marks:
                del untranslated[key]

        if changed:
            self._write_document(data)
        return removed
