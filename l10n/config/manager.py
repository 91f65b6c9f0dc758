"""
配置模型 + 读写逻辑（用户目录）
配置管理器
"""
import json
import logging
import os
import platform
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from l10n.plural.rules import normalize_locale

logger = logging.getLogger(__name__)

STORAGE_TYPES = ("json", "memory", "none")


def get_user_data_dir() -> Path:
    """获取用户数据目录路径（跨平台）

    - Windows: %APPDATA%/l10n/
    - Linux: ~/.config/l10n/
    - macOS: ~/Library/Application Support/l10n/

    Returns:
        用户数据目录的 Path 对象
    """
    system = platform.system()

    if system == "Windows":
        base_dir = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
    elif system == "Darwin":  # macOS
        base_dir = Path.home() / "Library" / "Application Support"
    else:  # Linux 和其他 Unix-like
        base_dir = Path.home() / ".config"

    return base_dir / "l10n"


@dataclass
class TranslatorConfig:
    """翻译器配置模型

    所有可持久化配置的统一入口
    """
    locale: str = "en_US"  # 语言代码，决定复数规则和翻译文件名
    storage: str = "json"  # 存储后端：json / memory / none
    storage_dir: Optional[str] = None  # 翻译文件目录，None 表示 <用户数据目录>/translations
    log_level: str = "INFO"  # 日志级别（DEBUG/INFO/WARN/ERROR）

    def __post_init__(self):
        self.locale = normalize_locale(self.locale)
        if self.storage not in STORAGE_TYPES:
            raise ValueError(
                f"storage must be one of {', '.join(STORAGE_TYPES)}, got {self.storage!r}"
            )

    def get_storage_dir(self) -> Path:
        """获取翻译文件目录"""
        if self.storage_dir:
            return Path(self.storage_dir)
        return get_user_data_dir() / "translations"

    def to_dict(self) -> dict:
        """转换为字典（用于 JSON 序列化）"""
        return {
            "locale": self.locale,
            "storage": self.storage,
            "storage_dir": self.storage_dir,
            "log_level": self.log_level,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TranslatorConfig":
        """从字典创建（用于 JSON 反序列化）"""
        storage_dir = data.get("storage_dir")
        if storage_dir == "":
            storage_dir = None

        return cls(
            locale=data.get("locale", "en_US"),
            storage=data.get("storage", "json"),
            storage_dir=storage_dir,
            log_level=data.get("log_level", "INFO"),
        )

    @classmethod
    def default(cls) -> "TranslatorConfig":
        """创建默认配置"""
        return cls()


class ConfigManager:
    """配置管理器

    负责读写 config.json
    """

    def __init__(self, config_file: Optional[Path] = None):
        """初始化配置管理器

        Args:
            config_file: 配置文件路径，如果为 None 则使用默认路径
        """
        if config_file is None:
            self.data_dir = get_user_data_dir()
            self.config_file = self.data_dir / "config.json"
        else:
            self.config_file = Path(config_file)
            self.data_dir = self.config_file.parent

    def load(self) -> TranslatorConfig:
        """加载配置

        Returns:
            TranslatorConfig 对象，如果文件不存在则返回默认配置并保存
        """
        if not self.config_file.exists():
            config = TranslatorConfig.default()
            self.save(config)
            return config

        try:
            with open(self.config_file, "r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("config root must be a JSON object")
            return TranslatorConfig.from_dict(data)
        except (json.JSONDecodeError, KeyError, ValueError) as e:
            # 配置文件损坏，备份旧文件并使用默认配置
            backup_file = self.config_file.with_suffix(".json.bak")
            logger.warning(
                f"Config file {self.config_file} is invalid ({e}), "
                f"moved to {backup_file.name} and using defaults"
            )
            self.config_file.replace(backup_file)
            config = TranslatorConfig.default()
            self.save(config)
            return config

    def save(self, config: TranslatorConfig) -> None:
        """保存配置

        Args:
            config: 要保存的配置对象
        """
        self.data_dir.mkdir(parents=True, exist_ok=True)
        # 先写入临时文件，再重命名（原子操作）
        temp_file = self.config_file.with_suffix(".json.tmp")
        with open(temp_file, "w", encoding="utf-8") as f:
            json.dump(config.to_dict(), f, ensure_ascii=False, indent=2)
        temp_file.replace(self.config_file)
