from .manager import (
    STORAGE_TYPES,
    ConfigManager,
    TranslatorConfig,
    get_user_data_dir,
)

__all__ = [
    "STORAGE_TYPES",
    "ConfigManager",
    "TranslatorConfig",
    "get_user_data_dir",
]
