"""
Storage Backends - 翻译持久化
"""

from .base import Storage
from .json_storage import JsonFileStorage
from .memory_storage import MemoryStorage

__all__ = [
    "Storage",
    "JsonFileStorage",
    "MemoryStorage",
]
