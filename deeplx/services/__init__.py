"""
/**
 * @file deeplx/services/__init__.py
 * @description 业务服务层导出。
 */
"""

from .background_task_service import drain_background_tasks, submit_background_task
from .cache_service import InMemoryTranslationCache, TranslationCache, make_cache_key
from .deepl_client_service import DeepLClient
from .translation_service import get_default_cache, translate_text

__all__ = [
    "DeepLClient",
    "TranslationCache",
    "InMemoryTranslationCache",
    "make_cache_key",
    "get_default_cache",
    "translate_text",
    "submit_background_task",
    "drain_background_tasks",
]
