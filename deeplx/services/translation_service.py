"""
/**
 * @file deeplx/services/translation_service.py
 * @description 翻译服务（基于 DeepL 网页端接口）。
 */
"""

from __future__ import annotations

from typing import Optional

from deeplx.models.translation_result_model import TranslationResult
from deeplx.services.cache_service import InMemoryTranslationCache, TranslationCache
from deeplx.services.deepl_client_service import DeepLClient

_DEFAULT_CACHE: TranslationCache = InMemoryTranslationCache()


def get_default_cache() -> TranslationCache:
    return _DEFAULT_CACHE


def translate_text(
    text: Optional[str],
    target_lang: Optional[str],
    source_lang: Optional[str] = None,
    dl_session: Optional[str] = "",
    use_cache: bool = False,
    client: Optional[DeepLClient] = None,
) -> TranslationResult:
    h = client or DeepLClient(cache=get_default_cache())
    return h.translate(source_lang, target_lang, text, dl_session=dl_session, use_cache=use_cache)
