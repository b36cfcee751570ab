"""
/**
 * @file deeplx/models/translate_request_model.py
 * @description 翻译请求模型（Pydantic）。
 */
"""

from __future__ import annotations

from typing import List, Optional, Union

from pydantic import BaseModel


class _CacheOverride(BaseModel):
    cache: Optional[bool] = None

    def use_cache(self, default: bool) -> bool:
        # an explicit null counts as an override and disables caching
        if "cache" in self.model_fields_set:
            return bool(self.cache)
        return default


class TranslateRequest(_CacheOverride):
    text: Optional[str] = None
    source_lang: Optional[str] = None
    target_lang: Optional[str] = None


class V2TranslateRequest(_CacheOverride):
    """DeepL official API style body; ``text`` may be a list of lines."""

    text: Union[str, List[str], None] = None
    target_lang: Optional[str] = None

    def joined_text(self) -> str:
        if isinstance(self.text, list):
            return "\n".join(self.text)
        return self.text or ""
