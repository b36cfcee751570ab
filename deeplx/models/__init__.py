"""
/**
 * @file deeplx/models/__init__.py
 * @description 数据模型导出。
 */
"""

from .translate_request_model import TranslateRequest, V2TranslateRequest
from .translation_result_model import TranslationFailure, TranslationResult, TranslationSuccess

__all__ = ["TranslateRequest", "V2TranslateRequest", "TranslationSuccess", "TranslationFailure", "TranslationResult"]
