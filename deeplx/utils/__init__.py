"""
/**
 * @file deeplx/utils/__init__.py
 * @description 工具函数导出。
 */
"""

from .errors import AuthError, ClientInputError, DeepLXError, UpstreamError, UpstreamRateLimited
from .signature import apply_method_spacing, correlation_id, count_i, perturbed_timestamp

__all__ = [
    "count_i",
    "correlation_id",
    "perturbed_timestamp",
    "apply_method_spacing",
    "DeepLXError",
    "ClientInputError",
    "AuthError",
    "UpstreamRateLimited",
    "UpstreamError",
]
