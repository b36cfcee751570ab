"""
/**
 * @file deeplx/utils/signature.py
 * @description 上游请求签名：随机 id、时间戳扰动、method 字段空格变体。
 */
"""

import random
import time
from typing import Optional

METHOD_FIELD = '"method":"'
METHOD_FIELD_SPACED = '"method" : "'
METHOD_FIELD_TRAILING = '"method": "'


def count_i(text: str) -> int:
    return text.count("i") if text else 0


def correlation_id() -> int:
    return random.randint(100000, 199998) * 1000


def perturbed_timestamp(i_count: int, now_ms: Optional[int] = None) -> int:
    """
    Current time in milliseconds, nudged to the next multiple of ``i_count + 1``.
    The web client does the same, and the upstream checks it.
    """
    ts = int(time.time() * 1000) if now_ms is None else now_ms
    if i_count != 0:
        d = i_count + 1
        return ts - ts % d + d
    return ts


def apply_method_spacing(request_id: int, body: str) -> str:
    # must run on the serialized text; the upstream inspects the raw bytes
    if (request_id + 5) % 29 == 0 or (request_id + 3) % 13 == 0:
        return body.replace(METHOD_FIELD, METHOD_FIELD_SPACED, 1)
    return body.replace(METHOD_FIELD, METHOD_FIELD_TRAILING, 1)
