"""
/**
 * @file deeplx/models/translation_result_model.py
 * @description 翻译结果：成功记录或失败记录。
 */
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Union

from deeplx.utils.errors import DeepLXError


@dataclass(frozen=True)
class TranslationSuccess:
    id: int
    data: str
    source_lang: str
    target_lang: str
    method: str
    alternatives: List[str] = field(default_factory=list)
    cached: bool = False

    code = 200

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "id": self.id,
            "data": self.data,
            "alternatives": list(self.alternatives),
            "source_lang": self.source_lang,
            "target_lang": self.target_lang,
            "method": self.method,
            "cached": self.cached,
        }

    def to_v2_dict(self) -> Dict[str, Any]:
        return {
            "translations": [{"detected_source_language": self.source_lang, "text": self.data}],
            "cached": self.cached,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    @classmethod
    def from_json(cls, raw: str) -> "TranslationSuccess":
        data = json.loads(raw)
        return cls(
            id=data["id"],
            data=data["data"],
            source_lang=data["source_lang"],
            target_lang=data["target_lang"],
            method=data["method"],
            alternatives=list(data.get("alternatives") or []),
            cached=bool(data.get("cached", False)),
        )

    def as_cached(self) -> "TranslationSuccess":
        return replace(self, cached=True)


@dataclass(frozen=True)
class TranslationFailure:
    code: int
    message: str

    @classmethod
    def from_error(cls, error: DeepLXError) -> "TranslationFailure":
        return cls(code=error.status_code, message=error.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message}


TranslationResult = Union[TranslationSuccess, TranslationFailure]
