"""
/**
 * @file deeplx/services/deepl_client_service.py
 * @description DeepL 网页端 JSON-RPC 调用封装（LMT_handle_texts）。
 */
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

import requests

from deeplx.config import Settings, load_settings
from deeplx.models.translation_result_model import TranslationFailure, TranslationResult, TranslationSuccess
from deeplx.services.background_task_service import submit_background_task
from deeplx.services.cache_service import CACHE_TTL_SECONDS, TranslationCache, make_cache_key
from deeplx.utils import (
    ClientInputError,
    DeepLXError,
    UpstreamError,
    UpstreamRateLimited,
    apply_method_spacing,
    correlation_id,
    count_i,
    perturbed_timestamp,
)

logger = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"
JSONRPC_METHOD = "LMT_handle_texts"
REQUEST_ALTERNATIVES = 3


def normalize_source_lang(source_lang: Optional[str]) -> str:
    if not source_lang or source_lang == "auto":
        return "EN"
    return source_lang.upper()


def normalize_target_lang(target_lang: Optional[str]) -> str:
    return (target_lang or "").upper()


def build_payload(source_lang: str, target_lang: str, text: str, request_id: int, timestamp: int) -> Dict[str, Any]:
    return {
        "jsonrpc": JSONRPC_VERSION,
        "method": JSONRPC_METHOD,
        "id": request_id,
        "params": {
            "splitting": "newlines",
            "lang": {
                "source_lang_user_selected": source_lang,
                "target_lang": target_lang,
            },
            "texts": [{"text": text, "requestAlternatives": REQUEST_ALTERNATIVES}],
            "timestamp": timestamp,
        },
    }


def serialize_payload(payload: Dict[str, Any], request_id: int) -> str:
    # compact form first, then the spacing variant the web client produces
    body = json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
    return apply_method_spacing(request_id, body)


class DeepLClient:
    def __init__(self, settings: Optional[Settings] = None, cache: Optional[TranslationCache] = None):
        self._initial_settings = settings
        self.cache = cache

    @property
    def settings(self) -> Settings:
        return self._initial_settings or load_settings()

    def _get_headers(self, dl_session: Optional[str] = None) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if dl_session:
            headers["Cookie"] = f"dl_session={dl_session}"
        return headers

    def _read_cache(self, key: str) -> Optional[TranslationSuccess]:
        if self.cache is None:
            return None
        raw = self.cache.get(key)
        if raw is None:
            return None
        try:
            return TranslationSuccess.from_json(raw).as_cached()
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Dropping unreadable cache entry {key[:64]}: {e}")
            self.cache.delete(key)
            return None

    def _write_cache(self, key: str, result: TranslationSuccess) -> None:
        if self.cache is None:
            return
        submit_background_task(self.cache.put, key, result.to_json(), CACHE_TTL_SECONDS)

    def translate(
        self,
        source_lang: Optional[str],
        target_lang: Optional[str],
        text: Optional[str],
        dl_session: Optional[str] = "",
        use_cache: bool = False,
    ) -> TranslationResult:
        if not text:
            return TranslationFailure.from_error(ClientInputError("No text to translate."))

        final_source = normalize_source_lang(source_lang)
        final_target = normalize_target_lang(target_lang)

        try:
            cache_key = make_cache_key(final_source, final_target, text) if use_cache else None
            if cache_key is not None:
                hit = self._read_cache(cache_key)
                if hit is not None:
                    logger.info(f"Cache hit for {final_source}->{final_target} ({len(text)} chars)")
                    return hit

            request_id = correlation_id()
            timestamp = perturbed_timestamp(count_i(text))
            body = serialize_payload(build_payload(final_source, final_target, text, request_id, timestamp), request_id)

            response = requests.post(
                self.settings.upstream_url,
                headers=self._get_headers(dl_session),
                data=body.encode("utf-8"),
                timeout=self.settings.upstream_timeout,
            )
            result = self._classify(response, request_id, final_target, bool(dl_session))
        except DeepLXError as e:
            logger.warning(f"DeepL translation failed with {e.status_code}: {e.message[:200]}")
            return TranslationFailure.from_error(e)
        except Exception as e:
            logger.error(f"DeepL request failed: {e}", exc_info=True)
            return TranslationFailure.from_error(UpstreamError(f"DeepL request failed: {e}"))

        if cache_key is not None:
            self._write_cache(cache_key, result)
        return result

    def _classify(self, response: requests.Response, request_id: int, target_lang: str, pro: bool) -> TranslationSuccess:
        if response.status_code == UpstreamRateLimited.default_status:
            raise UpstreamRateLimited()
        if not 200 <= response.status_code < 300:
            raise UpstreamError(response.text, status_code=response.status_code)

        data = response.json()
        if not isinstance(data, dict):
            raise ValueError("unexpected response body")

        error = data.get("error")
        if error:
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise UpstreamError(f"DeepL API returned an error: {message}")

        result = data.get("result")
        texts = result.get("texts") if isinstance(result, dict) else None
        if not isinstance(texts, list) or not texts or not isinstance(texts[0], dict) or not texts[0].get("text"):
            raise UpstreamError("Translation failed, no text returned.")

        first = texts[0]
        alternatives: List[str] = [
            alt.get("text") for alt in (first.get("alternatives") or []) if isinstance(alt, dict) and alt.get("text")
        ]
        return TranslationSuccess(
            id=request_id,
            data=first["text"],
            alternatives=alternatives,
            source_lang=result.get("lang"),
            target_lang=target_lang,
            method="Pro" if pro else "Free",
            cached=False,
        )
