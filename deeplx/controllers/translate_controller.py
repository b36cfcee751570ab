"""
/**
 * @file deeplx/controllers/translate_controller.py
 * @description 翻译控制器：/translate、/v1/translate、/v2/translate。
 */
"""

from __future__ import annotations

import logging
from typing import Type, TypeVar

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError
from starlette.concurrency import run_in_threadpool

from deeplx.config import load_settings
from deeplx.controllers.auth import require_access_token
from deeplx.models.translate_request_model import TranslateRequest, V2TranslateRequest
from deeplx.models.translation_result_model import TranslationResult, TranslationSuccess
from deeplx.services import translate_text
from deeplx.utils import AuthError, ClientInputError

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_access_token)])

M = TypeVar("M", bound=BaseModel)


async def _read_body(request: Request, model: Type[M]) -> M:
    try:
        body = await request.json()
    except ValueError:
        raise ClientInputError("Invalid JSON in request body")
    try:
        return model.model_validate(body)
    except ValidationError as e:
        logger.warning(f"Rejected request body: {e.error_count()} validation error(s)")
        raise ClientInputError("Invalid request body")


def _respond(result: TranslationResult) -> JSONResponse:
    return JSONResponse(status_code=result.code, content=result.to_dict())


@router.post("/translate")
async def translate(request: Request):
    req = await _read_body(request, TranslateRequest)
    use_cache = req.use_cache(not load_settings().is_private)
    result = await run_in_threadpool(
        translate_text, req.text, req.target_lang, source_lang=req.source_lang, use_cache=use_cache
    )
    return _respond(result)


@router.post("/v1/translate")
async def translate_v1(request: Request):
    dl_session = load_settings().resolve_dl_session()
    if not dl_session:
        raise AuthError("DL_SESSION is not configured in worker environment.")

    req = await _read_body(request, TranslateRequest)
    result = await run_in_threadpool(
        translate_text,
        req.text,
        req.target_lang,
        source_lang=req.source_lang,
        dl_session=dl_session,
        use_cache=req.use_cache(False),
    )
    return _respond(result)


@router.post("/v2/translate")
async def translate_v2(request: Request):
    req = await _read_body(request, V2TranslateRequest)
    use_cache = req.use_cache(not load_settings().is_private)
    result = await run_in_threadpool(
        translate_text, req.joined_text(), req.target_lang, source_lang="auto", use_cache=use_cache
    )
    if isinstance(result, TranslationSuccess):
        return JSONResponse(content=result.to_v2_dict())
    return _respond(result)
