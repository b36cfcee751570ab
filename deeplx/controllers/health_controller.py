"""
/**
 * @file deeplx/controllers/health_controller.py
 * @description 服务信息与健康检查控制器。
 */
"""

from fastapi import APIRouter


router = APIRouter()


@router.get("/")
def index():
    from deeplx.config import load_settings

    settings = load_settings()
    return {"code": 200, "message": settings.message, "repository": settings.repository}


@router.get("/health")
def health():
    from deeplx.config import load_settings
    from deeplx.services import get_default_cache
    from deeplx.services.background_task_service import pending_count

    settings = load_settings()

    return {
        "status": "ok",
        "checks": {
            "access_token": settings.is_private,
            "dl_session": bool(settings.resolve_dl_session()),
            "cache_entries": len(get_default_cache()),
            "pending_background_tasks": pending_count(),
        },
    }
