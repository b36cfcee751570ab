"""
/**
 * @file deeplx/main.py
 * @description FastAPI 应用入口（仅装配路由与中间件）。
 */
"""

import logging
import os

from fastapi import FastAPI
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from deeplx.config import CONFIG_LOCAL_PATH, CONFIG_PATH, load_settings, reload_settings
from deeplx.controllers import health_router, translate_router
from deeplx.controllers.middleware import CorsErrorMiddleware, deeplx_error_handler, http_error_handler
from deeplx.services import drain_background_tasks
from deeplx.utils import DeepLXError

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(title="DeepLX")


class ConfigEventHandler(FileSystemEventHandler):
    """Handler for config file changes"""
    def on_modified(self, event):
        if event.is_directory:
            return
        if event.src_path in (CONFIG_PATH, CONFIG_LOCAL_PATH):
            reload_settings()


_observer = None


@app.on_event("startup")
async def startup_event():
    global _observer
    load_settings()
    try:
        _observer = Observer()
        config_dir = os.path.dirname(CONFIG_PATH)
        _observer.schedule(ConfigEventHandler(), config_dir, recursive=False)
        _observer.start()
        logger.info(f"Config watcher started on {config_dir}")
    except OSError as e:
        _observer = None
        logger.warning(f"Failed to start config watcher: {e}")


@app.on_event("shutdown")
async def shutdown_event():
    global _observer

    if _observer:
        _observer.stop()
        _observer.join()
        _observer = None
    # let pending cache writes land
    await run_in_threadpool(drain_background_tasks, 10)


app.add_middleware(CorsErrorMiddleware)
app.add_exception_handler(DeepLXError, deeplx_error_handler)
app.add_exception_handler(StarletteHTTPException, http_error_handler)

app.include_router(health_router)
app.include_router(translate_router)
