import concurrent.futures
import logging
import threading
from typing import Any, Callable, Optional, Set

logger = logging.getLogger(__name__)

# Pending fire-and-forget work (cache writes)
_PENDING: Set[concurrent.futures.Future] = set()
_PENDING_LOCK = threading.Lock()

_EXECUTOR = concurrent.futures.ThreadPoolExecutor(max_workers=2, thread_name_prefix="deeplx-bg")


def _run_logged(func: Callable[..., Any], args: tuple, kwargs: dict) -> None:
    try:
        func(*args, **kwargs)
    except Exception as e:
        logger.error(f"Background task {getattr(func, '__name__', func)} failed: {e}", exc_info=True)


def _forget(future: concurrent.futures.Future) -> None:
    with _PENDING_LOCK:
        _PENDING.discard(future)


def submit_background_task(func: Callable[..., Any], *args: Any, **kwargs: Any) -> concurrent.futures.Future:
    """Run ``func`` off the request path. Errors are logged, never raised to the caller."""
    future = _EXECUTOR.submit(_run_logged, func, args, kwargs)
    with _PENDING_LOCK:
        _PENDING.add(future)
    future.add_done_callback(_forget)
    return future


def pending_count() -> int:
    with _PENDING_LOCK:
        return sum(1 for future in _PENDING if not future.done())


def drain_background_tasks(timeout: Optional[float] = None) -> bool:
    """
    Wait for every submitted task to finish.
    Returns False if some were still running when ``timeout`` expired.
    """
    with _PENDING_LOCK:
        pending = list(_PENDING)
    if not pending:
        return True
    _, not_done = concurrent.futures.wait(pending, timeout=timeout)
    if not_done:
        logger.warning(f"{len(not_done)} background task(s) still running after drain timeout")
    return not not_done
