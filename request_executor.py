"""
Request execution: one code path for blocking and non-blocking calls.

Sync mode blocks, returns the normalized payload and leaves the cache alone.
Async mode runs the blocking transport call via asyncio.to_thread, merges
the payload into the cache on the loop thread, then calls the caller's
on_success hook. Both modes report through the same generic error and
completion handlers, fire the status-code notifications, and overwrite
`last_result`.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Set, Tuple

from actions import ALL_MARKETS, Action, descriptor_for
from cache_manager import DataCache
from errors import NormalizationError, RequestError
from normalizer import normalize
from param_builder import UNPARSED_FORMATS
from transport import HttpTransport, RawResponse
import config

logger = logging.getLogger(__name__)


@dataclass
class CallResult:
    """Outcome of a single call. `error` is None on success."""
    action: Action
    params: Tuple[Tuple[str, str], ...]
    market: Optional[str] = None
    data: Any = None
    response: Optional[RawResponse] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def status_code(self) -> Optional[int]:
        if self.response is not None:
            return self.response.status_code
        return getattr(self.error, "status_code", None)


StatusHandler = Callable[[int, CallResult], None]
ResultHandler = Callable[[CallResult], None]
SuccessHandler = Callable[[Any, CallResult], None]


# ── Default generic handlers (logging only) ───────────────────────────────

def _notify_ok(status: int, result: CallResult):
    logger.debug("%s: HTTP %d OK", result.action.value, status)


def _notify_bad_request(status: int, result: CallResult):
    logger.warning("%s: HTTP %d bad request, params=%s", result.action.value, status, result.params)


def _notify_teapot(status: int, result: CallResult):
    logger.warning("%s: HTTP %d, server refused the request", result.action.value, status)


def default_status_handlers() -> Dict[int, StatusHandler]:
    handlers = {200: _notify_ok, 400: _notify_bad_request, 418: _notify_teapot}
    return {code: handlers[code] for code in config.NOTIFY_STATUS_CODES if code in handlers}


def log_error(result: CallResult):
    logger.error("%s request failed: %s", result.action.value, result.error)


def log_complete(result: CallResult):
    elapsed = result.response.elapsed_ms if result.response is not None else None
    logger.debug("%s request complete (ok=%s, status=%s, %s ms)",
                 result.action.value, result.ok, result.status_code, elapsed)


# ═══════════════════════════════════════════════════════════════════════════
# Executor
# ═══════════════════════════════════════════════════════════════════════════

class RequestExecutor:

    def __init__(self, transport: Optional[HttpTransport] = None,
                 cache: Optional[DataCache] = None,
                 status_handlers: Optional[Dict[int, StatusHandler]] = None,
                 on_error: Optional[ResultHandler] = None,
                 on_complete: Optional[ResultHandler] = None):
        self.transport = transport or HttpTransport()
        self.cache = cache if cache is not None else DataCache()
        self.status_handlers = (
            dict(status_handlers) if status_handlers is not None else default_status_handlers()
        )
        self.on_error = on_error or log_error
        self.on_complete = on_complete or log_complete
        # Shared across every call: whichever call finishes last wins.
        self.last_result: Optional[CallResult] = None
        # Strong references to in-flight async calls until they finish.
        self._pending: Set[asyncio.Task] = set()

    def execute(self, action, url: str, params, result_format: str = "json",
                sync: bool = True, on_success: Optional[SuccessHandler] = None):
        """
        Issue one request.

        sync=True:  returns the normalized payload. On failure the generic
                    error handler fires, then RequestError or
                    NormalizationError is raised. The cache is not touched
                    and on_success is not called.
        sync=False: returns an asyncio.Task resolving to a CallResult. Must
                    be called with a running event loop.
        """
        action = Action(action)
        params = tuple(params)
        if sync:
            return self._execute_sync(action, url, params, result_format)

        loop = asyncio.get_running_loop()
        task = loop.create_task(
            self._execute_async(action, url, params, result_format, on_success)
        )
        self._pending.add(task)
        task.add_done_callback(self._task_done)
        return task

    @property
    def pending(self) -> int:
        """Number of async calls not yet finished."""
        return len(self._pending)

    def _task_done(self, task: asyncio.Task):
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Async call failed in a completion callback: %r", exc)

    def _execute_sync(self, action, url, params, result_format):
        result = self._fetch(action, url, params, result_format)
        self._record(result)
        try:
            if not result.ok:
                self.on_error(result)
                raise result.error
            return result.data
        finally:
            self.on_complete(result)

    async def _execute_async(self, action, url, params, result_format, on_success):
        result = await asyncio.to_thread(self._fetch, action, url, params, result_format)
        self._record(result)
        try:
            if result.ok:
                self.cache.merge(action, result.market, result.data)
                if on_success is not None:
                    on_success(result.data, result)
            else:
                self.on_error(result)
        finally:
            self.on_complete(result)
        return result

    # ── Blocking part (runs on a worker thread in async mode) ─────────────

    def _fetch(self, action: Action, url: str, params, result_format: str) -> CallResult:
        result = CallResult(action=action, params=params)
        try:
            raw = self.transport.get(url, params)
        except RequestError as e:
            result.response = e.response
            result.error = e
            return result

        result.response = raw
        result.market = self._market_key(action, raw)
        try:
            result.data = normalize(action, self._parse(action, raw, result_format), result_format)
        except NormalizationError as e:
            result.error = e
        return result

    @staticmethod
    def _parse(action: Action, raw: RawResponse, result_format: str):
        if result_format in UNPARSED_FORMATS:
            return raw.text
        try:
            return raw.json()
        except ValueError as e:
            raise NormalizationError(f"{action.value}: invalid JSON body: {e}",
                                     action=action.value) from e

    @staticmethod
    def _market_key(action: Action, raw: RawResponse) -> Optional[str]:
        # Read back from what was sent, not from caller state.
        if not descriptor_for(action).keyed_by_market:
            return None
        return raw.param("market") or ALL_MARKETS

    # ── Side channels ─────────────────────────────────────────────────────

    def _record(self, result: CallResult):
        self.last_result = result
        status = result.status_code
        handler = self.status_handlers.get(status) if status is not None else None
        if handler is None:
            return
        try:
            handler(status, result)
        except Exception:
            logger.exception("Status handler for HTTP %s failed", status)
