"""
One calling convention for every user supplied callable.

Hooks (version validator, parameter validator, error, success) may be plain
functions or coroutines; a plain function's return value is used as is, an
awaitable is awaited. Handlers follow the same rule, except that plain
functions run in the threadpool like Starlette endpoints do.
"""

import functools
import inspect
from typing import Any, Callable

from starlette.concurrency import run_in_threadpool


async def call_hook(hook: Callable, *args: Any) -> Any:
    result = hook(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


def _is_async_callable(obj: Any) -> bool:
    while isinstance(obj, functools.partial):
        obj = obj.func
    return inspect.iscoroutinefunction(obj) or (
        callable(obj) and inspect.iscoroutinefunction(getattr(obj, '__call__', None))
    )


async def call_handler(handler: Callable, request: Any) -> Any:
    if _is_async_callable(handler):
        return await handler(request)
    result = await run_in_threadpool(handler, request)
    if inspect.isawaitable(result):
        result = await result
    return result
