import asyncio
import functools
from typing import Any, Callable, Coroutine

# strong references to tasks started with done=, dropped once they finish
_background_tasks: set[asyncio.Task] = set()


def callback_or_awaitable(
    fn: Callable[..., Coroutine[Any, Any, Any]] | None = None,
    *,
    precheck: Callable[..., Any] | None = None,
):
    """Let an ``async def`` method also be driven by a completion callback.

    Called without ``done=`` the wrapped method returns its coroutine. Called
    with ``done=callback`` it is scheduled on the running loop, the task is
    returned, and ``callback(error, result)`` fires when the task finishes.

    ``precheck`` runs with the call's arguments before anything is built, so
    the errors it raises reach the caller directly in both modes.
    """
    if fn is None:
        return functools.partial(callback_or_awaitable, precheck=precheck)

    @functools.wraps(fn)
    def wrapper(*args, done: Callable[[BaseException | None, Any], Any] | None = None, **kwargs):
        if precheck is not None:
            precheck(*args, **kwargs)
        coro = fn(*args, **kwargs)
        if done is None:
            return coro

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            raise
        task = loop.create_task(coro)
        _background_tasks.add(task)

        def _finished(t: asyncio.Task):
            _background_tasks.discard(t)
            if t.cancelled():
                done(asyncio.CancelledError(), None)
                return
            exc = t.exception()
            if exc is not None:
                done(exc, None)
            else:
                done(None, t.result())

        task.add_done_callback(_finished)
        return task

    return wrapper
