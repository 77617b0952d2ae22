from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Union

from bs4 import Tag

from .dom import HostDocument, MutationRecord

logger = logging.getLogger(__name__)

Predicate = Callable[[], Union[Any, Awaitable[Any]]]


async def until_async(predicate: Predicate, interval_ms: float = 1000, timeout_ms: float = 10000) -> bool:
    """
    Poll `predicate` until it returns something truthy.

    The predicate may be a plain function or a coroutine function. Exceptions
    it raises propagate immediately. Raises `TimeoutError` once more than
    `timeout_ms` have elapsed, so the last attempt can overshoot the deadline
    by at most one interval.
    """
    loop = asyncio.get_running_loop()
    start = loop.time()
    while True:
        result = predicate()
        if inspect.isawaitable(result):
            result = await result
        if result:
            return True

        if (loop.time() - start) * 1000 > timeout_ms:
            raise TimeoutError("Timed out waiting for condition to become true.")
        await asyncio.sleep(interval_ms / 1000)


def wait_for_element(document: HostDocument, element_id: str) -> "asyncio.Future[Tag]":
    """
    Future resolving to the element with `element_id` once it is in the
    document. Resolves immediately if it already is; otherwise watches the
    body subtree and stops watching on the first match.

    There is no timeout. Cancelling the future disconnects the watcher, which
    is how `wait_for_element_bounded` puts a deadline on it.
    """
    loop = asyncio.get_running_loop()
    future: "asyncio.Future[Tag]" = loop.create_future()

    element = document.get_element_by_id(element_id)
    if element is not None:
        future.set_result(element)
        return future

    def on_mutation(record: MutationRecord) -> None:
        if future.done():
            return
        found = document.get_element_by_id(element_id)
        if found is not None:
            observer.disconnect()
            future.set_result(found)

    observer = document.observe(document.body, on_mutation)
    future.add_done_callback(lambda _: observer.disconnect())
    return future


async def wait_for_element_bounded(
    document: HostDocument,
    element_id: str,
    interval_ms: float = 50,
    timeout_ms: float = 10000,
) -> Tag:
    """
    `wait_for_element` with a deadline enforced by `until_async`.
    Raises `TimeoutError` if the element never shows up. The watcher is
    released however the wait ends, including cancellation of the caller.
    """
    future = wait_for_element(document, element_id)
    try:
        await until_async(future.done, interval_ms, timeout_ms)
    except TimeoutError:
        logger.debug("Element %s did not appear within %sms", element_id, timeout_ms)
        raise
    finally:
        if not future.done():
            future.cancel()
    return future.result()
