import asyncio

import pytest

from glossary_page.host import HostDocument, until_async, wait_for_element, wait_for_element_bounded


PAGE = "<html><body><main id='main'></main></body></html>"


@pytest.mark.asyncio
async def test_until_async_returns_on_first_truthy_result():
    calls = []

    def predicate():
        calls.append(1)
        return len(calls) == 3

    assert await until_async(predicate, 1, 1000) is True
    assert len(calls) == 3


@pytest.mark.asyncio
async def test_until_async_accepts_coroutine_predicates():
    async def predicate():
        return "yes"

    assert await until_async(predicate, 1, 100) is True


@pytest.mark.asyncio
async def test_until_async_times_out_within_one_interval_of_deadline():
    loop = asyncio.get_running_loop()
    start = loop.time()
    with pytest.raises(TimeoutError):
        await until_async(lambda: False, 50, 200)
    elapsed_ms = (loop.time() - start) * 1000

    assert elapsed_ms >= 200
    # one interval of slack plus scheduler jitter
    assert elapsed_ms <= 200 + 50 + 100


@pytest.mark.asyncio
async def test_until_async_propagates_predicate_errors_without_retrying():
    calls = []

    def predicate():
        calls.append(1)
        raise ValueError("boom")

    with pytest.raises(ValueError, match="boom"):
        await until_async(predicate, 1, 1000)
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_wait_for_element_resolves_immediately_when_present():
    document = HostDocument(PAGE)
    future = wait_for_element(document, "main")

    assert future.done()
    assert (await future).get("id") == "main"
    assert document._observers == []


@pytest.mark.asyncio
async def test_wait_for_element_resolves_on_insert_and_disconnects():
    document = HostDocument(PAGE)
    future = wait_for_element(document, "search")
    assert not future.done()

    main = document.get_element_by_id("main")
    document.append_child(main, document.create_element("span", id="unrelated"))
    assert not future.done()

    field = document.append_child(main, document.create_element("input", id="search"))

    assert future.done()
    assert future.result() is field
    assert document._observers == []


@pytest.mark.asyncio
async def test_wait_for_element_resolves_exactly_once():
    document = HostDocument(PAGE)
    resolved = []
    future = wait_for_element(document, "search")
    future.add_done_callback(lambda f: resolved.append(f.result()))
    main = document.get_element_by_id("main")

    first = document.append_child(main, document.create_element("input", id="search"))
    document.remove_element(first)
    document.append_child(main, document.create_element("input", id="search"))
    await asyncio.sleep(0)

    assert resolved == [first]


@pytest.mark.asyncio
async def test_wait_for_element_bounded_times_out_and_releases_watcher():
    document = HostDocument(PAGE)

    with pytest.raises(TimeoutError):
        await wait_for_element_bounded(document, "never", interval_ms=10, timeout_ms=30)
    await asyncio.sleep(0)

    assert document._observers == []


@pytest.mark.asyncio
async def test_cancelling_bounded_wait_releases_watcher():
    document = HostDocument(PAGE)
    task = asyncio.create_task(wait_for_element_bounded(document, "never", interval_ms=10, timeout_ms=5000))
    await asyncio.sleep(0.03)
    assert len(document._observers) == 1

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    await asyncio.sleep(0)

    assert document._observers == []


@pytest.mark.asyncio
async def test_outer_deadline_releases_watcher():
    document = HostDocument(PAGE)

    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(wait_for_element_bounded(document, "never", interval_ms=10, timeout_ms=5000), 0.03)
    await asyncio.sleep(0)

    assert document._observers == []


@pytest.mark.asyncio
async def test_wait_for_element_bounded_returns_element_added_later():
    document = HostDocument(PAGE)
    main = document.get_element_by_id("main")

    async def add_later():
        await asyncio.sleep(0.02)
        document.append_child(main, document.create_element("input", id="late"))

    task = asyncio.create_task(add_later())
    element = await wait_for_element_bounded(document, "late", interval_ms=5, timeout_ms=1000)
    await task

    assert element.get("id") == "late"
