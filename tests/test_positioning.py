import asyncio

import pytest

from expertfinder.providers.positioning import (
    ChannelPositionProvider,
    PositionDenied,
    PositionTimeout,
    PositionUnsupported,
    WatchOptions,
)


@pytest.mark.asyncio
async def test_watch_yields_fixes_in_publish_order():
    provider = ChannelPositionProvider()
    sub = provider.watch(WatchOptions())
    provider.publish(18.5, 73.8)
    provider.publish(18.6, 73.9)

    first = await sub.__anext__()
    second = await sub.__anext__()
    assert (first.latitude, second.latitude) == (18.5, 18.6)
    sub.cancel()


@pytest.mark.asyncio
async def test_cancel_ends_iteration_and_releases_watch():
    provider = ChannelPositionProvider()
    sub = provider.watch(WatchOptions())
    assert provider.active_watches == 1

    sub.cancel()
    sub.cancel()
    assert provider.active_watches == 0
    assert sub.cancelled
    with pytest.raises(StopAsyncIteration):
        await sub.__anext__()


@pytest.mark.asyncio
async def test_denial_is_raised_from_iterator():
    provider = ChannelPositionProvider()
    sub = provider.watch(WatchOptions())
    provider.deny()
    with pytest.raises(PositionDenied):
        await sub.__anext__()
    assert provider.active_watches == 0


@pytest.mark.asyncio
async def test_first_fix_timeout():
    provider = ChannelPositionProvider()
    sub = provider.watch(WatchOptions(timeout_s=0.01))
    with pytest.raises(PositionTimeout):
        await sub.__anext__()


@pytest.mark.asyncio
async def test_no_timeout_after_first_fix():
    provider = ChannelPositionProvider()
    sub = provider.watch(WatchOptions(timeout_s=0.01))
    provider.publish(1.0, 2.0)
    await sub.__anext__()

    waiter = asyncio.ensure_future(sub.__anext__())
    await asyncio.sleep(0.05)
    assert not waiter.done()
    sub.cancel()
    with pytest.raises(StopAsyncIteration):
        await waiter


def test_unsupported_platform():
    provider = ChannelPositionProvider(supported=False)
    with pytest.raises(PositionUnsupported):
        provider.watch(WatchOptions())


@pytest.mark.asyncio
async def test_cached_fix_only_reused_when_maximum_age_allows():
    provider = ChannelPositionProvider()
    provider.publish(10.0, 20.0)

    fresh_only = provider.watch(WatchOptions(timeout_s=0.01, maximum_age_s=0))
    with pytest.raises(PositionTimeout):
        await fresh_only.__anext__()

    cached_ok = provider.watch(WatchOptions(maximum_age_s=60))
    fix = await cached_ok.__anext__()
    assert (fix.latitude, fix.longitude) == (10.0, 20.0)
    cached_ok.cancel()
