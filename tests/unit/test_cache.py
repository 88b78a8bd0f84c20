"""Tests for pdfprep.cache package."""

import asyncio
from pathlib import Path

import pytest

from pdfprep.cache import PagePreviewCache, ThumbnailCache
from pdfprep.exceptions import RenderError
from pdfprep.model import Box
from pdfprep.progress import ProgressBus, ProgressEventType
from pdfprep.rendering.mock import MockRasterizer
from pdfprep.state.metadata import MetadataStore


async def make_cache(count=5, gate=None, fail_pages=None, bus=None, capacity=20):
    rasterizer = MockRasterizer(pages=[(612, 792)] * count, gate=gate, fail_pages=fail_pages)
    result = await rasterizer.load_file(Path("doc.pdf"))
    store = MetadataStore()
    for info in result.pages:
        store.init_page(info.page_number, info.width, info.height)
    cache = PagePreviewCache(rasterizer, store, bus, width=200, height=250, capacity=capacity)
    return cache, rasterizer, store


class TestPagePreviewCache:
    """Test the versioned preview cache."""

    def test_render_and_cache(self):
        async def scenario():
            cache, rasterizer, _ = await make_cache()
            first = await cache.ensure_preview(1)
            second = await cache.ensure_preview(1)
            return cache, rasterizer, first, second

        cache, rasterizer, first, second = asyncio.run(scenario())
        assert first is second
        assert rasterizer.render_count(1) == 1
        assert cache.get_cached(1) is first
        assert len(cache) == 1

    def test_preview_fits_container(self):
        async def scenario():
            cache, _, _ = await make_cache()
            return await cache.ensure_preview(1)

        image = asyncio.run(scenario())
        assert image.width <= 200
        assert image.height <= 250

    def test_transforms_applied(self):
        async def scenario():
            cache, _, store = await make_cache()
            store.set_rotation(1, 90)
            return await cache.ensure_preview(1)

        image = asyncio.run(scenario())
        # Rotated letter page is landscape
        assert image.width > image.height

    def test_concurrent_callers_share_render(self):
        async def scenario():
            gate = asyncio.Event()
            cache, rasterizer, _ = await make_cache(gate=gate)
            tasks = [asyncio.ensure_future(cache.ensure_preview(2)) for _ in range(3)]
            await asyncio.sleep(0)
            assert cache.is_pending(2)
            gate.set()
            images = await asyncio.gather(*tasks)
            return rasterizer, images

        rasterizer, images = asyncio.run(scenario())
        assert rasterizer.render_count(2) == 1
        assert images[0] is images[1] is images[2]

    def test_stale_render_not_cached(self):
        async def scenario():
            gate = asyncio.Event()
            cache, _, store = await make_cache(gate=gate)
            task = asyncio.ensure_future(cache.ensure_preview(3))
            await asyncio.sleep(0)
            store.set_rotation(3, 90)
            cache.invalidate(3)
            gate.set()
            stale = await task
            return cache, stale

        cache, stale = asyncio.run(scenario())
        assert stale is not None
        assert len(cache) == 0
        assert cache.get_cached(3) is None
        assert cache.version(3) == 1

    def test_render_after_invalidation_uses_new_transforms(self):
        async def scenario():
            gate = asyncio.Event()
            cache, rasterizer, store = await make_cache(gate=gate)
            stale_task = asyncio.ensure_future(cache.ensure_preview(3))
            await asyncio.sleep(0)
            store.set_rotation(3, 90)
            cache.invalidate(3)
            fresh_task = asyncio.ensure_future(cache.ensure_preview(3))
            await asyncio.sleep(0)
            gate.set()
            stale, fresh = await asyncio.gather(stale_task, fresh_task)
            return cache, rasterizer, stale, fresh

        cache, rasterizer, stale, fresh = asyncio.run(scenario())
        assert rasterizer.render_count(3) == 2
        assert stale.width < stale.height
        assert fresh.width > fresh.height
        assert cache.get_cached(3) is fresh

    def test_invalidate_all_bumps_unseen_pages(self):
        async def scenario():
            gate = asyncio.Event()
            cache, _, _ = await make_cache(gate=gate)
            task = asyncio.ensure_future(cache.ensure_preview(4))
            await asyncio.sleep(0)
            cache.invalidate_all(range(1, 6))
            gate.set()
            await task
            return cache

        cache = asyncio.run(scenario())
        assert len(cache) == 0
        assert cache.version(4) == 1
        assert cache.version(5) == 1

    def test_clear_discards_in_flight_renders(self):
        async def scenario():
            gate = asyncio.Event()
            cache, _, _ = await make_cache(gate=gate)
            task = asyncio.ensure_future(cache.ensure_preview(1))
            await asyncio.sleep(0)
            cache.clear()
            gate.set()
            await task
            return cache

        cache = asyncio.run(scenario())
        assert len(cache) == 0
        assert not cache.is_pending(1)

    def test_failed_render_can_be_retried(self):
        async def scenario():
            cache, rasterizer, _ = await make_cache(fail_pages={2})
            with pytest.raises(RenderError):
                await cache.ensure_preview(2)
            pending_after_failure = cache.is_pending(2)
            rasterizer.fail_pages.clear()
            image = await cache.ensure_preview(2)
            return pending_after_failure, image

        pending_after_failure, image = asyncio.run(scenario())
        assert pending_after_failure is False
        assert image is not None

    def test_lru_eviction(self):
        async def scenario():
            cache, _, _ = await make_cache(capacity=2)
            for page_number in (1, 2, 3):
                await cache.ensure_preview(page_number)
            return cache

        cache = asyncio.run(scenario())
        assert len(cache) == 2
        assert cache.get_cached(1) is None
        assert cache.get_cached(3) is not None

    def test_uncached_render(self):
        async def scenario():
            cache, _, _ = await make_cache()
            await cache.get_preview(1, 100, 100, cache=False)
            return cache

        assert len(asyncio.run(scenario())) == 0

    def test_edit_changes_cache_key(self):
        async def scenario():
            cache, _, store = await make_cache()
            await cache.ensure_preview(1)
            store.set_crop(1, Box(0.0, 0.0, 0.5, 0.5))
            return cache

        cache = asyncio.run(scenario())
        assert cache.get_cached(1) is None

    def test_raw_preview_survives_invalidation(self):
        async def scenario():
            cache, rasterizer, _ = await make_cache()
            first = await cache.get_raw_preview(1, 0.5)
            cache.invalidate(1)
            second = await cache.get_raw_preview(1, 0.5)
            return rasterizer, first, second

        rasterizer, first, second = asyncio.run(scenario())
        assert first is second
        assert rasterizer.render_count(1) == 1
        assert first.size == (306, 396)

    def test_render_events(self):
        async def scenario():
            bus = ProgressBus()
            events = []
            bus.subscribe(events.append)
            cache, _, _ = await make_cache(bus=bus)
            await cache.ensure_preview(2)
            return events

        events = asyncio.run(scenario())
        assert [e.type for e in events] == [ProgressEventType.RENDER_START, ProgressEventType.RENDER_COMPLETE]
        assert all(e.page_number == 2 for e in events)

    def test_token_changes_on_clear(self):
        async def scenario():
            cache, _, _ = await make_cache()
            before = cache.token(1)
            cache.clear()
            return cache, before

        cache, before = asyncio.run(scenario())
        # Versions restart at 0, the generation does not
        assert cache.version(1) == 0
        assert not cache.is_current_token(1, before)
        assert cache.is_current_token(1, cache.token(1))

    def test_token_changes_on_invalidate(self):
        async def scenario():
            cache, _, _ = await make_cache()
            before = cache.token(2)
            cache.invalidate(2)
            return cache, before

        cache, before = asyncio.run(scenario())
        assert not cache.is_current_token(2, before)

    def test_is_pending_at_matches_size(self):
        async def scenario():
            gate = asyncio.Event()
            cache, _, _ = await make_cache(gate=gate)
            task = asyncio.ensure_future(cache.get_preview(2, 150, 200, cache=False))
            await asyncio.sleep(0)
            states = (cache.is_pending(2), cache.is_pending_at(2), cache.is_pending_at(2, 150, 200))
            gate.set()
            await task
            return states

        assert asyncio.run(scenario()) == (True, False, True)


class TestThumbnailCache:
    """Test the bounded thumbnail cache."""

    @staticmethod
    async def make_thumbnails(capacity=100, **kwargs):
        previews, rasterizer, store = await make_cache(**kwargs)
        released = []
        thumbnails = ThumbnailCache(previews, capacity=capacity, release=released.append)
        return thumbnails, released, rasterizer, store

    def test_thumbnail_within_bounds(self):
        async def scenario():
            thumbnails, _, _, _ = await self.make_thumbnails()
            return await thumbnails.get_thumbnail(1)

        image = asyncio.run(scenario())
        assert image.width <= 150
        assert image.height <= 200

    def test_cached(self):
        async def scenario():
            thumbnails, _, rasterizer, _ = await self.make_thumbnails()
            first = await thumbnails.get_thumbnail(1)
            second = await thumbnails.get_thumbnail(1)
            return thumbnails, rasterizer, first, second

        thumbnails, rasterizer, first, second = asyncio.run(scenario())
        assert first is second
        assert rasterizer.render_count(1) == 1
        assert thumbnails.get_cached(1) is first

    def test_thumbnails_do_not_fill_preview_cache(self):
        async def scenario():
            thumbnails, _, _, _ = await self.make_thumbnails()
            await thumbnails.generate_all(range(1, 6))
            return thumbnails

        thumbnails = asyncio.run(scenario())
        assert len(thumbnails) == 5
        assert len(thumbnails.previews) == 0

    def test_eviction_releases(self):
        async def scenario():
            thumbnails, released, _, _ = await self.make_thumbnails(capacity=2)
            first = await thumbnails.get_thumbnail(1)
            await thumbnails.get_thumbnail(2)
            await thumbnails.get_thumbnail(3)
            return thumbnails, released, first

        thumbnails, released, first = asyncio.run(scenario())
        assert len(thumbnails) == 2
        assert released == [first]

    def test_invalidate_releases_transformed_only(self):
        async def scenario():
            thumbnails, released, _, _ = await self.make_thumbnails()
            page = await thumbnails.get_thumbnail(1)
            raw = await thumbnails.get_raw_thumbnail(1)
            thumbnails.invalidate(1)
            return thumbnails, released, page, raw

        thumbnails, released, page, raw = asyncio.run(scenario())
        assert released == [page]
        assert len(thumbnails) == 1

    def test_invalidate_all_releases_everything(self):
        async def scenario():
            thumbnails, released, _, _ = await self.make_thumbnails()
            await thumbnails.generate_all([1, 2, 3])
            thumbnails.invalidate_all()
            return thumbnails, released

        thumbnails, released = asyncio.run(scenario())
        assert len(thumbnails) == 0
        assert len(released) == 3

    def test_raw_thumbnail_ignores_edits(self):
        async def scenario():
            thumbnails, _, _, store = await self.make_thumbnails()
            store.set_rotation(1, 90)
            return await thumbnails.get_raw_thumbnail(1)

        image = asyncio.run(scenario())
        assert image.width < image.height
        assert image.width <= 150
        assert image.height <= 200

    def test_stale_thumbnail_not_cached(self):
        async def scenario():
            gate = asyncio.Event()
            thumbnails, _, _, store = await self.make_thumbnails(gate=gate)
            task = asyncio.ensure_future(thumbnails.get_thumbnail(1))
            await asyncio.sleep(0)
            store.set_rotation(1, 180)
            thumbnails.previews.invalidate(1)
            gate.set()
            image = await task
            return thumbnails, image

        thumbnails, image = asyncio.run(scenario())
        assert image is not None
        assert len(thumbnails) == 0

    def test_thumbnail_in_flight_during_clear(self):
        async def scenario():
            gate = asyncio.Event()
            thumbnails, _, _, _ = await self.make_thumbnails(gate=gate)
            task = asyncio.ensure_future(thumbnails.get_thumbnail(1))
            raw = asyncio.ensure_future(thumbnails.get_raw_thumbnail(2))
            await asyncio.sleep(0)
            thumbnails.previews.clear()
            gate.set()
            await asyncio.gather(task, raw)
            return thumbnails

        thumbnails = asyncio.run(scenario())
        assert len(thumbnails) == 0

    def test_generate_all_skips_failures(self, caplog):
        async def scenario():
            thumbnails, _, _, _ = await self.make_thumbnails(fail_pages={2})
            return await thumbnails.generate_all(range(1, 4))

        assert asyncio.run(scenario()) == 2
        assert "Thumbnail for page 2 failed" in caplog.text
