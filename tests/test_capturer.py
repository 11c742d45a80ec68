"""Tests for the sequential capture run and its retry-then-abort policy."""

import asyncio
import sys
from pathlib import Path

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

sys.path.insert(0, str(Path(__file__).parent.parent))

from mapshot.capture import CaptureBuilder, RegionCapturer
from mapshot.config import DEFAULT_TARGETS, CaptureConfig, CapturePlan, Target
from mapshot.error_handler import (
    CaptureCancelledError,
    ErrorType,
    InvalidPngError,
    NavigationError,
    NavigationTimeoutError,
    RenderTimeoutError,
)
from mapshot.features import HideControlsFeature
from mapshot.storage import PNG_SIGNATURE
from fakes import FakePage, FakeSession, make_png, map_page

TARGETS = (
    Target('kilima', 'https://maps.test/?map=kilima-valley', 'kilima.png'),
    Target('bahari', 'https://maps.test/?map=bahari-bay', 'bahari.png'),
    Target('elderwood', 'https://maps.test/?map=elderwood', 'elderwood.png'),
)


def fast_config(tmp_path, **overrides):
    defaults = dict(
        poll_interval_ms=5, render_timeout_ms=50, stabilize_ms=5,
        stabilize_timeout_ms=200, locator_timeout_ms=10, settle_ms=0,
        retry_delay=0, output_dir=str(tmp_path / "docs"),
    )
    defaults.update(overrides)
    return CaptureConfig(**defaults)


def make_capturer(tmp_path, pages, targets=TARGETS, **overrides):
    plan = CapturePlan(targets=targets, config=fast_config(tmp_path, **overrides))
    session = FakeSession(pages)
    capturer = RegionCapturer(plan, session=session)
    capturer.add_feature(HideControlsFeature())
    return capturer, session


def nav_timeout():
    return PlaywrightTimeoutError("Timeout 60000ms exceeded.")


class TestSuccessfulRun:
    def test_every_target_written_in_order(self, tmp_path):
        png = make_png()
        pages = [map_page(png) for _ in TARGETS]
        capturer, session = make_capturer(tmp_path, pages)

        results = asyncio.run(capturer.run())

        assert [r.target for r in results] == ['kilima', 'bahari', 'elderwood']
        assert [p.visited for p in pages] == [[t.url] for t in TARGETS]
        for result in results:
            written = Path(result.path).read_bytes()
            assert written == png
            assert result.region_kind == 'selector'
            assert result.selector == '.leaflet-container'
            assert (result.width, result.height) == (200, 200)
            assert result.attempts == 1
        assert all(page.closed for page in pages)
        assert all(len(page.styles) == 1 for page in pages)
        assert session.enter_count == 1 and session.close_count == 1

    def test_kilima_example(self, tmp_path):
        capturer, _ = make_capturer(tmp_path, [map_page(make_png())], targets=TARGETS[:1])
        asyncio.run(capturer.run())

        output = tmp_path / "docs" / "kilima.png"
        content = output.read_bytes()
        assert content[:8] == bytes.fromhex('89504E470D0A1A0A')
        assert len(content) >= 20000

    def test_full_page_fallback_is_still_written(self, tmp_path):
        page = FakePage(content=make_png())
        capturer, _ = make_capturer(tmp_path, [page], targets=TARGETS[:1])
        results = asyncio.run(capturer.run())
        assert results[0].region_kind == 'full_page'
        assert page.screenshot_calls[0]['full_page'] is True

    def test_metrics_recorded(self, tmp_path):
        capturer, _ = make_capturer(tmp_path, [map_page(make_png()) for _ in TARGETS])
        asyncio.run(capturer.run())
        metrics = capturer.metrics_collector.capture_metrics
        assert metrics.targets_captured == 3
        assert metrics.retries == 0
        assert metrics.bytes_written > 60000


class TestRetry:
    def test_transient_failure_then_success(self, tmp_path):
        png = make_png()
        flaky = map_page(png, goto_error=nav_timeout())
        capturer, session = make_capturer(tmp_path, [flaky, map_page(png)], targets=TARGETS[:1])

        results = asyncio.run(capturer.run())

        assert results[0].attempts == 2
        assert (tmp_path / "docs" / "kilima.png").read_bytes() == png
        assert flaky.closed
        assert capturer.metrics_collector.errors_by_type == {'navigation_timeout': 1}
        assert session.close_count == 1

    def test_two_failures_abort_the_run(self, tmp_path):
        pages = [
            map_page(make_png()),
            map_page(make_png(), goto_error=nav_timeout()),
            map_page(make_png(), goto_error=nav_timeout()),
            map_page(make_png()),
        ]
        capturer, session = make_capturer(tmp_path, pages)

        with pytest.raises(NavigationTimeoutError):
            asyncio.run(capturer.run())

        docs = tmp_path / "docs"
        assert (docs / "kilima.png").exists()
        assert not (docs / "bahari.png").exists()
        assert not (docs / "elderwood.png").exists()
        assert pages[3].visited == []
        assert session.close_count == 1
        assert capturer.error_handler.get_failed_targets() == ['bahari']
        assert capturer.metrics_collector.capture_metrics.targets_failed == 1

    def test_invalid_png_is_never_written(self, tmp_path):
        html = b'<html>blocked</html>' * 2000
        pages = [map_page(html), map_page(html)]
        capturer, _ = make_capturer(tmp_path, pages, targets=TARGETS[:1])

        with pytest.raises(InvalidPngError):
            asyncio.run(capturer.run())
        assert not (tmp_path / "docs" / "kilima.png").exists()

    def test_render_timeout_then_recovery(self, tmp_path):
        blank = map_page(make_png(), probes=[{'tiles': 0, 'canvases': 0}])
        capturer, _ = make_capturer(tmp_path, [blank, map_page(make_png())], targets=TARGETS[:1])
        results = asyncio.run(capturer.run())
        assert results[0].attempts == 2
        history = capturer.error_handler.error_history
        assert [e.error_type for e in history] == [ErrorType.RENDER_TIMEOUT]

    def test_navigation_error_is_classified(self, tmp_path):
        from playwright.async_api import Error as PlaywrightError

        broken = [map_page(b'', goto_error=PlaywrightError("net::ERR_NAME_NOT_RESOLVED"))
                  for _ in range(2)]
        capturer, _ = make_capturer(tmp_path, broken, targets=TARGETS[:1])
        with pytest.raises(NavigationError, match="ERR_NAME_NOT_RESOLVED"):
            asyncio.run(capturer.run())

    def test_cancelled_run_is_not_retried(self, tmp_path):
        capturer, session = make_capturer(tmp_path, [map_page(make_png()), map_page(make_png())],
                                          targets=TARGETS[:1])
        capturer.cancel("shutting down")

        with pytest.raises(CaptureCancelledError):
            asyncio.run(capturer.run())
        assert len(session.opened) == 1
        assert session.close_count == 1


class TestBuilder:
    def test_from_plan_enables_configured_features(self, tmp_path):
        config = fast_config(tmp_path, hide_controls=True, dismiss_banners=True)
        capturer = CaptureBuilder.from_plan(CapturePlan(TARGETS, config)).build(session=FakeSession([]))
        assert [f.name for f in capturer.features] == ['hide_controls', 'dismiss_banners']
        assert capturer.plan.targets == TARGETS
        assert capturer.error_handler.retry_config.max_attempts == 2

    def test_hide_controls_can_be_disabled(self, tmp_path):
        plan = CapturePlan(DEFAULT_TARGETS, fast_config(tmp_path, hide_controls=False))
        capturer = CaptureBuilder.from_plan(plan).build(session=FakeSession([]))
        assert capturer.features == []

    def test_fluent_overrides(self, tmp_path):
        capturer = (CaptureBuilder(TARGETS[:1])
                    .output_dir(tmp_path / "out")
                    .max_attempts(1)
                    .with_hidden_controls()
                    .build(session=FakeSession([])))
        assert capturer.storage.base_path == tmp_path / "out"
        assert capturer.error_handler.retry_config.max_attempts == 1

    def test_single_attempt_aborts_on_first_failure(self, tmp_path):
        pages = [map_page(make_png(), goto_error=nav_timeout())]
        capturer = (CaptureBuilder(TARGETS[:1])
                    .config(fast_config(tmp_path))
                    .max_attempts(1)
                    .build(session=FakeSession(pages)))
        with pytest.raises(NavigationTimeoutError):
            asyncio.run(capturer.run())


def test_stabilization_failure_is_a_render_timeout(tmp_path):
    from fakes import FakeLocator, box

    moving = FakeLocator([box(900 + i, 700) for i in range(2000)], content=make_png())
    pages = [FakePage(elements={'#map': moving}, content=make_png()) for _ in range(2)]
    capturer, _ = make_capturer(tmp_path, pages, targets=TARGETS[:1], stabilize_timeout_ms=30)

    with pytest.raises(RenderTimeoutError):
        asyncio.run(capturer.run())
