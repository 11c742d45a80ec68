"""
Region Capturer - runs the per-target capture sequence over a plan
"""

import asyncio
import time
import logging
from collections import defaultdict
from typing import Dict, List, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..browser import BrowserSession
from ..config import CapturePlan, Target
from ..error_handler import ErrorHandler, RetryConfig, NavigationError, NavigationTimeoutError
from ..features.base import CaptureFeature
from ..monitoring import MetricsCollector, LogManager
from ..region import (
    CancellationToken,
    capture_region,
    locate_region,
    wait_for_map_render,
    wait_for_stable_box,
)
from ..storage import FileStorage, read_png_dimensions, validate_png
from .result import CaptureResult

logger = logging.getLogger(__name__)


class RegionCapturer:
    """
    Captures every target of a plan, one at a time, with one shared browser.

    Each target gets ``max_attempts`` tries of the full sequence (navigate,
    wait for render, locate, stabilise, prepare, screenshot, validate, write).
    The first target that runs out of attempts aborts the run; the browser is
    closed exactly once either way.
    """

    def __init__(self, plan: CapturePlan, session: Optional[BrowserSession] = None,
                 storage: Optional[FileStorage] = None,
                 error_handler: Optional[ErrorHandler] = None,
                 metrics_collector: Optional[MetricsCollector] = None,
                 log_manager: Optional[LogManager] = None):
        self.plan = plan
        self.config = plan.config
        self.features: List[CaptureFeature] = []
        self.session = session or BrowserSession(self.config)
        self.storage = storage or FileStorage(self.config.output_dir)
        self.error_handler = error_handler or ErrorHandler(RetryConfig(
            max_attempts=self.config.max_attempts,
            base_delay=self.config.retry_delay
        ))
        self.metrics_collector = metrics_collector or MetricsCollector()
        self.log_manager = log_manager
        self.token = CancellationToken()

        self.results: List[CaptureResult] = []
        self.attempts: Dict[str, int] = defaultdict(int)

    def add_feature(self, feature: CaptureFeature):
        """Add a feature to this capturer"""
        self.features.append(feature)
        return self

    def cancel(self, reason: str = "cancelled by caller"):
        """Stop at the next wait point; the current target is not retried"""
        self.token.cancel(reason)

    async def run(self) -> List[CaptureResult]:
        """Capture all targets in order; raises the last error of the first target that fails"""
        logger.info(f"Capturing {len(self.plan.targets)} targets into {self.storage.base_path}")

        for feature in self.features:
            await feature.initialize(self)

        try:
            async with self.session:
                for target in self.plan.targets:
                    result = await self.capture_target(target)
                    self.results.append(result)
        finally:
            for feature in self.features:
                await feature.finalize(self)
            self._export_metrics()

        return self.results

    async def capture_target(self, target: Target) -> CaptureResult:
        """Capture one target with the retry policy applied"""
        logger.info(f"[shot] {target.name} <- {target.url}")

        try:
            result = await self.error_handler.execute_with_retry(
                self._capture_once, target.name, target
            )
        except Exception:
            self.metrics_collector.record_target_failed(target.name, self.attempts[target.name])
            raise

        self.metrics_collector.record_capture(
            target.name, result.byte_length, result.duration, result.attempts, result.region_kind
        )
        logger.info(f"[ok] wrote {result.path} ({result.byte_length} bytes)")
        return result

    async def _capture_once(self, target: Target) -> CaptureResult:
        """One full attempt at a target in a fresh page"""
        self.attempts[target.name] += 1
        start_time = time.time()
        config = self.config

        page = await self.session.new_page()
        try:
            await self._navigate(page, target)

            probe = await wait_for_map_render(page, config, self.token)
            if config.settle_ms:
                await asyncio.sleep(config.settle_ms / 1000.0)

            region = await locate_region(page, config, target.selector, self.token)
            if region.is_element:
                region.box = await wait_for_stable_box(region.locator, config, self.token)

            for feature in self.features:
                await feature.prepare_page(page, target, region, self)

            content = await capture_region(page, region, config)
            validate_png(content, config.min_bytes)
            path = await self.storage.save_bytes(target.output_path, content)

        except Exception as error:
            self.metrics_collector.record_error(
                target.name, self.error_handler.classify_error(error).value
            )
            raise
        finally:
            await self._close_page(page)

        dimensions = read_png_dimensions(content) or (None, None)
        result = CaptureResult(
            target=target.name,
            url=target.url,
            path=str(path),
            byte_length=len(content),
            region_kind=region.kind,
            selector=region.selector,
            width=dimensions[0],
            height=dimensions[1],
            attempts=self.attempts[target.name],
            duration=time.time() - start_time
        )

        if self.log_manager:
            self.log_manager.log_performance_event(
                'capture',
                target=target.name,
                duration=result.duration,
                bytes=result.byte_length,
                region_kind=result.region_kind,
                tiles=probe.get('tiles'),
                canvases=probe.get('canvases')
            )
        return result

    async def _navigate(self, page, target: Target):
        """Load the target and wait for network activity to settle"""
        timeout = self.config.navigation_timeout_ms
        try:
            await page.goto(target.url, wait_until='networkidle', timeout=timeout)
        except PlaywrightTimeoutError as e:
            raise NavigationTimeoutError(f"{target.url} did not settle within {timeout}ms") from e
        except PlaywrightError as e:
            raise NavigationError(f"Failed to load {target.url}: {e}") from e

    async def _close_page(self, page):
        try:
            await page.close()
        except PlaywrightError as e:
            logger.warning(f"Error closing page: {e}")

    def _export_metrics(self):
        if not self.log_manager:
            return

        summary = self.metrics_collector.get_summary()
        summary['errors'] = self.error_handler.get_error_summary()
        summary['storage'] = self.storage.get_storage_stats()
        self.log_manager.export_metrics_json(summary, "final_capture_metrics.json")
