"""
Region Capture - turn a located Region into PNG bytes
"""

import logging
from typing import Dict

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from ..config import CaptureConfig
from ..error_handler import ScreenshotError
from .locator import Region

logger = logging.getLogger(__name__)

SCROLL_OFFSET_JS = "() => ({ x: window.scrollX, y: window.scrollY })"


def padded_clip(box: Dict[str, float], padding: int) -> Dict[str, float]:
    """Grow a bounding box by ``padding`` on every side, clamped at the page origin"""
    x = max(0.0, box['x'] - padding)
    y = max(0.0, box['y'] - padding)
    return {
        'x': x,
        'y': y,
        'width': box['x'] + box['width'] + padding - x,
        'height': box['y'] + box['height'] + padding - y,
    }


def to_page_coordinates(box: Dict[str, float], scroll: Dict[str, float]) -> Dict[str, float]:
    """Shift a viewport-relative box by the scroll offset"""
    return {**box, 'x': box['x'] + scroll.get('x', 0), 'y': box['y'] + scroll.get('y', 0)}


async def capture_region(page: Page, region: Region, config: CaptureConfig) -> bytes:
    """
    Screenshot a region as PNG.

    Element regions are captured through the locator, which covers the
    element's full extent even when it overflows the viewport. With padding
    the page is clipped around the element's box instead.
    """
    try:
        if not region.is_element:
            logger.debug("Capturing full page")
            return await page.screenshot(full_page=True, type='png', animations='disabled')

        if config.padding > 0 and region.box:
            # bounding_box() is relative to the viewport, full-page clips are not
            scroll = await page.evaluate(SCROLL_OFFSET_JS) or {}
            clip = padded_clip(to_page_coordinates(region.box, scroll), config.padding)
            logger.debug(f"Capturing clip {clip}")
            return await page.screenshot(full_page=True, clip=clip, type='png', animations='disabled')

        return await region.locator.screenshot(type='png', animations='disabled')

    except PlaywrightError as e:
        raise ScreenshotError(f"Screenshot of {region.kind} region failed: {e}") from e
