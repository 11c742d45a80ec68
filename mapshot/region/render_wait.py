"""
Render Detection - decide when a client-rendered map has finished drawing
"""

import logging
from typing import Any, Dict, Optional

from playwright.async_api import Locator, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..config import CaptureConfig
from .polling import CancellationToken, Deadline, poll_until, wait_until_stable

logger = logging.getLogger(__name__)

# Counts loaded tile images and large canvases in one round trip
RENDER_PROBE_JS = """
({ minCanvasWidth, minCanvasHeight }) => {
    const tilePattern = /(tile|map|leaflet|mapbox|raster|png|jpg)/i;
    const tiles = Array.from(document.querySelectorAll('img')).filter(img =>
        img.naturalWidth > 0 &&
        img.naturalHeight > 0 &&
        img.offsetParent !== null &&
        tilePattern.test(img.src || '')
    ).length;
    const canvases = Array.from(document.querySelectorAll('canvas')).filter(c =>
        c.width >= minCanvasWidth &&
        c.height >= minCanvasHeight &&
        c.offsetParent !== null
    ).length;
    return { tiles, canvases };
}
"""


def is_rendered(probe: Optional[Dict[str, Any]], config: CaptureConfig) -> bool:
    """Enough loaded tiles, or at least one large visible canvas"""
    if not probe:
        return False
    return probe.get('tiles', 0) >= config.min_tile_count or probe.get('canvases', 0) > 0


async def wait_for_map_render(page: Page, config: CaptureConfig,
                              token: Optional[CancellationToken] = None) -> Dict[str, Any]:
    """
    Wait until tiles or a canvas have been drawn on the page.

    Returns the last probe result ({'tiles': n, 'canvases': n}).
    Raises RenderTimeoutError after ``render_timeout_ms``.
    """
    args = {
        'minCanvasWidth': config.min_canvas_width,
        'minCanvasHeight': config.min_canvas_height,
    }

    async def probe():
        return await page.evaluate(RENDER_PROBE_JS, args)

    result = await poll_until(
        probe,
        lambda value: is_rendered(value, config),
        Deadline(config.render_timeout_ms),
        config.poll_interval_ms,
        token,
        description="map tiles or canvas to render"
    )
    logger.debug(f"Map rendered: {result['tiles']} tiles, {result['canvases']} canvases")
    return result


def _box_key(box: Optional[Dict[str, float]]):
    if not box:
        return None
    return (round(box['x'], 1), round(box['y'], 1), round(box['width'], 1), round(box['height'], 1))


async def wait_for_stable_box(locator: Locator, config: CaptureConfig,
                              token: Optional[CancellationToken] = None) -> Dict[str, float]:
    """
    Poll a locator's bounding box until it is unchanged for ``stabilize_ms``.

    Raises RenderTimeoutError if the box keeps moving past ``stabilize_timeout_ms``.
    """
    latest = {}
    deadline = Deadline(config.stabilize_timeout_ms)

    async def probe():
        # A detached or re-created element reads as "no box yet"
        try:
            box = await locator.bounding_box(timeout=max(1.0, deadline.remaining() * 1000))
        except PlaywrightTimeoutError:
            box = None
        latest['box'] = box
        return _box_key(box)

    await wait_until_stable(
        probe,
        config.stabilize_ms,
        deadline,
        config.poll_interval_ms,
        token,
        description="region bounding box to stabilize"
    )
    return latest['box']
