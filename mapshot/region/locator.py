"""
Region Locator - pick the page element that holds the map
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from playwright.async_api import Locator, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..config import CaptureConfig
from ..error_handler import NoCapturableElementError
from .polling import CancellationToken

logger = logging.getLogger(__name__)

# Known map-library containers first, generic fallbacks last
CANDIDATE_SELECTORS = [
    '.leaflet-container',
    '.mapboxgl-map',
    '.mapboxgl-canvas',
    '#map',
    '.map',
    'main',
    'canvas',
    'img',
]

REGION_ATTRIBUTE = 'data-mapshot-region'

# Marks the largest visible canvas/img so a locator can address it
MARK_LARGEST_JS = """
({ minWidth, minHeight, attr }) => {
    document.querySelectorAll('[' + attr + ']').forEach(e => e.removeAttribute(attr));
    const els = Array.from(document.querySelectorAll('canvas, img'))
        .filter(e => e.offsetParent !== null);
    let best = null, bestArea = 0;
    for (const e of els) {
        const r = e.getBoundingClientRect();
        const area = r.width * r.height;
        if (area > bestArea) { best = e; bestArea = area; }
    }
    if (!best) return null;
    const r = best.getBoundingClientRect();
    if (r.width < minWidth || r.height < minHeight) return null;
    best.setAttribute(attr, '1');
    return { tag: best.tagName.toLowerCase(), width: r.width, height: r.height };
}
"""


class RegionKind:
    SELECTOR = 'selector'
    LARGEST = 'largest'
    FULL_PAGE = 'full_page'


@dataclass
class Region:
    """The part of the page chosen for the screenshot"""
    kind: str
    selector: Optional[str] = None
    locator: Optional[Locator] = None
    box: Optional[Dict[str, float]] = None

    @property
    def is_element(self) -> bool:
        return self.locator is not None


def box_qualifies(box: Optional[Dict[str, float]], config: CaptureConfig) -> bool:
    return bool(box) and box['width'] >= config.min_region_width and box['height'] >= config.min_region_height


def candidate_selectors(override: Optional[str] = None) -> List[str]:
    """Selector override first (if any), then the built-in candidates"""
    if not override:
        return list(CANDIDATE_SELECTORS)
    return [override] + [s for s in CANDIDATE_SELECTORS if s != override]


async def probe_selector(page: Page, selector: str,
                         config: CaptureConfig) -> Tuple[Optional[Locator], Optional[Dict[str, float]]]:
    """Return (locator, box) if the first match is visible and large enough"""
    locator = page.locator(selector).first
    if not await locator.count():
        return None, None

    try:
        await locator.wait_for(state='visible', timeout=config.locator_timeout_ms)
    except PlaywrightTimeoutError:
        logger.debug(f"{selector} never became visible")
        return None, None

    try:
        box = await locator.bounding_box(timeout=config.locator_timeout_ms)
    except PlaywrightTimeoutError:
        logger.debug(f"{selector} detached before it could be measured")
        return None, None
    if not box_qualifies(box, config):
        logger.debug(f"{selector} too small: {box}")
        return None, None

    return locator, box


async def find_largest_visual(page: Page, config: CaptureConfig) -> Optional[Region]:
    """Largest visible canvas or image by rendered area, if it meets the minimum size"""
    marked = await page.evaluate(MARK_LARGEST_JS, {
        'minWidth': config.min_region_width,
        'minHeight': config.min_region_height,
        'attr': REGION_ATTRIBUTE,
    })
    if not marked:
        return None

    selector = f'[{REGION_ATTRIBUTE}]'
    locator = page.locator(selector).first
    try:
        box = await locator.bounding_box(timeout=config.locator_timeout_ms)
    except PlaywrightTimeoutError:
        logger.debug("Largest visual element detached before it could be measured")
        return None
    if not box_qualifies(box, config):
        return None

    logger.debug(f"Largest visual element: <{marked['tag']}> {marked['width']:.0f}x{marked['height']:.0f}")
    return Region(RegionKind.LARGEST, selector=selector, locator=locator, box=box)


async def locate_region(page: Page, config: CaptureConfig,
                        selector_override: Optional[str] = None,
                        token: Optional[CancellationToken] = None) -> Region:
    """
    Walk the fallback chain: selectors, then largest canvas/img, then full page.

    Every probe is bounded by ``locator_timeout_ms``, so the chain always ends
    with a Region or a NoCapturableElementError.
    """
    for selector in candidate_selectors(selector_override):
        if token:
            token.raise_if_cancelled()

        locator, box = await probe_selector(page, selector, config)
        if locator is not None:
            logger.info(f"Map region: {selector} ({box['width']:.0f}x{box['height']:.0f})")
            return Region(RegionKind.SELECTOR, selector=selector, locator=locator, box=box)

    if token:
        token.raise_if_cancelled()

    region = await find_largest_visual(page, config)
    if region:
        logger.info(f"Map region: largest visual element ({region.box['width']:.0f}x{region.box['height']:.0f})")
        return region

    if config.allow_full_page:
        logger.warning("No map element qualified, falling back to full page")
        return Region(RegionKind.FULL_PAGE)

    raise NoCapturableElementError(
        f"Could not find a map element of at least "
        f"{config.min_region_width}x{config.min_region_height} to screenshot"
    )
