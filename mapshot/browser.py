import logging
from playwright.async_api import async_playwright, Page

from .config import CaptureConfig

logger = logging.getLogger(__name__)

USER_AGENT = 'Mozilla/5.0 (compatible; MapShot/1.0) AppleWebKit/537.36'


class BrowserSession:
    """One Chromium browser and context shared by every page of a run"""

    def __init__(self, config: CaptureConfig):
        self.config = config
        self.playwright = None
        self.browser = None
        self.context = None

    async def __aenter__(self):
        """Async context manager entry"""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        await self.close()

    async def start(self):
        """Initialize browser instance"""
        try:
            self.playwright = await async_playwright().start()

            self.browser = await self.playwright.chromium.launch(
                headless=self.config.headless,
                args=[
                    '--no-sandbox',
                    '--disable-dev-shm-usage',
                    '--hide-scrollbars'
                ]
            )

            # Viewport and pixel ratio are shared by every page of the run
            self.context = await self.browser.new_context(
                viewport=self.config.viewport,
                device_scale_factor=self.config.device_scale_factor,
                user_agent=USER_AGENT
            )

        except Exception as e:
            logger.error(f"Failed to start browser: {e}")
            await self.close()
            raise

        logger.info(
            f"Browser ready ({self.config.viewport_width}x{self.config.viewport_height} "
            f"@{self.config.device_scale_factor}x)"
        )

    async def new_page(self) -> Page:
        """Open a fresh page in the shared context"""
        if not self.context:
            raise RuntimeError("Browser not initialized. Use 'async with' or call start() first")
        return await self.context.new_page()

    async def close(self):
        """Clean up browser resources"""
        try:
            if self.context:
                await self.context.close()
            if self.browser:
                await self.browser.close()
            if self.playwright:
                await self.playwright.stop()
        except Exception as e:
            logger.error(f"Error closing browser: {e}")
        finally:
            self.context = None
            self.browser = None
            self.playwright = None
