"""
Playwright browser session
Persistent Chromium context so platform logins survive restarts
"""
from pathlib import Path
from typing import Optional

from loguru import logger
from playwright.async_api import (
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Playwright,
    async_playwright,
)

from core.config import settings


class BrowserSession:
    """Owns one persistent browser context and its single page"""

    LAUNCH_ARGS = [
        '--no-sandbox',
        '--disable-blink-features=AutomationControlled',
    ]

    def __init__(self, profile_name: str, headless: Optional[bool] = None, user_data_dir: Optional[str] = None):
        self.profile_name = profile_name
        self.headless = settings.PLAYWRIGHT_HEADLESS if headless is None else headless
        self.user_data_dir = Path(user_data_dir or settings.BROWSER_USER_DATA_DIR) / profile_name
        self._playwright: Optional[Playwright] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None

    @property
    def page(self) -> Optional[Page]:
        return self._page

    @property
    def is_open(self) -> bool:
        return self._page is not None and not self._page.is_closed()

    async def start(self) -> bool:
        """Launch the browser if needed; False when it cannot be launched"""
        if self.is_open:
            return True

        try:
            self.user_data_dir.mkdir(parents=True, exist_ok=True)
            if self._playwright is None:
                self._playwright = await async_playwright().start()
            self._context = await self._playwright.chromium.launch_persistent_context(
                str(self.user_data_dir),
                headless=self.headless,
                args=self.LAUNCH_ARGS,
                user_agent=settings.USER_AGENT,
                viewport={'width': 1280, 'height': 900},
            )
            self._context.set_default_navigation_timeout(settings.NAVIGATION_TIMEOUT_MS)
            pages = self._context.pages
            self._page = pages[0] if pages else await self._context.new_page()
            logger.info(f"Browser session '{self.profile_name}' started (headless={self.headless})")
            return True
        except (PlaywrightError, OSError) as e:
            logger.error(f"Could not start browser session '{self.profile_name}': {e}")
            await self.close()
            return False

    async def close(self) -> None:
        try:
            if self._context is not None:
                await self._context.close()
            if self._playwright is not None:
                await self._playwright.stop()
        except PlaywrightError as e:
            logger.warning(f"Error closing browser session '{self.profile_name}': {e}")
        finally:
            self._context = None
            self._playwright = None
            self._page = None
