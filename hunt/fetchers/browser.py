"""
Playwright-based fetcher for JS-rendered posting pages.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Optional, Tuple

from hunt.config import Settings
from hunt.extract.html import clean

logger = logging.getLogger(__name__)

# Collapsed descriptions hide most of the posting behind one of these.
SHOW_MORE_SELECTORS: Tuple[str, ...] = (
    "button.show-more-less-html__button",
    "button.show-more-less-html__button--more",
    ".jobs-description__footer-button",
    "button[aria-label*='Show more']",
    "button[aria-label*='See more']",
)

DESCRIPTION_SELECTORS: Tuple[str, ...] = (
    ".jobs-description__content",
    ".jobs-box__html-content",
    ".show-more-less-html__markup",
    ".description__text",
    "div.jobs-description-content__text",
    "#job-details",
    "article.jobs-description",
)

AUTH_WALL_SELECTORS: Tuple[str, ...] = (
    "input[name='session_key']",
    "input[name='session_password']",
    ".authwall",
    "button[aria-label*='Sign in']",
)

AUTH_WALL_URL_MARKERS: Tuple[str, ...] = ("/login", "/authwall")


@dataclass
class FetchResult:
    """Result of fetching one posting page."""
    url: str
    status: int = 0
    html: str = ""
    text: str = ""
    final_url: str = ""
    error: str = ""
    elapsed_ms: float = 0

    @property
    def ok(self) -> bool:
        return not self.error and bool(self.text)


@dataclass
class BrowserConfig:
    """Browser configuration."""
    headless: bool = False
    timeout_ms: int = 30000
    user_data_dir: Optional[str] = None  # reuse a logged-in profile
    block_resources: bool = True  # Block images/fonts/media for speed
    settle_s: float = 2.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "BrowserConfig":
        return cls(
            headless=settings.browser_headless,
            timeout_ms=settings.browser_timeout_ms,
            user_data_dir=settings.browser_user_data_dir,
        )


class BrowserFetcher:
    """
    Playwright-based fetcher for posting pages.

    Falls back gracefully if Playwright is not installed: every fetch
    returns a FetchResult carrying an error.
    """

    def __init__(self, config: Optional[BrowserConfig] = None):
        self.config = config or BrowserConfig()
        self._browser = None
        self._context = None
        self._playwright = None
        self._available: Optional[bool] = None

    async def __aenter__(self) -> "BrowserFetcher":
        await self.start()
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()

    @property
    def is_available(self) -> bool:
        """Check if Playwright is available."""
        if self._available is None:
            try:
                from playwright.async_api import async_playwright  # noqa
                self._available = True
            except ImportError:
                self._available = False
        return self._available

    async def start(self) -> bool:
        """
        Initialize the browser.
        Returns True if successful, False if Playwright not available.
        """
        if not self.is_available:
            return False

        if self._context is not None:
            return True

        from playwright.async_api import Error as PlaywrightError, async_playwright

        try:
            self._playwright = await async_playwright().start()
            if self.config.user_data_dir:
                self._context = await self._playwright.chromium.launch_persistent_context(
                    self.config.user_data_dir,
                    headless=self.config.headless,
                    args=["--no-first-run", "--no-default-browser-check", "--disable-sync"],
                )
            else:
                self._browser = await self._playwright.chromium.launch(
                    headless=self.config.headless,
                )
                self._context = await self._browser.new_context(
                    viewport={"width": 1920, "height": 1080},
                )

            if self.config.block_resources:
                await self._context.route(
                    "**/*.{png,jpg,jpeg,gif,webp,svg,ico,woff,woff2,ttf,eot}",
                    lambda route: route.abort(),
                )

            return True

        except PlaywrightError as e:
            logger.warning("Failed to start browser: %s", e)
            self._available = False
            await self.close()
            return False

    async def close(self) -> None:
        """Close the browser."""
        if self._context:
            await self._context.close()
            self._context = None
        if self._browser:
            await self._browser.close()
            self._browser = None
        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

    async def _requires_auth(self, page) -> bool:
        if any(marker in page.url for marker in AUTH_WALL_URL_MARKERS):
            return True
        for selector in AUTH_WALL_SELECTORS:
            if await page.query_selector(selector):
                return True
        return False

    async def _expand_description(self, page) -> bool:
        for selector in SHOW_MORE_SELECTORS:
            button = await page.query_selector(selector)
            if button is None:
                continue
            await button.click()
            await asyncio.sleep(self.config.settle_s)
            return True
        return False

    async def _description_html(self, page) -> str:
        for selector in DESCRIPTION_SELECTORS:
            element = await page.query_selector(selector)
            if element is None:
                continue
            html = await element.inner_html()
            if clean(html):
                logger.debug("Description found via %s", selector)
                return html
        logger.debug("No description selector matched; using <body>")
        body = await page.query_selector("body")
        return await body.inner_html() if body else ""

    async def fetch_job_description(self, url: str) -> FetchResult:
        """
        Fetch a posting page and return its cleaned description.

        Auth walls, navigation failures and empty pages are reported in
        FetchResult.error.
        """
        if not self.is_available:
            return FetchResult(
                url=url,
                error="Playwright not installed. Install with: pip install playwright && playwright install chromium",
            )

        if self._context is None:
            started = await self.start()
            if not started:
                return FetchResult(url=url, error="Failed to start browser")

        from playwright.async_api import Error as PlaywrightError

        start_time = time.time()
        page = None

        try:
            page = await self._context.new_page()
            response = await page.goto(
                url,
                timeout=self.config.timeout_ms,
                wait_until="domcontentloaded",
            )
            status = response.status if response else 0
            await asyncio.sleep(self.config.settle_s)

            if await self._requires_auth(page):
                return FetchResult(
                    url=url,
                    status=status,
                    final_url=page.url,
                    error="Authentication required: log in with the browser profile and close other Chrome windows",
                    elapsed_ms=(time.time() - start_time) * 1000,
                )

            if not await self._expand_description(page):
                logger.debug("No 'Show more' button on %s", url)

            html = await self._description_html(page)
            text = clean(html)

            return FetchResult(
                url=url,
                status=status,
                html=html,
                text=text,
                final_url=page.url,
                error="" if text else "No content found on page",
                elapsed_ms=(time.time() - start_time) * 1000,
            )

        except PlaywrightError as e:
            return FetchResult(
                url=url,
                error=f"Browser fetch failed: {e}",
                elapsed_ms=(time.time() - start_time) * 1000,
            )

        finally:
            if page:
                await page.close()
