import logging
from typing import Optional

import requests
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from ..errors import BlockedUpstreamError, ScraperUnavailableError, UpstreamFetchError

logger = logging.getLogger(__name__)

UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36"
)
SCRAPER_API = "http://api.scraperapi.com"
CAPTCHA_MARKER = "captcha"


class BrowserRenderer:
    """Renders a page in a fresh headless Chromium and returns the DOM as HTML."""

    def __init__(self, timeout_ms: int = 30000):
        self.timeout_ms = timeout_ms

    async def __call__(self, url: str) -> str:
        async with async_playwright() as pw:
            try:
                browser = await pw.chromium.launch(
                    headless=True, args=["--no-sandbox", "--disable-setuid-sandbox"]
                )
            except PlaywrightError as exc:
                raise UpstreamFetchError(f"Browser launch failed: {exc}") from exc
            # One browser per request; always released.
            try:
                ctx = await browser.new_context(user_agent=UA)
                page = await ctx.new_page()
                await page.goto(url, timeout=self.timeout_ms, wait_until="domcontentloaded")
                return await page.content()
            except PlaywrightTimeoutError as exc:
                raise UpstreamFetchError(
                    f"Navigation timed out after {self.timeout_ms} ms"
                ) from exc
            except PlaywrightError as exc:
                raise UpstreamFetchError(f"Navigation failed: {exc}") from exc
            finally:
                await browser.close()
                logger.debug("Browser closed for %s", url)


class ProxyFetcher:
    """Fetches raw HTML through the ScraperAPI proxy."""

    def __init__(self, api_key: Optional[str], timeout: float = 60.0):
        self.api_key = api_key
        self.timeout = timeout

    def fetch(self, url: str) -> str:
        if not self.api_key:
            raise ScraperUnavailableError("SCRAPER_API_KEY is not configured")
        try:
            resp = requests.get(
                SCRAPER_API,
                params={"api_key": self.api_key, "url": url},
                timeout=self.timeout,
            )
            resp.raise_for_status()
        except requests.Timeout as exc:
            raise UpstreamFetchError(f"Proxy request timed out after {self.timeout}s") from exc
        except requests.HTTPError as exc:
            # The request URL carries the API key; report the status only.
            raise UpstreamFetchError(
                f"Proxy returned HTTP {exc.response.status_code}"
            ) from exc
        except requests.RequestException as exc:
            raise UpstreamFetchError(f"Proxy request failed: {type(exc).__name__}") from exc
        return resp.text


def check_blocked(html: Optional[str]) -> str:
    if not html or CAPTCHA_MARKER in html.lower():
        raise BlockedUpstreamError("Blocked by Flipkart. Try again later.")
    return html
