import argparse
import asyncio
import logging
import sys
from typing import Awaitable, Callable, List, Optional
from urllib.parse import urlparse

from ..app.config import get_settings
from ..app.repository import InMemoryProductRepository, get_repository
from ..errors import InvalidUrlError, PriceTrackerError
from .adapters.adapter_amazon import extract_amazon
from .adapters.adapter_flipkart import extract_flipkart, tld_extract
from .fetcher import BrowserRenderer, ProxyFetcher
from .schema import ScrapedProduct

logger = logging.getLogger(__name__)

SITES = ("amazon", "flipkart")


def validate_url(url: Optional[str]) -> str:
    if not url or urlparse(url).scheme not in ("http", "https"):
        raise InvalidUrlError("Invalid URL")
    return url


def pick_site(url: str) -> Optional[str]:
    # amazon.com, amazon.in, amazon.co.uk ... all share the "amazon" label.
    domain = tld_extract(url).domain
    return domain if domain in SITES else None


async def process(
    url: str,
    repository,
    render: Optional[Callable[[str], Awaitable[str]]] = None,
    fetch: Optional[Callable[[str], str]] = None,
    site: Optional[str] = None,
) -> ScrapedProduct:
    """
    Scrape one product page and record the observation.

    `site` forces an extractor; otherwise it is picked from the URL's domain.
    Amazon needs `render`, Flipkart needs `fetch`.
    Nothing is written unless extraction succeeds.
    """
    url = validate_url(url)
    site = site or pick_site(url)
    if site == "amazon":
        product = await extract_amazon(url, render)
    elif site == "flipkart":
        # requests is blocking; keep it off the event loop.
        product = await asyncio.to_thread(extract_flipkart, url, fetch)
    else:
        raise InvalidUrlError("Please enter a valid Amazon or Flipkart product URL")

    await asyncio.to_thread(repository.upsert, product.identifier, product)
    logger.info("Scraped %s %s | %s | %s", site, product.identifier, product.title, product.price)
    return product


async def main(urls: List[str], dry_run: bool = False) -> int:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    repository = InMemoryProductRepository() if dry_run else get_repository()
    render = BrowserRenderer(timeout_ms=settings.navigation_timeout_ms)
    fetch = ProxyFetcher(settings.scraper_api_key, timeout=settings.proxy_timeout_s).fetch

    failures = 0
    for url in urls:
        logger.info("[JOB] FETCH -> %s", url)
        try:
            product = await process(url, repository, render, fetch)
        except PriceTrackerError as exc:
            failures += 1
            logger.error("[JOB] ERR -> %s | %s: %s", url, type(exc).__name__, exc.message)
            continue
        print(product.model_dump_json(indent=2))
    return 1 if failures else 0


if __name__ == "__main__":
    #   python -m pricetrack.scrape.scrape <url> [<url> ...]
    #   python -m pricetrack.scrape.scrape --dry-run <url>   -> nothing written to Supabase
    parser = argparse.ArgumentParser(description="Scrape Amazon/Flipkart product pages and record prices.")
    parser.add_argument("urls", nargs="+", help="product page URLs")
    parser.add_argument("--dry-run", action="store_true", help="keep observations in memory only")
    args = parser.parse_args()
    sys.exit(asyncio.run(main(args.urls, dry_run=args.dry_run)))
