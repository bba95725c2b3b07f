import logging
from typing import Callable, Optional

from fastapi import APIRouter, Depends, Query

from ...errors import PriceTrackerError
from ...scrape.fetcher import BrowserRenderer, ProxyFetcher
from ...scrape.scrape import process
from ..config import get_settings
from ..repository import ProductRepository, get_repository

router = APIRouter()
logger = logging.getLogger(__name__)


def get_renderer() -> BrowserRenderer:
    return BrowserRenderer(timeout_ms=get_settings().navigation_timeout_ms)


def get_fetcher() -> Callable[[str], str]:
    settings = get_settings()
    return ProxyFetcher(settings.scraper_api_key, timeout=settings.proxy_timeout_s).fetch


async def _scrape(site: str, label: str, url, repository, render=None, fetch=None) -> dict:
    logger.info("Received %s scrape request for: %s", site, url)
    try:
        product = await process(url, repository, render=render, fetch=fetch, site=site)
    except PriceTrackerError as exc:
        if exc.status_code < 500:
            raise
        logger.error("%s scrape failed: %s", label, exc.message)
        raise type(exc)(f"{label} scraping failed: {exc.message}") from exc
    except Exception as exc:
        logger.exception("%s scrape failed", label)
        raise PriceTrackerError(f"{label} scraping failed: {exc}") from exc
    return {"success": True, "data": product.to_response()}


@router.get("/scrape")
async def scrape_amazon(
    url: Optional[str] = Query(default=None),
    repository: ProductRepository = Depends(get_repository),
    render: BrowserRenderer = Depends(get_renderer),
):
    """
    Render an Amazon product page, record its price and return the normalized product.
    """
    return await _scrape("amazon", "Amazon", url, repository, render=render)


@router.get("/scrape/flipkart")
async def scrape_flipkart(
    url: Optional[str] = Query(default=None),
    repository: ProductRepository = Depends(get_repository),
    fetch: Callable[[str], str] = Depends(get_fetcher),
):
    """
    Fetch a Flipkart product page through the scraping proxy, record its price
    and return the normalized product.
    """
    return await _scrape("flipkart", "Flipkart", url, repository, fetch=fetch)
