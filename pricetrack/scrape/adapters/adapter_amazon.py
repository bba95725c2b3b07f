# adapter_amazon.py
import logging
import re
from typing import Awaitable, Callable, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from ...errors import ExtractionError, InvalidIdentifierError
from ..normalizer import NO_FEATURES, normalize
from ..schema import ScrapedProduct
from ..resolver import Rule, resolve, resolve_all

logger = logging.getLogger(__name__)

ASIN_RE = re.compile(r"/dp/([A-Z0-9]{10})")

PRICE_NOT_FOUND = "Price not found"

TITLE_RULES = [
    Rule("#productTitle"),
    Rule("#title"),
    Rule("meta[name='title']", attr="content"),
]
# Legacy block, deal, sale, offscreen, core-price feature div.
PRICE_RULES = [
    Rule("#priceblock_ourprice"),
    Rule("#priceblock_dealprice"),
    Rule("#priceblock_saleprice"),
    Rule(".a-price .a-offscreen"),
    Rule("#corePrice_feature_div .a-offscreen"),
]
IMAGE_RULES = [
    Rule("#landingImage", attr="src"),
    Rule("#imgTagWrapperId img", attr="src"),
]
FEATURE_RULES = [
    Rule("#feature-bullets ul li span"),
]


def parse_asin(url: str) -> str:
    m = ASIN_RE.search(url or "")
    if not m:
        raise InvalidIdentifierError("Invalid ASIN")
    return m.group(1)


def parse_amazon(html: str, asin: str, base_url: Optional[str] = None) -> ScrapedProduct:
    soup = BeautifulSoup(html, "lxml")

    title = resolve(soup, TITLE_RULES)
    if not title:
        raise ExtractionError("Product title not found")

    raw = {
        "title": title,
        "price": resolve(soup, PRICE_RULES, fallback=PRICE_NOT_FOUND),
        "image_url": resolve(soup, IMAGE_RULES),
        "features": resolve_all(soup, FEATURE_RULES, fallback=[NO_FEATURES]),
    }
    # The browser's img.src is absolute; the raw attribute may not be.
    if raw["image_url"] and base_url:
        raw["image_url"] = urljoin(base_url, raw["image_url"])
    if raw["price"] == PRICE_NOT_FOUND:
        logger.warning("No price on Amazon page for %s", asin)
    return normalize("amazon", asin, raw)


async def extract_amazon(url: str, render: Callable[[str], Awaitable[str]]) -> ScrapedProduct:
    """
    Render an Amazon product page and extract it.

    The ASIN is checked before rendering so a bad URL never launches a browser.
    """
    asin = parse_asin(url)
    html = await render(url)
    return parse_amazon(html, asin, base_url=url)
