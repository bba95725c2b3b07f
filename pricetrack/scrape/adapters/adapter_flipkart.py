# adapter_flipkart.py
import logging
import re
from typing import Callable, Optional
from urllib.parse import urljoin

import tldextract
from bs4 import BeautifulSoup

from ...errors import InvalidIdentifierError, InvalidUrlError
from ..fetcher import check_blocked
from ..normalizer import NO_FEATURES, normalize
from ..schema import ScrapedProduct
from ..resolver import Rule, resolve, resolve_all

logger = logging.getLogger(__name__)

PRODUCT_ID_RE = re.compile(r"/p/([^/?]+)")

# Flipkart serves (at least) two markup variants; each field has one rule per variant.
TITLE_RULES = [Rule("span.B_NuCI"), Rule("span._35KyD6")]
PRICE_RULES = [Rule("div._30jeq3._16Jk6d"), Rule("div._30jeq3")]
IMAGE_RULES = [Rule("img._396cs4", attr="src"), Rule("img._2r_T1I", attr="src")]
FEATURE_RULES = [Rule("ul._1xgFaf li"), Rule("div._2418kt ul li")]

# Bundled suffix snapshot only; no network fetch at import or first use.
tld_extract = tldextract.TLDExtract(suffix_list_urls=())


def is_flipkart_url(url: str) -> bool:
    return tld_extract(url or "").registered_domain == "flipkart.com"


def parse_product_id(url: str) -> str:
    m = PRODUCT_ID_RE.search(url or "")
    if not m:
        raise InvalidIdentifierError("Invalid product ID")
    return m.group(1)


def parse_flipkart(html: str, product_id: str, base_url: Optional[str] = None) -> ScrapedProduct:
    soup = BeautifulSoup(html, "lxml")
    raw = {
        "title": resolve(soup, TITLE_RULES, fallback=""),
        "price": resolve(soup, PRICE_RULES),
        "image_url": resolve(soup, IMAGE_RULES),
        "features": resolve_all(soup, FEATURE_RULES, fallback=[NO_FEATURES]),
    }
    if raw["image_url"] and base_url:
        raw["image_url"] = urljoin(base_url, raw["image_url"])
    if not raw["title"]:
        logger.warning("No title on Flipkart page for %s", product_id)
    return normalize("flipkart", product_id, raw)


def extract_flipkart(url: str, fetch: Callable[[str], str]) -> ScrapedProduct:
    if not is_flipkart_url(url):
        raise InvalidUrlError("Invalid Flipkart URL")
    product_id = parse_product_id(url)
    html = check_blocked(fetch(url))
    return parse_flipkart(html, product_id, base_url=url)
