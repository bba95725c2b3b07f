import math
import re
from typing import Any, Dict, Optional

from .schema import ScrapedProduct

_NON_NUMERIC = re.compile(r"[^0-9.]")

NO_FEATURES = "No features found"


def normalize_price(raw: Any) -> Optional[float]:
    """
    Turn scraped price text ("₹ 1,29,990.00", "$19.99") into a float.

    Everything except ASCII digits and "." is dropped first, so currency
    symbols and thousands separators of any locale are ignored. Returns None
    when nothing numeric is left or the remainder is not a valid number.
    """
    if not isinstance(raw, str):
        return None
    cleaned = _NON_NUMERIC.sub("", raw)
    if not cleaned:
        return None
    try:
        value = float(cleaned)
    except ValueError:
        return None
    # Huge digit runs overflow to inf rather than raising.
    return value if math.isfinite(value) else None


def normalize(site: str, identifier: str, raw: Dict[str, Any]) -> ScrapedProduct:
    features = [f for f in (raw.get("features") or []) if f] or [NO_FEATURES]
    return ScrapedProduct(
        identifier=identifier,
        site=site,
        title=raw.get("title") or "",
        price=normalize_price(raw.get("price")),
        image_url=raw.get("image_url"),
        features=features,
    )
