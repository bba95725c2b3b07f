import logging
from datetime import datetime, timedelta
from typing import Optional

from .models import ProductHistory
from .repository import ProductRepository, utcnow

logger = logging.getLogger(__name__)

RANGES = {"7d": 7, "30d": 30}


def get_history(
    repository: ProductRepository,
    identifier: str,
    range: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Optional[ProductHistory]:
    """
    Price log for one product, optionally limited to the last 7 or 30 days.

    Unrecognized ranges return the whole log. Returns None when the product
    is unknown; a known product with an empty log is still a result.
    """
    record = repository.find_by_identifier(identifier)
    if record is None:
        return None

    entries = record.price_log
    days = RANGES.get(range) if range else None
    if days:
        threshold = (now or utcnow()) - timedelta(days=days)
        entries = [e for e in entries if e.observed_at >= threshold]
    logger.info("History for %s (range=%s): %d entries", identifier, range, len(entries))

    return ProductHistory(
        identifier=record.identifier,
        title=record.title,
        image_url=record.image_url,
        price_log=entries,
    )
