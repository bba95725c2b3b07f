import logging
import threading
from datetime import datetime, timezone
from typing import Dict, Optional

from supabase import Client

from ..errors import PersistenceError
from ..scrape.schema import ScrapedProduct
from .models import PriceEntry, ProductRecord
from .supabase_client import get_supabase

logger = logging.getLogger(__name__)

UPSERT_RPC = "record_price_observation"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def apply_observation(
    existing: Optional[ProductRecord], scraped: ScrapedProduct, observed_at: datetime
) -> ProductRecord:
    """
    Merge one scrape into a product record.

    Title and image are overwritten; the old current price shifts into
    previous_price and exactly one entry is appended to the log.
    """
    entry = PriceEntry(price=scraped.price, observed_at=observed_at)
    if existing is None:
        return ProductRecord(
            identifier=scraped.identifier,
            title=scraped.title,
            image_url=scraped.image_url,
            current_price=scraped.price,
            previous_price=None,
            last_checked_at=observed_at,
            price_log=[entry],
        )
    return existing.model_copy(
        update={
            "title": scraped.title,
            "image_url": scraped.image_url,
            "previous_price": existing.current_price,
            "current_price": scraped.price,
            "last_checked_at": observed_at,
            "price_log": [*existing.price_log, entry],
        }
    )


class ProductRepository:
    def upsert(
        self, identifier: str, scraped: ScrapedProduct, observed_at: Optional[datetime] = None
    ) -> ProductRecord:
        raise NotImplementedError

    def find_by_identifier(self, identifier: str) -> Optional[ProductRecord]:
        raise NotImplementedError


class InMemoryProductRepository(ProductRepository):
    """Process-local store with the same upsert semantics as the database function."""

    def __init__(self):
        self._products: Dict[str, ProductRecord] = {}
        self._lock = threading.Lock()

    def upsert(self, identifier, scraped, observed_at=None):
        observed_at = observed_at or utcnow()
        scraped = scraped.model_copy(update={"identifier": identifier})
        with self._lock:
            record = apply_observation(self._products.get(identifier), scraped, observed_at)
            self._products[identifier] = record
            return record.model_copy(deep=True)

    def find_by_identifier(self, identifier):
        with self._lock:
            record = self._products.get(identifier)
            return record.model_copy(deep=True) if record else None


class SupabaseProductRepository(ProductRepository):
    """
    Products stored in the Supabase `products` table.

    The upsert goes through the `record_price_observation` Postgres function
    (supabase/migrations), which does the insert-or-shift-and-append in one
    statement under the row lock, so concurrent scrapes of the same product
    cannot lose an update.
    """

    def __init__(self, client: Optional[Client] = None):
        self._client = client

    @property
    def client(self) -> Client:
        # Connected on first use so request validation never waits on Supabase.
        if self._client is None:
            try:
                self._client = get_supabase()
            except Exception as exc:
                raise PersistenceError("Supabase client initialization failed") from exc
        return self._client

    def upsert(self, identifier, scraped, observed_at=None):
        observed_at = observed_at or utcnow()
        params = {
            "p_asin": identifier,
            "p_title": scraped.title,
            "p_image": scraped.image_url,
            "p_price": scraped.price,
            "p_observed_at": observed_at.isoformat(),
        }
        logger.info("Recording price observation: %s -> %s", identifier, scraped.price)
        client = self.client
        try:
            resp = client.rpc(UPSERT_RPC, params).execute()
        except Exception as exc:
            logger.exception("Supabase rpc(%s) raised an exception", UPSERT_RPC)
            raise PersistenceError(f"Failed to save product {identifier}: {exc}") from exc

        data = getattr(resp, "data", None)
        rows = data if isinstance(data, list) else [data] if data else []
        if not rows:
            raise PersistenceError(f"Failed to save product {identifier}: empty response")
        return ProductRecord.model_validate(rows[0])

    def find_by_identifier(self, identifier):
        client = self.client
        try:
            resp = (
                client.table("products")
                .select("*")
                .eq("asin", identifier)
                .limit(1)
                .execute()
            )
        except Exception as exc:
            logger.exception("Supabase select() raised an exception")
            raise PersistenceError(f"Failed to load product {identifier}: {exc}") from exc
        data = getattr(resp, "data", None) or []
        return ProductRecord.model_validate(data[0]) if data else None


def get_repository() -> ProductRepository:
    return SupabaseProductRepository()
