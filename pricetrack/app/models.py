from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# One observation in a product's price log. Stored in the jsonb column as {"price", "date"}.
class PriceEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    price: Optional[float] = None
    observed_at: datetime = Field(alias="date")

    @field_validator("observed_at")
    @classmethod
    def _assume_utc(cls, v: datetime) -> datetime:
        return v if v.tzinfo else v.replace(tzinfo=timezone.utc)

    def to_wire(self) -> Dict[str, Any]:
        return {"price": self.price, "date": self.observed_at.isoformat()}


# --- public.products ---
# PK is asin (Amazon ASIN or Flipkart product code).
class ProductRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    identifier: str = Field(alias="asin")  # PRIMARY KEY
    title: Optional[str] = None
    image_url: Optional[str] = Field(default=None, alias="image")
    current_price: Optional[float] = None
    previous_price: Optional[float] = None
    last_checked_at: Optional[datetime] = Field(default=None, alias="last_checked")
    price_log: List[PriceEntry] = Field(default_factory=list, alias="price_history")


class ProductHistory(BaseModel):
    identifier: str
    title: Optional[str] = None
    image_url: Optional[str] = None
    price_log: List[PriceEntry] = Field(default_factory=list)

    def to_response(self) -> Dict[str, Any]:
        return {
            "asin": self.identifier,
            "title": self.title,
            "image": self.image_url,
            "priceHistory": [e.to_wire() for e in self.price_log],
        }
