from typing import List, Literal, Optional

from pydantic import BaseModel, Field

Site = Literal["amazon", "flipkart"]


class ScrapedProduct(BaseModel):
    identifier: str              # ASIN or Flipkart product code
    site: Site
    title: str
    price: Optional[float] = None
    image_url: Optional[str] = None
    features: List[str] = Field(default_factory=list)

    def to_response(self) -> dict:
        # Wire shape consumed by the chart UI.
        return {
            "title": self.title,
            "price": self.price,
            "image": self.image_url,
            "asin": self.identifier,
            "features": self.features,
            "site": self.site,
        }
