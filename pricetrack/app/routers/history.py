import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...errors import InvalidIdentifierError, PriceTrackerError, ProductNotFoundError
from ..history import get_history
from ..repository import ProductRepository, get_repository

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/history")
def history(
    asin: Optional[str] = Query(default=None),
    range: Optional[str] = Query(default=None),
    repository: ProductRepository = Depends(get_repository),
):
    if not asin:
        raise InvalidIdentifierError("ASIN is required")
    try:
        result = get_history(repository, asin, range)
    except PriceTrackerError:
        raise
    except Exception as exc:
        logger.exception("History lookup failed for %s", asin)
        raise PriceTrackerError("Server error") from exc
    if result is None:
        raise ProductNotFoundError("Product not found")
    return {"success": True, "data": result.to_response()}
