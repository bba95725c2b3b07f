import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..errors import PriceTrackerError
from .config import get_settings
from .routers import history, scrape

# Refuses to start without SUPABASE_URL / SUPABASE_SERVICE_KEY.
settings = get_settings()
logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)

if not settings.scraper_api_key:
    logger.warning("SCRAPER_API_KEY not set; Flipkart scraping will fail")

app = FastAPI(title="Price Tracker API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PriceTrackerError)
async def price_tracker_error_handler(request: Request, exc: PriceTrackerError):
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.message})


@app.get("/health")
def healthcheck():
    return {"status": "ok", "env": settings.env}


app.include_router(scrape.router, prefix="/api", tags=["scrape"])
app.include_router(history.router, prefix="/api", tags=["history"])
