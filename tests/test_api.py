from datetime import datetime, timedelta, timezone

from pricetrack.errors import UpstreamFetchError
from pricetrack.scrape.schema import ScrapedProduct

from .conftest import AMAZON_URL, FLIPKART_URL


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_scrape_amazon(client, repository):
    resp = client.get("/api/scrape", params={"url": AMAZON_URL})
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["data"] == {
        "title": "Apple iPhone 15 (128 GB) - Black",
        "price": 69900.0,
        "image": "https://m.media-amazon.com/images/I/iphone15.jpg",
        "asin": "B0CHX1W1XY",
        "features": ["DYNAMIC ISLAND COMES TO IPHONE 15", "48MP MAIN CAMERA WITH 2X TELEPHOTO"],
        "site": "amazon",
    }
    record = repository.find_by_identifier("B0CHX1W1XY")
    assert record.current_price == 69900.0
    assert len(record.price_log) == 1


def test_scrape_amazon_twice_shifts_price(client, repository, site):
    client.get("/api/scrape", params={"url": AMAZON_URL})
    site.pages[AMAZON_URL] = site.pages[AMAZON_URL].replace("₹69,900.00", "₹64,900.00")
    client.get("/api/scrape", params={"url": AMAZON_URL})
    record = repository.find_by_identifier("B0CHX1W1XY")
    assert record.previous_price == 69900.0
    assert record.current_price == 64900.0
    assert len(record.price_log) == 2


def test_scrape_amazon_missing_url(client):
    resp = client.get("/api/scrape")
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "Invalid URL"}


def test_scrape_amazon_non_http_url(client, site):
    resp = client.get("/api/scrape", params={"url": "ftp://www.amazon.in/dp/B0CHX1W1XY"})
    assert resp.status_code == 400
    assert site.calls == []


def test_scrape_amazon_bad_asin_writes_nothing(client, repository, site):
    resp = client.get("/api/scrape", params={"url": "https://www.amazon.in/gp/bestsellers"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid ASIN"
    assert site.calls == []
    assert repository.find_by_identifier("B0CHX1W1XY") is None


def test_scrape_amazon_missing_title_is_500(client, repository, site):
    site.pages[AMAZON_URL] = "<html><body>Sorry, we just need to make sure you're not a robot</body></html>"
    resp = client.get("/api/scrape", params={"url": AMAZON_URL})
    assert resp.status_code == 500
    assert resp.json() == {
        "success": False,
        "error": "Amazon scraping failed: Product title not found",
    }
    assert repository.find_by_identifier("B0CHX1W1XY") is None


def test_scrape_amazon_navigation_timeout(client, site):
    site.pages[AMAZON_URL] = UpstreamFetchError("Navigation timed out after 30000 ms")
    resp = client.get("/api/scrape", params={"url": AMAZON_URL})
    assert resp.status_code == 500
    assert resp.json()["error"] == "Amazon scraping failed: Navigation timed out after 30000 ms"


def test_scrape_amazon_unexpected_error(client, site):
    site.pages[AMAZON_URL] = RuntimeError("browser crashed")
    resp = client.get("/api/scrape", params={"url": AMAZON_URL})
    assert resp.status_code == 500
    assert resp.json() == {"success": False, "error": "Amazon scraping failed: browser crashed"}


def test_scrape_flipkart(client, repository):
    resp = client.get("/api/scrape/flipkart", params={"url": FLIPKART_URL})
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["asin"] == "itm6ac6485515ae4"
    assert data["price"] == 65999.0
    assert data["site"] == "flipkart"
    assert repository.find_by_identifier("itm6ac6485515ae4").current_price == 65999.0


def test_scrape_flipkart_wrong_domain(client, site):
    resp = client.get("/api/scrape/flipkart", params={"url": AMAZON_URL})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid Flipkart URL"
    assert site.calls == []


def test_scrape_flipkart_blocked(client, repository, site):
    site.pages[FLIPKART_URL] = "<html><form id='captcha'></form></html>"
    resp = client.get("/api/scrape/flipkart", params={"url": FLIPKART_URL})
    assert resp.status_code == 500
    assert resp.json()["error"] == "Flipkart scraping failed: Blocked by Flipkart. Try again later."
    assert repository.find_by_identifier("itm6ac6485515ae4") is None


def test_history_requires_asin(client):
    resp = client.get("/api/history")
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "ASIN is required"}


def test_history_unknown(client):
    resp = client.get("/api/history", params={"asin": "B000000000"})
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "Product not found"}


def test_history_range(client, repository):
    now = datetime.now(timezone.utc)
    for age, price in [(20, 500.0), (2, 450.0)]:
        repository.upsert(
            "B0CHX1W1XY",
            ScrapedProduct(identifier="B0CHX1W1XY", site="amazon", title="iPhone", price=price),
            observed_at=now - timedelta(days=age),
        )

    full = client.get("/api/history", params={"asin": "B0CHX1W1XY"}).json()
    assert full["success"] is True
    assert [e["price"] for e in full["data"]["priceHistory"]] == [500.0, 450.0]
    assert full["data"]["title"] == "iPhone"

    week = client.get("/api/history", params={"asin": "B0CHX1W1XY", "range": "7d"}).json()
    assert [e["price"] for e in week["data"]["priceHistory"]] == [450.0]


def test_scrape_amazon_overflowing_price_is_null(client, repository, site):
    site.pages[AMAZON_URL] = site.pages[AMAZON_URL].replace("₹69,900.00", "₹" + "9" * 400)
    resp = client.get("/api/scrape", params={"url": AMAZON_URL})
    assert resp.status_code == 200
    assert resp.json()["data"]["price"] is None
    assert repository.find_by_identifier("B0CHX1W1XY").current_price is None


def test_bad_input_is_400_even_when_database_is_down(client, monkeypatch):
    from pricetrack.app import repository as repository_module
    from pricetrack.app.main import app

    def broken_supabase():
        raise RuntimeError("SUPABASE_URL in .env is still the placeholder")

    monkeypatch.setattr(repository_module, "get_supabase", broken_supabase)
    app.dependency_overrides.pop(repository_module.get_repository)

    assert client.get("/api/scrape").status_code == 400
    assert client.get("/api/scrape/flipkart").status_code == 400
    assert client.get("/api/history").status_code == 400

    resp = client.get("/api/history", params={"asin": "B0CHX1W1XY"})
    assert resp.status_code == 500
    assert resp.json() == {"success": False, "error": "Supabase client initialization failed"}
