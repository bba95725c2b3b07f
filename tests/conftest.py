# Test configuration and fixtures
import os

import pytest

# The app module reads settings at import time; give it a harmless config.
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")

AMAZON_URL = "https://www.amazon.in/Apple-iPhone-15-128-GB/dp/B0CHX1W1XY/ref=sr_1_1"
FLIPKART_URL = "https://www.flipkart.com/apple-iphone-15-black-128-gb/p/itm6ac6485515ae4?pid=MOBGTAGPTB3VS24W"

AMAZON_HTML = """
<html><body>
  <span id="productTitle">   Apple iPhone 15 (128 GB) - Black   </span>
  <div id="corePrice_feature_div">
    <span class="a-price"><span class="a-offscreen">₹69,900.00</span></span>
  </div>
  <div id="imgTagWrapperId"><img id="landingImage" src="https://m.media-amazon.com/images/I/iphone15.jpg"></div>
  <div id="feature-bullets"><ul>
    <li><span>DYNAMIC ISLAND COMES TO IPHONE 15</span></li>
    <li><span>48MP MAIN CAMERA WITH 2X TELEPHOTO</span></li>
    <li><span>  </span></li>
  </ul></div>
</body></html>
"""

FLIPKART_HTML = """
<html><body>
  <h1><span class="B_NuCI">Apple iPhone 15 (Black, 128 GB)</span></h1>
  <div class="_30jeq3 _16Jk6d">₹65,999</div>
  <img class="_396cs4" src="https://rukminim2.flixcart.com/image/iphone15.jpeg">
  <ul class="_1xgFaf">
    <li>128 GB ROM</li>
    <li>15.49 cm (6.1 inch) Super Retina XDR Display</li>
  </ul>
</body></html>
"""


class FakeSite:
    """Stands in for the browser renderer and the scraping proxy."""

    def __init__(self):
        self.pages = {}
        self.calls = []

    def _lookup(self, url):
        self.calls.append(url)
        page = self.pages[url]
        if isinstance(page, Exception):
            raise page
        return page

    async def render(self, url):
        return self._lookup(url)

    def fetch(self, url):
        return self._lookup(url)


@pytest.fixture
def amazon_html():
    return AMAZON_HTML


@pytest.fixture
def flipkart_html():
    return FLIPKART_HTML


@pytest.fixture
def repository():
    from pricetrack.app.repository import InMemoryProductRepository

    return InMemoryProductRepository()


@pytest.fixture
def site():
    fake = FakeSite()
    fake.pages[AMAZON_URL] = AMAZON_HTML
    fake.pages[FLIPKART_URL] = FLIPKART_HTML
    return fake


@pytest.fixture
def client(repository, site):
    from fastapi.testclient import TestClient

    from pricetrack.app.main import app
    from pricetrack.app.repository import get_repository
    from pricetrack.app.routers.scrape import get_fetcher, get_renderer

    app.dependency_overrides[get_repository] = lambda: repository
    app.dependency_overrides[get_renderer] = lambda: site.render
    app.dependency_overrides[get_fetcher] = lambda: site.fetch
    yield TestClient(app)
    app.dependency_overrides.clear()
