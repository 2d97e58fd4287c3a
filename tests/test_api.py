from fastapi.testclient import TestClient
from conftest import FakeFeed, FakeGenerator, feed_product, gemini_payload

from style_assistant.app import FALLBACK_REPLY, create_app
from style_assistant.errors import NetworkError


def _client(settings, feed, generator=None):
    app = create_app(settings, feed=feed, generator=generator or FakeGenerator())
    return TestClient(app)


def test_products_returns_snapshot(settings, catalogue):
    client = _client(settings, FakeFeed(catalogue))

    r = client.get("/api/products")

    assert r.status_code == 200
    data = r.json()
    assert [p["name"] for p in data["products"]] == ["Forsaken Hoodie", "Carpenter Pants"]
    assert data["soldOut"] == ["Chaos Erupts Tee"]
    assert isinstance(data["lastUpdated"], str)
    assert data["products"][0]["imageUrl"].endswith("forsaken_hoodie.png")


def test_products_falls_back_to_default_data(settings, failing_feed):
    client = _client(settings, failing_feed)

    r = client.get("/api/products")

    assert r.status_code == 200
    data = r.json()
    assert len(data["products"]) == 9
    assert len(data["soldOut"]) == 4


def test_chat_end_to_end(settings, catalogue):
    generator = FakeGenerator(payload=gemini_payload("Check this out\nPRODUCT:Forsaken Hoodie\nStay dark."))
    client = _client(settings, FakeFeed(catalogue), generator)

    r = client.post("/api/chat", json={"message": "show me hoodies"})

    assert r.status_code == 200
    data = r.json()
    assert data["reply"] == "Check this out\nStay dark."
    assert len(data["products"]) == 1
    product = data["products"][0]
    assert product["name"] == "Forsaken Hoodie"
    assert product["price"] == "$95.00"
    assert product["salePrice"] is None
    assert product["url"] == "https://shop.example.com/products/madman-forsaken-hoodie"
    assert product["stock"] == 30

    prompt = generator.prompts[0]
    assert "- Forsaken Hoodie - $95.00 [In Stock]" in prompt
    assert "- Carpenter Pants - $170.00 [Low Stock (3 left)]" in prompt
    assert "SOLD OUT (DO NOT RECOMMEND):\n- Chaos Erupts Tee" in prompt
    assert prompt.rstrip().endswith("Customer says: show me hoodies")


def test_chat_reuses_cached_snapshot(settings, catalogue):
    feed = FakeFeed(catalogue)
    client = _client(settings, feed, FakeGenerator(payload=gemini_payload("Yo.")))

    client.get("/api/products")
    client.post("/api/chat", json={"message": "hi"})

    assert feed.calls == 1


def test_chat_upstream_failure_returns_fallback(settings, catalogue):
    client = _client(settings, FakeFeed(catalogue), FakeGenerator(error=NetworkError("timeout")))

    r = client.post("/api/chat", json={"message": "show me hoodies"})

    assert r.status_code == 500
    assert r.json() == {"reply": FALLBACK_REPLY, "products": []}


def test_chat_malformed_reply_returns_fallback(settings, catalogue):
    client = _client(settings, FakeFeed(catalogue), FakeGenerator(payload={"candidates": []}))

    r = client.post("/api/chat", json={"message": "show me hoodies"})

    assert r.status_code == 500
    assert r.json()["reply"] == FALLBACK_REPLY


def test_chat_with_failing_feed_matches_default_catalogue(settings, failing_feed):
    generator = FakeGenerator(payload=gemini_payload("Pair it with\nPRODUCT:Star Pendant"))
    client = _client(settings, failing_feed, generator)

    r = client.post("/api/chat", json={"message": "jewelry?"})

    assert r.status_code == 200
    assert [p["name"] for p in r.json()["products"]] == ["Star Pendant"]


def test_chat_requires_message(settings, catalogue):
    client = _client(settings, FakeFeed(catalogue))

    r = client.post("/api/chat", json={"text": "hi"})

    assert r.status_code == 422


def test_cors_is_open(settings, catalogue):
    client = _client(settings, FakeFeed(catalogue))

    r = client.options(
        "/api/chat",
        headers={"Origin": "https://madmanlosangeles.com", "Access-Control-Request-Method": "POST"},
    )

    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] == "*"


def test_sale_price_reaches_the_card(settings):
    feed = FakeFeed([feed_product("Forsaken Sweats", price="76.00", compare_at="95.00", stock=(25,))])
    generator = FakeGenerator(payload=gemini_payload("On sale now\nPRODUCT:Forsaken Sweats"))
    client = _client(settings, feed, generator)

    product = client.post("/api/chat", json={"message": "deals?"}).json()["products"][0]

    assert product["price"] == "$95.00"
    assert product["salePrice"] == "$76.00"


def test_products_survives_unexpected_feed_error(settings):
    client = _client(settings, FakeFeed(error=RuntimeError("unexpected")))

    r = client.get("/api/products")

    assert r.status_code == 200
    assert len(r.json()["products"]) == 9


def test_chat_emoji_only_reply_returns_fallback(settings, catalogue):
    client = _client(settings, FakeFeed(catalogue), FakeGenerator(payload=gemini_payload("\U0001F525\U0001F525")))

    r = client.post("/api/chat", json={"message": "hype me up"})

    assert r.status_code == 500
    assert r.json() == {"reply": FALLBACK_REPLY, "products": []}
