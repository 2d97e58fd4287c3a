from datetime import datetime, timezone

import pytest

from style_assistant.config import BASE_DIR, Settings
from style_assistant.errors import NetworkError


def feed_product(title, handle=None, price="95.00", compare_at=None, stock=(10,), available=True, tags=None):
    variants = [
        {
            "price": price,
            "compare_at_price": compare_at,
            "available": available,
            "inventory_quantity": qty,
        }
        for qty in stock
    ]
    return {
        "title": title,
        "handle": handle or title.lower().replace(" ", "-"),
        "variants": variants,
        "images": [{"src": f"https://cdn.example.com/{title.lower().replace(' ', '_')}.png"}],
        "tags": tags or [],
    }


def gemini_payload(text):
    return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}


class FakeFeed:
    def __init__(self, products=None, error=None):
        self.products = products or []
        self.error = error
        self.calls = 0

    def fetch(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.products


class FakeGenerator:
    def __init__(self, payload=None, error=None):
        self.payload = payload
        self.error = error
        self.prompts = []

    def generate(self, prompt):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.payload


class FakeClock:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def settings():
    return Settings(
        gemini_api_key="test-key",
        gemini_model="gemini-2.0-flash",
        gemini_temperature=0.7,
        gemini_max_output_tokens=1024,
        store_url="https://shop.example.com",
        feed_url="https://shop.example.com/collections/all/products.json",
        feed_timeout=5.0,
        currency_symbol="$",
        cache_ttl_seconds=3600,
        refresh_interval_minutes=30,
        refresh_enabled=False,
        prompts_dir=BASE_DIR / "prompts",
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fixed_now():
    return datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def catalogue():
    return [
        feed_product("Forsaken Hoodie", handle="madman-forsaken-hoodie", stock=(12, 18)),
        feed_product("Carpenter Pants", price="170.00", stock=(3,)),
        feed_product("Chaos Erupts Tee", price="54.00", stock=(0,), available=False),
    ]


@pytest.fixture
def failing_feed():
    return FakeFeed(error=NetworkError("connection refused"))
