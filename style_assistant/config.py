from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent

DEFAULT_STORE_URL = "https://madmanlosangeles.com"


@dataclass(frozen=True)
class Settings:
    """Configuration container for the generation model, feed, cache, and scheduler."""
    gemini_api_key: str
    gemini_model: str
    gemini_temperature: float
    gemini_max_output_tokens: int
    store_url: str
    feed_url: str
    feed_timeout: float
    currency_symbol: str
    cache_ttl_seconds: int
    refresh_interval_minutes: int
    refresh_enabled: bool
    prompts_dir: Path


def load_settings() -> Settings:
    """Purpose: Load configuration from environment variables and defaults.
    Inputs/Outputs: No inputs; returns a Settings instance.
    Side Effects / State: Reads environment variables and filesystem paths.
    Dependencies: Uses os.getenv and BASE_DIR for the default prompts directory.
    Failure Modes: Invalid numeric env values (TTL, timeout, tokens) raise ValueError.
    If Removed: App cannot locate the feed or the model and fails at startup.
    Testing Notes: Verify defaults and overrides via environment variables.
    """
    # Derive the feed endpoint from the storefront unless overridden.
    store_url = os.getenv("STORE_URL", DEFAULT_STORE_URL).strip().rstrip("/")
    feed_url = os.getenv("FEED_URL", "").strip() or f"{store_url}/collections/all/products.json"

    prompts_dir = os.getenv("PROMPTS_DIR")
    if prompts_dir:
        prompts_path = Path(prompts_dir)
    else:
        prompts_path = (BASE_DIR / "prompts").resolve()

    return Settings(
        gemini_api_key=os.getenv("GEMINI_API_KEY", ""),
        gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.0-flash"),
        gemini_temperature=float(os.getenv("GEMINI_TEMPERATURE", "0.7")),
        gemini_max_output_tokens=int(os.getenv("GEMINI_MAX_OUTPUT_TOKENS", "1024")),
        store_url=store_url,
        feed_url=feed_url,
        feed_timeout=float(os.getenv("FEED_TIMEOUT", "10")),
        currency_symbol=os.getenv("CURRENCY_SYMBOL", "$"),
        cache_ttl_seconds=int(os.getenv("CACHE_TTL_SECONDS", "3600")),
        refresh_interval_minutes=int(os.getenv("REFRESH_INTERVAL_MINUTES", "30")),
        refresh_enabled=os.getenv("REFRESH_ENABLED", "1") != "0",
        prompts_dir=prompts_path,
    )
