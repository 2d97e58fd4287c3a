from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from .config import Settings
from .errors import MalformedResponse, NetworkError

logger = logging.getLogger("style_assistant.feed")


class FeedClient:
    """Single-shot reader for the storefront's public products.json feed."""

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None) -> None:
        """Purpose: Configure the feed endpoint and HTTP session.
        Inputs/Outputs: Input is Settings and an optional requests.Session; no return.
        Side Effects / State: Keeps the session for connection reuse across refreshes.
        Dependencies: Uses requests.
        Failure Modes: None at init; fetch() maps transport errors.
        If Removed: Refresh cycles cannot see the live catalogue.
        Testing Notes: Inject a session stub and assert the feed URL is requested.
        """
        self._url = settings.feed_url
        self._timeout = settings.feed_timeout
        self._session = session or requests.Session()

    def fetch(self) -> List[Dict[str, Any]]:
        """Purpose: Fetch the raw product list from the feed, once.
        Inputs/Outputs: No inputs; returns the list under the feed's "products" key.
        Side Effects / State: One HTTP GET; no retry.
        Dependencies: Uses requests and the configured timeout.
        Failure Modes: Raises NetworkError on transport errors, non-2xx or non-JSON
            bodies; raises MalformedResponse when "products" is not a list.
        If Removed: The cache can only ever serve the default snapshot.
        Testing Notes: Simulate a timeout and a 503 and expect NetworkError.
        """
        try:
            response = self._session.get(
                self._url,
                timeout=self._timeout,
                headers={"Accept": "application/json"},
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            raise NetworkError(f"feed request failed: {exc}") from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise NetworkError("feed returned a non-JSON body") from exc

        if not isinstance(data, dict) or not isinstance(data.get("products"), list):
            raise MalformedResponse("feed payload has no products list")

        products = data["products"]
        logger.info("feed fetched url=%s status=%s products=%d", self._url, response.status_code, len(products))
        return products
