from __future__ import annotations

"""Inventory normalization for the storefront product feed.

This module turns raw feed records into immutable ProductRecord objects and
partitions them into an InventorySnapshot, keeping feed order for in-stock
items and collecting sold-out items by name only.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple

from .config import DEFAULT_STORE_URL
from .models import ProductPayload, SnapshotPayload

logger = logging.getLogger("style_assistant.inventory")

PRICE_TBD = "Price TBD"


@dataclass(frozen=True)
class ProductRecord:
    """Normalized, immutable view of one purchasable product."""
    name: str
    price: str
    sale_price: Optional[str]
    url: str
    image_url: str
    stock: int
    available: bool
    tags: FrozenSet[str] = field(default_factory=frozenset)

    def to_payload(self) -> ProductPayload:
        return ProductPayload(
            name=self.name,
            price=self.price,
            salePrice=self.sale_price,
            url=self.url,
            imageUrl=self.image_url,
            stock=self.stock,
            available=self.available,
            tags=sorted(self.tags),
        )


@dataclass(frozen=True)
class InventorySnapshot:
    """Complete inventory listing captured at one point in time."""
    products: Tuple[ProductRecord, ...]
    sold_out: Tuple[str, ...]
    last_updated: datetime

    def to_payload(self) -> SnapshotPayload:
        return SnapshotPayload(
            products=[product.to_payload() for product in self.products],
            soldOut=list(self.sold_out),
            lastUpdated=self.last_updated.isoformat(),
        )


def normalize(
    raw_products: Iterable[Any],
    store_url: str,
    currency_symbol: str = "$",
    now: Optional[datetime] = None,
) -> InventorySnapshot:
    """Purpose: Map raw feed records into an InventorySnapshot.
    Inputs/Outputs: Inputs are raw product dicts, the storefront base URL, the
        currency symbol and an optional timestamp; output is an InventorySnapshot.
    Side Effects / State: Logs skipped records.
    Dependencies: Uses _normalize_record for per-record mapping.
    Failure Modes: Unreadable records are skipped, never raised.
    If Removed: The cache has nothing to store and the prompt lists no products.
    Testing Notes: Zero-stock and unavailable records must land in sold_out only.
    """
    # Keep feed order for available items and dedupe sold-out names.
    available: List[ProductRecord] = []
    sold_out: List[str] = []
    for raw in raw_products:
        record = _normalize_record(raw, store_url, currency_symbol)
        if record is None:
            continue
        if record.available and record.stock > 0:
            available.append(record)
        else:
            sold_out.append(record.name)

    in_stock_names = {record.name for record in available}
    sold_out_names = [name for name in dict.fromkeys(sold_out) if name not in in_stock_names]

    return InventorySnapshot(
        products=tuple(available),
        sold_out=tuple(sold_out_names),
        last_updated=now or datetime.now(timezone.utc),
    )


def format_price(value: Any, currency_symbol: str = "$") -> Optional[str]:
    """Format a feed price ("95.0", 95, "95.00") as "$95.00"; None when unparseable."""
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    if not amount.is_finite():
        return None
    return f"{currency_symbol}{amount:.2f}"


def _normalize_record(raw: Any, store_url: str, currency_symbol: str) -> Optional[ProductRecord]:
    if not isinstance(raw, dict):
        logger.warning("skipping feed record of type %s", type(raw).__name__)
        return None
    name = str(raw.get("title") or "").strip()
    if not name:
        logger.warning("skipping feed record without title handle=%s", raw.get("handle"))
        return None

    variants = raw.get("variants") or []
    if not isinstance(variants, list):
        logger.warning("skipping feed record with unreadable variants name=%s", name)
        return None
    variants = [variant for variant in variants if isinstance(variant, dict)]

    price, sale_price = _resolve_prices(variants, currency_symbol)
    stock = max(0, sum(_as_int(variant.get("inventory_quantity")) for variant in variants))
    available = any(variant.get("available") is True for variant in variants)

    handle = str(raw.get("handle") or "").strip()
    return ProductRecord(
        name=name,
        price=price,
        sale_price=sale_price,
        url=f"{store_url}/products/{handle}" if handle else store_url,
        image_url=_first_image(raw),
        stock=stock,
        available=available,
        tags=_parse_tags(raw.get("tags")),
    )


def _resolve_prices(variants: List[Dict[str, Any]], currency_symbol: str) -> Tuple[str, Optional[str]]:
    # The first variant prices the card; a differing compare-at price marks a sale.
    if not variants:
        return PRICE_TBD, None
    first = variants[0]
    current = format_price(first.get("price"), currency_symbol)
    if current is None:
        return PRICE_TBD, None
    compare_at = format_price(first.get("compare_at_price"), currency_symbol)
    if compare_at is None or compare_at == current:
        return current, None
    return compare_at, current


def _first_image(raw: Dict[str, Any]) -> str:
    images = raw.get("images")
    if isinstance(images, list):
        for image in images:
            if isinstance(image, dict) and image.get("src"):
                return str(image["src"])
    image = raw.get("image")
    if isinstance(image, dict) and image.get("src"):
        return str(image["src"])
    return ""


def _parse_tags(tags: Any) -> FrozenSet[str]:
    if isinstance(tags, str):
        parts = tags.split(",")
    elif isinstance(tags, list):
        parts = [str(tag) for tag in tags]
    else:
        return frozenset()
    return frozenset(part.strip() for part in parts if part.strip())


def _as_int(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return 0
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return 0


_DEFAULT_PRODUCTS = [
    ("Forsaken Hoodie", "$95.00", "madman-forsaken-hoodie", "forsaken_hoodie_front.png", 40),
    ("Forsaken Sweats", "$95.00", "madman-forsaken-sweats", "forsaken_sweats_front.png", 40),
    ("Carpenter Pants", "$170.00", "madman-carpenter-pants", "carpenter_pants_front.png", 30),
    ("Carpenter Shorts", "$120.00", "carpenter-pants-copy", "carpenter_shorts_front.png", 15),
    ("Hendrixx Tee", "$54.00", "hendrixx-cut-off-tee", "HendrixFront.png", 35),
    ("Punk Tee", "$54.00", "punk-tee", "punk_tee_front.png", 35),
    ("Washed Logo Tee", "$54.00", "washed-logo-tee", "washed_logo_front.png", 30),
    ("Medallion Bracelet", "$280.00", "medallion-bracelet", "MADMANBRACELETWEB.png", 20),
    ("Star Pendant", "$360.00", "star-pendant", "MADMANCHAINWEB.png", 15),
]

_DEFAULT_SOLD_OUT = (
    "'Have I Gone Mad?' Hoodie",
    "'Have I Gone Mad?' Sweats",
    "Chaos Erupts Tee",
    "Da Vinci Work Jacket",
)

_DEFAULT_IMAGE_BASE = "https://cdn.shopify.com/s/files/1/0438/3621/1356/files"


def default_snapshot(store_url: str = DEFAULT_STORE_URL, now: Optional[datetime] = None) -> InventorySnapshot:
    """Purpose: Build the built-in catalogue served when the feed is unreachable.
    Inputs/Outputs: Input is the storefront base URL and optional timestamp;
        output is an InventorySnapshot.
    Side Effects / State: None; a new snapshot per call.
    Dependencies: None beyond the module constants.
    Failure Modes: None.
    If Removed: Feed outages leave the cache empty and the chat without products.
    Testing Notes: Verify nine in-stock items and four sold-out names.
    """
    products = tuple(
        ProductRecord(
            name=name,
            price=price,
            sale_price=None,
            url=f"{store_url}/products/{handle}",
            image_url=f"{_DEFAULT_IMAGE_BASE}/{image}",
            stock=stock,
            available=True,
        )
        for name, price, handle, image, stock in _DEFAULT_PRODUCTS
    )
    return InventorySnapshot(
        products=products,
        sold_out=_DEFAULT_SOLD_OUT,
        last_updated=now or datetime.now(timezone.utc),
    )
