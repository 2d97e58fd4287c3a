from __future__ import annotations

"""Product marker extraction and name resolution against the inventory snapshot.

Marker grammar: "PRODUCT:" followed by at least one character, running to the end
of the line. The marker may start mid-line. A marker on its own line is removed
along with its line break; a marker after other text is cut back to that text
and the line break stays.
"""

import re
from typing import List, Optional, Tuple

from .inventory import InventorySnapshot, ProductRecord

MARKER_PATTERN = re.compile(r"PRODUCT:([^\n]+)")
# A marker that owns its line takes the line break with it; a trailing marker
# after other text leaves the break in place.
MARKER_LINE_PATTERN = re.compile(r"^[ \t]*PRODUCT:[^\n]+\n?|[ \t]*PRODUCT:[^\n]+", re.MULTILINE)


def extract_markers(text: str) -> List[str]:
    """Return marker names in reply order; blank names are dropped."""
    names = [match.strip() for match in MARKER_PATTERN.findall(text or "")]
    return [name for name in names if name]


def strip_markers(text: str) -> str:
    return MARKER_LINE_PATTERN.sub("", text or "").strip()


def find_product(snapshot: InventorySnapshot, name: str) -> Optional[ProductRecord]:
    """Purpose: Resolve a marker name to the first matching in-stock product.
    Inputs/Outputs: Inputs are a snapshot and a marker name; output is the
        ProductRecord or None.
    Side Effects / State: None; pure function.
    Dependencies: None beyond str.lower containment checks.
    Failure Modes: Names that share words ("Carpenter") resolve to whichever
        product comes first in the snapshot.
    If Removed: Replies cannot carry product cards.
    Testing Notes: "Forsaken" should resolve to "Forsaken Hoodie".
    """
    search = name.strip().lower()
    if not search:
        return None
    for product in snapshot.products:
        candidate = product.name.lower()
        if search in candidate or candidate in search:
            return product
    return None


def match(text: str, snapshot: InventorySnapshot) -> Tuple[str, List[ProductRecord]]:
    """Split a sanitized reply into display text and the products it names.

    Unmatched names are dropped; repeated markers yield repeated products.
    """
    products: List[ProductRecord] = []
    for name in extract_markers(text):
        product = find_product(snapshot, name)
        if product is not None:
            products.append(product)
    return strip_markers(text), products
