from __future__ import annotations

from pathlib import Path
from typing import List

from .inventory import InventorySnapshot

PERSONA_PROMPT = "assistant.txt"


def stock_label(stock: int) -> str:
    """Map a stock count to the label shown to the model."""
    if stock > 20:
        return "In Stock"
    if stock > 5:
        return "Limited Stock"
    return f"Low Stock ({stock} left)"


def render(snapshot: InventorySnapshot) -> str:
    """Purpose: Render a snapshot into the inventory block of the prompt.
    Inputs/Outputs: Input is an InventorySnapshot; output is a text block.
    Side Effects / State: None; pure function of the snapshot.
    Dependencies: Uses stock_label.
    Failure Modes: None; an empty snapshot renders headers only.
    If Removed: The model cannot see what is in stock and recommends blindly.
    Testing Notes: Rendering the same snapshot twice yields identical text.
    """
    # In-stock listing first; sold-out section only when non-empty.
    updated = snapshot.last_updated.strftime("%Y-%m-%d %H:%M UTC")
    lines: List[str] = [
        f"CURRENT INVENTORY (Last Updated: {updated}):",
        "",
        "IN STOCK PRODUCTS:",
    ]
    for product in snapshot.products:
        lines.append(f"- {product.name} - {product.price} [{stock_label(product.stock)}]")

    if snapshot.sold_out:
        lines.extend(["", "SOLD OUT (DO NOT RECOMMEND):"])
        lines.extend(f"- {name}" for name in snapshot.sold_out)

    return "\n".join(lines) + "\n"


def load_prompt(prompt_path: Path) -> str:
    """Purpose: Load a prompt template as UTF-8 text and strip BOM if present.
    Inputs/Outputs: Input is a Path to the template; output is the decoded string.
    Side Effects / State: Reads the filesystem.
    Dependencies: Uses Path.read_text/read_bytes; used by create_app at startup.
    Failure Modes: Missing file raises FileNotFoundError; invalid UTF-8 bytes
        are dropped by the fallback decode.
    If Removed: The persona template cannot be loaded and chat has no brand voice.
    Testing Notes: Validate BOM-stripping on a template saved with a BOM.
    """
    try:
        return prompt_path.read_text(encoding="utf-8").lstrip("\ufeff")
    except UnicodeDecodeError:
        raw = prompt_path.read_bytes()
        return raw.decode("utf-8", errors="ignore").lstrip("\ufeff")


def build_prompt(template: str, inventory_block: str, message: str) -> str:
    """Fill the persona template's <<INVENTORY>> and <<MESSAGE>> slots."""
    return template.replace("<<INVENTORY>>", inventory_block).replace("<<MESSAGE>>", message)
