from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel


class ChatRequest(BaseModel):
    """Request payload for chat API."""
    message: str


class ProductPayload(BaseModel):
    """Wire form of a product card, keyed the way the widget reads it."""
    name: str
    price: str
    salePrice: Optional[str] = None
    url: str
    imageUrl: str
    stock: int
    available: bool
    tags: List[str]


class ChatResponse(BaseModel):
    """Response payload returned by the chat API."""
    reply: str
    products: List[ProductPayload]


class SnapshotPayload(BaseModel):
    """Wire form of the current inventory snapshot."""
    products: List[ProductPayload]
    soldOut: List[str]
    lastUpdated: str
