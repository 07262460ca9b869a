from __future__ import annotations

from pydantic import BaseModel, Field


class Item(BaseModel):
    """Catalog entry as seen by pricing and ordering."""
    item_id: str = Field(description="Unique item identifier")
    name: str = Field(description="Item name")
    category: str = Field(default="", description="Item category")
    price: float = Field(description="Current unit price")
    description: str = Field(default="", description="Free-text description")
    stock: int = Field(default=0, description="Units available")


class BasketLine(BaseModel):
    """One (item, quantity) pair of a basket."""
    item: Item
    quantity: int = Field(gt=0, description="Units requested")

    @property
    def line_total(self) -> float:
        return self.item.price * self.quantity
