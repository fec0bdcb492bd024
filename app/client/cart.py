"""Client-side cart.

A flat list of lines persisted under one storage key. Grouping by farmer is
derived on demand from that list, never stored.
"""
import math
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from app.client.storage import LocalStore

CART_STORAGE_KEY = "agri_cart_v1"


class CartLine(BaseModel):
    crop_id: int
    name: str
    price_per_unit: float
    quantity: int = Field(1, ge=1)
    farmer_id: int
    farmer_name: Optional[str] = None

    @property
    def subtotal(self) -> float:
        return self.quantity * self.price_per_unit


class Cart:
    def __init__(self, store: LocalStore):
        self.store = store
        self.lines: List[CartLine] = [
            CartLine.model_validate(raw) for raw in store.get(CART_STORAGE_KEY, []) or []
        ]

    def _save(self):
        self.store.set(CART_STORAGE_KEY, [line.model_dump() for line in self.lines])

    def __len__(self):
        return len(self.lines)

    def get(self, crop_id: int) -> Optional[CartLine]:
        return next((line for line in self.lines if line.crop_id == crop_id), None)

    def add(self, line: CartLine):
        """Add a line, summing quantities when the crop is already in the cart."""
        existing = self.get(line.crop_id)
        if existing:
            merged = existing.model_copy(update={"quantity": existing.quantity + line.quantity})
            self.lines = [merged if current.crop_id == line.crop_id else current for current in self.lines]
        else:
            self.lines.append(line)
        self._save()

    def update_quantity(self, crop_id: int, quantity: float):
        quantity = max(0, math.floor(quantity))
        self.lines = [
            line.model_copy(update={"quantity": quantity}) if line.crop_id == crop_id else line
            for line in self.lines
        ]
        self.lines = [line for line in self.lines if line.quantity > 0]
        self._save()

    def remove(self, crop_id: int):
        self.lines = [line for line in self.lines if line.crop_id != crop_id]
        self._save()

    def clear_for_farmer(self, farmer_id: int):
        self.lines = [line for line in self.lines if line.farmer_id != farmer_id]
        self._save()

    def clear_all(self):
        self.lines = []
        self._save()

    def by_farmer(self) -> Dict[int, List[CartLine]]:
        groups: Dict[int, List[CartLine]] = {}
        for line in self.lines:
            groups.setdefault(line.farmer_id, []).append(line)
        return groups

    def farmer_total(self, farmer_id: int) -> float:
        return sum(line.subtotal for line in self.by_farmer().get(farmer_id, []))

    @property
    def total(self) -> float:
        return sum(line.subtotal for line in self.lines)
