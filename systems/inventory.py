from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union

from settings import INVENTORY_CAPACITY
from systems.equipment import Equipment
from systems.stones import Stone

InventoryItem = Union[Equipment, Stone]


@dataclass
class Inventory:
    """
    Bag of unequipped items (equipment and stones) with a hard capacity.

    - items:    owned items in pickup order
    - capacity: INVENTORY_PAGES * ITEMS_PER_PAGE by default

    The bag never holds more than `capacity` items; callers that receive
    more loot than fits convert the rest to gold (systems.progression).
    """

    items: List[InventoryItem] = field(default_factory=list)
    capacity: int = INVENTORY_CAPACITY

    def copy(self) -> "Inventory":
        return Inventory(items=list(self.items), capacity=self.capacity)

    # --- Queries ---

    def __len__(self) -> int:
        return len(self.items)

    @property
    def free_slots(self) -> int:
        return max(0, self.capacity - len(self.items))

    def is_full(self) -> bool:
        return self.free_slots == 0

    def get(self, item_id: str) -> Optional[InventoryItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def equipment(self) -> List[Equipment]:
        return [it for it in self.items if isinstance(it, Equipment)]

    def stones(self) -> List[Stone]:
        return [it for it in self.items if isinstance(it, Stone)]

    # --- Mutation ---

    def add_item(self, item: InventoryItem) -> bool:
        """Add an item if there is room. Returns False when full."""
        if self.is_full():
            return False
        self.items.append(item)
        return True

    def remove_item(self, item_id: str) -> Optional[InventoryItem]:
        """Remove and return the item with this id (None if absent)."""
        for i, item in enumerate(self.items):
            if item.id == item_id:
                return self.items.pop(i)
        return None
