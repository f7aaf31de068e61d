"""ShoppingList aggregate: aggregated purchasing items for one approved plan."""
from datetime import datetime
from typing import List, Dict, Any, Optional


class ShoppingItem:
    def __init__(self, ingredient: str = "", amount: str = "", category: str = "", checked: bool = False):
        self.ingredient = ingredient
        self.amount = amount
        self.category = category
        self.checked = checked

    def __str__(self) -> str:
        mark = "x" if self.checked else " "
        return f"[{mark}] {self.ingredient} {self.amount} ({self.category})"

    __repr__ = __str__

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "ShoppingItem":
        d = data if isinstance(data, dict) else {}
        return ShoppingItem(
            ingredient=d.get('ingredient', ''),
            amount=d.get('amount', ''),
            category=d.get('category', ''),
            checked=bool(d.get('checked', False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ingredient": self.ingredient,
            "amount": self.amount,
            "category": self.category,
            "checked": self.checked,
        }


class ShoppingList:
    def __init__(self, plan_id: str, items: Optional[List[ShoppingItem]] = None, created_at: Optional[str] = None):
        self.plan_id = plan_id
        self.items = items[:] if items else []
        self.created_at = created_at or datetime.now().isoformat(timespec='seconds')

    def toggle(self, index: int, checked: bool) -> ShoppingItem:
        '''
        Sets the checked flag of one item; the only mutation allowed after creation.
        '''
        if index < 0 or index >= len(self.items):
            raise IndexError(f"Shopping item index out of range: {index}")
        self.items[index].checked = checked
        return self.items[index]

    def __str__(self) -> str:
        items_str = ",\n\t".join(str(item) for item in self.items)
        return f"Shopping List for plan {self.plan_id}:\n\t{items_str}"

    __repr__ = __str__

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "ShoppingList":
        return ShoppingList(
            plan_id=data.get('planId', ''),
            items=[ShoppingItem.from_dict(i) for i in data.get('items') or []],
            created_at=data.get('createdAt'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "planId": self.plan_id,
            "createdAt": self.created_at,
            "items": [i.to_dict() for i in self.items],
        }
