from typing import Optional
from pathlib import Path

from mealplan.domain.ShoppingList import ShoppingItem, ShoppingList
from mealplan.infra.json_store import JsonDocumentStore
from mealplan.infra.paths import SHOPPING_LISTS_FILE


class ShoppingListRepository:
    """Shopping lists keyed by plan id."""

    def __init__(self, path: Optional[Path] = None):
        self.store = JsonDocumentStore(path or SHOPPING_LISTS_FILE)

    def get(self, plan_id: str) -> Optional[ShoppingList]:
        data = self.store.load().get(plan_id)
        return ShoppingList.from_dict(data) if data else None

    def save(self, shopping_list: ShoppingList) -> ShoppingList:
        with self.store.lock:
            data = self.store.load()
            data[shopping_list.plan_id] = shopping_list.to_dict()
            self.store.save(data)
        return shopping_list

    def toggle_item(self, plan_id: str, index: int, checked: bool) -> ShoppingItem:
        with self.store.lock:
            shopping_list = self.get(plan_id)
            if shopping_list is None:
                raise KeyError(plan_id)
            item = shopping_list.toggle(index, checked)
            self.save(shopping_list)
            return item
