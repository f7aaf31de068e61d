"""Shopping list builder.

Turns the free-text ingredient lines of a finished plan into one
ShoppingItem per distinct ingredient name, with same-unit quantities summed.
"""
import re
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional, Tuple

from mealplan.domain.DayPlan import DayPlan
from mealplan.domain.ShoppingList import ShoppingItem
from mealplan.logic.shopping.categories import categorize_ingredient

# optional number or fraction, then an optional run of letters in any script
_AMOUNT_RE = re.compile(r'^(\d*(?:\.\d+)?|\d+/\d+)\s*([^\W\d_]*)$')


def _parse_value(text: str) -> float:
    if '/' in text:
        num, den = text.split('/', 1)
        if float(den) == 0:
            return 0
        return float(num) / float(den)
    try:
        return float(text)
    except ValueError:
        return 0


def parse_amount(text: str) -> Optional[Tuple[Optional[float], str]]:
    """Split an amount such as "200g", "1/2個" or "適量" into (value, unit).

    Returns None when the text does not look like a quantity at all, and
    (None, unit) when it is a bare word without a number.
    """
    match = _AMOUNT_RE.match(text)
    if not match:
        return None
    value_str, unit = match.groups()
    if not value_str:
        return None, unit
    return _parse_value(value_str), unit


def _format_value(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    formatted = str(Decimal(str(value)).quantize(Decimal('0.1'), rounding=ROUND_HALF_UP))
    return formatted[:-2] if formatted.endswith('.0') else formatted


def sum_amounts(amounts: Iterable[str]) -> str:
    totals: Dict[str, float] = {}
    literals: List[str] = []
    for raw in amounts:
        amount = (raw or '').strip()
        if not amount:
            continue
        parsed = parse_amount(amount)
        if parsed is None or parsed[0] is None:
            if amount not in literals:
                literals.append(amount)
            continue
        value, unit = parsed
        totals[unit] = totals.get(unit, 0) + value
    parts = [f"{_format_value(v)}{unit}" for unit, v in totals.items()]
    return ", ".join(parts + literals)


def build_shopping_list(days: Dict[str, DayPlan]) -> List[ShoppingItem]:
    """Aggregate the ingredients of every non-cheat day into shopping items.

    Args:
        days: plan days keyed by ISO date.

    Returns:
        One unchecked ShoppingItem per trimmed ingredient name, in first-seen
        order. The category is decided by the first occurrence of the name.
    """
    groups: Dict[str, Dict[str, object]] = {}
    for date in sorted(days):
        day = days[date]
        if day.is_cheat_day:
            continue
        for _, meal in day.present_meals():
            for line in meal.ingredients:
                name = (line.name or '').strip()
                if not name:
                    continue
                amount = (line.amount or '').strip()
                group = groups.get(name)
                if group is None:
                    groups[name] = {"amounts": [amount], "category": categorize_ingredient(name, amount)}
                else:
                    group["amounts"].append(amount)

    return [ShoppingItem(ingredient=name, amount=sum_amounts(data["amounts"]),
                         category=data["category"], checked=False)
            for name, data in groups.items()]


def group_by_category(items: Iterable[ShoppingItem]) -> Dict[str, List[ShoppingItem]]:
    grouped: Dict[str, List[ShoppingItem]] = {}
    for item in items:
        grouped.setdefault(item.category, []).append(item)
    return grouped


__all__ = ['parse_amount', 'sum_amounts', 'build_shopping_list', 'group_by_category']
