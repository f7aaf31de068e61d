from pathlib import Path
from mealplan.utilities.config import DATA_DIR as _CONFIG_DATA_DIR

# Centralized paths for data files (single source of truth)
DATA_DIR = Path(_CONFIG_DATA_DIR).resolve()
PLANS_FILE = DATA_DIR / 'plans.json'
USERS_FILE = DATA_DIR / 'users.json'
SHOPPING_LISTS_FILE = DATA_DIR / 'shopping_lists.json'

__all__ = ['DATA_DIR', 'PLANS_FILE', 'USERS_FILE', 'SHOPPING_LISTS_FILE']
