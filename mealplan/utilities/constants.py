from typing import Final

MEAL_TYPES: Final[tuple[str, ...]] = ("breakfast", "lunch", "dinner")
OPTIONAL_MEAL_TYPES: Final[tuple[str, ...]] = ("snack",)
NUTRIENTS: Final[tuple[str, ...]] = ("calories", "protein", "fat", "carbs")

MEAL_RATIOS: Final[dict[str, float]] = {"breakfast": 0.2, "lunch": 0.4, "dinner": 0.4}
MEAL_TYPE_LABELS: Final[dict[str, str]] = {"breakfast": "朝食", "lunch": "昼食", "dinner": "夕食", "snack": "間食"}

# Used when a user has no explicit nutrition goal
DEFAULT_DAILY_TARGET: Final[dict[str, int]] = {"calories": 1800, "protein": 100, "fat": 50, "carbs": 200}

# grams of protein/fat/carbs per kcal of a skeleton snack
SNACK_MACRO_RATIOS: Final[dict[str, float]] = {"protein": 0.1, "fat": 0.05, "carbs": 0.15}

SLOT_MODES: Final[tuple[str, ...]] = ("auto", "fixed", "custom")
CHEAT_DAY_FREQUENCIES: Final[tuple[str, ...]] = ("weekly", "biweekly")
DEFAULT_CHEAT_DAY_FREQUENCY: Final[str] = "weekly"

FALLBACK_TAG: Final[str] = "fallback"
FALLBACK_TITLE: Final[str] = "【栄養調整】鶏むね肉とブロッコリーのバランスセット"
FALLBACK_TAGS: Final[tuple[str, ...]] = (FALLBACK_TAG, "高タンパク", "調整用", "時短")
FALLBACK_INGREDIENTS: Final[tuple[tuple[str, str], ...]] = (
    ("鶏むね肉", "150g"),
    ("ブロッコリー", "100g"),
    ("玄米", "150g"),
    ("オリーブオイル", "適量"),
    ("塩コショウ", "少々"),
)
FALLBACK_STEPS: Final[tuple[str, ...]] = (
    "鶏むね肉とブロッコリーを一口大に切る",
    "耐熱容器に入れ、塩コショウとオリーブオイルを少量かける",
    "ふんわりラップをして電子レンジで加熱(600Wで約5分)",
    "玄米を添えて完成",
)

# System instructions per generation task. The constraint payload and the
# JSON schema of the expected answer are appended by the generator.
GENERATION_INSTRUCTIONS: Final[dict[str, str]] = {
    "plan": (
        "You plan daily meals for a diet programme. Produce a complete multi-day plan. "
        "Slots listed under 'anchors' must be echoed verbatim on every day. "
        "Fill every other slot so that each meal matches its entry in 'slotTargets' within 15%. "
        "Mark cheat days (is_cheat_day) at the rate given by 'cheatDayFrequency': "
        "one day per week for 'weekly', one per two weeks for 'biweekly'. "
        "Never use an ingredient from 'dislikedIngredients'. "
        "Split ingredients into plain names and amounts (e.g. name '豚肉', amount '100g')."
    ),
    "repair": (
        "Some meals of a plan missed their nutrition targets. Produce one replacement per key "
        "in 'invalidMeals', keyed exactly as given. Each replacement must match its target "
        "within 15%, must not reuse a title from 'existingTitles' and must respect any 'constraint'."
    ),
    "skeleton": (
        "Draft a coarse plan for the whole horizon: a title, main ingredients and approximate "
        "calories per meal, plus ingredient pools covering contiguous date ranges whose items "
        "are shared across those days so that nothing is wasted. "
        "Every slot under 'fixedMeals' uses that menu on every day; honour 'mealConstraints' per slot. "
        "Mark cheat days (is_cheat_day) at the rate given by 'cheatDayFrequency'."
    ),
    "day_detail": (
        "Expand the given day of a meal skeleton into full recipes with ingredient amounts, "
        "steps and nutrition. Keep every title. Draw primarily from 'pool'. Match 'targets'. "
        "Keep a slot listed under 'fixedMeals' as that menu and honour 'mealConstraints'."
    ),
    "recipe_detail": (
        "Write the ingredient list (name and amount) and the cooking steps for the given meal "
        "so that it matches the given nutrition."
    ),
    "estimate": (
        "Estimate the nutrition of one meal described by the user. For a fixed menu, estimate the "
        "dish as named. For a free-text requirement, assume one representative meal satisfying it. "
        "Keep values realistic and explain the estimate in 'reason'."
    ),
}

PLAN_STATUS_MESSAGES: Final[dict[str, str]] = {
    "started": "Plan generation started. It can take one to two minutes.",
    "already_creating": "A plan is already being generated. Please wait.",
}
