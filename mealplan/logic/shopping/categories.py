"""Purchasing categories for shopping list items.

An amount written as a kitchen measure ("大さじ1", "少々", "a pinch") marks the
item as a pantry staple no matter what the ingredient is; otherwise the name
is matched against ordered keyword tables and the first hit wins.
"""
from typing import Final, Tuple

PANTRY_CATEGORY: Final[str] = "基本調味料・常備品 (お家にあれば購入不要)"
DEFAULT_CATEGORY: Final[str] = "その他"

PANTRY_MEASURE_TOKENS: Final[Tuple[str, ...]] = (
    "大さじ", "小さじ", "少々", "適量", "少量", "たっぷり", "ひとつまみ",
    "tablespoon", "tbsp", "teaspoon", "tsp", "pinch", "to taste", "a little", "plenty", "dash",
)

# Order matters: "鶏油" is meat before it is a condiment
CATEGORY_KEYWORDS: Final[Tuple[Tuple[str, Tuple[str, ...]], ...]] = (
    ("肉類", ("肉", "牛", "豚", "鶏", "ひき肉", "ベーコン", "ハム", "ウィンナー", "ソーセージ", "ささみ",
             "チャーシュー", "beef", "pork", "chicken", "bacon", "ham", "sausage", "turkey", "lamb")),
    ("魚介類", ("魚", "鮭", "マグロ", "海老", "イカ", "タコ", "貝", "刺身", "鯖", "鯛", "あゆ", "ぶり",
               "カツオ", "しらす", "アサリ", "fish", "salmon", "tuna", "shrimp", "prawn", "squid", "cod")),
    ("野菜・ハーブ類", ("野菜", "玉ねぎ", "人参", "キャベツ", "レタス", "トマト", "ブロッコリー", "ピーマン",
                     "なす", "ほうれん草", "じゃがいも", "大根", "きのこ", "椎茸", "えのき", "セロリ",
                     "パプリカ", "もやし", "キュウリ", "きゅうり", "ニラ", "パセリ", "刻みネギ", "バジル",
                     "onion", "carrot", "cabbage", "lettuce", "tomato", "broccoli", "bell pepper", "eggplant", "spinach",
                     "potato", "mushroom", "celery", "cucumber", "parsley", "basil")),
    ("果実類", ("果物", "フルーツ", "レモン", "バナナ", "ブルーベリー", "イチゴ", "リンゴ", "みかん", "アボカド",
               "fruit", "lemon", "banana", "blueberr", "strawberr", "apple", "orange", "avocado")),
    ("卵・乳製品", ("卵", "チーズ", "牛乳", "ヨーグルト", "バター", "生クリーム",
                  "egg", "cheese", "milk", "yogurt", "yoghurt", "butter", "cream")),
    ("大豆製品", ("豆腐", "納豆", "豆乳", "油揚げ", "厚揚げ", "tofu", "natto", "soy milk")),
    ("主食・穀類", ("パスタ", "ラザニア", "パン", "米", "ご飯", "飯", "うどん", "そば", "麺", "ピザ生地",
                  "トースト", "全粒粉", "pasta", "bread", "rice", "noodle", "oatmeal", "flour")),
    ("調味料・甘味料", ("塩", "胡椒", "醤油", "味噌", "油", "だし", "砂糖", "酢", "みりん", "酒", "マヨネーズ",
                     "ケチャップ", "ソース", "コンソメ", "めんつゆ", "ドレッシング", "ポン酢", "はちみつ",
                     "シロップ", "片栗粉", "豆板醤", "生姜", "わさび", "にんにく", "練りごま", "ハーブ",
                     "salt", "soy sauce", "miso", "oil", "sugar", "vinegar", "mayonnaise", "ketchup",
                     "sauce", "honey", "syrup", "ginger", "garlic")),
    ("加工食品・その他", ("プロテイン", "わかめ", "海苔", "寿司", "茶碗蒸し", "protein", "seaweed")),
)


def is_pantry_measure(amount: str) -> bool:
    lowered = (amount or '').lower()
    return any(token in lowered for token in PANTRY_MEASURE_TOKENS)


def categorize_ingredient(name: str, amount: str = "") -> str:
    if is_pantry_measure(amount):
        return PANTRY_CATEGORY
    lowered = (name or '').lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(k in lowered for k in keywords):
            return category
    return DEFAULT_CATEGORY


__all__ = ['PANTRY_CATEGORY', 'DEFAULT_CATEGORY', 'is_pantry_measure', 'categorize_ingredient']
