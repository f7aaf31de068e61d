import unittest
from mealplan.domain.DayPlan import DayPlan
from mealplan.domain.MealSlot import IngredientLine, MealSlot
from mealplan.domain.ShoppingList import ShoppingItem, ShoppingList
from mealplan.logic.shopping.categories import PANTRY_CATEGORY, DEFAULT_CATEGORY, categorize_ingredient
from mealplan.logic.shopping.list_builder import (
    build_shopping_list, group_by_category, parse_amount, sum_amounts,
)


def day_with(*lines, is_cheat_day=False):
    meal = MealSlot(title="Meal", ingredients=[IngredientLine(n, a) for n, a in lines])
    return DayPlan(meals={"dinner": meal}, is_cheat_day=is_cheat_day)


class TestParseAmount(unittest.TestCase):

    def test_number_and_unit(self):
        self.assertEqual(parse_amount("200g"), (200.0, "g"))
        self.assertEqual(parse_amount("1.5 個"), (1.5, "個"))
        self.assertEqual(parse_amount("3"), (3.0, ""))

    def test_fraction(self):
        self.assertEqual(parse_amount("1/2個"), (0.5, "個"))

    def test_word_without_number(self):
        self.assertEqual(parse_amount("適量"), (None, "適量"))

    def test_free_text_does_not_parse(self):
        self.assertIsNone(parse_amount("to taste"))
        self.assertIsNone(parse_amount("大さじ1"))


class TestSumAmounts(unittest.TestCase):

    def test_same_unit_is_summed(self):
        self.assertEqual(sum_amounts(["150g", "50g"]), "200g")

    def test_fractions_sum_to_integer(self):
        self.assertEqual(sum_amounts(["1/2個", "1/2個"]), "1個")

    def test_decimal_rendering(self):
        self.assertEqual(sum_amounts(["1.25g", "1.25g"]), "2.5g")
        self.assertEqual(sum_amounts(["0.5本"]), "0.5本")

    def test_halves_round_up(self):
        self.assertEqual(sum_amounts(["1/4個"]), "0.3個")
        self.assertEqual(sum_amounts(["2個", "1/4個"]), "2.3個")
        self.assertEqual(sum_amounts(["1.96g"]), "2g")

    def test_units_then_unique_literals(self):
        amounts = ["100g", "適量", "1/2個", "50g", "適量", "大さじ1"]
        self.assertEqual(sum_amounts(amounts), "150g, 0.5個, 適量, 大さじ1")

    def test_blank_amounts_are_ignored(self):
        self.assertEqual(sum_amounts(["", "  ", "2枚"]), "2枚")

    def test_zero_denominator_counts_as_zero(self):
        self.assertEqual(sum_amounts(["1/0個", "2個"]), "2個")


class TestCategorize(unittest.TestCase):

    def test_name_keywords(self):
        self.assertEqual(categorize_ingredient("鶏むね肉", "200g"), "肉類")
        self.assertEqual(categorize_ingredient("鮭", "1切れ"), "魚介類")
        self.assertEqual(categorize_ingredient("ブロッコリー", "100g"), "野菜・ハーブ類")
        self.assertEqual(categorize_ingredient("豆腐", "1丁"), "大豆製品")
        self.assertEqual(categorize_ingredient("玄米", "150g"), "主食・穀類")
        self.assertEqual(categorize_ingredient("Chicken thigh", "300g"), "肉類")

    def test_pantry_measure_overrides_name(self):
        self.assertEqual(categorize_ingredient("鶏むね肉", "少々"), PANTRY_CATEGORY)
        self.assertEqual(categorize_ingredient("醤油", "大さじ2"), PANTRY_CATEGORY)
        self.assertEqual(categorize_ingredient("Salt", "a pinch"), PANTRY_CATEGORY)
        self.assertEqual(categorize_ingredient("Olive oil", "1 tbsp"), PANTRY_CATEGORY)

    def test_unknown_falls_back_to_default(self):
        self.assertEqual(categorize_ingredient("ジャスミン茶葉", "1個"), DEFAULT_CATEGORY)


class TestBuildShoppingList(unittest.TestCase):

    def test_same_ingredient_across_days_is_one_item(self):
        days = {
            "2024-01-01": day_with(("鶏むね肉", "150g")),
            "2024-01-02": day_with(("鶏むね肉", "50g")),
        }
        items = build_shopping_list(days)
        self.assertEqual(len(items), 1)
        self.assertEqual(items[0].ingredient, "鶏むね肉")
        self.assertEqual(items[0].amount, "200g")
        self.assertEqual(items[0].category, "肉類")
        self.assertFalse(items[0].checked)

    def test_names_are_trimmed_before_grouping(self):
        days = {"2024-01-01": day_with(("卵 ", "1個"), (" 卵", "2個"))}
        items = build_shopping_list(days)
        self.assertEqual([(i.ingredient, i.amount) for i in items], [("卵", "3個")])

    def test_first_occurrence_decides_category(self):
        days = {
            "2024-01-01": day_with(("鶏むね肉", "少々")),
            "2024-01-02": day_with(("鶏むね肉", "200g")),
        }
        item = build_shopping_list(days)[0]
        self.assertEqual(item.category, PANTRY_CATEGORY)
        self.assertEqual(item.amount, "200g, 少々")

        days = {
            "2024-01-01": day_with(("鶏むね肉", "200g")),
            "2024-01-02": day_with(("鶏むね肉", "少々")),
        }
        self.assertEqual(build_shopping_list(days)[0].category, "肉類")

    def test_cheat_days_are_excluded(self):
        days = {
            "2024-01-01": day_with(("豚肉", "100g")),
            "2024-01-02": day_with(("豚肉", "500g"), ("ピザ生地", "1枚"), is_cheat_day=True),
        }
        items = build_shopping_list(days)
        self.assertEqual([(i.ingredient, i.amount) for i in items], [("豚肉", "100g")])

    def test_group_by_category(self):
        days = {"2024-01-01": day_with(("鶏むね肉", "150g"), ("塩", "少々"), ("豚肉", "100g"))}
        grouped = group_by_category(build_shopping_list(days))
        self.assertEqual([i.ingredient for i in grouped["肉類"]], ["鶏むね肉", "豚肉"])
        self.assertEqual([i.ingredient for i in grouped[PANTRY_CATEGORY]], ["塩"])


class TestShoppingListToggle(unittest.TestCase):

    def test_toggle_only_changes_checked(self):
        sl = ShoppingList("plan-1", [ShoppingItem("卵", "3個", "卵・乳製品")])
        sl.toggle(0, True)
        self.assertTrue(sl.items[0].checked)
        self.assertEqual(sl.items[0].amount, "3個")
        with self.assertRaises(IndexError):
            sl.toggle(5, True)

    def test_round_trip(self):
        sl = ShoppingList("plan-1", [ShoppingItem("卵", "3個", "卵・乳製品", True)])
        again = ShoppingList.from_dict(sl.to_dict())
        self.assertEqual(again.plan_id, "plan-1")
        self.assertEqual(again.items[0].to_dict(), sl.items[0].to_dict())


if __name__ == '__main__':
    unittest.main()
