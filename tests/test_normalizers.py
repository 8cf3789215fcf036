"""
Tests for the pure normalizers: phone keys, fulfillment and menu documents.
"""

import pytest

from cloud_kitchen.domain.normalizers import (
    DEFAULT_CATEGORIES,
    fallback_label,
    normalize_fulfillment,
    normalize_menu,
    normalize_phone,
)


class TestNormalizePhone:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("(555) 123-4567", "5551234567"),
            ("+1 555.123.4567", "15551234567"),
            ("", ""),
            (None, ""),
            ("N/A", ""),
        ],
    )
    def test_keeps_only_digits(self, raw, expected):
        assert normalize_phone(raw) == expected


class TestNormalizeFulfillment:
    def test_defaults_to_delivery_now(self):
        result = normalize_fulfillment({})
        assert result.method == "delivery"
        assert result.schedule.mode == "now"
        assert result.schedule.asap is True
        assert result.schedule.iso is None

    def test_none_input(self):
        assert normalize_fulfillment(None).method == "delivery"

    def test_pickup_only_when_exact(self):
        assert normalize_fulfillment({"method": "pickup"}).method == "pickup"
        assert normalize_fulfillment({"method": "Pickup"}).method == "delivery"
        assert normalize_fulfillment({"method": "drone"}).method == "delivery"

    def test_later_schedule_builds_utc_timestamp(self):
        result = normalize_fulfillment(
            {"method": "delivery", "schedule": {"mode": "later", "date": "2026-10-20", "time": "18:30"}}
        )
        assert result.schedule.mode == "later"
        assert result.schedule.date == "2026-10-20"
        assert result.schedule.time == "18:30"
        assert result.schedule.iso == "2026-10-20T18:30:00Z"

    def test_later_schedule_uses_kitchen_timezone(self):
        result = normalize_fulfillment(
            {"schedule": {"mode": "later", "date": "2026-01-15", "time": "19:00"}},
            tz="Asia/Kolkata",
        )
        # IST is UTC+05:30
        assert result.schedule.iso == "2026-01-15T13:30:00Z"

    def test_unparseable_schedule_is_kept_without_timestamp(self):
        result = normalize_fulfillment({"schedule": {"mode": "later", "date": "tomorrow", "time": "soon"}})
        assert result.schedule.mode == "later"
        assert result.schedule.iso is None

    @pytest.mark.parametrize("schedule", ["later", ["later"], 42, None])
    def test_non_object_schedule_means_now(self, schedule):
        result = normalize_fulfillment({"method": "pickup", "schedule": schedule})
        assert result.method == "pickup"
        assert result.schedule.mode == "now"
        assert result.schedule.asap is True

    @pytest.mark.parametrize("raw", ["pickup", ["pickup"], 7])
    def test_non_object_fulfillment_means_delivery_now(self, raw):
        result = normalize_fulfillment(raw)
        assert result.method == "delivery"
        assert result.schedule.mode == "now"

    def test_later_without_time_falls_back_to_now(self):
        result = normalize_fulfillment({"schedule": {"mode": "later", "date": "2026-10-20"}})
        assert result.schedule.mode == "now"
        assert result.schedule.asap is True


class TestNormalizeMenu:
    def test_empty_menu_gets_default_categories(self):
        menu = normalize_menu()
        assert [c.key for c in menu.categories] == [c["key"] for c in DEFAULT_CATEGORIES]
        assert menu.items == {"starters": [], "mains": [], "breads": [], "desserts": []}

    def test_drops_blank_and_duplicate_category_keys(self):
        menu = normalize_menu({
            "categories": [
                {"key": "mains", "label": "Mains"},
                {"key": "  ", "label": "Blank"},
                {"key": "mains", "label": "Again"},
                {"key": "chaat"},
                "not-a-category",
            ],
        })
        assert [(c.key, c.label) for c in menu.categories] == [("mains", "Mains"), ("chaat", "Chaat")]

    def test_items_rebuilt_from_categories(self):
        menu = normalize_menu({
            "categories": [{"key": "mains", "label": "Mains"}],
            "items": {"mains": [{"name": "Dal"}], "ghost": [{"name": "Orphan"}]},
        })
        assert list(menu.items) == ["mains"]
        assert menu.items["mains"][0].name == "Dal"

    def test_legacy_top_level_category_items(self):
        menu = normalize_menu({"categories": [{"key": "breads", "label": "Breads"}], "breads": [{"name": "Roti"}]})
        assert [i.name for i in menu.items["breads"]] == ["Roti"]

    def test_item_fields_are_coerced(self):
        menu = normalize_menu({
            "categories": [{"key": "mains", "label": "Mains"}],
            "items": {"mains": [{
                "id": 7,
                "price": "12.5",
                "spicy": 9,
                "rating": "4.2",
                "reviews": "many",
                "veg": "yes",
                "chefSpecial": True,
            }]},
        })
        item = menu.items["mains"][0]
        assert item.id == "7"
        assert item.name == "Menu Item"
        assert item.price == 12.5
        assert item.spicy == 3
        assert item.rating == 4.2
        assert item.reviews == 0
        assert item.veg is False
        assert item.chef_special is True
        assert item.available is True

    def test_negative_spicy_clamped_and_unavailable_kept(self):
        menu = normalize_menu({
            "categories": [{"key": "mains", "label": "Mains"}],
            "items": {"mains": [{"name": "Raita", "spicy": -2, "available": False}]},
        })
        item = menu.items["mains"][0]
        assert item.spicy == 0
        assert item.available is False

    def test_unknown_item_keys_survive(self):
        menu = normalize_menu({
            "categories": [{"key": "mains", "label": "Mains"}],
            "items": {"mains": [{"name": "Thali", "portion": "large"}]},
        })
        assert menu.to_document()["items"]["mains"][0]["portion"] == "large"

    def test_normalization_is_a_fixed_point(self):
        raw = {
            "categories": [{"key": "mains"}, {"key": "mains"}, {"key": "sweets", "label": " Sweets "}],
            "items": {"mains": [{"name": "Dal", "price": "4", "spicy": 5, "extra": 1}], "sweets": [{}]},
        }
        once = normalize_menu(raw)
        twice = normalize_menu(once.to_document())
        assert twice == once
        assert normalize_menu(once) == once

    @pytest.mark.parametrize(
        "key,label",
        [("main-course", "Main Course"), ("street_food", "Street Food"), ("--", "Menu")],
    )
    def test_fallback_label(self, key, label):
        assert fallback_label(key) == label
