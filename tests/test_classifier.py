"""Tests for identifier naming and category derivation."""

import pytest

from sagittarius.classifier import (
    ClassifiedEvent,
    classify_scroll,
    click_name,
    button_code,
    event_type,
    key_name,
    scroll_notches,
)


class TestEventType:

    @pytest.mark.parametrize("identifier,expected", [
        ("KEY_A", "KEY"),
        ("KEY_LEFTSHIFT", "KEY"),
        ("CLICK_LEFT", "CLICK"),
        ("CLICK_OTHER", "CLICK"),
        ("WHEEL_VERTICAL", "WHEEL"),
        ("WHEEL_HORIZONTAL", "WHEEL"),
        ("BTN_SIDE", "OTHER"),
        ("UNKNOWN_255", "OTHER"),
        ("key_a", "OTHER"),
        ("KEY", "OTHER"),
        ("", "OTHER"),
    ])
    def test_prefix_rule(self, identifier, expected):
        assert event_type(identifier) == expected


class TestButtons:

    def test_code_table(self):
        assert click_name(0x110) == "CLICK_LEFT"
        assert click_name(0x111) == "CLICK_RIGHT"
        assert click_name(0x112) == "CLICK_MIDDLE"

    def test_unmapped_code_is_click_other(self):
        assert click_name(0x113) == "CLICK_OTHER"
        assert click_name(None) == "CLICK_OTHER"

    def test_backend_names(self):
        assert click_name(button_code("left")) == "CLICK_LEFT"
        assert click_name(button_code("right")) == "CLICK_RIGHT"
        assert click_name(button_code("middle")) == "CLICK_MIDDLE"
        assert click_name(button_code("x1")) == "CLICK_OTHER"


class TestScroll:

    def test_notches_round_absolute(self):
        assert scroll_notches(15.0) == 1
        assert scroll_notches(-30.0) == 2
        assert scroll_notches(22.0) == 1
        assert scroll_notches(23.0) == 2
        assert scroll_notches(5.0) == 0

    def test_custom_notch_size(self):
        assert scroll_notches(-3, notch_size=1.0) == 3

    def test_axes_are_separate_identifiers(self):
        events = classify_scroll(dx=-15.0, dy=45.0)
        assert events == [
            ClassifiedEvent("WHEEL_VERTICAL", 3),
            ClassifiedEvent("WHEEL_HORIZONTAL", 1),
        ]

    def test_sub_notch_movement_is_dropped(self):
        assert classify_scroll(dx=0, dy=4.0) == []


class TestKeyName:

    def test_letters_and_digits(self):
        assert key_name(char="a") == "KEY_A"
        assert key_name(char="A") == "KEY_A"
        assert key_name(char="7") == "KEY_7"

    def test_shifted_symbols_map_to_physical_key(self):
        assert key_name(char="!") == "KEY_1"
        assert key_name(char="?") == "KEY_SLASH"
        assert key_name(char="_") == "KEY_MINUS"

    def test_control_character_maps_to_letter(self):
        assert key_name(char="\x03") == "KEY_C"

    def test_special_keys(self):
        assert key_name(name="enter") == "KEY_ENTER"
        assert key_name(name="shift_r") == "KEY_RIGHTSHIFT"
        assert key_name(name="f12") == "KEY_F12"

    def test_unknown_keys_get_opaque_names(self):
        assert key_name(char="é", vk=233) == "UNKNOWN_233"
        assert key_name(name="launch_app") == "UNKNOWN_LAUNCH_APP"
        assert key_name() == "UNKNOWN"
        assert event_type(key_name(vk=500)) == "OTHER"
