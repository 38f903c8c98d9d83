"""Tests for the Display and Keypad modules."""

import pytest
from chip8.display import Display
from chip8.keypad import Keypad


class TestDisplay:
    """Framebuffer tests."""

    def test_starts_blank(self):
        """New display is all off."""
        display = Display()
        rows = display.rows()
        assert len(rows) == 32
        assert all(len(row) == 64 for row in rows)
        assert display.lit_count() == 0

    def test_draw_sets_pixels(self):
        """A sprite row lights the matching pixels."""
        display = Display()
        collision = display.draw_sprite(0, 0, bytes([0b10100000]))
        assert collision is False
        assert display.get_pixel(0, 0) is True
        assert display.get_pixel(1, 0) is False
        assert display.get_pixel(2, 0) is True

    def test_draw_twice_erases_with_collision(self):
        """Drawing the same sprite again XORs it off and reports collision."""
        display = Display()
        display.draw_sprite(10, 5, bytes([0xFF, 0x81]))
        collision = display.draw_sprite(10, 5, bytes([0xFF, 0x81]))
        assert collision is True
        assert display.lit_count() == 0

    def test_no_collision_when_disjoint(self):
        """Sprites that do not overlap report no collision."""
        display = Display()
        display.draw_sprite(0, 0, bytes([0xF0]))
        assert display.draw_sprite(0, 0, bytes([0x0F])) is False
        assert display.lit_count() == 8

    def test_wraps_horizontally(self):
        """Pixels past the right edge wrap to column 0."""
        display = Display()
        display.draw_sprite(62, 0, bytes([0xF0]))
        assert display.get_pixel(62, 0)
        assert display.get_pixel(63, 0)
        assert display.get_pixel(0, 0)
        assert display.get_pixel(1, 0)

    def test_wraps_vertically(self):
        """Rows past the bottom wrap to row 0."""
        display = Display()
        display.draw_sprite(0, 31, bytes([0x80, 0x80]))
        assert display.get_pixel(0, 31)
        assert display.get_pixel(0, 0)

    def test_start_coordinates_wrap(self):
        """Start coordinates are taken modulo the screen size."""
        display = Display()
        display.draw_sprite(64 + 3, 32 + 2, bytes([0x80]))
        assert display.get_pixel(3, 2)

    def test_clear(self):
        """Clear turns every pixel off."""
        display = Display()
        display.draw_sprite(0, 0, bytes([0xFF] * 15))
        display.clear()
        assert display.lit_count() == 0

    def test_to_text(self):
        """Text rendering uses one character per pixel."""
        display = Display()
        display.draw_sprite(0, 0, bytes([0xC0]))
        text = display.to_text()
        assert len(text) == 32
        assert text[0].startswith("##.")
        assert text[1] == "." * 64


class TestKeypad:
    """Keypad tests."""

    def test_press_and_release(self):
        """State follows press and release."""
        keypad = Keypad()
        keypad.press(0xA)
        assert keypad.is_pressed(0xA)
        assert keypad.pressed_keys() == [0xA]
        keypad.release(0xA)
        assert not keypad.is_pressed(0xA)

    def test_events_queue_in_order(self):
        """Press events are delivered oldest first."""
        keypad = Keypad()
        keypad.press(3)
        keypad.press(1)
        assert keypad.next_event() == 3
        assert keypad.next_event() == 1
        assert keypad.next_event() is None

    def test_held_key_queues_once(self):
        """Repeated press of a held key is one event."""
        keypad = Keypad()
        keypad.press(5)
        keypad.press(5)
        assert keypad.next_event() == 5
        assert keypad.next_event() is None

    def test_invalid_key(self):
        """Keys outside 0-F are rejected."""
        keypad = Keypad()
        with pytest.raises(ValueError):
            keypad.press(16)
        with pytest.raises(ValueError):
            keypad.release(-1)

    def test_event_queue_is_bounded(self):
        """Unconsumed presses never pile up past one per key."""
        keypad = Keypad()
        for _ in range(10000):
            keypad.press(3)
            keypad.release(3)
        drained = 0
        while keypad.next_event() is not None:
            drained += 1
        assert drained <= 16

    def test_is_pressed_uses_low_nibble(self):
        """Register values above 0xF select key by low nibble."""
        keypad = Keypad()
        keypad.press(0x2)
        assert keypad.is_pressed(0x12)
