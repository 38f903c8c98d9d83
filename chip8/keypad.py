"""Hex keypad state for the CHIP-8 emulator."""

from collections import deque
from typing import Optional
from .constants import NUM_KEYS


class Keypad:
    """Pressed/released state for keys 0x0-0xF plus a queue of press events."""

    def __init__(self):
        self._down: list[bool] = [False] * NUM_KEYS
        # Bounded; oldest presses drop when nothing consumes them
        self._events: deque[int] = deque(maxlen=NUM_KEYS)

    @staticmethod
    def _check_key(key: int) -> None:
        if not 0 <= key < NUM_KEYS:
            raise ValueError(f"Key out of range: {key}")

    def press(self, key: int) -> None:
        """Mark key as held and queue a press event."""
        self._check_key(key)
        if not self._down[key]:
            self._events.append(key)
        self._down[key] = True

    def release(self, key: int) -> None:
        """Mark key as released."""
        self._check_key(key)
        self._down[key] = False

    def is_pressed(self, key: int) -> bool:
        # Only the low nibble of a register selects a key
        return self._down[key & 0xF]

    def next_event(self) -> Optional[int]:
        """Pop the oldest press event, or None."""
        if self._events:
            return self._events.popleft()
        return None

    def clear_events(self) -> None:
        self._events.clear()

    def pressed_keys(self) -> list[int]:
        return [k for k, down in enumerate(self._down) if down]

    def reset(self) -> None:
        self._down = [False] * NUM_KEYS
        self._events.clear()
