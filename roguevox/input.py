"""Per-frame keyboard and mouse state with press/hold edge detection."""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

KEY_COUNT = 372
_FIRST_POLLED_KEY = 30
_POLLED_KEY_END = 350

KEY_SPACE = 32
KEY_A = 65
KEY_D = 68
KEY_F = 70
KEY_H = 72
KEY_L = 76
KEY_R = 82
KEY_S = 83
KEY_W = 87
KEY_TAB = 258
KEY_LEFT_CONTROL = 341


def _check_keycode(keycode: int) -> None:
    if not 0 <= keycode < KEY_COUNT:
        raise IndexError(f"keycode {keycode} outside 0..{KEY_COUNT - 1}")


@dataclass
class InputState:
    """Keyboard, mouse button, wheel and cursor state sampled once per frame."""

    mouse_x: float = 0.0
    mouse_y: float = 0.0
    mouse_offset_x: float = 0.0
    mouse_offset_y: float = 0.0
    mouse_wheel_up: bool = False
    mouse_wheel_down: bool = False
    left_mouse_down: bool = False
    left_mouse_pressed: bool = False
    right_mouse_pressed: bool = False
    _right_button: bool = field(default=False, init=False, repr=False)
    _prevent_right_hold: bool = field(default=False, init=False, repr=False)
    _wheel: int = field(default=0, init=False, repr=False)
    _down: frozenset = field(default=frozenset(), init=False, repr=False)
    _pressed: frozenset = field(default=frozenset(), init=False, repr=False)

    def begin(self, mouse_x: float, mouse_y: float) -> None:
        """Start tracking from the given cursor position."""
        self.mouse_x = mouse_x
        self.mouse_y = mouse_y
        self.mouse_offset_x = mouse_x
        self.mouse_offset_y = mouse_y

    def scroll(self, delta: int) -> None:
        """Accumulate mouse wheel movement until the next update."""
        self._wheel += delta

    def update(
        self,
        keys_down: Iterable[int],
        mouse_x: float,
        mouse_y: float,
        left_button: bool,
        right_button: bool,
    ) -> None:
        """Advance one frame with the currently held keys, cursor and buttons."""
        self.mouse_wheel_up = self._wheel > 0
        self.mouse_wheel_down = self._wheel < 0
        self._wheel = 0

        down = frozenset(k for k in keys_down if _FIRST_POLLED_KEY <= k < _POLLED_KEY_END)
        self._pressed = down - self._down
        self._down = down

        self.mouse_offset_x = mouse_x - self.mouse_x
        self.mouse_offset_y = mouse_y - self.mouse_y
        self.mouse_x = mouse_x
        self.mouse_y = mouse_y

        left = bool(left_button)
        self.left_mouse_pressed = left and not self.left_mouse_down
        self.left_mouse_down = left

        right = bool(right_button)
        self.right_mouse_pressed = right and not self._right_button
        self._right_button = right
        if self.right_mouse_pressed:
            self._prevent_right_hold = False

    @property
    def mouse_position(self) -> tuple[int, int]:
        """Cursor position truncated to whole pixels."""
        return int(self.mouse_x), int(self.mouse_y)

    def key_pressed(self, keycode: int) -> bool:
        """True only on the frame the key went down."""
        _check_keycode(keycode)
        return keycode in self._pressed

    def key_down(self, keycode: int) -> bool:
        """True while the key is held."""
        _check_keycode(keycode)
        return keycode in self._down

    def right_mouse_down(self) -> bool:
        """True while the right button is held, unless holding was suppressed."""
        return self._right_button and not self._prevent_right_hold

    def prevent_right_mouse_hold(self) -> None:
        """Ignore the held right button until it is clicked again."""
        self._prevent_right_hold = True