"""Game rules that stand apart from level data: input, animation and camera."""

from __future__ import annotations

import enum
from typing import Protocol

FB_WIDTH = 320
FB_HEIGHT = 200
FRAME_PER_ITER = 24
WON_FRAME_LIMIT = 60 * 5


class Input(enum.IntEnum):
    """Buttons the game reacts to."""

    UP = 0
    DOWN = 1
    LEFT = 2
    RIGHT = 3
    PUSH = 4
    MENU = 5
    RESET = 6
    NONE = 7


_OFFSETS: dict[Input, tuple[int, int]] = {
    Input.UP: (0, -1),
    Input.LEFT: (-1, 0),
    Input.RIGHT: (1, 0),
    Input.DOWN: (0, 1),
}

_NAMES: dict[Input, str] = {
    Input.UP: "up",
    Input.LEFT: "left",
    Input.RIGHT: "right",
    Input.DOWN: "down",
}

_BY_NAME: dict[str, Input] = {name: direction for direction, name in _NAMES.items()}


class EdgeDetector:
    """Reports when a signal goes from off to on."""

    def __init__(self, init: bool = False) -> None:
        self._state = bool(init)

    def set(self, state: bool) -> bool:
        """Record ``state`` and tell whether it is a rising edge."""
        rising = bool(state) and not self._state
        self._state = bool(state)
        return rising


def input_to_offset(direction: Input) -> tuple[int, int]:
    """Return the tile step for a direction; other inputs give no step."""
    return _OFFSETS.get(direction, (0, 0))


def input_to_string(direction: Input) -> str:
    """Return the sprite name of a direction, or an empty string."""
    return _NAMES.get(direction, "")


def string_to_input(name: str) -> Input:
    """Return the direction named ``name``, or ``Input.NONE``."""
    return _BY_NAME.get(name, Input.NONE)


def _jump_phase(frame: int) -> int:
    return ((frame // FRAME_PER_ITER - 3) >> 1) & 1


def win_animation_state(frame: int) -> str:
    """Return the sprite state shown ``frame`` frames into the win animation."""
    if frame >= 3 * FRAME_PER_ITER:
        return "cheer" if _jump_phase(frame) else "down"
    if frame >= 2 * FRAME_PER_ITER:
        return "defrost2"
    if frame >= FRAME_PER_ITER:
        return "defrost1"
    return "frozen"


def animation_index(frame: int, sliding: bool) -> int:
    """Return the walking sprite index: 1 to 4 walking, 5 and 6 sliding."""
    if sliding:
        return (frame // 10) % 2 + 5
    return (frame // 10) % 4 + 1


def _half(value: int) -> int:
    """Halve an integer, rounding toward zero."""
    return -((-value) // 2) if value < 0 else value // 2


class _Target(Protocol):
    width: int
    height: int

    def camera_set(self, pos: tuple[int, int]) -> None:
        ...


class _Box(Protocol):
    x: int
    y: int
    w: int
    h: int


class CameraManager:
    """Keeps the followed rectangle in view without showing past the map edges."""

    def __init__(self, target: _Target, rect: _Box, map_size: tuple[int, int]) -> None:
        self.target = target
        self.rect = rect
        self.map_size = (int(map_size[0]), int(map_size[1]))

    def update(self) -> None:
        """Move the target's camera for the current position of the rectangle."""
        map_w, map_h = self.map_size
        width, height = self.target.width, self.target.height

        if width >= map_w and height >= map_h:
            self.target.camera_set((_half(map_w - width), _half(map_h - height)))
            return

        centre_x = self.rect.x + _half(self.rect.w)
        centre_y = self.rect.y + _half(self.rect.h)
        base_x = centre_x - _half(width)
        base_y = centre_y - _half(height)

        if base_x < 0:
            base_x = 0
        elif base_x + width > map_w:
            base_x -= base_x + width - map_w

        if base_y < 0:
            base_y = 0
        elif base_y + height > map_h:
            base_y -= base_y + height - map_h

        self.target.camera_set((base_x, base_y))