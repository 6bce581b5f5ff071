"""Bitmap fonts cut from a glyph sheet, and clusters of layered fonts."""

from __future__ import annotations

import enum
import os
import xml.etree.ElementTree as ElementTree
from dataclasses import dataclass, field
from typing import Protocol, Union

from PIL import Image

_ALPHA_MASK = 0xFF000000

FontSource = Union[str, "os.PathLike[str]", "Font"]


class FontError(Exception):
    """Raised when a font description or its glyph sheet cannot be loaded."""


class Alignment(enum.IntEnum):
    """Horizontal placement of a line of text relative to its anchor."""

    LEFT = 0
    RIGHT = 1
    CENTERED = 2


@dataclass(frozen=True)
class Glyph:
    """One character's image as ARGB pixels, stored row by row."""

    width: int
    height: int
    pixels: tuple[int, ...]
    ignore_camera: bool = True

    def __post_init__(self) -> None:
        if len(self.pixels) != self.width * self.height:
            raise ValueError("pixel count does not match glyph geometry")

    def pixel(self, x: int, y: int) -> int:
        """Return the ARGB pixel at column ``x`` and row ``y``."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) is outside the glyph")
        return self.pixels[y * self.width + x]

    def recoloured(self, color: int) -> Glyph:
        """Return a copy in which every visible pixel takes ``color``."""
        pixels = tuple(color if pix & _ALPHA_MASK else pix for pix in self.pixels)
        return Glyph(self.width, self.height, pixels, self.ignore_camera)


class RenderTarget(Protocol):
    """Anything glyphs can be drawn onto."""

    def blit(self, glyph: Glyph, x: int, y: int) -> None:
        ...


def _int_attr(node: ElementTree.Element, name: str) -> int:
    value = node.get(name, "").strip()
    try:
        return int(value)
    except ValueError:
        return 0


def _load_sheet(path: str) -> tuple[int, int, list[int]]:
    try:
        with Image.open(path) as image:
            rgba = image.convert("RGBA")
    except (OSError, ValueError) as exc:
        raise FontError(f"Failed to load glyph sheet: {path}.") from exc
    raw = rgba.tobytes()
    pixels = [
        (raw[i + 3] << 24) | (raw[i] << 16) | (raw[i + 1] << 8) | raw[i + 2]
        for i in range(0, len(raw), 4)
    ]
    return rgba.width, rgba.height, pixels


@dataclass
class Font:
    """A fixed-width bitmap font mapping characters to glyphs."""

    glyph_width: int = 0
    glyph_height: int = 0
    glyphs: dict[str, Glyph] = field(default_factory=dict)

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> Font:
        """Load a font from its XML description and the glyph sheet it names."""
        path = os.fspath(path)
        try:
            root = ElementTree.parse(path).getroot()
        except (OSError, ElementTree.ParseError) as exc:
            raise FontError(f"Failed to load font: {path}.") from exc

        node = root.find("glyphs") if root.tag == "font" else None
        if node is None:
            node = ElementTree.Element("glyphs")

        start_ascii = _int_attr(node, "startascii")
        columns = _int_attr(node, "width")
        rows = _int_attr(node, "height")
        glyph_width = _int_attr(node, "glyphwidth")
        glyph_height = _int_attr(node, "glyphheight")
        source = node.get("source", "")

        if not columns or not rows or not glyph_width or not glyph_height:
            raise ValueError("Invalid glyph arguments.")

        sheet_path = os.path.join(os.path.dirname(path), source)
        sheet_width, sheet_height, pixels = _load_sheet(sheet_path)
        if sheet_width != columns * glyph_width or sheet_height != rows * glyph_height:
            raise ValueError("Geometry of font and attributes do not match.")

        glyphs: dict[str, Glyph] = {}
        code = start_ascii
        for row in range(rows):
            for column in range(columns):
                left = column * glyph_width
                top = row * glyph_height
                cells = tuple(
                    pixels[(top + gy) * sheet_width + left + gx]
                    for gy in range(glyph_height)
                    for gx in range(glyph_width)
                )
                glyphs[chr(code & 0xFF)] = Glyph(glyph_width, glyph_height, cells)
                code += 1
        return cls(glyph_width, glyph_height, glyphs)

    def surface(self, char: str) -> Glyph:
        """Return the glyph for ``char``."""
        try:
            return self.glyphs[char]
        except KeyError:
            raise KeyError(f"Character '{char}' not found in font.") from None

    def glyph_size(self) -> tuple[int, int]:
        """Return the width and height of one glyph."""
        return self.glyph_width, self.glyph_height

    def set_color(self, color: int) -> None:
        """Paint every visible pixel of every glyph with the ARGB ``color``."""
        self.glyphs = {char: glyph.recoloured(color) for char, glyph in self.glyphs.items()}

    def adjust_x(self, line: str, alignment: Alignment) -> int:
        """Return how far left of the anchor ``line`` starts."""
        if alignment == Alignment.RIGHT:
            return self.glyph_width * len(line)
        if alignment == Alignment.CENTERED:
            return self.glyph_width * len(line) // 2
        return 0

    def render_msg(
        self,
        target: RenderTarget,
        msg: str,
        x: int,
        y: int,
        alignment: Alignment = Alignment.LEFT,
        newline_offset: int = 0,
    ) -> None:
        """Draw ``msg`` onto ``target``, one line per newline."""
        for line in msg.split("\n"):
            line_x = x - self.adjust_x(line, alignment)
            for char in line:
                target.blit(self.surface(char), line_x, y)
                line_x += self.glyph_width
            y += self.glyph_height + newline_offset

    def _clone(self) -> Font:
        return Font(self.glyph_width, self.glyph_height, dict(self.glyphs))


@dataclass
class _OffsetFont:
    font: Font
    offset: tuple[int, int]


class FontCluster:
    """Groups of fonts drawn on top of each other, selected by an identifier."""

    def __init__(self) -> None:
        self._fonts: dict[str, list[_OffsetFont]] = {}
        self.current_id = ""

    def add_font(
        self,
        font: FontSource,
        offset: tuple[int, int],
        color: int,
        font_id: str = "",
    ) -> None:
        """Add a coloured layer, drawn shifted by ``offset``, to group ``font_id``."""
        layer = font._clone() if isinstance(font, Font) else Font.from_file(font)
        layer.set_color(color)
        self._fonts.setdefault(font_id, []).append(_OffsetFont(layer, tuple(offset)))

    def set_id(self, font_id: str) -> None:
        """Select the group used for sizing and rendering."""
        self.current_id = font_id

    def _current(self) -> list[_OffsetFont]:
        try:
            return self._fonts[self.current_id]
        except KeyError:
            raise KeyError(f"Font ID: {self.current_id} not found in map!") from None

    def glyph_size(self) -> tuple[int, int]:
        """Return the largest glyph width and height in the selected group."""
        layers = self._current()
        width = max(layer.font.glyph_width for layer in layers)
        height = max(layer.font.glyph_height for layer in layers)
        return width, height

    def render_msg(
        self,
        target: RenderTarget,
        msg: str,
        x: int,
        y: int,
        alignment: Alignment = Alignment.LEFT,
        newline_offset: int = 0,
    ) -> None:
        """Draw ``msg`` with every layer of the selected group, in order."""
        for layer in self._current():
            dx, dy = layer.offset
            layer.font.render_msg(target, msg, x + dx, y + dy, alignment, newline_offset)