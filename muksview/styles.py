"""Terminal colours, cell styles and an in-memory screen to draw on."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import ClassVar

import wcwidth


@dataclass(frozen=True)
class Color:
    """A terminal colour: the terminal default, a named colour or a true colour."""

    name: str
    rgb: tuple[int, int, int] | None = None

    DEFAULT: ClassVar[Color]
    BLACK: ClassVar[Color]
    WHITE: ClassVar[Color]
    RED: ClassVar[Color]
    GREEN: ClassVar[Color]
    YELLOW: ClassVar[Color]
    GRAY: ClassVar[Color]
    DARK_GREEN: ClassVar[Color]
    DARK_RED: ClassVar[Color]
    DARK_CYAN: ClassVar[Color]

    @property
    def is_default(self) -> bool:
        return self.rgb is None

    def hex(self) -> int:
        """Return the colour as a 0xRRGGBB integer, or -1 for the default colour."""
        if self.rgb is None:
            return -1
        r, g, b = self.rgb
        return (r << 16) | (g << 8) | b

    def __str__(self) -> str:
        return self.name


Color.DEFAULT = Color("default")
Color.BLACK = Color("black", (0x00, 0x00, 0x00))
Color.WHITE = Color("white", (0xFF, 0xFF, 0xFF))
Color.RED = Color("red", (0xFF, 0x00, 0x00))
Color.GREEN = Color("green", (0x00, 0x80, 0x00))
Color.YELLOW = Color("yellow", (0xFF, 0xFF, 0x00))
Color.GRAY = Color("gray", (0x80, 0x80, 0x80))
Color.DARK_GREEN = Color("darkgreen", (0x00, 0x64, 0x00))
Color.DARK_RED = Color("darkred", (0x8B, 0x00, 0x00))
Color.DARK_CYAN = Color("darkcyan", (0x00, 0x8B, 0x8B))


def rgb_color(r: int, g: int, b: int) -> Color:
    """Create a true colour from its red, green and blue components."""
    for component in (r, g, b):
        if not 0 <= component <= 255:
            raise ValueError(f"colour component out of range: {component}")
    return Color(f"#{r:02x}{g:02x}{b:02x}", (r, g, b))


_ATTRIBUTES = ("bold", "italic", "underline", "strikethrough")


@dataclass(frozen=True)
class Style:
    """An immutable cell style: foreground, background and text attributes."""

    fg: Color = Color.DEFAULT
    bg: Color = Color.DEFAULT
    is_bold: bool = False
    is_italic: bool = False
    is_underline: bool = False
    is_strikethrough: bool = False

    DEFAULT: ClassVar[Style]

    def foreground(self, color: Color) -> Style:
        return replace(self, fg=color)

    def background(self, color: Color) -> Style:
        return replace(self, bg=color)

    def bold(self, on: bool = True) -> Style:
        return replace(self, is_bold=on)

    def italic(self, on: bool = True) -> Style:
        return replace(self, is_italic=on)

    def underline(self, on: bool = True) -> Style:
        return replace(self, is_underline=on)

    def strikethrough(self, on: bool = True) -> Style:
        return replace(self, is_strikethrough=on)

    def decompose(self) -> tuple[Color, Color, frozenset[str]]:
        """Return the foreground, the background and the set of active attributes."""
        attrs = frozenset(name for name in _ATTRIBUTES if getattr(self, f"is_{name}"))
        return self.fg, self.bg, attrs


Style.DEFAULT = Style()


def rune_width(char: str) -> int:
    """Return the number of terminal columns a single character occupies."""
    return max(wcwidth.wcwidth(char), 0)


@dataclass(frozen=True)
class Cell:
    """A single character with its style."""

    char: str
    style: Style = Style.DEFAULT

    def width(self) -> int:
        return rune_width(self.char)

    def draw(self, screen, x: int, y: int) -> int:
        """Draw the cell at the given position and return the columns it took."""
        char_width = self.width()
        for offset in range(char_width):
            screen.set_content(x + offset, y, self.char, self.style)
        return char_width


class Screen:
    """A fixed-size grid of styled cells held in memory."""

    def __init__(self, width: int, height: int, style: Style = Style.DEFAULT) -> None:
        if width < 0 or height < 0:
            raise ValueError("screen dimensions must not be negative")
        self.width = width
        self.height = height
        self.style = style
        self._cells = [[Cell(" ", style) for _ in range(width)] for _ in range(height)]

    def size(self) -> tuple[int, int]:
        return self.width, self.height

    def _contains(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def set_content(self, x: int, y: int, char: str, style: Style) -> None:
        if self._contains(x, y):
            self._cells[y][x] = Cell(char, style)

    def get_content(self, x: int, y: int) -> tuple[str, Style]:
        if not self._contains(x, y):
            return " ", self.style
        cell = self._cells[y][x]
        return cell.char, cell.style

    def fill(self, char: str, style: Style) -> None:
        self._cells = [[Cell(char, style) for _ in range(self.width)] for _ in range(self.height)]

    def clear(self) -> None:
        self.fill(" ", self.style)

    def set_style(self, style: Style) -> None:
        self.style = style

    def row_text(self, y: int) -> str:
        """Return the characters of one row as a string."""
        if not 0 <= y < self.height:
            raise IndexError(f"row {y} outside screen of height {self.height}")
        return "".join(cell.char for cell in self._cells[y])


@dataclass
class ProxyScreen:
    """A rectangular window onto a parent screen."""

    parent: object
    offset_x: int = 0
    offset_y: int = 0
    width: int = 0
    height: int = 0
    style: Style = field(default=Style.DEFAULT)

    def size(self) -> tuple[int, int]:
        return self.width, self.height

    def _contains(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def set_content(self, x: int, y: int, char: str, style: Style) -> None:
        if self._contains(x, y):
            self.parent.set_content(self.offset_x + x, self.offset_y + y, char, style)

    def get_content(self, x: int, y: int) -> tuple[str, Style]:
        if not self._contains(x, y):
            return " ", self.style
        return self.parent.get_content(self.offset_x + x, self.offset_y + y)

    def fill(self, char: str, style: Style) -> None:
        for y in range(self.height):
            for x in range(self.width):
                self.set_content(x, y, char, style)

    def clear(self) -> None:
        self.fill(" ", self.style)

    def set_style(self, style: Style) -> None:
        self.style = style


def write_line(screen, text: str, x: int, y: int, max_width: int, style: Style = Style.DEFAULT) -> int:
    """Write left-aligned text, cut at max_width columns; return the columns written."""
    drawn = 0
    for char in text:
        char_width = rune_width(char)
        if drawn + char_width > max_width:
            break
        Cell(char, style).draw(screen, x + drawn, y)
        drawn += char_width
    return drawn