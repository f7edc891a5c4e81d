"""Strings that carry a style for every character."""

from __future__ import annotations

from dataclasses import replace
from itertools import chain
from typing import Callable, Iterable, Iterator, overload

from .styles import Cell, Color, Style

StyleFunc = Callable[[Style], Style]


class TString:
    """A sequence of styled cells that can be drawn onto a screen unchanged."""

    __slots__ = ("_cells",)

    def __init__(self, cells: Iterable[Cell] = ()) -> None:
        self._cells: list[Cell] = list(cells)

    @classmethod
    def plain(cls, text: str) -> TString:
        return cls(Cell(char) for char in text)

    @classmethod
    def colored(cls, text: str, color: Color) -> TString:
        style = Style.DEFAULT.foreground(color)
        return cls(Cell(char, style) for char in text)

    @classmethod
    def styled(cls, text: str, style: Style) -> TString:
        return cls(Cell(char, style) for char in text)

    def __len__(self) -> int:
        return len(self._cells)

    def __iter__(self) -> Iterator[Cell]:
        return iter(self._cells)

    @overload
    def __getitem__(self, index: int) -> Cell: ...

    @overload
    def __getitem__(self, index: slice) -> TString: ...

    def __getitem__(self, index):
        if isinstance(index, slice):
            return TString(self._cells[index])
        return self._cells[index]

    def __setitem__(self, index: int, cell: Cell) -> None:
        self._cells[index] = cell

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TString):
            return NotImplemented
        return self._cells == other._cells

    __hash__ = None  # type: ignore[assignment]

    def __add__(self, other: TString) -> TString:
        if not isinstance(other, TString):
            return NotImplemented
        return TString(chain(self._cells, other._cells))

    def __str__(self) -> str:
        return "".join(cell.char for cell in self._cells)

    def __repr__(self) -> str:
        return f"TString({str(self)!r})"

    def clone(self) -> TString:
        return TString(self._cells)

    def _appended(self, data: str, style: Style) -> TString:
        return TString(chain(self._cells, (Cell(char, style) for char in data)))

    def _prepended(self, data: str, style: Style) -> TString:
        return TString(chain((Cell(char, style) for char in data), self._cells))

    def append(self, data: str) -> TString:
        return self._appended(data, Style.DEFAULT)

    def append_color(self, data: str, color: Color) -> TString:
        return self._appended(data, Style.DEFAULT.foreground(color))

    def append_style(self, data: str, style: Style) -> TString:
        return self._appended(data, style)

    def append_tstring(self, *args: TString) -> TString:
        return TString(chain(self._cells, *args))

    def prepend(self, data: str) -> TString:
        return self._prepended(data, Style.DEFAULT)

    def prepend_color(self, data: str, color: Color) -> TString:
        return self._prepended(data, Style.DEFAULT.foreground(color))

    def prepend_style(self, data: str, style: Style) -> TString:
        return self._prepended(data, style)

    def prepend_tstring(self, data: TString) -> TString:
        return TString(chain(data, self._cells))

    def trim_space(self) -> TString:
        return self.trim(str.isspace)

    def trim(self, predicate: Callable[[str], bool]) -> TString:
        return self.trim_left(predicate).trim_right(predicate)

    def trim_left(self, predicate: Callable[[str], bool]) -> TString:
        for index, cell in enumerate(self._cells):
            if not predicate(cell.char):
                return self[index:]
        return TString()

    def trim_right(self, predicate: Callable[[str], bool]) -> TString:
        end = len(self._cells)
        while end > 0 and predicate(self._cells[end - 1].char):
            end -= 1
        return self[:end]

    def colorize(self, start: int, length: int, color: Color) -> None:
        """Set the foreground colour of a span in place."""
        self.adjust_style(start, length, lambda style: style.foreground(color))

    def adjust_style(self, start: int, length: int, fn: StyleFunc) -> None:
        """Apply fn to the style of every cell in a span, in place."""
        end = start + length
        if start < 0 or length < 0 or end > len(self._cells):
            raise IndexError(f"span {start}:{end} outside string of length {len(self._cells)}")
        self._cells[start:end] = [replace(cell, style=fn(cell.style)) for cell in self._cells[start:end]]

    def adjust_style_full(self, fn: StyleFunc) -> None:
        self.adjust_style(0, len(self._cells), fn)

    def draw(self, screen, x: int, y: int) -> None:
        for cell in self._cells:
            x += cell.draw(screen, x, y)

    def width(self) -> int:
        """Return the number of terminal columns the string occupies."""
        return sum(cell.width() for cell in self._cells)

    def truncate(self, width: int) -> TString:
        """Return the longest prefix that fits in the given number of columns."""
        total = 0
        for index, cell in enumerate(self._cells):
            total += cell.width()
            if total > width:
                return self[:index]
        return self[:]

    def index(self, char: str, start: int = 0) -> int:
        """Return the position of the first char at or after start, or -1."""
        if start < 0:
            raise IndexError(f"negative start index {start}")
        return next(
            (index for index, cell in enumerate(self._cells[start:], start) if cell.char == char),
            -1,
        )

    def count(self, char: str) -> int:
        return sum(1 for cell in self._cells if cell.char == char)

    def split(self, sep: str) -> list[TString]:
        parts = [TString()]
        for cell in self._cells:
            if cell.char == sep:
                parts.append(TString())
            else:
                parts[-1]._cells.append(cell)
        return parts


def join(strings: Iterable[TString], separator: str) -> TString:
    """Join styled strings with an unstyled separator between them."""
    items = list(strings)
    if not items:
        return TString()
    first, *rest = items
    if not separator:
        return first.append_tstring(*rest)
    return first.append_tstring(*(item.prepend(separator) for item in rest))