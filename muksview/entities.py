"""Renderable entities built from the HTML of formatted messages."""

from __future__ import annotations

import re
import string
from typing import Callable, Iterable

from .styles import ProxyScreen, Style, rune_width, write_line

AdjustStyleFunc = Callable[[Style], Style]

BLOCK_QUOTE_CHAR = ">"
HORIZONTAL_LINE_CHAR = "━"
LIST_BULLET_CHAR = "●"

_WHITESPACE = r"[\t\n\f\r ]"
_PUNCTUATION = "[" + re.escape(string.punctuation) + "]"
_BOUNDARY_PATTERN = re.compile(f"(?:{_PUNCTUATION}{_WHITESPACE}*|{_WHITESPACE}+)")
_BARE_BOUNDARY_PATTERN = re.compile(f"{_WHITESPACE}+")
_SPACE_PATTERN = re.compile(f"{_WHITESPACE}+")


def digits(num: int) -> int:
    """Return the number of decimal digits of a positive number, 0 otherwise."""
    if num <= 0:
        return 0
    return len(str(num))


def _string_width(text: str) -> int:
    return sum(rune_width(char) for char in text)


def _truncate(text: str, width: int) -> str:
    """Return the longest prefix of text that fits in width columns."""
    total = 0
    for index, char in enumerate(text):
        total += rune_width(char)
        if total > width:
            return text[:index]
    return text


def _trim(extract: str, full: str, bare: bool) -> tuple[str, bool]:
    """Cut extract back to a word boundary; report whether it ends on one."""
    if len(extract) == len(full):
        return extract, True
    spaces = _SPACE_PATTERN.match(full, len(extract))
    if spaces is not None:
        extract = full[: spaces.end()]
    pattern = _BARE_BOUNDARY_PATTERN if bare else _BOUNDARY_PATTERN
    matches = list(pattern.finditer(extract))
    if matches:
        until = matches[-1].end()
        if until < len(extract):
            return extract[:until], True
    return extract, bool(extract) and extract[-1] == " "


class Entity:
    """The common part of all entities: tag, style, block flag and layout state."""

    def __init__(
        self,
        tag: str = "",
        style: Style = Style.DEFAULT,
        block: bool = False,
        default_height: int = 0,
    ) -> None:
        self.tag = tag
        self.style = style
        self.block = block
        self.default_height = default_height
        self.prev_width = 0
        self.start_x = 0
        self.height = 0

    def _copy_base_to(self, target: Entity) -> Entity:
        target.tag = self.tag
        target.style = self.style
        target.block = self.block
        target.default_height = self.default_height
        return target

    def adjust_style(self, fn: AdjustStyleFunc) -> Entity:
        """Change the style of this entity with fn and return the entity."""
        self.style = fn(self.style)
        return self

    def clone(self) -> Entity:
        return self._copy_base_to(Entity())

    def plain_text(self) -> str:
        return ""

    def calculate_buffer(self, width: int, start_x: int, bare: bool) -> int:
        """Prepare for rendering; return the column where the next entity starts."""
        self.height = self.default_height
        self.start_x = 0 if self.block else start_x
        return self.start_x

    def draw(self, screen) -> None:
        raise TypeError("a bare entity cannot be drawn")

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(tag={self.tag!r}, style={self.style!r}, block={self.block}, "
            f"start_x={self.start_x}, height={self.height})"
        )


class ContainerEntity(Entity):
    """An entity that lays out and draws a list of child entities."""

    def __init__(
        self,
        tag: str = "",
        children: Iterable[Entity] | None = None,
        indent: int = 0,
        block: bool = False,
        style: Style = Style.DEFAULT,
        default_height: int = 0,
    ) -> None:
        super().__init__(tag=tag, style=style, block=block, default_height=default_height)
        self.children: list[Entity] = list(children or [])
        self.indent = indent

    def _copy_container_to(self, target: ContainerEntity) -> ContainerEntity:
        self._copy_base_to(target)
        target.children = [child.clone() for child in self.children]
        target.indent = self.indent
        return target

    def plain_text(self) -> str:
        if not self.children:
            return ""
        parts: list[str] = []
        newlined = False
        for child in self.children:
            text = child.plain_text()
            if not text.startswith("\n") and child.block and not newlined:
                parts.append("\n")
            newlined = False
            parts.append(text)
            if child.block:
                if not text.endswith("\n"):
                    parts.append("\n")
                newlined = True
        return "".join(parts).strip()

    def adjust_style(self, fn: AdjustStyleFunc) -> Entity:
        """Change the style of this entity and of all its children."""
        for child in self.children:
            child.adjust_style(fn)
        self.style = fn(self.style)
        return self

    def clone(self) -> Entity:
        return self._copy_container_to(ContainerEntity())

    def draw(self, screen) -> None:
        if not self.children:
            return
        width, _ = screen.size()
        proxy = ProxyScreen(screen, offset_x=self.indent, width=width - self.indent, style=self.style)
        prev_break = False
        for index, entity in enumerate(self.children):
            if index != 0 and entity.start_x == 0:
                proxy.offset_y += 1
            proxy.height = entity.height
            entity.draw(proxy)
            proxy.set_style(self.style)
            proxy.offset_y += entity.height - 1
            is_break = isinstance(entity, BreakEntity)
            if prev_break and is_break:
                proxy.offset_y += 1
            prev_break = is_break

    def calculate_buffer(self, width: int, start_x: int, bare: bool) -> int:
        super().calculate_buffer(width, start_x, bare)
        if self.children:
            self.height = 0
            child_start_x = self.start_x
            prev_break = False
            for entity in self.children:
                if entity.block or child_start_x == 0 or self.height == 0:
                    self.height += 1
                child_start_x = entity.calculate_buffer(width - self.indent, child_start_x, bare)
                self.height += entity.height - 1
                is_break = isinstance(entity, BreakEntity)
                if prev_break and is_break:
                    self.height += 1
                prev_break = is_break
            if not self.block:
                return child_start_x
        return self.start_x

    def __repr__(self) -> str:
        inner = "".join(f"\n    {child!r}" for child in self.children)
        return f"{type(self).__name__}(tag={self.tag!r}, indent={self.indent}, children=[{inner}])"


class TextEntity(Entity):
    """A run of text that wraps at word boundaries."""

    def __init__(
        self,
        text: str,
        tag: str = "text",
        style: Style = Style.DEFAULT,
        block: bool = False,
        default_height: int = 0,
    ) -> None:
        super().__init__(tag=tag, style=style, block=block, default_height=default_height)
        self.text = text
        self.buffer: list[str] = []

    def clone(self) -> Entity:
        return self._copy_base_to(TextEntity(self.text))

    def plain_text(self) -> str:
        return self.text

    def draw(self, screen) -> None:
        width, _ = screen.size()
        x = self.start_x
        for y, line in enumerate(self.buffer):
            write_line(screen, line, x, y, width, self.style)
            x = 0

    def calculate_buffer(self, width: int, start_x: int, bare: bool) -> int:
        super().calculate_buffer(width, start_x, bare)
        if not self.text:
            return self.start_x
        self.height = 0
        self.prev_width = width
        lines: list[str] = []
        text = self.text
        text_start_x = self.start_x
        while True:
            extract = _truncate(text, width - text_start_x)
            extract, word_wrapped = _trim(extract, text, bare)
            if not word_wrapped and text_start_x > 0:
                lines.append("")
                text_start_x = 0
                continue
            if not extract:
                # Nothing fits even on an empty line; take one character to make progress.
                extract = text[0]
            lines.append(extract)
            text = text[len(extract):]
            if not text:
                self.buffer = lines
                self.height += len(lines)
                if self.block:
                    return 0
                return text_start_x + _string_width(extract)
            text_start_x = 0

    def __repr__(self) -> str:
        return f"TextEntity(text={self.text!r}, tag={self.tag!r}, start_x={self.start_x}, height={self.height})"


class BreakEntity(Entity):
    """A line break; containers account for it when laying out."""

    def __init__(self) -> None:
        super().__init__(tag="br", block=True)

    def clone(self) -> Entity:
        return BreakEntity()

    def plain_text(self) -> str:
        return "\n"

    def draw(self, screen) -> None:
        return None

    def __repr__(self) -> str:
        return "BreakEntity()"


class BlockquoteEntity(ContainerEntity):
    """A quoted block drawn with a quote marker in front of every line."""

    def __init__(self, children: Iterable[Entity] | None = None) -> None:
        super().__init__(tag="blockquote", children=children, indent=2, block=True)

    def adjust_style(self, fn: AdjustStyleFunc) -> Entity:
        return Entity.adjust_style(self, fn)

    def clone(self) -> Entity:
        return self._copy_container_to(BlockquoteEntity())

    def draw(self, screen) -> None:
        super().draw(screen)
        for y in range(self.height):
            screen.set_content(0, y, BLOCK_QUOTE_CHAR, self.style)

    def plain_text(self) -> str:
        if not self.children:
            return ""
        parts: list[str] = []
        newlined = False
        for index, child in enumerate(self.children):
            if index != 0 and child.block and not newlined:
                parts.append("\n")
            newlined = False
            rows = child.plain_text().split("\n")
            parts.append("\n".join(f"{BLOCK_QUOTE_CHAR} {row}" for row in rows))
            if child.block:
                parts.append("\n")
                newlined = True
        return "".join(parts).strip()


class CodeBlockEntity(ContainerEntity):
    """A preformatted block drawn on its own background."""

    def __init__(self, children: Iterable[Entity] | None = None, background: Style = Style.DEFAULT) -> None:
        super().__init__(tag="pre", children=children, block=True)
        self.background = background

    def adjust_style(self, fn: AdjustStyleFunc) -> Entity:
        """Code blocks keep their own style."""
        return self

    def clone(self) -> Entity:
        return self._copy_container_to(CodeBlockEntity(background=self.background))

    def draw(self, screen) -> None:
        screen.fill(" ", self.background)
        super().draw(screen)


class HorizontalLineEntity(Entity):
    """A horizontal rule across the full width."""

    def __init__(self) -> None:
        super().__init__(tag="hr", block=True, default_height=1)

    def clone(self) -> Entity:
        return HorizontalLineEntity()

    def draw(self, screen) -> None:
        width, _ = screen.size()
        for x in range(width):
            screen.set_content(x, 0, HORIZONTAL_LINE_CHAR, self.style)

    def plain_text(self) -> str:
        return HORIZONTAL_LINE_CHAR * 5

    def __repr__(self) -> str:
        return "HorizontalLineEntity()"


class ListEntity(ContainerEntity):
    """An ordered or unordered list of items."""

    def __init__(self, ordered: bool = False, start: int = 1, children: Iterable[Entity] | None = None) -> None:
        super().__init__(tag="ol" if ordered else "ul", children=children, indent=2, block=True)
        self.ordered = ordered
        self.start = start
        if ordered:
            self.indent += digits(start + len(self.children) - 1)

    def adjust_style(self, fn: AdjustStyleFunc) -> Entity:
        return Entity.adjust_style(self, fn)

    def clone(self) -> Entity:
        return self._copy_container_to(ListEntity(self.ordered, self.start))

    def _number_prefix(self, number: int) -> str:
        return f"{number}. " + " " * (self.indent - 2 - digits(number))

    def draw(self, screen) -> None:
        width, _ = screen.size()
        proxy = ProxyScreen(screen, offset_x=self.indent, width=width - self.indent, style=self.style)
        for number, entity in enumerate(self.children, self.start):
            proxy.height = entity.height
            if self.ordered:
                write_line(screen, self._number_prefix(number), 0, proxy.offset_y, self.indent, self.style)
            else:
                screen.set_content(0, proxy.offset_y, LIST_BULLET_CHAR, self.style)
            entity.draw(proxy)
            proxy.set_style(self.style)
            proxy.offset_y += entity.height

    def plain_text(self) -> str:
        if not self.children:
            return ""
        indent = " " * self.indent
        parts: list[str] = []
        for number, child in enumerate(self.children, self.start):
            prefix = self._number_prefix(number) if self.ordered else f"{LIST_BULLET_CHAR} "
            rows = child.plain_text().split("\n")
            parts.append(prefix + ("\n" + indent).join(rows) + "\n")
        return "".join(parts).strip()

    def __repr__(self) -> str:
        return f"ListEntity(ordered={self.ordered}, start={self.start}, children={len(self.children)})"