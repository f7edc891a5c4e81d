"""Renderers for the content of plain-text, expanded-text, redacted and HTML messages."""

from __future__ import annotations

from datetime import datetime

from .entities import Entity
from .message import Preferences, UIMessage, calculate_buffer_with_text
from .styles import Color, Style, rgb_color
from .tstring import TString

REDACTION_CHAR = "█"
REDACTION_MAX_WIDTH = 40
REDACTION_STYLE = Style.DEFAULT.foreground(rgb_color(50, 0, 0))


def _draw_lines(lines: list[TString], screen) -> None:
    for y, line in enumerate(lines):
        line.draw(screen, 0, y)


class TextMessage:
    """Plain text content, coloured by the state of the message it belongs to."""

    def __init__(self, text: str) -> None:
        self.text = text
        self._cache: TString | None = None
        self._buffer: list[TString] = []
        self._is_highlight = False

    def _get_cache(self, ui_msg: UIMessage) -> TString:
        if self._cache is None:
            if ui_msg.type == "m.emote":
                cache = TString.colored(f"* {ui_msg.sender_name} {self.text}", ui_msg.text_color())
                cache.colorize(0, len(ui_msg.sender_name) + 2, ui_msg.sender_color())
            else:
                cache = TString.colored(self.text, ui_msg.text_color())
            self._cache = cache
        return self._cache

    def clone(self) -> TextMessage:
        return TextMessage(self.text)

    def notification_content(self) -> str:
        return self.text

    def plain_text(self) -> str:
        return self.text

    def calculate_buffer(self, prefs: Preferences, width: int, ui_msg: UIMessage) -> None:
        if ui_msg.is_highlight != self._is_highlight:
            self._cache = None
            self._is_highlight = ui_msg.is_highlight
        self._buffer = calculate_buffer_with_text(prefs, self._get_cache(ui_msg), width, ui_msg)

    def height(self) -> int:
        return len(self._buffer)

    def draw(self, screen) -> None:
        _draw_lines(self._buffer, screen)

    def __repr__(self) -> str:
        return f"TextMessage(text={self.text!r})"


class ExpandedTextMessage:
    """Content that is already a styled string."""

    def __init__(self, text: TString) -> None:
        self.text = text
        self._buffer: list[TString] = []

    def clone(self) -> ExpandedTextMessage:
        return ExpandedTextMessage(self.text.clone())

    def notification_content(self) -> str:
        return str(self.text)

    def plain_text(self) -> str:
        return str(self.text)

    def calculate_buffer(self, prefs: Preferences, width: int, ui_msg: UIMessage) -> None:
        self._buffer = calculate_buffer_with_text(prefs, self.text, width, ui_msg)

    def height(self) -> int:
        return len(self._buffer)

    def draw(self, screen) -> None:
        _draw_lines(self._buffer, screen)

    def __repr__(self) -> str:
        return f"ExpandedTextMessage(text={str(self.text)!r})"


class RedactedMessage:
    """Content of a redacted event: a single bar of block characters."""

    def __init__(self) -> None:
        self.last_width = 0

    def clone(self) -> RedactedMessage:
        return RedactedMessage()

    def notification_content(self) -> str:
        return ""

    def plain_text(self) -> str:
        return "[redacted]"

    def calculate_buffer(self, prefs: Preferences, width: int, ui_msg: UIMessage) -> None:
        """Remember the width; the bar always takes exactly one row."""
        self.last_width = width

    def height(self) -> int:
        return 1

    def draw(self, screen) -> None:
        width, _ = screen.size()
        for x in range(min(width, REDACTION_MAX_WIDTH)):
            screen.set_content(x, 0, REDACTION_CHAR, REDACTION_STYLE)

    def __repr__(self) -> str:
        return "RedactedMessage()"


class HTMLMessage:
    """Content rendered from an entity tree built from HTML."""

    def __init__(self, root: Entity, focused_bg: Color = Color.DEFAULT) -> None:
        self.root = root
        self.focused_bg = focused_bg
        self.text_color = Color.DEFAULT
        self.focused = False

    def clone(self) -> HTMLMessage:
        return HTMLMessage(self.root.clone(), self.focused_bg)

    def notification_content(self) -> str:
        return self.root.plain_text()

    def plain_text(self) -> str:
        return self.root.plain_text()

    def calculate_buffer(self, prefs: Preferences, width: int, ui_msg: UIMessage) -> None:
        if width < 2:
            return
        self.text_color = ui_msg.text_color()
        self.root.calculate_buffer(width, 0, prefs.bare_message_view)

    def height(self) -> int:
        return self.root.height

    def draw(self, screen) -> None:
        if self.focused:
            screen.set_style(Style.DEFAULT.background(self.focused_bg).foreground(self.text_color))
        if self.text_color != Color.DEFAULT:
            text_color = self.text_color

            def recolor(style: Style) -> Style:
                return style.foreground(text_color) if style.fg == Color.DEFAULT else style

            self.root.adjust_style(recolor)
        screen.clear()
        self.root.draw(screen)

    def focus(self) -> None:
        self.focused = True

    def blur(self) -> None:
        self.focused = False

    def __repr__(self) -> str:
        return f"HTMLMessage(root={self.root!r})"


def new_service_message(text: str, now: datetime | None = None) -> UIMessage:
    """Create a local service message with plain text content."""
    return UIMessage(
        renderer=TextMessage(text),
        sender_id="*",
        sender_name="*",
        timestamp=now if now is not None else datetime.now(),
        is_service=True,
    )


def new_date_change_message(text: str, now: datetime | None = None) -> UIMessage:
    """Create a service message marking a date change, stamped at midnight of now."""
    current = now if now is not None else datetime.now()
    midnight = current.replace(hour=0, minute=0, second=0, microsecond=0)
    return UIMessage(
        renderer=ExpandedTextMessage(TString.colored(text, Color.GREEN)),
        sender_id="*",
        sender_name="*",
        timestamp=midnight,
        is_service=True,
    )