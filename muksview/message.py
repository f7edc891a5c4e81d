"""The message model shared by all renderers, and plain-text line wrapping."""

from __future__ import annotations

import copy
import enum
import re
import string
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Protocol

from .styles import Color, ProxyScreen, Style, write_line
from .tstring import TString

TIME_FORMAT = "%H:%M:%S"
TIME_WIDTH = len("15:04:05")

REPLY_BAR_CHAR = "▊"

_MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

_WHITESPACE = r"[\t\n\f\r ]"
_PUNCTUATION = "[" + re.escape(string.punctuation) + "]"
_BOUNDARY_PATTERN = re.compile(f"(?:{_PUNCTUATION}{_WHITESPACE}*|{_WHITESPACE}+)")
_BARE_BOUNDARY_PATTERN = re.compile(f"{_WHITESPACE}+")
_SPACE_PATTERN = re.compile(f"{_WHITESPACE}+")


@dataclass(frozen=True)
class Preferences:
    """User preferences that affect how messages are laid out."""

    bare_message_view: bool = False
    hide_timestamp: bool = False
    disable_images: bool = False
    disable_downloads: bool = False
    disable_show_urls: bool = False


class OutgoingState(enum.Enum):
    """The sending state of a message written by the local user."""

    DEFAULT = "default"
    LOCAL_ECHO = "local_echo"
    SEND_FAIL = "send_fail"


@dataclass
class ReactionItem:
    """A reaction key and how many times it was given."""

    key: str
    count: int = 1

    def __str__(self) -> str:
        return f"{self.count}×{self.key}"


class MessageRenderer(Protocol):
    def draw(self, screen) -> None: ...

    def notification_content(self) -> str: ...

    def plain_text(self) -> str: ...

    def calculate_buffer(self, prefs: Preferences, width: int, ui_msg: UIMessage) -> None: ...

    def height(self) -> int: ...

    def clone(self) -> MessageRenderer: ...


@dataclass(eq=False)
class UIMessage:
    """A message as shown in the message view, with its content renderer."""

    renderer: MessageRenderer
    event_id: str = ""
    txn_id: str = ""
    type: str = ""
    sender_id: str = ""
    sender_name: str = ""
    default_sender_color: Color = Color.DEFAULT
    timestamp: datetime = field(default_factory=datetime.now)
    state: OutgoingState = OutgoingState.DEFAULT
    is_highlight: bool = False
    is_service: bool = False
    is_selected: bool = False
    edited: bool = False
    event: object | None = None
    reply_to: UIMessage | None = None
    reactions: list[ReactionItem] = field(default_factory=list)
    color_for: Callable[[str], Color] | None = None

    def sender(self) -> str:
        """Return the text shown in the sender column."""
        if self.state is OutgoingState.LOCAL_ECHO:
            return "Sending..."
        if self.state is OutgoingState.SEND_FAIL:
            return "Error"
        if self.type == "m.emote":
            # Emotes include the sender in the message body itself.
            return ""
        return self.sender_name

    def _state_color(self) -> Color:
        if self.state is OutgoingState.LOCAL_ECHO:
            return Color.GRAY
        if self.state is OutgoingState.SEND_FAIL:
            return Color.RED
        return Color.DEFAULT

    def sender_color(self) -> Color:
        state_color = self._state_color()
        if state_color != Color.DEFAULT:
            return state_color
        if self.type == "m.room.member":
            if self.color_for is not None:
                return self.color_for(self.sender_name)
            return self.default_sender_color
        if self.is_service:
            return Color.GRAY
        return self.default_sender_color

    def text_color(self) -> Color:
        state_color = self._state_color()
        if state_color != Color.DEFAULT:
            return state_color
        if self.is_service or self.type == "m.notice":
            return Color.GRAY
        if self.is_highlight:
            return Color.YELLOW
        if self.type == "m.room.member":
            return Color.GREEN
        return Color.DEFAULT

    def timestamp_color(self) -> Color:
        if self.is_service:
            return Color.GRAY
        return self._state_color()

    def reply_height(self) -> int:
        return 1 + self.reply_to.height() if self.reply_to is not None else 0

    def reaction_height(self) -> int:
        return 1 if self.reactions else 0

    def height(self) -> int:
        """Return the number of rows the message takes when drawn."""
        return self.reply_height() + self.renderer.height() + self.reaction_height()

    def format_time(self) -> str:
        return self.timestamp.strftime(TIME_FORMAT)

    def format_date(self) -> str:
        ts = self.timestamp
        return f"{_MONTHS[ts.month - 1]} {ts.day:>2}, {ts.year}"

    def same_date(self, other: UIMessage) -> bool:
        return self.timestamp.date() == other.timestamp.date()

    def id(self) -> str:
        """Return the event ID, or the transaction ID if there is no event ID yet."""
        return self.event_id or self.txn_id

    def add_reaction(self, key: str) -> None:
        for reaction in self.reactions:
            if reaction.key == key:
                reaction.count += 1
                break
        else:
            self.reactions.append(ReactionItem(key, 1))
        self.reactions.sort(key=lambda reaction: reaction.key)

    def calculate_buffer(self, prefs: Preferences, width: int) -> None:
        self.renderer.calculate_buffer(prefs, width, self)
        if self.reply_to is not None:
            self.reply_to.calculate_buffer(prefs, width - 1)

    def draw_reactions(self, screen) -> None:
        if not self.reactions:
            return
        width, height = screen.size()
        row = ProxyScreen(screen, offset_x=0, offset_y=height - 1, width=width, height=1)
        style = Style.DEFAULT.foreground(Color.WHITE).background(Color.DARK_GREEN)
        x = 0
        for reaction in self.reactions:
            drawn = write_line(row, str(reaction), x, 0, width - x, style)
            x += drawn + 1
            if x >= width:
                break

    def draw_reply(self, screen):
        """Draw the replied-to message; return the area left for this message."""
        if self.reply_to is None:
            return screen
        width, height = screen.size()
        reply_height = self.reply_to.height()
        write_line(screen, "In reply to", 1, 0, width - 1, Style.DEFAULT.foreground(Color.GREEN))
        write_line(
            screen, self.reply_to.sender_name, 13, 0, width - 13,
            Style.DEFAULT.foreground(self.reply_to.sender_color()),
        )
        for y in range(1 + reply_height):
            screen.set_content(0, y, REPLY_BAR_CHAR, Style.DEFAULT)
        self.reply_to.draw(ProxyScreen(screen, offset_x=1, offset_y=1, width=width - 1, height=reply_height))
        return ProxyScreen(
            screen, offset_x=0, offset_y=reply_height + 1,
            width=width, height=height - reply_height - 1,
        )

    def draw(self, screen) -> None:
        area = self.draw_reply(screen)
        self.renderer.draw(area)
        self.draw_reactions(area)
        if self.is_selected:
            width, height = screen.size()
            for x in range(width):
                for y in range(height):
                    char, style = screen.get_content(x, y)
                    if style.bg == Color.DEFAULT:
                        screen.set_content(x, y, char, style.background(Color.DARK_GREEN))

    def clone(self) -> UIMessage:
        """Copy the message without its reply and reactions, with a cloned renderer."""
        duplicate = copy.copy(self)
        duplicate.reply_to = None
        duplicate.reactions = []
        duplicate.renderer = self.renderer.clone()
        return duplicate

    def plain_text(self) -> str:
        return self.renderer.plain_text()

    def notification_content(self) -> str:
        return self.renderer.notification_content()

    def __str__(self) -> str:
        return (
            f"UIMessage(id={self.event_id!r}, txn_id={self.txn_id!r}, type={self.type!r}, "
            f"timestamp={self.timestamp}, sender=({self.sender_id!r}, {self.sender_name!r}, "
            f"#{self.default_sender_color.hex():X}), is_service={self.is_service}, "
            f"is_highlight={self.is_highlight}, renderer={self.renderer!r})"
        )


def _cut_at_boundary(extract: TString, bare: bool) -> TString:
    pattern = _BARE_BOUNDARY_PATTERN if bare else _BOUNDARY_PATTERN
    matches = list(pattern.finditer(str(extract)))
    if matches:
        until = matches[-1].end()
        if until < len(extract):
            return extract[:until]
    return extract


def calculate_buffer_with_text(prefs: Preferences, text: TString, width: int, msg: UIMessage) -> list[TString]:
    """Split text into lines at most width columns wide, wrapping at word boundaries."""
    if width < 2:
        return []

    if prefs.bare_message_view:
        prefixed = TString.plain(msg.format_time())
        sender = msg.sender()
        if sender:
            prefixed = prefixed.append_tstring(TString.colored(f" <{sender}> ", msg.sender_color()))
        else:
            prefixed = prefixed.append(" ")
        text = prefixed.append_tstring(text)

    buffer: list[TString] = []
    newlines = 0
    for line in text.split("\n"):
        if len(line) == 0 and newlines < 1:
            buffer.append(TString())
            newlines += 1
        else:
            newlines = 0
        while len(line) > 0:
            extract = line.truncate(width)
            if len(extract) < len(line):
                spaces = _SPACE_PATTERN.match(str(line), len(extract))
                if spaces is not None:
                    extract = line[: spaces.end()]
                extract = _cut_at_boundary(extract, prefs.bare_message_view)
            if len(extract) == 0:
                extract = line[:1]
            buffer.append(extract)
            line = line[len(extract):]
    return buffer