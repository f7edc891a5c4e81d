"""The scrollable view that lays out and draws the messages of a room."""

from __future__ import annotations

import enum
import math
import threading

from .message import TIME_WIDTH, Preferences, UIMessage
from .renderers import new_date_change_message
from .styles import Color, ProxyScreen, Style, rune_width, write_line

PADDING_AT_TOP = 5

TIMESTAMP_SENDER_GAP = 1
SENDER_SEPARATOR_GAP = 1
SENDER_MESSAGE_GAP = 3

DEFAULT_MAX_SENDER_WIDTH = 15
DEFAULT_WIDEST_SENDER = 5
DEFAULT_WIDTH = 80

EMPTY_TEXT = "It's quite empty in here."
SCROLL_UP_TEXT = "Scroll up to load more messages."
LOADING_TEXT = "Loading more messages..."


class MessageDirection(enum.Enum):
    """Where a new message goes in the view."""

    APPEND = 0
    PREPEND = 1
    IGNORE = 2


def scrollbar_style(scrollbar_here: bool, is_top: bool, is_bottom: bool) -> tuple[str, Style]:
    """Return the separator character and style for one row of the scroll bar."""
    style = Style.DEFAULT
    if scrollbar_here:
        style = style.foreground(Color.GREEN)
    if is_top:
        char = "╥" if scrollbar_here else "┬"
    elif is_bottom:
        char = "╨" if scrollbar_here else "┴"
    elif scrollbar_here:
        char = "║"
    else:
        char = "│"
    return char, style


def _round_half_away(value: float) -> int:
    if value >= 0:
        return math.floor(value + 0.5)
    return -math.floor(-value + 0.5)


def _write_right(screen, text: str, x: int, y: int, width: int, style: Style) -> None:
    """Write text right-aligned in a field, dropping characters from the start if too wide."""
    chars = list(text)
    total = sum(rune_width(char) for char in chars)
    while chars and total > width:
        total -= rune_width(chars.pop(0))
    write_line(screen, "".join(chars), x + width - total, y, width, style)


class MessageView:
    """Holds the messages of one room and the line buffer they are drawn from."""

    def __init__(self, preferences: Preferences | None = None, max_sender_width: int = DEFAULT_MAX_SENDER_WIDTH) -> None:
        self.preferences = preferences if preferences is not None else Preferences()
        self.max_sender_width = max_sender_width
        self.timestamp_width = TIME_WIDTH
        self.scroll_offset = 0
        self.loading_messages = False

        self._lock = threading.RLock()
        self.messages: list[UIMessage] = []
        self.msg_buffer: list[UIMessage] = []
        self._message_ids: dict[str, UIMessage] = {}
        self.selected: UIMessage | None = None

        self._widest_sender = DEFAULT_WIDEST_SENDER
        self._prev_widest_sender = 0
        self.width = DEFAULT_WIDTH
        self.height = 0
        self._prev_width = 0
        self._prev_height = 0
        self._prev_msg_count = -1
        self._prev_prefs = Preferences()
        self.initial_history_loaded = False

    def unload(self) -> None:
        """Forget all messages and reset scrolling."""
        with self._lock:
            self._message_ids = {}
            self.msg_buffer = []
            self.messages = []
            self.initial_history_loaded = False
            self.scroll_offset = 0
            self._widest_sender = DEFAULT_WIDEST_SENDER
            self._prev_msg_count = -1

    @property
    def widest_sender(self) -> int:
        return self._widest_sender

    def _update_widest_sender(self, sender: str) -> None:
        if len(sender) > self._widest_sender:
            self._widest_sender = min(len(sender), self.max_sender_width)

    def _content_width(self, prefs: Preferences) -> int:
        width = self.width
        if not prefs.bare_message_view:
            width -= self._widest_sender + SENDER_MESSAGE_GAP
            if not prefs.hide_timestamp:
                width -= self.timestamp_width + TIMESTAMP_SENDER_GAP
        return width

    def _get_message_by_id(self, event_id: str) -> UIMessage | None:
        if not event_id:
            return None
        with self._lock:
            return self._message_ids.get(event_id)

    def _delete_message_id(self, event_id: str) -> None:
        if event_id:
            with self._lock:
                self._message_ids.pop(event_id, None)

    def _set_message_id(self, message: UIMessage) -> None:
        if message.id():
            with self._lock:
                self._message_ids[message.id()] = message

    def add_message(self, message: UIMessage | None, direction: MessageDirection) -> None:
        """Add a message at the end or start, or replace the message it updates."""
        if message is None:
            return
        if not isinstance(message, UIMessage):
            raise TypeError(f"expected a UIMessage, got {type(message).__name__}")

        old_msg = self._get_message_by_id(message.event_id)
        if old_msg is not None:
            self._replace_message(old_msg, message)
            direction = MessageDirection.IGNORE
        else:
            old_msg = self._get_message_by_id(message.txn_id)
            if old_msg is not None:
                self._replace_message(old_msg, message)
                self._delete_message_id(message.txn_id)
                direction = MessageDirection.IGNORE

        self._update_widest_sender(message.sender())

        prefs = self.preferences
        width = self._content_width(prefs)
        message.calculate_buffer(prefs, width)

        def make_date_change() -> UIMessage:
            date_change = new_date_change_message(f"Date changed to {message.format_date()}")
            date_change.calculate_buffer(prefs, width)
            self._append_buffer(date_change)
            return date_change

        if direction is MessageDirection.APPEND:
            if self.scroll_offset > 0:
                self.scroll_offset += message.height()
            with self._lock:
                if self.messages and not self.messages[-1].same_date(message):
                    self.messages.extend([make_date_change(), message])
                else:
                    self.messages.append(message)
            self._append_buffer(message)
        elif direction is MessageDirection.PREPEND:
            with self._lock:
                if self.messages and not self.messages[0].same_date(message):
                    self.messages[:0] = [message, make_date_change()]
                else:
                    self.messages.insert(0, message)
        elif old_msg is not None:
            self._replace_buffer(old_msg, message)
        else:
            raise ValueError("a new message must be appended or prepended")

        if message.id():
            self._set_message_id(message)

    def _replace_message(self, original: UIMessage, new: UIMessage) -> None:
        if new.id():
            self._set_message_id(new)
        with self._lock:
            self.messages = [new if msg is original else msg for msg in self.messages]

    def _append_buffer(self, message: UIMessage) -> None:
        with self._lock:
            self._append_buffer_unlocked(message)

    def _append_buffer_unlocked(self, message: UIMessage) -> None:
        self.msg_buffer.extend([message] * message.height())
        self._prev_msg_count += 1

    def _replace_buffer(self, original: UIMessage, new: UIMessage) -> None:
        with self._lock:
            start = end = -1
            for index, meta in enumerate(self.msg_buffer):
                if meta is original:
                    if start == -1:
                        start = index
                    end = index
                elif start != -1:
                    break
            if start == -1:
                self._append_buffer_unlocked(new)
                return
            end += 1
            if new.height() == 0:
                new.calculate_buffer(self._prev_prefs, self._prev_width)
            self.msg_buffer[start:end] = [new] * new.height()

    def _recalculate_buffers(self) -> None:
        prefs = self.preferences
        recalculate = (
            self.width != self._prev_width
            or self._widest_sender != self._prev_widest_sender
            or self._prev_prefs.bare_message_view != prefs.bare_message_view
            or self._prev_prefs.disable_images != prefs.disable_images
        )
        with self._lock:
            if recalculate or len(self.messages) != self._prev_msg_count:
                width = self._content_width(prefs)
                self.msg_buffer = []
                self._prev_msg_count = 0
                for message in self.messages:
                    if recalculate:
                        message.calculate_buffer(prefs, width)
                    self._append_buffer_unlocked(message)
        self._prev_width = self.width
        self._prev_height = self.height
        self._prev_widest_sender = self._widest_sender
        self._prev_prefs = prefs

    def set_selected(self, message: UIMessage | None) -> None:
        """Select a message, or deselect it if it was already selected."""
        if self.selected is not None:
            self.selected.is_selected = False
        if message is not None and (self.selected is message or message.is_service):
            self.selected = None
        else:
            self.selected = message
        if self.selected is not None:
            self.selected.is_selected = True

    def add_scroll_offset(self, diff: int) -> None:
        """Scroll by diff lines, staying within the content."""
        total_height = self.total_height()
        limit = total_height - self.height + PADDING_AT_TOP
        if diff >= 0 and self.scroll_offset + diff >= limit:
            self.scroll_offset = limit
        else:
            self.scroll_offset += diff
        if self.scroll_offset > limit:
            self.scroll_offset = limit
        if self.scroll_offset < 0:
            self.scroll_offset = 0

    def set_size(self, width: int, height: int) -> None:
        self.width = width
        self.height = height

    def total_height(self) -> int:
        with self._lock:
            return len(self.msg_buffer)

    def is_at_top(self) -> bool:
        return self.scroll_offset >= self.total_height() - self.height + PADDING_AT_TOP

    def calculate_scroll_bar(self, height: int) -> tuple[int, int]:
        """Return the height of the scroll bar and the row just below it."""
        content = float(self.total_height())
        if content == 0:
            raise ValueError("cannot place a scroll bar over empty content")
        viewport = float(height)
        if viewport == 0:
            return 0, 0
        bar_height = math.ceil(viewport / (content / viewport))
        bar_pos = height - _round_half_away(self.scroll_offset / content * viewport)
        return bar_height, bar_pos

    def capture_plaintext(self, height: int) -> str:
        """Return the messages visible in a viewport of the given height as text."""
        lines: list[str] = []
        index_offset = self.total_height() - self.scroll_offset - height
        prev: UIMessage | None = None
        with self._lock:
            for line in range(height):
                index = index_offset + line
                if index < 0:
                    continue
                message = self.msg_buffer[index]
                if message is prev:
                    continue
                if message.sender():
                    sender = f" <{message.sender()}>"
                elif message.type == "m.emote":
                    sender = f" * {message.sender_name}"
                else:
                    sender = ""
                lines.append(f"{message.format_time()}{sender} {message.plain_text()}\n")
                prev = message
        return "".join(lines)

    def draw(self, screen) -> None:
        """Draw the visible part of the view onto the screen."""
        self.set_size(*screen.size())
        self._recalculate_buffers()

        height = self.height
        width = self.width
        prefs = self.preferences
        total = self.total_height()
        if total == 0:
            write_line(screen, EMPTY_TEXT, 0, height, width, Style.DEFAULT)
            return

        username_x = 0 if prefs.hide_timestamp else self.timestamp_width + TIMESTAMP_SENDER_GAP
        message_x = username_x + self._widest_sender + SENDER_MESSAGE_GAP
        bare = prefs.bare_message_view
        if bare:
            message_x = 0

        index_offset = total - self.scroll_offset - height
        if index_offset <= -PADDING_AT_TOP:
            notice = LOADING_TEXT if self.loading_messages else SCROLL_UP_TEXT
            write_line(screen, notice, message_x, 0, width - message_x, Style.DEFAULT.foreground(Color.GREEN))

        view_start = -index_offset if index_offset < 0 else 0

        if not bare:
            separator_x = username_x + self._widest_sender + SENDER_SEPARATOR_GAP
            bar_height, bar_pos = self.calculate_scroll_bar(height)
            for line in range(view_start, height):
                relative = line - view_start
                here = bar_pos - bar_height <= relative < bar_pos
                is_top = line == view_start and self.scroll_offset + height >= total
                is_bottom = line == height - 1 and self.scroll_offset == 0
                char, style = scrollbar_style(here, is_top, is_bottom)
                screen.set_content(separator_x, line, char, style)

        with self._lock:
            buffer = list(self.msg_buffer)
        prev: UIMessage | None = None
        line = view_start
        while line < height and index_offset + line < len(buffer):
            index = index_offset + line
            msg = buffer[index]
            if msg is prev:
                line += 1
                continue

            time_text = msg.format_time()
            if time_text and not prefs.hide_timestamp:
                write_line(screen, time_text, 0, line, width, Style.DEFAULT.foreground(msg.timestamp_color()))
            _write_right(
                screen, msg.sender(), username_x, line, self._widest_sender,
                Style.DEFAULT.foreground(msg.sender_color()),
            )
            if msg.edited:
                screen.set_content(
                    username_x + self._widest_sender, line, "*", Style.DEFAULT.foreground(Color.DARK_RED)
                )

            earlier = index - 1
            while earlier >= 0 and buffer[earlier] is msg:
                line -= 1
                earlier -= 1
            msg.draw(ProxyScreen(screen, offset_x=message_x, offset_y=line, width=width - message_x, height=msg.height()))
            line += msg.height()
            prev = msg