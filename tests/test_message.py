from datetime import datetime

import pytest

from muksview.message import (
    OutgoingState,
    Preferences,
    ReactionItem,
    UIMessage,
    calculate_buffer_with_text,
)
from muksview.styles import Color, Screen, Style
from muksview.tstring import TString


class FakeRenderer:
    def __init__(self, lines=("body",)):
        self.lines = list(lines)
        self.calls = []

    def draw(self, screen):
        for y, line in enumerate(self.lines):
            TString.plain(line).draw(screen, 0, y)

    def notification_content(self):
        return "notify:" + " ".join(self.lines)

    def plain_text(self):
        return "\n".join(self.lines)

    def calculate_buffer(self, prefs, width, ui_msg):
        self.calls.append((prefs, width, ui_msg))

    def height(self):
        return len(self.lines)

    def clone(self):
        return FakeRenderer(self.lines)


def make(**kwargs):
    kwargs.setdefault("renderer", FakeRenderer())
    kwargs.setdefault("timestamp", datetime(2021, 3, 5, 15, 4, 5))
    kwargs.setdefault("sender_name", "alice")
    return UIMessage(**kwargs)


def test_sender_by_state_and_type():
    assert make().sender() == "alice"
    assert make(state=OutgoingState.LOCAL_ECHO).sender() == "Sending..."
    assert make(state=OutgoingState.SEND_FAIL).sender() == "Error"
    assert make(type="m.emote").sender() == ""


def test_colors():
    blue = Color("blue", (0, 0, 255))
    assert make(default_sender_color=blue).sender_color() == blue
    assert make(state=OutgoingState.SEND_FAIL).sender_color() == Color.RED
    assert make(is_service=True).sender_color() == Color.GRAY
    assert make(type="m.room.member", color_for=lambda name: blue).sender_color() == blue
    assert make(type="m.notice").text_color() == Color.GRAY
    assert make(is_highlight=True).text_color() == Color.YELLOW
    assert make(type="m.room.member").text_color() == Color.GREEN
    assert make().text_color() == Color.DEFAULT
    assert make(is_service=True).timestamp_color() == Color.GRAY
    assert make(state=OutgoingState.LOCAL_ECHO).timestamp_color() == Color.GRAY


def test_height_includes_reply_and_reactions():
    reply = make(renderer=FakeRenderer(["a", "b"]))
    msg = make(renderer=FakeRenderer(["x"]), reply_to=reply)
    assert msg.reply_height() == 1 + reply.height()
    assert msg.reaction_height() == 0
    msg.add_reaction("k")
    assert msg.height() == msg.reply_height() + 1 + msg.reaction_height()


def test_format_time_and_date():
    msg = make()
    assert msg.format_time() == "15:04:05"
    assert msg.format_date() == "March  5, 2021"


def test_same_date():
    a = make(timestamp=datetime(2021, 3, 5, 1, 0))
    b = make(timestamp=datetime(2021, 3, 5, 23, 0))
    c = make(timestamp=datetime(2021, 3, 6, 1, 0))
    assert a.same_date(b)
    assert not a.same_date(c)


def test_id_falls_back_to_txn():
    assert make(txn_id="txn1").id() == "txn1"
    assert make(event_id="$evt", txn_id="txn1").id() == "$evt"


def test_add_reaction_sorts_and_counts():
    msg = make()
    msg.add_reaction("b")
    msg.add_reaction("a")
    msg.add_reaction("b")
    assert msg.reactions == [ReactionItem("a", 1), ReactionItem("b", 2)]
    assert str(msg.reactions[1]) == "2×b"


def test_calculate_buffer_passes_to_reply():
    reply = make()
    msg = make(reply_to=reply)
    prefs = Preferences()
    msg.calculate_buffer(prefs, 30)
    assert msg.renderer.calls == [(prefs, 30, msg)]
    assert reply.renderer.calls == [(prefs, 29, reply)]


def test_clone_drops_reply_and_reactions():
    msg = make(reply_to=make())
    msg.add_reaction("x")
    clone = msg.clone()
    assert clone.reply_to is None
    assert clone.reactions == []
    assert clone.renderer is not msg.renderer
    assert clone.plain_text() == msg.plain_text()
    assert len(msg.reactions) == 1


def test_plain_text_and_notification():
    msg = make(renderer=FakeRenderer(["hi"]))
    assert msg.plain_text() == "hi"
    assert msg.notification_content() == "notify:hi"


def test_draw_reply_and_reactions():
    reply = make(renderer=FakeRenderer(["quoted"]), sender_name="bob")
    msg = make(renderer=FakeRenderer(["body"]), reply_to=reply)
    msg.add_reaction("a")
    screen = Screen(30, msg.height())
    msg.draw(screen)
    assert screen.row_text(0).startswith("▊In reply to bob")
    assert screen.row_text(1).startswith("▊quoted")
    assert screen.row_text(2).startswith("body")
    assert screen.row_text(3).startswith("1×a")


def test_draw_selected_paints_background():
    msg = make(is_selected=True)
    screen = Screen(6, 1)
    msg.draw(screen)
    _, style = screen.get_content(5, 0)
    assert style.bg == Color.DARK_GREEN


def test_wrap_too_narrow():
    assert calculate_buffer_with_text(Preferences(), TString.plain("abc"), 1, make()) == []


def test_wrap_at_word_boundary():
    lines = calculate_buffer_with_text(Preferences(), TString.plain("hello world"), 8, make())
    assert [str(line) for line in lines] == ["hello ", "world"]


@pytest.mark.parametrize("text", ["the quick brown fox jumps over", "a,b,c,d,e,f,g,h", "x" * 40])
def test_wrap_preserves_text(text):
    lines = calculate_buffer_with_text(Preferences(), TString.plain(text), 10, make())
    assert "".join(str(line) for line in lines) == text
    assert all(len(line) > 0 for line in lines)


def test_collapses_repeated_blank_lines():
    lines = calculate_buffer_with_text(Preferences(), TString.plain("a\n\n\nb"), 10, make())
    assert [str(line) for line in lines] == ["a", "", "b"]


def test_bare_mode_prefixes_time_and_sender():
    msg = make()
    lines = calculate_buffer_with_text(Preferences(bare_message_view=True), TString.plain("hi"), 80, msg)
    assert str(lines[0]) == f"{msg.format_time()} <alice> hi"


def test_bare_mode_emote_has_no_sender():
    msg = make(type="m.emote")
    lines = calculate_buffer_with_text(Preferences(bare_message_view=True), TString.plain("waves"), 80, msg)
    assert str(lines[0]) == f"{msg.format_time()} waves"


def test_wrap_keeps_styles():
    style = Style.DEFAULT.bold(True)
    lines = calculate_buffer_with_text(Preferences(), TString.styled("hello world", style), 8, make())
    assert all(cell.style == style for line in lines for cell in line)