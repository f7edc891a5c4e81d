import pytest

from muksview.styles import (
    Cell,
    Color,
    ProxyScreen,
    Screen,
    Style,
    rgb_color,
    rune_width,
    write_line,
)


def test_style_modifiers_return_new_style():
    base = Style()
    bold = base.bold(True)
    assert "bold" in bold.decompose()[2]
    assert base.decompose()[2] == frozenset()


def test_style_foreground_background_decompose():
    style = Style.DEFAULT.foreground(Color.GREEN).background(Color.DARK_GREEN)
    fg, bg, attrs = style.decompose()
    assert fg == Color.GREEN
    assert bg == Color.DARK_GREEN
    assert attrs == frozenset()


def test_style_all_attributes():
    style = Style().bold(True).italic(True).underline(True).strikethrough(True)
    assert style.decompose()[2] == {"bold", "italic", "underline", "strikethrough"}
    assert style.bold(False).decompose()[2] == {"italic", "underline", "strikethrough"}


def test_rgb_color_keeps_components():
    color = rgb_color(10, 20, 30)
    assert color.rgb == (10, 20, 30)
    assert not color.is_default
    assert Color.DEFAULT.is_default


def test_rgb_color_rejects_out_of_range():
    with pytest.raises(ValueError):
        rgb_color(256, 0, 0)
    with pytest.raises(ValueError):
        rgb_color(0, -1, 0)


def test_rune_width_values():
    assert rune_width("a") == 1
    assert rune_width("\u0301") == 0
    assert rune_width("\u4e2d") == 2 * rune_width("a")


def test_cell_draw_wide_char_fills_its_columns():
    screen = Screen(4, 1)
    cell = Cell("\u4e2d", Style().bold())
    written = cell.draw(screen, 1, 0)
    assert written == cell.width()
    assert screen.get_content(1, 0) == ("\u4e2d", Style().bold())
    assert screen.get_content(2, 0)[0] == "\u4e2d"
    assert screen.get_content(0, 0)[0] == " "


def test_screen_set_get_and_out_of_bounds():
    screen = Screen(3, 2)
    screen.set_content(2, 1, "x", Style.DEFAULT)
    screen.set_content(5, 5, "y", Style.DEFAULT)
    assert screen.get_content(2, 1)[0] == "x"
    assert screen.row_text(1) == "  x"
    assert screen.size() == (3, 2)


def test_screen_fill_and_clear():
    screen = Screen(2, 2)
    style = Style().foreground(Color.RED)
    screen.fill("#", style)
    assert screen.row_text(0) == "##"
    assert screen.get_content(1, 1) == ("#", style)
    screen.clear()
    assert screen.row_text(1) == "  "


def test_screen_row_text_out_of_range():
    with pytest.raises(IndexError):
        Screen(1, 1).row_text(3)


def test_proxy_screen_translates_and_clips():
    screen = Screen(5, 3)
    proxy = ProxyScreen(screen, offset_x=1, offset_y=1, width=2, height=1)
    proxy.set_content(0, 0, "a", Style.DEFAULT)
    proxy.set_content(1, 0, "b", Style.DEFAULT)
    proxy.set_content(2, 0, "c", Style.DEFAULT)
    assert screen.row_text(1) == " ab  "
    assert proxy.get_content(1, 0)[0] == "b"
    assert proxy.size() == (2, 1)


def test_proxy_screen_fill_limited_to_area():
    screen = Screen(4, 2)
    proxy = ProxyScreen(screen, offset_x=2, offset_y=0, width=2, height=2)
    proxy.fill("*", Style.DEFAULT)
    assert screen.row_text(0) == "  **"
    assert screen.row_text(1) == "  **"


def test_proxy_screen_clear_uses_set_style():
    screen = Screen(2, 1)
    proxy = ProxyScreen(screen, width=2, height=1)
    style = Style().background(Color.DARK_GREEN)
    proxy.set_style(style)
    proxy.clear()
    assert screen.get_content(0, 0) == (" ", style)


def test_write_line_truncates_to_max_width():
    screen = Screen(10, 1)
    written = write_line(screen, "hello", 0, 0, 3, Style.DEFAULT)
    assert written == 3
    assert screen.row_text(0).startswith("hel")
    assert screen.get_content(3, 0)[0] == " "


def test_write_line_offset():
    screen = Screen(6, 1)
    write_line(screen, "ab", 2, 0, 10, Style.DEFAULT)
    assert screen.row_text(0) == "  ab  "